import pytest
import requests

import fetcher
from fetcher import HttpPageFetcher


class FakeResponse:
    def __init__(self, status_code, text="", url=""):
        self.status_code = status_code
        self.text = text
        self.url = url
        self.ok = 200 <= status_code < 400


class FakeHttp:
    """Replays queued responses; exception instances are raised instead."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def get(self, url, timeout=None, allow_redirects=True):
        self.calls.append((url, timeout))
        r = self.responses.pop(0)
        if isinstance(r, Exception):
            raise r
        return r


def make_fetcher(http, retries=2, deadline=0):
    return HttpPageFetcher(timeout=20, retries=retries, delay=0, deadline=deadline, http=http)


@pytest.mark.parametrize("status", [403, 408, 429, 500, 503])
def test_fetch_retries_transient_statuses(status):
    http = FakeHttp(FakeResponse(status), FakeResponse(200, "<h1>Art More</h1>", "https://artmore.com/home"))

    page = make_fetcher(http).fetch("https://artmore.com/")

    assert len(http.calls) == 2
    assert page.url == "https://artmore.com/home"
    assert page.soup.h1.get_text() == "Art More"


def test_fetch_gives_up_on_other_statuses(capsys):
    http = FakeHttp(FakeResponse(404), FakeResponse(200, "<p>never</p>"))

    assert make_fetcher(http).fetch("https://artmore.com/missing") is None
    assert len(http.calls) == 1
    assert "status 404" in capsys.readouterr().out


def test_fetch_stops_after_retry_budget(capsys):
    http = FakeHttp(
        requests.exceptions.ConnectionError("refused"),
        requests.exceptions.Timeout("slow"),
        FakeResponse(503),
        FakeResponse(200, "<p>too late</p>"),
    )

    assert make_fetcher(http, retries=2).fetch("https://artmore.com/") is None
    assert len(http.calls) == 3
    out = capsys.readouterr().out
    assert "attempt 1/3" in out
    assert "attempt 3/3" in out
    assert "attempt 4/" not in out


def test_fetch_without_retries_tries_once():
    http = FakeHttp(requests.exceptions.ConnectionError("refused"), FakeResponse(200))

    assert make_fetcher(http, retries=0).fetch("https://artmore.com/") is None
    assert len(http.calls) == 1


def test_fetch_stops_when_page_deadline_passes(monkeypatch):
    clock = [0.0, 1.0, 6.0]
    monkeypatch.setattr(fetcher.time, "monotonic", lambda: clock.pop(0) if len(clock) > 1 else clock[0])
    http = FakeHttp(FakeResponse(503), FakeResponse(200, "<p>too late</p>"))

    assert make_fetcher(http, retries=5, deadline=5).fetch("https://artmore.com/") is None
    # Second attempt never starts; the first one was capped to the time left
    assert http.calls == [("https://artmore.com/", 4.0)]


def test_evaluate_selects_from_parsed_page():
    http = FakeHttp(FakeResponse(200, '<a href="/contact">Contact</a><a href="/about">About</a>'))
    f = make_fetcher(http)

    page = f.fetch("https://artmore.com/")

    assert [a["href"] for a in f.evaluate(page, "a[href]")] == ["/contact", "/about"]


def test_fetch_text_returns_none_on_error_status(monkeypatch):
    monkeypatch.setattr(fetcher.session, "get", lambda url, **kwargs: FakeResponse(404, "not found"))
    assert fetcher.fetch_text("https://artmore.com/robots.txt") is None

    monkeypatch.setattr(fetcher.session, "get", lambda url, **kwargs: FakeResponse(200, "Sitemap: x"))
    assert fetcher.fetch_text("https://artmore.com/robots.txt") == "Sitemap: x"


def test_fetch_text_returns_none_on_request_error(monkeypatch):
    def refuse(url, **kwargs):
        raise requests.exceptions.ConnectionError("refused")

    monkeypatch.setattr(fetcher.session, "get", refuse)
    assert fetcher.fetch_text("https://artmore.com/sitemap.xml") is None
