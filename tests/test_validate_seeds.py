import requests

import validate_seeds


class FakeResponse:
    def __init__(self, status_code):
        self.status_code = status_code
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True
        return False


def resolves(monkeypatch):
    monkeypatch.setattr(validate_seeds.socket, "getaddrinfo", lambda host, port: [("addr",)])


def test_check_url_rejects_url_without_host():
    assert validate_seeds.check_url("not a url") == (False, "bad_url")
    assert validate_seeds.check_url("http://[broken/x") == (False, "bad_url")


def test_check_url_reports_dns_failure(monkeypatch):
    def fail(host, port):
        raise OSError("no such host")

    monkeypatch.setattr(validate_seeds.socket, "getaddrinfo", fail)
    assert validate_seeds.check_url("https://gone.example/") == (False, "dns_fail")


def test_check_url_uses_head_status(monkeypatch):
    resolves(monkeypatch)
    monkeypatch.setattr(validate_seeds.requests, "head", lambda url, **kwargs: FakeResponse(404))

    def no_get(url, **kwargs):
        raise AssertionError("GET should not be needed")

    monkeypatch.setattr(validate_seeds.requests, "get", no_get)
    assert validate_seeds.check_url("https://artmore.com/") == (False, "bad_status_404")


def test_check_url_falls_back_to_get_when_head_refused(monkeypatch):
    resolves(monkeypatch)
    got = []

    def get(url, **kwargs):
        got.append(FakeResponse(200))
        assert kwargs["stream"] is True
        return got[-1]

    monkeypatch.setattr(validate_seeds.requests, "head", lambda url, **kwargs: FakeResponse(405))
    monkeypatch.setattr(validate_seeds.requests, "get", get)

    assert validate_seeds.check_url("https://artmore.com/") == (True, "ok_200")
    assert got[0].closed


def test_check_url_falls_back_to_get_after_head_error(monkeypatch):
    resolves(monkeypatch)

    def head(url, **kwargs):
        raise requests.exceptions.ConnectionError("reset")

    def get(url, **kwargs):
        raise requests.exceptions.ReadTimeout("slow")

    monkeypatch.setattr(validate_seeds.requests, "head", head)
    monkeypatch.setattr(validate_seeds.requests, "get", get)
    assert validate_seeds.check_url("https://artmore.com/") == (False, "timeout")
