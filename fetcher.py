import time
import threading
from dataclasses import dataclass
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup

import config
from urls import normalize_netloc

session = requests.Session()
session.headers.update({
    "User-Agent": config.USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
})


RETRY_STATUSES = (403, 408, 429)


@dataclass
class Page:
    url: str
    html: str
    soup: BeautifulSoup


def fetch_text(url: str, timeout: float = config.REQUEST_TIMEOUT) -> str | None:
    """Plain GET used for robots.txt and sitemaps. None on any failure."""
    try:
        r = session.get(url, timeout=timeout, allow_redirects=True)
        if not r.ok:
            return None
        return r.text
    except requests.exceptions.RequestException as e:
        print(f"Fetch failed: {url} -> {e}")
        return None


class HttpPageFetcher:
    """
    Fetches pages over plain HTTP and parses them with BeautifulSoup.
    Requests to the same host are spaced by `delay` seconds.
    """

    def __init__(
        self,
        timeout: float = config.REQUEST_TIMEOUT,
        retries: int = config.MAX_REQUEST_RETRIES,
        delay: float = config.SLEEP_BETWEEN_REQUESTS,
        deadline: float = config.PAGE_DEADLINE,
        http=None,
    ):
        self.timeout = timeout
        self.retries = max(0, retries)
        self.delay = delay
        self.deadline = deadline
        self.http = http or session
        self._lock = threading.Lock()
        self._last_request: dict[str, float] = {}

    def _wait_turn(self, url: str):
        netloc = normalize_netloc(urlparse(url).netloc)
        with self._lock:
            last = self._last_request.get(netloc, 0.0)
            start = max(time.time(), last + self.delay)
            self._last_request[netloc] = start
        pause = start - time.time()
        if pause > 0:
            time.sleep(pause)

    def fetch(self, url: str, timeout: float | None = None) -> Page | None:
        timeout = timeout or self.timeout
        attempts = self.retries + 1
        deadline = time.monotonic() + self.deadline if self.deadline > 0 else None
        for attempt in range(1, attempts + 1):
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    print(f"Fetch gave up: {url} -> deadline of {self.deadline}s passed")
                    return None
                timeout = min(timeout, remaining)
            try:
                self._wait_turn(url)
                r = self.http.get(url, timeout=timeout, allow_redirects=True)
                if r.status_code == 200:
                    return Page(url=r.url or url, html=r.text, soup=BeautifulSoup(r.text, "html.parser"))
                if r.status_code not in RETRY_STATUSES and r.status_code < 500:
                    print(f"Fetch failed: {url} -> status {r.status_code}")
                    return None
                print(f"Fetch attempt {attempt}/{attempts} failed: {url} -> status {r.status_code}")
            except requests.exceptions.RequestException as e:
                print(f"Fetch attempt {attempt}/{attempts} failed: {url} -> {e}")
        return None

    def evaluate(self, page: Page, selector: str) -> list:
        return page.soup.select(selector)
