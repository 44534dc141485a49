import threading
from datetime import datetime, timezone

from models import GalleryState
from urls import normalize_url, normalize_netloc


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class DedupGate:
    """
    Per-run dedup state and the single save point for gallery records.

    Two append-only claim sets: normalized detail-page URLs and gallery
    website domains. claim_* is an atomic check-and-set, so only one worker
    ever wins a given key.
    """

    def __init__(self, sink):
        self.sink = sink
        self._lock = threading.Lock()
        self._urls: set[str] = set()
        self._domains: set[str] = set()

    def _claim(self, seen: set[str], key: str) -> bool:
        if not key:
            return False
        with self._lock:
            if key in seen:
                return False
            seen.add(key)
            return True

    def claim_url(self, url: str) -> bool:
        return self._claim(self._urls, normalize_url(url))

    def claim_domain(self, domain: str) -> bool:
        return self._claim(self._domains, normalize_netloc(domain))

    def has_url(self, url: str) -> bool:
        with self._lock:
            return normalize_url(url) in self._urls

    def has_domain(self, domain: str) -> bool:
        with self._lock:
            return normalize_netloc(domain) in self._domains

    def save(self, state: GalleryState) -> dict | None:
        """Write a finalized record when the state has an email, phone or website."""
        record = finalize_record(state)
        if not (record["emails"] or record["phone_numbers"] or record["website"]):
            return None
        self.sink.append(record)
        return record


def finalize_record(state: GalleryState) -> dict:
    emails = list(dict.fromkeys(e.lower() for e in state.emails if e))
    phones = list(dict.fromkeys(p for p in state.phone_numbers if p))
    return {
        "gallery_name": state.gallery_name or "Unknown",
        "website": state.website or "",
        "emails": emails,
        "phone_numbers": phones,
        "address": state.address or "",
        "source_url": state.source_url or "",
        "scraped_at": now_iso(),
    }
