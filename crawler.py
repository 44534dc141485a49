import queue
import threading
from concurrent.futures import ThreadPoolExecutor, FIRST_COMPLETED, wait
from dataclasses import dataclass, asdict
from urllib.parse import urlparse

import config
from extractors import extract_emails, extract_phone_numbers, is_candidate_email
from models import GalleryState, WorkItem
from pages import (
    emails_from_mailto_links,
    extract_detail_contact,
    extract_gallery_links,
    find_contact_links,
    page_text,
)
from urls import (
    CONTACT_PAGE,
    GALLERY_DETAIL,
    GALLERY_HOME,
    LISTING,
    effective_label,
    get_domain,
)

MAILTO_SELECTOR = "a[href^='mailto:']"


@dataclass
class CrawlStats:
    galleries_found: int = 0
    galleries_processed: int = 0
    contact_pages_visited: int = 0
    emails_found: int = 0
    phones_found: int = 0
    records_saved: int = 0
    pages_processed: int = 0
    pages_failed: int = 0

    def as_dict(self) -> dict:
        return asdict(self)


class WorkQueue:
    """FIFO of work items shared by the dispatcher and the stage handlers."""

    def __init__(self):
        self._q: queue.Queue = queue.Queue()
        self._lock = threading.Lock()
        self.enqueued = 0

    def enqueue(self, item: WorkItem):
        self._q.put(item)
        with self._lock:
            self.enqueued += 1

    def dequeue(self) -> WorkItem | None:
        try:
            return self._q.get_nowait()
        except queue.Empty:
            return None

    def __len__(self) -> int:
        return self._q.qsize()


class GalleryCrawler:
    """
    Labeled dispatcher for the four crawl stages:
    LISTING -> GALLERY_DETAIL -> GALLERY_HOME -> CONTACT_PAGE.

    Each work item carries the gallery state collected so far; handlers
    enrich a copy of it and either enqueue the next stage or hand it to the
    gate for saving.
    """

    def __init__(
        self,
        fetcher,
        gate,
        max_pages: int = 1000,
        max_concurrency: int = 5,
        timeout: float = config.REQUEST_TIMEOUT,
        work_queue: WorkQueue | None = None,
    ):
        self.fetcher = fetcher
        self.gate = gate
        self.max_pages = max_pages if max_pages and max_pages > 0 else float("inf")
        self.max_concurrency = max(1, int(max_concurrency or 1))
        self.timeout = timeout
        self.queue = work_queue or WorkQueue()
        self.stats = CrawlStats()
        self._stats_lock = threading.Lock()
        self.dispatched = 0

    def bump(self, name: str, n: int = 1):
        with self._stats_lock:
            setattr(self.stats, name, getattr(self.stats, name) + n)

    def enqueue(self, url: str, label: str, state: GalleryState):
        self.queue.enqueue(WorkItem(url=url, label=label, state=state))

    def run(self, seeds: list[WorkItem]) -> CrawlStats:
        for item in seeds:
            self.queue.enqueue(item)

        with ThreadPoolExecutor(max_workers=self.max_concurrency) as pool:
            pending = set()
            while True:
                while len(pending) < self.max_concurrency and self.dispatched < self.max_pages:
                    item = self.queue.dequeue()
                    if item is None:
                        break
                    self.dispatched += 1
                    pending.add(pool.submit(self.process, item))
                if not pending:
                    break
                done, pending = wait(pending, return_when=FIRST_COMPLETED)
                for fut in done:
                    fut.result()

        if len(self.queue) and self.dispatched >= self.max_pages:
            print(f"Page budget of {self.dispatched} reached, {len(self.queue)} items left in queue.")
        return self.stats

    def process(self, item: WorkItem):
        label = effective_label(item.url, item.label)
        print(f"Processing [{label}]: {item.url}")
        try:
            page = self.fetcher.fetch(item.url, self.timeout)
            if page is None:
                self.bump("pages_failed")
                print(f"Request {item.url} failed, dropping it.")
                return
            self.bump("pages_processed")
            handler = self.handlers()[label]
            handler(item.url, page, item.state.copy())
        except Exception as e:
            self.bump("pages_failed")
            print(f"Error processing {item.url}: {e}")

    def handlers(self) -> dict:
        return {
            LISTING: self.handle_listing,
            GALLERY_DETAIL: self.handle_gallery_detail,
            GALLERY_HOME: self.handle_gallery_home,
            CONTACT_PAGE: self.handle_contact_page,
        }

    def handle_listing(self, url: str, page, state: GalleryState):
        galleries = extract_gallery_links(page.soup, page.url or url)
        print(f"Found {len(galleries)} gallery detail pages on {url}")
        self.bump("galleries_found", len(galleries))

        for detail_url, name in galleries:
            if not self.gate.claim_url(detail_url):
                continue
            self.enqueue(detail_url, GALLERY_DETAIL, GalleryState(gallery_name=name, source_url=url))

    def handle_gallery_detail(self, url: str, page, state: GalleryState):
        self.bump("galleries_processed")
        contact = extract_detail_contact(page.soup, page.url or url)
        text = page_text(page.soup)

        emails = [contact["email"]] if contact["email"] else []
        emails.extend(extract_emails(text))
        phones = [contact["phone"]] if contact["phone"] else []
        phones.extend(extract_phone_numbers(text))

        state.merge(
            gallery_name=contact["gallery_name"],
            website=contact["website"],
            address=contact["address"],
            emails=[e for e in emails if is_candidate_email(e)],
            phones=phones,
        )
        state.source_url = url
        print(
            f"Directory page - emails: {len(state.emails)}, phones: {len(state.phone_numbers)}, "
            f"website: {state.website or 'none'}"
        )

        domain = get_domain(state.website) if state.website else None
        if domain and self.gate.claim_domain(domain):
            print(f"Following gallery website: {state.website}")
            self.enqueue(state.website, GALLERY_HOME, state)
            return
        self.save(state)

    def handle_gallery_home(self, url: str, page, state: GalleryState):
        state.merge(
            gallery_name=urlparse(url).hostname or "Unknown",
            website=url,
            source_url=url,
        )
        print(f"Scraping gallery website: {state.gallery_name} - {url}")
        self.collect_contacts(page, state)

        contact_links = find_contact_links(page.soup, page.url or url)
        if not contact_links:
            self.save(state)
            return

        print(f"Found {len(contact_links)} contact pages for {state.gallery_name}")
        for contact_url in contact_links:
            self.enqueue(contact_url, CONTACT_PAGE, state.copy())

    def handle_contact_page(self, url: str, page, state: GalleryState):
        self.bump("contact_pages_visited")
        print(f"Processing contact page for: {state.gallery_name} - {url}")
        self.collect_contacts(page, state)
        self.save(state)

    def collect_contacts(self, page, state: GalleryState):
        text = page_text(page.soup)
        text_emails = extract_emails(text)
        mailto_emails = emails_from_mailto_links(self.fetcher.evaluate(page, MAILTO_SELECTOR))
        state.add_emails(e for e in text_emails + mailto_emails if is_candidate_email(e))
        state.add_phones(extract_phone_numbers(text))
        print(f"Emails found: {len(text_emails)} from text, {len(mailto_emails)} from mailto links")

    def save(self, state: GalleryState) -> dict | None:
        record = self.gate.save(state)
        if record is None:
            print(f"Nothing to save for {state.gallery_name or state.source_url}")
            return None
        self.bump("records_saved")
        self.bump("emails_found", len(record["emails"]))
        self.bump("phones_found", len(record["phone_numbers"]))
        print(
            f"Saved: {record['gallery_name']} - {len(record['emails'])} emails, "
            f"{len(record['phone_numbers'])} phones, website: {'yes' if record['website'] else 'no'}"
        )
        return record
