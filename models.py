import copy
from dataclasses import dataclass, field


@dataclass
class GalleryState:
    """Contact facts collected for one gallery while it moves through the crawl."""

    gallery_name: str = ""
    website: str = ""
    emails: list[str] = field(default_factory=list)
    phone_numbers: list[str] = field(default_factory=list)
    address: str = ""
    source_url: str = ""

    def __post_init__(self):
        self.emails = _unique(e.strip().lower() for e in self.emails if e and e.strip())
        self.phone_numbers = _unique(p for p in self.phone_numbers if p)

    def add_emails(self, emails):
        for e in emails or []:
            e = (e or "").strip().lower()
            if e and e not in self.emails:
                self.emails.append(e)

    def add_phones(self, phones):
        for p in phones or []:
            if p and p not in self.phone_numbers:
                self.phone_numbers.append(p)

    def merge(
        self,
        gallery_name: str = "",
        website: str = "",
        address: str = "",
        source_url: str = "",
        emails=None,
        phones=None,
    ):
        if not self.gallery_name and gallery_name:
            self.gallery_name = gallery_name
        if not self.website and website:
            self.website = website
        if not self.address and address:
            self.address = address
        if not self.source_url and source_url:
            self.source_url = source_url
        self.add_emails(emails)
        self.add_phones(phones)

    def has_contact(self) -> bool:
        return bool(self.emails or self.phone_numbers or self.website)

    def copy(self) -> "GalleryState":
        return copy.deepcopy(self)


@dataclass(frozen=True)
class WorkItem:
    url: str
    label: str
    state: GalleryState = field(default_factory=GalleryState)


def _unique(values) -> list:
    out = []
    for v in values:
        if v not in out:
            out.append(v)
    return out
