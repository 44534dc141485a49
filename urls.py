from urllib.parse import urlparse

LISTING = "LISTING"
GALLERY_DETAIL = "GALLERY_DETAIL"
GALLERY_HOME = "GALLERY_HOME"
CONTACT_PAGE = "CONTACT_PAGE"

STAGES = (LISTING, GALLERY_DETAIL, GALLERY_HOME, CONTACT_PAGE)

CONTACT_PAGE_KEYWORDS = (
    "contact",
    "about",
    "submit",
    "submissions",
    "artists",
    "visit",
    "info",
    "location",
)

DETAIL_PATH_PATTERNS = (
    "/gallery/",
    "/galleries/",
    "/artist/",
    "/view/",
    "/details/",
)

EXCLUDED_DOMAINS = {
    "facebook.com",
    "instagram.com",
    "twitter.com",
    "x.com",
    "linkedin.com",
    "youtube.com",
    "tiktok.com",
    "pinterest.com",
    "mapquest.com",
    "goo.gl",
    "bit.ly",
    "maps.google.com",
    "google.com",
    "cookiedatabase.org",
    "domainworx.com",
    "yelp.com",
    "tripadvisor.com",
    "yellowpages.com",
    "bbb.org",
    "apple.com",
    "play.google.com",
}

EXCLUDED_PATH_KEYWORDS = (
    "privacy",
    "policy",
    "terms",
    "cookie",
    "login",
    "signup",
    "account",
    "cart",
    "checkout",
    "donate",
    "press",
    "news",
    "events",
    "blog",
)

LISTING_PATH_KEYWORDS = (
    "gallery",
    "galleries",
    "directory",
    "listing",
    "listings",
    "index",
    "art-galleries",
    "locations",
    "states",
    "usa",
)

# First path segments that hold directory indexes rather than galleries
LISTING_NAMESPACES = ("states",)
PAGING_SEGMENTS = ("page", "category")


def normalize_netloc(netloc: str) -> str:
    netloc = (netloc or "").lower()
    if ":" in netloc:
        netloc = netloc.split(":", 1)[0]
    if netloc.startswith("www."):
        netloc = netloc[4:]
    return netloc


def host_in_set(host: str, domain_set: set[str]) -> bool:
    h = normalize_netloc(host)
    if not h:
        return False
    for d in domain_set:
        if h == d or h.endswith("." + d):
            return True
    return False


def normalize_url(u: str) -> str:
    """
    Identity key for a page: scheme://host/path without query, fragment or
    trailing slash. Unparseable input comes back as given.
    """
    try:
        p = urlparse(u)
        if not p.scheme or not p.hostname:
            return u
        return f"{p.scheme}://{p.hostname}{p.path}".rstrip("/")
    except Exception:
        return u


def get_domain(u: str) -> str | None:
    try:
        host = urlparse(u).hostname
    except Exception:
        return None
    if not host:
        return None
    return normalize_netloc(host)


def url_path(u: str) -> str:
    try:
        return urlparse(u).path.lower()
    except Exception:
        return ""


def path_segments(u: str) -> list[str]:
    return [s for s in url_path(u).split("/") if s]


def is_http_url(u: str) -> bool:
    try:
        p = urlparse(u)
        return p.scheme in ("http", "https") and bool(p.netloc)
    except Exception:
        return False


def is_contact_page(u: str) -> bool:
    path = url_path(u)
    return any(f"/{kw}" in path for kw in CONTACT_PAGE_KEYWORDS)


def is_gallery_detail_page(u: str) -> bool:
    path = url_path(u)
    return any(p in path for p in DETAIL_PATH_PATTERNS)


def is_excluded_url(u: str) -> bool:
    try:
        p = urlparse(u)
        host = normalize_netloc(p.hostname or "")
        path = p.path.lower()
    except Exception:
        return True
    if not host:
        return True
    if host_in_set(host, EXCLUDED_DOMAINS):
        return True
    return any(kw in path for kw in EXCLUDED_PATH_KEYWORDS)


def is_likely_listing_url(u: str, base_domain: str | None = None) -> bool:
    try:
        p = urlparse(u)
        host = normalize_netloc(p.hostname or "")
        path = p.path.lower()
    except Exception:
        return False
    if base_domain and host != normalize_netloc(base_domain):
        return False
    return any(kw in path for kw in LISTING_PATH_KEYWORDS)


def classify_seed_label(u: str) -> str:
    if is_likely_listing_url(u):
        return LISTING
    if is_gallery_detail_page(u) or is_contact_page(u):
        return GALLERY_HOME
    return LISTING


def looks_like_detail_path(u: str) -> bool:
    # Directory detail pages look like /state/city/gallery-name/
    segments = path_segments(u)
    if len(segments) < 3:
        return False
    if segments[0] in LISTING_NAMESPACES:
        return False
    return not any(s in PAGING_SEGMENTS for s in segments)


def effective_label(u: str, label: str) -> str:
    """Label a page is dispatched under; path shape at fetch time wins."""
    if looks_like_detail_path(u):
        return GALLERY_DETAIL
    return label if label in STAGES else LISTING
