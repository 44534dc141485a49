"""
DOM extraction for the crawl stages. Every function takes a parsed
BeautifulSoup document and returns plain values.
"""

from urllib.parse import urljoin, urlparse, parse_qs, unquote

from bs4 import BeautifulSoup, Comment

from extractors import extract_emails, extract_phone_numbers, normalize_email
from urls import (
    get_domain,
    host_in_set,
    is_contact_page,
    is_excluded_url,
    is_http_url,
    normalize_netloc,
)

MAX_CONTACT_LINKS = 5

# Hosts that are never a gallery's own website
NON_GALLERY_DOMAINS = {
    "facebook.com",
    "instagram.com",
    "twitter.com",
    "yelp.com",
    "google.com",
    "maps.google.com",
    "tripadvisor.com",
    "artgalleries.com",
}

WEBSITE_LINK_TEXTS = ("visit website", "official site")

LISTING_SKIP_PATHS = (
    "/claim",
    "/login",
    "/register",
    "/privacy",
    "/terms",
    "/cookie",
)

TITLE_SEPARATORS = ("|", " - ", "–")


def page_text(soup: BeautifulSoup) -> str:
    body = soup.body or soup
    parts = []
    for s in body.find_all(string=True):
        if isinstance(s, Comment):
            continue
        if s.parent is not None and s.parent.name in ("script", "style", "noscript"):
            continue
        t = s.strip()
        if t:
            parts.append(t)
    return "\n".join(parts)


def anchors(soup: BeautifulSoup, base_url: str) -> list[tuple[str, str, object]]:
    """(absolute href, link text, tag) for every anchor with an href."""
    out = []
    for a in soup.select("a[href]"):
        href = (a.get("href") or "").strip()
        if not href:
            continue
        if href.lower().startswith(("javascript:", "mailto:", "tel:")):
            out.append((href, a.get_text(" ", strip=True), a))
            continue
        try:
            absolute = urljoin(base_url, href)
        except ValueError:
            continue
        out.append((absolute, a.get_text(" ", strip=True), a))
    return out


def extract_gallery_links(soup: BeautifulSoup, base_url: str) -> list[tuple[str, str]]:
    """
    Links from a directory listing page to gallery detail pages on the same
    directory site, as (url, link text) pairs.
    """
    base_domain = get_domain(base_url)
    results = []
    seen = set()
    for href, text, _ in anchors(soup, base_url):
        if not text or len(text) < 3 or len(text) > 120:
            continue
        if href.lower().startswith(("javascript:", "mailto:", "tel:")):
            continue
        if "#" in href:
            continue
        try:
            p = urlparse(href)
        except ValueError:
            continue
        host = normalize_netloc(p.hostname or "")
        path = p.path.lower()
        if not host or host != base_domain:
            continue

        segments = [s for s in path.split("/") if s]
        if "/page/" in path or "page=" in (p.query or ""):
            continue
        if not segments:
            continue
        if "/states/" in path and len(segments) <= 2:
            continue
        if any(s in path for s in LISTING_SKIP_PATHS):
            continue
        if len(segments) < 3:
            continue

        if href in seen:
            continue
        seen.add(href)
        results.append((href, text))
    return results


def first_non_empty(strategies, soup: BeautifulSoup) -> str:
    for strategy in strategies:
        value = strategy(soup)
        if value:
            return value
    return ""


def _heading_text(soup: BeautifulSoup, tag: str) -> str:
    el = soup.find(tag)
    if not el:
        return ""
    text = el.get_text(" ", strip=True)
    return text if len(text) > 2 else ""


def _strip_title_suffix(title: str) -> str:
    for sep in TITLE_SEPARATORS:
        title = title.split(sep)[0]
    return title.strip()


def name_from_h1(soup: BeautifulSoup) -> str:
    return _heading_text(soup, "h1")


def name_from_h2(soup: BeautifulSoup) -> str:
    return _heading_text(soup, "h2")


def name_from_title(soup: BeautifulSoup) -> str:
    if not soup.title:
        return ""
    return _strip_title_suffix(soup.title.get_text(" ", strip=True))


def name_from_og_title(soup: BeautifulSoup) -> str:
    meta = soup.find("meta", attrs={"property": "og:title"})
    if not meta:
        return ""
    return _strip_title_suffix(meta.get("content") or "")


NAME_STRATEGIES = (name_from_h1, name_from_h2, name_from_title, name_from_og_title)


def gallery_name(soup: BeautifulSoup) -> str:
    return first_non_empty(NAME_STRATEGIES, soup)


def phone_from_tel_links(soup: BeautifulSoup) -> str:
    for a in soup.select("a[href^='tel:']"):
        raw = (a.get("href") or "")[len("tel:"):]
        phones = extract_phone_numbers(unquote(raw))
        if phones:
            return phones[0]
    return ""


def emails_from_mailto_links(links) -> list[str]:
    out = []
    for a in links:
        e = normalize_email(a.get("href") or "")
        if "@" in e and e not in out:
            out.append(e)
    return out


def website_link(soup: BeautifulSoup, base_url: str) -> str:
    """The gallery's own site as linked from a directory detail page."""
    self_domain = get_domain(base_url)
    for href, text, a in anchors(soup, base_url):
        if not is_http_url(href):
            continue
        label = " ".join([
            text.lower(),
            (a.get("title") or "").lower(),
            (a.get("aria-label") or "").lower(),
        ])
        if text.lower() != "website" and not any(t in label for t in WEBSITE_LINK_TEXTS):
            continue
        host = get_domain(href)
        if not host or host == self_domain:
            continue
        if host_in_set(host, NON_GALLERY_DOMAINS) or is_excluded_url(href):
            continue
        return href
    return ""


def address_from_map_links(soup: BeautifulSoup) -> str:
    for a in soup.select("a[href*='maps.google.com'], a[href*='google.com/maps']"):
        try:
            qs = parse_qs(urlparse(a.get("href") or "").query)
        except ValueError:
            continue
        for key in ("daddr", "destination"):
            values = qs.get(key)
            if values and values[0].strip():
                return values[0].strip()
    return ""


def extract_detail_contact(soup: BeautifulSoup, base_url: str) -> dict:
    """Contact fields shown on a directory's gallery detail page."""
    emails = emails_from_mailto_links(soup.select("a[href^='mailto:']"))[:1]
    if not emails:
        emails = extract_emails(page_text(soup))[:1]
    return {
        "gallery_name": gallery_name(soup),
        "phone": phone_from_tel_links(soup),
        "email": emails[0] if emails else "",
        "website": website_link(soup, base_url),
        "address": address_from_map_links(soup),
    }


def find_contact_links(soup: BeautifulSoup, base_url: str, limit: int = MAX_CONTACT_LINKS) -> list[str]:
    out = []
    for href, _, _ in anchors(soup, base_url):
        if not is_http_url(href):
            continue
        if not is_contact_page(href) or is_excluded_url(href):
            continue
        if href not in out:
            out.append(href)
        if len(out) >= limit:
            break
    return out
