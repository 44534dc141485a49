import os
import re
from urllib.parse import urlparse

import config
from extractors import extract_urls_from_text
from fetcher import fetch_text as http_fetch_text
from models import GalleryState, WorkItem
from urls import (
    GALLERY_HOME,
    classify_seed_label,
    is_gallery_detail_page,
    is_likely_listing_url,
)

LOC_RE = re.compile(r"<loc>\s*([^<]+?)\s*</loc>", re.I)
ROBOTS_SITEMAP_RE = re.compile(r"^\s*sitemap:\s*(\S+)\s*$", re.I)
SITEMAP_INDEX_MARKER = "<sitemapindex"


class NoSeedUrlsError(Exception):
    pass


def unique(values) -> list:
    return list(dict.fromkeys(v for v in values if v))


def normalize_start_url_entry(entry) -> str | None:
    if not entry:
        return None
    if isinstance(entry, str):
        return entry.strip() or None
    if isinstance(entry, dict) and isinstance(entry.get("url"), str):
        return entry["url"].strip() or None
    return None


def extract_sitemap_locs(xml: str | None) -> list[str]:
    if not xml:
        return []
    return [u for u in LOC_RE.findall(xml) if u.startswith("http")]


def expand_sitemap_urls(sitemap_urls, max_urls: int = 2000, fetch_text=None) -> list[str]:
    """
    Breadth-first walk from sitemap roots. Index documents contribute their
    child sitemaps to the walk, plain sitemaps contribute page URLs.
    """
    fetch_text = fetch_text or http_fetch_text
    queue = unique(sitemap_urls or [])
    visited = set()
    results = []

    while queue and len(results) < max_urls:
        sitemap_url = queue.pop(0)
        if sitemap_url in visited:
            continue
        visited.add(sitemap_url)

        xml = fetch_text(sitemap_url)
        if not xml:
            continue

        locs = extract_sitemap_locs(xml)
        if SITEMAP_INDEX_MARKER in xml:
            for loc in locs:
                if loc not in visited:
                    queue.append(loc)
            continue

        for loc in locs:
            results.append(loc)
            if len(results) >= max_urls:
                break

    return results


def origin_of(url: str) -> str | None:
    try:
        p = urlparse(url)
    except ValueError:
        return None
    if p.scheme not in ("http", "https") or not p.netloc:
        return None
    return f"{p.scheme}://{p.netloc}"


def parse_robots_sitemaps(robots_text: str | None) -> list[str]:
    if not robots_text:
        return []
    out = []
    for line in robots_text.splitlines():
        m = ROBOTS_SITEMAP_RE.match(line)
        if m:
            out.append(m.group(1).strip())
    return out


def discover_sitemaps_from_robots(start_urls, fetch_text=None) -> list[str]:
    fetch_text = fetch_text or http_fetch_text
    origins = unique(origin_of(u) for u in start_urls or [])

    sitemaps = []
    for origin in origins:
        found = parse_robots_sitemaps(fetch_text(f"{origin}/robots.txt"))
        if not found:
            found = [f"{origin}/sitemap.xml", f"{origin}/sitemap_index.xml"]
        sitemaps.extend(found)
    return unique(sitemaps)


def load_urls_from_csv(start_urls_csv) -> list[str]:
    if not start_urls_csv:
        return []
    entries = start_urls_csv if isinstance(start_urls_csv, (list, tuple)) else [start_urls_csv]
    urls = []
    for entry in entries:
        if not entry or not isinstance(entry, str):
            continue
        if os.path.exists(entry):
            with open(entry, "r", encoding="utf-8") as f:
                urls.extend(extract_urls_from_text(f.read()))
        elif "http" in entry:
            urls.extend(extract_urls_from_text(entry))
        else:
            print(f"CSV path not found: {entry}")
    return urls


def build_seed_urls(
    start_urls=None,
    sitemap_urls=None,
    start_urls_csv=None,
    auto_discover_sitemaps: bool = True,
    max_sitemap_urls: int = 2000,
    fetch_text=None,
) -> list[str]:
    seed_urls = []

    normalized_start_urls = [u for u in (normalize_start_url_entry(e) for e in start_urls or []) if u]
    seed_urls.extend(normalized_start_urls)
    seed_urls.extend(load_urls_from_csv(start_urls_csv))

    sitemap_seeds = [u for u in sitemap_urls or [] if isinstance(u, str)]
    if auto_discover_sitemaps:
        sitemap_seeds.extend(discover_sitemaps_from_robots(normalized_start_urls, fetch_text))
    sitemap_seeds = unique(sitemap_seeds)

    if sitemap_seeds:
        expanded = expand_sitemap_urls(sitemap_seeds, max_sitemap_urls, fetch_text)
        filtered = [u for u in expanded if is_likely_listing_url(u) or is_gallery_detail_page(u)]
        if not filtered:
            filtered = expanded
        print(f"Sitemaps expanded to {len(expanded)} urls, {len(filtered)} kept as seeds")
        seed_urls.extend(filtered)

    seeds = [u for u in unique(seed_urls) if u.startswith("http")]
    if not seeds:
        raise NoSeedUrlsError(
            "No start URLs provided. Please provide startUrls, sitemapUrls, or startUrlsCsv."
        )
    return seeds


def build_seed_items(urls) -> list[WorkItem]:
    items = []
    for url in urls:
        label = classify_seed_label(url)
        if label == GALLERY_HOME:
            try:
                host = urlparse(url).hostname or "Unknown"
            except ValueError:
                host = "Unknown"
            state = GalleryState(gallery_name=host, website=url, source_url=url)
        else:
            state = GalleryState()
        items.append(WorkItem(url=url, label=label, state=state))
    return items


def build_seeds_from_input(data: dict, fetch_text=None) -> list[str]:
    seeds = build_seed_urls(
        start_urls=data.get("startUrls"),
        sitemap_urls=data.get("sitemapUrls"),
        start_urls_csv=data.get("startUrlsCsv"),
        auto_discover_sitemaps=bool(data.get("autoDiscoverSitemaps", True)),
        max_sitemap_urls=int(data.get("maxSitemapUrls") or config.DEFAULT_INPUT["maxSitemapUrls"]),
        fetch_text=fetch_text,
    )
    max_seed_urls = int(data.get("maxSeedUrls") or 0)
    if max_seed_urls > 0 and len(seeds) > max_seed_urls:
        print(f"Seed URLs capped to {max_seed_urls} (set maxSeedUrls to increase).")
        seeds = seeds[:max_seed_urls]
    return seeds
