import config
from crawler import GalleryCrawler
from fetcher import HttpPageFetcher
from gate import DedupGate
from seeds import NoSeedUrlsError, build_seed_items, build_seeds_from_input
from sinks import make_sink


def print_summary(stats, sink):
    print("Scraping complete.")
    print(f"  Galleries found in listings: {stats.galleries_found}")
    print(f"  Galleries processed: {stats.galleries_processed}")
    print(f"  Contact pages visited: {stats.contact_pages_visited}")
    print(f"  Total emails: {stats.emails_found}")
    print(f"  Total phone numbers: {stats.phones_found}")
    print(f"  Pages processed: {stats.pages_processed}, failed: {stats.pages_failed}")
    print(f"  Records saved: {sink.count()}")


def print_sample(sink, max_results: int):
    limit = max(1, min(100, int(max_results or 20)))
    items = sink.sample(limit)
    if not items:
        print("No saved records yet (no emails/phones found).")
        return
    print(f"Sample results (up to {limit}):")
    for i, item in enumerate(items, 1):
        emails = len(item.get("emails") or [])
        phones = len(item.get("phone_numbers") or [])
        print(f"{i}. {item.get('gallery_name')} | {item.get('website')} | emails: {emails}, phones: {phones}")


def crawl(data: dict, fetcher=None, sink=None, fetch_text=None):
    seeds = build_seeds_from_input(data, fetch_text=fetch_text)
    sink = sink if sink is not None else make_sink()
    fetcher = fetcher or HttpPageFetcher()

    print(f"Start URLs: {len(seeds)}, max pages: {data.get('maxPagesPerCrawl')}, concurrency: {data.get('maxConcurrency')}")

    crawler = GalleryCrawler(
        fetcher,
        DedupGate(sink),
        max_pages=int(data.get("maxPagesPerCrawl") or 0),
        max_concurrency=int(data.get("maxConcurrency") or 5),
    )
    stats = crawler.run(build_seed_items(seeds))
    print_summary(stats, sink)
    if data.get("logResultsToConsole", True):
        print_sample(sink, data.get("maxResultsToLog"))
    return stats


def main():
    data = config.load_input()
    try:
        crawl(data)
    except NoSeedUrlsError as e:
        print(str(e))
        raise SystemExit(1)


if __name__ == "__main__":
    main()
