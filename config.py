import os
import json

from dotenv import load_dotenv

load_dotenv()

USER_AGENT = os.getenv("USER_AGENT", "GalleryContactFinder/1.0")
REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "20"))
SLEEP_BETWEEN_REQUESTS = float(os.getenv("SLEEP_BETWEEN_REQUESTS", "1.0"))
MAX_REQUEST_RETRIES = int(os.getenv("MAX_REQUEST_RETRIES", "5"))
# Wall-clock budget for one page across all of its attempts
PAGE_DEADLINE = float(os.getenv("PAGE_DEADLINE", "90"))

INPUT_FILE = os.getenv("INPUT_FILE", "input.json")
SEEDS_FILE = os.getenv("SEEDS_FILE", "seeds.txt")

RECORD_SINK = os.getenv("RECORD_SINK", "jsonl").strip().lower()
EXPORT_RECORDS_FILE = os.getenv("EXPORT_RECORDS_FILE", "galleries.jsonl").strip()

AWS_REGION = os.getenv("AWS_REGION", "us-east-1")
GALLERIES_TABLE = os.getenv("GALLERIES_TABLE", "GalleryContacts")
DYNAMODB_ENDPOINT_URL = os.getenv("DYNAMODB_ENDPOINT_URL")

DEFAULT_INPUT = {
    "startUrls": [],
    "sitemapUrls": [],
    "startUrlsCsv": None,
    "autoDiscoverSitemaps": True,
    "maxSitemapUrls": 2000,
    "maxSeedUrls": 200,
    "maxPagesPerCrawl": 1000,
    "maxConcurrency": 5,
    "logResultsToConsole": True,
    "maxResultsToLog": 20,
}


def load_seeds(path: str) -> list[str]:
    if not path or not os.path.exists(path):
        return []
    out = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            s = line.strip()
            if not s or s.startswith("#"):
                continue
            out.append(s)
    return out


def load_input(path: str | None = None, seeds_path: str | None = None) -> dict:
    """
    Crawl input: defaults, overlaid with the JSON input file when present.
    URLs listed in the seeds file are appended to startUrls.
    """
    path = INPUT_FILE if path is None else path
    seeds_path = SEEDS_FILE if seeds_path is None else seeds_path

    data = dict(DEFAULT_INPUT)
    if path and os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            loaded = json.load(f) or {}
        for k, v in loaded.items():
            if v is not None:
                data[k] = v

    start_urls = list(data.get("startUrls") or [])
    start_urls.extend(load_seeds(seeds_path))
    data["startUrls"] = start_urls
    return data
