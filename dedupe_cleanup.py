import os
from datetime import datetime, timezone
from urllib.parse import urlparse

import boto3
from boto3.dynamodb.conditions import Attr


AWS_REGION = os.getenv("AWS_REGION", "us-east-1")
GALLERIES_TABLE = os.getenv("GALLERIES_TABLE", "GalleryContacts")
DYNAMODB_ENDPOINT_URL = os.getenv("DYNAMODB_ENDPOINT_URL")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_netloc(netloc: str) -> str:
    host = (netloc or "").strip().lower()
    if host.startswith("www."):
        host = host[4:]
    return host


def gallery_key(item: dict) -> str:
    # One gallery lineage shares a website; directory-only galleries share a source page.
    website = item.get("website") or ""
    if website:
        return normalize_netloc(urlparse(website).netloc)
    return (item.get("source_url") or "").rstrip("/")


def pick_winner(items: list[dict]) -> dict:
    def key_fn(x: dict):
        return (
            len(x.get("emails") or []) + len(x.get("phone_numbers") or []),
            x.get("scraped_at") or "",
            x.get("record_id") or "",
        )

    return max(items, key=key_fn)


def merge_group(items: list[dict]) -> tuple[dict, list[dict], list[str], list[str]]:
    """Winner, losers, and the union of every email/phone in the group."""
    winner = pick_winner(items)
    emails = list(dict.fromkeys(e for x in [winner] + items for e in x.get("emails") or []))
    phones = list(dict.fromkeys(p for x in [winner] + items for p in x.get("phone_numbers") or []))
    losers = [x for x in items if x.get("record_id") != winner.get("record_id")]
    return winner, losers, emails, phones


def group_duplicates(items: list[dict]) -> dict[str, list[dict]]:
    by_gallery: dict[str, list[dict]] = {}
    for item in items:
        key = gallery_key(item)
        if not key:
            continue
        by_gallery.setdefault(key, []).append(item)
    return {k: v for k, v in by_gallery.items() if len(v) > 1}


def main() -> None:
    dynamodb = boto3.resource(
        "dynamodb",
        region_name=AWS_REGION,
        endpoint_url=DYNAMODB_ENDPOINT_URL or None,
    )
    galleries_table = dynamodb.Table(GALLERIES_TABLE)

    filter_expr = Attr("status").not_exists() | Attr("status").ne("duplicate")
    scan_kwargs = {
        "FilterExpression": filter_expr,
        "ProjectionExpression": "record_id,website,source_url,emails,phone_numbers,scraped_at,#s",
        "ExpressionAttributeNames": {"#s": "status"},
    }

    items: list[dict] = []
    start_key = None
    while True:
        if start_key:
            scan_kwargs["ExclusiveStartKey"] = start_key
        resp = galleries_table.scan(**scan_kwargs)
        items.extend(resp.get("Items", []))
        start_key = resp.get("LastEvaluatedKey")
        if not start_key:
            break

    now = utc_now_iso()
    merged = 0
    for key, group in group_duplicates(items).items():
        winner, losers, emails, phones = merge_group(group)
        winner_id = winner.get("record_id") or ""
        galleries_table.update_item(
            Key={"record_id": winner_id},
            UpdateExpression="SET emails = :emails, phone_numbers = :phones, touched_at = :now",
            ExpressionAttributeValues={":emails": emails, ":phones": phones, ":now": now},
        )
        for item in losers:
            galleries_table.update_item(
                Key={"record_id": item["record_id"]},
                UpdateExpression=(
                    "SET #s = :dup, touched_at = :now, touched_by = :user, "
                    "dedupe_reason = :reason, dedupe_winner = :winner"
                ),
                ExpressionAttributeNames={"#s": "status"},
                ExpressionAttributeValues={
                    ":dup": "duplicate",
                    ":now": now,
                    ":user": "dedupe_cleanup",
                    ":reason": "duplicate_gallery",
                    ":winner": winner_id,
                },
            )
            merged += 1

    print(f"Dedupe complete. Merged {merged} duplicate gallery records.")


if __name__ == "__main__":
    main()
