import os
import json
import hashlib
import threading

import boto3

import config


def sha_id(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def record_id(record: dict) -> str:
    return sha_id(json.dumps(record, sort_keys=True, ensure_ascii=False))


class MemorySink:
    def __init__(self):
        self._lock = threading.Lock()
        self.records: list[dict] = []

    def append(self, record: dict):
        with self._lock:
            self.records.append(dict(record))

    def count(self) -> int:
        with self._lock:
            return len(self.records)

    def sample(self, limit: int) -> list[dict]:
        with self._lock:
            return list(self.records[:limit])


class JsonlSink:
    """
    Append-only JSON lines export, one record per line. sample() only
    returns records written by this sink, not earlier runs in the same file.
    """

    def __init__(self, path: str):
        self.path = path
        self._start = os.path.getsize(path) if os.path.exists(path) else 0
        self._lock = threading.Lock()
        self._count = 0

    def append(self, record: dict):
        line = json.dumps(record, ensure_ascii=False)
        with self._lock:
            try:
                with open(self.path, "a", encoding="utf-8") as f:
                    f.write(line + "\n")
                self._count += 1
            except OSError as e:
                print(f"Record export failed: {e}")

    def count(self) -> int:
        with self._lock:
            return self._count

    def sample(self, limit: int) -> list[dict]:
        out = []
        try:
            with open(self.path, "rb") as f:
                f.seek(self._start)
                for raw in f:
                    line = raw.decode("utf-8").strip()
                    if not line:
                        continue
                    out.append(json.loads(line))
                    if len(out) >= limit:
                        break
        except FileNotFoundError:
            return []
        return out


class DynamoDbSink:
    def __init__(self, table=None):
        if table is None:
            dynamodb = boto3.resource(
                "dynamodb",
                region_name=config.AWS_REGION,
                endpoint_url=config.DYNAMODB_ENDPOINT_URL or None,
            )
            table = dynamodb.Table(config.GALLERIES_TABLE)
        self.table = table
        self._lock = threading.Lock()
        self._count = 0

    def append(self, record: dict):
        item = {k: v for k, v in record.items() if v not in (None, "")}
        item["record_id"] = record_id(record)
        item["status"] = "new"
        try:
            self.table.put_item(Item=item)
        except Exception as e:
            print(f"DynamoDB galleries table write failed: {e}")
            return
        with self._lock:
            self._count += 1

    def count(self) -> int:
        with self._lock:
            return self._count

    def sample(self, limit: int) -> list[dict]:
        try:
            resp = self.table.scan(Limit=limit)
        except Exception as e:
            print(f"DynamoDB galleries table scan failed: {e}")
            return []
        return resp.get("Items", [])


def make_sink(kind: str | None = None):
    kind = (kind or config.RECORD_SINK or "jsonl").lower()
    if kind == "dynamodb":
        return DynamoDbSink()
    if kind == "memory":
        return MemorySink()
    return JsonlSink(config.EXPORT_RECORDS_FILE)
