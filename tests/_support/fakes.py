"""
In-process stand-ins for the document and cache store clients.

Only the calls the album repositories make are implemented.
"""

from __future__ import annotations

from typing import Any


class FakeCollection:
    def __init__(self) -> None:
        self.documents: dict[Any, dict[str, Any]] = {}

    def count_documents(self, query: dict[str, Any]) -> int:
        return len(self.documents)

    def replace_one(self, query: dict[str, Any], document: dict[str, Any], upsert: bool = False):
        key = query["_id"]
        if key in self.documents or upsert:
            self.documents[key] = dict(document)

    def find(self, query: dict[str, Any]):
        return iter(list(self.documents.values()))


class FakeDatabase:
    def __init__(self, name: str = "music") -> None:
        self.name = name
        self.collections: dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection())


class FakeMongoClient:
    def __init__(self, uri: str, connect: bool = True) -> None:
        self.uri = uri
        self.connect = connect
        self.closed = False
        self.database: FakeDatabase | None = None

    def get_default_database(self, default: str | None = None) -> FakeDatabase:
        if self.database is None:
            self.database = FakeDatabase(default or "test")
        return self.database

    def close(self) -> None:
        self.closed = True


class FakeRedis:
    def __init__(self, url: str = "redis://fake") -> None:
        self.url = url
        self.hashes: dict[str, dict[str, str]] = {}
        self.closed = False

    def hlen(self, key: str) -> int:
        return len(self.hashes.get(key, {}))

    def hset(self, key: str, field: str, value: str) -> int:
        bucket = self.hashes.setdefault(key, {})
        added = int(field not in bucket)
        bucket[field] = value
        return added

    def hvals(self, key: str) -> list[str]:
        return list(self.hashes.get(key, {}).values())

    def close(self) -> None:
        self.closed = True
