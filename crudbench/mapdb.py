"""An in-memory dictionary datastore, measuring the harness with real storage."""

from __future__ import annotations

from itertools import islice
from typing import Any

from crudbench.engine import (
    BenchmarkClient,
    BenchmarkEngine,
    KeyType,
    NotSupportedError,
    Scan,
)

_STRING_KEY_TYPES = frozenset(
    {KeyType.STRING26, KeyType.STRING90, KeyType.STRING250, KeyType.STRING506}
)

_MISSING = object()


def _scan_entries(entries: dict[Any, Any], scan: Scan) -> int:
    if scan.condition is not None:
        raise NotSupportedError()
    start = scan.start or 0
    stop = None if scan.limit is None else start + scan.limit
    scan.resolve_projection()
    return sum(1 for _ in islice(entries.items(), start, stop))


class MapClient(BenchmarkClient):
    """A client over a dictionary shared by every client of the same engine."""

    def __init__(self, entries: dict[Any, Any], integer_keys: bool) -> None:
        self._entries = entries
        self._integer_keys = integer_keys

    def _require(self, integer: bool) -> dict[Any, Any]:
        if self._integer_keys != integer:
            raise TypeError("Invalid MapDatabase variant")
        return self._entries

    def _create(self, integer: bool, key: Any, value: Any) -> None:
        entries = self._require(integer)
        if key in entries:
            raise KeyError(f"key {key!r} already exists")
        entries[key] = value

    def _read(self, integer: bool, key: Any) -> None:
        if key not in self._require(integer):
            raise KeyError(key)

    def _update(self, integer: bool, key: Any, value: Any) -> None:
        entries = self._require(integer)
        if key not in entries:
            raise KeyError(key)
        entries[key] = value

    def _delete(self, integer: bool, key: Any) -> None:
        entries = self._require(integer)
        if entries.pop(key, _MISSING) is _MISSING:
            raise KeyError(key)

    async def create_u32(self, key: int, value: Any) -> None:
        self._create(True, key, value)

    async def create_string(self, key: str, value: Any) -> None:
        self._create(False, key, value)

    async def read_u32(self, key: int) -> None:
        self._read(True, key)

    async def read_string(self, key: str) -> None:
        self._read(False, key)

    async def update_u32(self, key: int, value: Any) -> None:
        self._update(True, key, value)

    async def update_string(self, key: str, value: Any) -> None:
        self._update(False, key, value)

    async def delete_u32(self, key: int) -> None:
        self._delete(True, key)

    async def delete_string(self, key: str) -> None:
        self._delete(False, key)

    async def scan_u32(self, scan: Scan) -> int:
        return _scan_entries(self._require(True), scan)

    async def scan_string(self, scan: Scan) -> int:
        return _scan_entries(self._require(False), scan)


class MapClientProvider(BenchmarkEngine):
    """An engine backed by a single in-process dictionary."""

    def __init__(self, integer_keys: bool) -> None:
        self._integer_keys = integer_keys
        self._entries: dict[Any, Any] = {}

    @classmethod
    async def setup(cls, key_type: KeyType, columns: Any, options: Any) -> MapClientProvider:
        if key_type is KeyType.INTEGER:
            return cls(integer_keys=True)
        if key_type in _STRING_KEY_TYPES:
            return cls(integer_keys=False)
        raise ValueError(f"key type {key_type} is not supported")

    async def create_client(self) -> MapClient:
        return MapClient(self._entries, self._integer_keys)

    def wait_timeout(self) -> float | None:
        return None