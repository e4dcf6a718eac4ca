"""An LMDB-backed datastore."""

from __future__ import annotations

import json
import os
import shutil
import struct
from itertools import islice
from typing import Any

import lmdb

from crudbench.engine import (
    BenchmarkClient,
    BenchmarkEngine,
    KeyType,
    NotSupportedError,
    Projection,
    Scan,
)

DATABASE_DIR = "lmdb"
DEFAULT_SIZE = 1_073_741_824
SIZE_VARIABLE = "CRUD_BENCH_LMDB_DATABASE_SIZE"


def database_size() -> int:
    """Return the map size from the environment, or the default size."""
    text = os.environ.get(SIZE_VARIABLE)
    if text is None:
        return DEFAULT_SIZE
    try:
        size = int(text)
    except ValueError:
        return DEFAULT_SIZE
    return size if size >= 0 else DEFAULT_SIZE


def _int_key(key: int) -> bytes:
    return struct.pack("=I", key)


def _serialize(value: Any) -> bytes:
    return json.dumps(value, separators=(",", ":")).encode("utf-8")


class LmdbClient(BenchmarkClient):
    """A client over a shared LMDB environment."""

    def __init__(self, env: lmdb.Environment) -> None:
        self._env = env

    async def shutdown(self) -> None:
        self._env.close()
        shutil.rmtree(DATABASE_DIR, ignore_errors=True)

    def _put(self, key: bytes, value: Any) -> None:
        data = _serialize(value)
        with self._env.begin(write=True) as txn:
            txn.put(key, data)

    def _get(self, key: bytes) -> None:
        with self._env.begin() as txn:
            if txn.get(key) is None:
                raise KeyError(key)

    def _remove(self, key: bytes) -> None:
        with self._env.begin(write=True) as txn:
            txn.delete(key)

    def _scan(self, scan: Scan) -> int:
        if scan.condition is not None:
            raise NotSupportedError()
        start = scan.start or 0
        stop = None if scan.limit is None else start + scan.limit
        projection = scan.resolve_projection()
        with self._env.begin() as txn:
            cursor = txn.cursor()
            if projection is Projection.FULL:
                entries = cursor.iternext(keys=False, values=True)
            else:
                entries = cursor.iternext(keys=True, values=False)
            return sum(1 for _ in islice(entries, start, stop))

    async def create_u32(self, key: int, value: Any) -> None:
        self._put(_int_key(key), value)

    async def create_string(self, key: str, value: Any) -> None:
        self._put(key.encode("utf-8"), value)

    async def read_u32(self, key: int) -> None:
        self._get(_int_key(key))

    async def read_string(self, key: str) -> None:
        self._get(key.encode("utf-8"))

    async def update_u32(self, key: int, value: Any) -> None:
        self._put(_int_key(key), value)

    async def update_string(self, key: str, value: Any) -> None:
        self._put(key.encode("utf-8"), value)

    async def delete_u32(self, key: int) -> None:
        self._remove(_int_key(key))

    async def delete_string(self, key: str) -> None:
        self._remove(key.encode("utf-8"))

    async def scan_u32(self, scan: Scan) -> int:
        return self._scan(scan)

    async def scan_string(self, scan: Scan) -> int:
        return self._scan(scan)


class LmdbClientProvider(BenchmarkEngine):
    """An engine owning a fresh LMDB environment in the working directory."""

    def __init__(self, env: lmdb.Environment) -> None:
        self._env = env

    @classmethod
    async def setup(cls, key_type: KeyType, columns: Any, options: Any) -> LmdbClientProvider:
        shutil.rmtree(DATABASE_DIR, ignore_errors=True)
        os.mkdir(DATABASE_DIR)
        env = lmdb.open(
            DATABASE_DIR,
            map_size=database_size(),
            sync=False,
            metasync=False,
            map_async=True,
        )
        return cls(env)

    async def create_client(self) -> LmdbClient:
        return LmdbClient(self._env)

    def wait_timeout(self) -> float | None:
        return None