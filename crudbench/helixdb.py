"""A HelixDB datastore reached over plain HTTP requests."""

from __future__ import annotations

import asyncio
import json
import re
import socket
from pathlib import Path
from typing import Any

from crudbench.engine import BenchmarkClient, BenchmarkEngine, KeyType, Projection, Scan

DEFAULT = "http://localhost:6969"
DEFAULT_SCAN_LIMIT = 100

_PORT = re.compile(r"\+?[0-9]+")


def _to_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), sort_keys=True, ensure_ascii=False)


def extract_host_and_port(endpoint: str) -> tuple[str, int]:
    """Split an ``http://host:port`` endpoint, defaulting the port to 80."""
    parts = endpoint.replace("http://", "").split(":")
    host = parts[0]
    port = 80
    if len(parts) > 1 and _PORT.fullmatch(parts[1]):
        value = int(parts[1])
        if value <= 0xFFFF:
            port = value
    return host, port


def extract_string_field(value: Any) -> str:
    """Return the first string field of an object, else the value as JSON."""
    if isinstance(value, dict):
        for key in sorted(value):
            if isinstance(value[key], str):
                return value[key]
    return _to_json(value)


class HelixDBClient(BenchmarkClient):
    """A client sending each operation as a request to a stored query."""

    def __init__(self, endpoint: str) -> None:
        self.endpoint = endpoint

    def make_request(self, path: str, method: str, body: str | None) -> str:
        """Send one HTTP request and return the response body."""
        host, port = extract_host_and_port(self.endpoint)
        payload = (body or "").encode("utf-8")
        head = (
            f"{method} {path} HTTP/1.1\r\n"
            f"Host: {host}\r\n"
            "Content-Type: application/json\r\n"
            f"Content-Length: {len(payload)}\r\n"
            "Accept: application/json\r\n\r\n"
        ).encode("utf-8")
        chunks = []
        with socket.create_connection((host, port)) as stream:
            stream.sendall(head + payload)
            while chunk := stream.recv(4096):
                chunks.append(chunk)
        response = b"".join(chunks).decode("utf-8", errors="replace")
        split = response.find("\r\n\r\n")
        return response[(split if split >= 0 else 0) + 4 :]

    async def _post(self, path: str, body: Any | None) -> str:
        text = None if body is None else _to_json(body)
        return await asyncio.to_thread(self.make_request, path, "POST", text)

    async def create_u32(self, key: int, value: Any) -> None:
        await self.create_string(str(key), value)

    async def create_string(self, key: str, value: Any) -> None:
        await self._post("/create_record", {"id": key, "data": extract_string_field(value)})

    async def read_u32(self, key: int) -> None:
        await self.read_string(str(key))

    async def read_string(self, key: str) -> None:
        await self._post("/read_record", {"id": key})

    async def update_u32(self, key: int, value: Any) -> None:
        await self.update_string(str(key), value)

    async def update_string(self, key: str, value: Any) -> None:
        await self._post("/update_record", {"id": key, "data": extract_string_field(value)})

    async def delete_u32(self, key: int) -> None:
        await self.delete_string(str(key))

    async def delete_string(self, key: str) -> None:
        await self._post("/delete_record", {"id": key})

    async def _scan(self, scan: Scan) -> int:
        limit = scan.limit if scan.limit is not None else DEFAULT_SCAN_LIMIT
        offset = scan.start or 0
        if scan.resolve_projection() is Projection.COUNT:
            result = json.loads(await self._post("/count_records", None))
            if isinstance(result, int) and not isinstance(result, bool):
                return result
            return 0
        response = await self._post("/scan_records", {"limit": offset + limit, "offset": offset})
        result = json.loads(response)
        return len(result) if isinstance(result, list) else 0

    async def scan_u32(self, scan: Scan) -> int:
        return await self._scan(scan)

    async def scan_string(self, scan: Scan) -> int:
        return await self._scan(scan)


class HelixDBClientProvider(BenchmarkEngine):
    """An engine pointing clients at a HelixDB endpoint."""

    def __init__(self, endpoint: str, project_path: Path) -> None:
        self.endpoint = endpoint
        self.project_path = project_path

    @classmethod
    async def setup(cls, key_type: KeyType, columns: Any, options: Any) -> HelixDBClientProvider:
        endpoint = getattr(options, "endpoint", None) or DEFAULT
        return cls(endpoint, Path("~/crud-bench/helixdb-queries"))

    async def create_client(self) -> HelixDBClient:
        return HelixDBClient(self.endpoint)