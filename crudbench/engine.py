"""Core benchmark abstractions: key types, scan specifications, engines and clients."""

from __future__ import annotations

import abc
import asyncio
import enum
import json
from dataclasses import dataclass, fields
from typing import Any, Protocol

NOT_SUPPORTED = "NotSupported"

DEFAULT_VALUE = """{
    "text": "string:50",
    "integer": "int"
}"""

DEFAULT_SCANS = """[
    { "name": "count_all", "samples": 100, "projection": "COUNT" },
    { "name": "limit_id", "samples": 100, "projection": "ID", "limit": 100, "expect": 100 },
    { "name": "limit_all", "samples": 100, "projection": "FULL", "limit": 100, "expect": 100 },
    { "name": "limit_count", "samples": 100, "projection": "COUNT", "limit": 100, "expect": 100 },
    { "name": "limit_start_id", "samples": 100, "projection": "ID", "start": 5000, "limit": 100, "expect": 100 },
    { "name": "limit_start_all", "samples": 100, "projection": "FULL", "start": 5000, "limit": 100, "expect": 100 },
    { "name": "limit_start_count", "samples": 100, "projection": "COUNT", "start": 5000, "limit": 100, "expect": 100 }
]"""

DEFAULT_WAIT_TIMEOUT = 5.0


class NotSupportedError(Exception):
    """Raised when a datastore does not support an operation."""

    def __init__(self, message: str = NOT_SUPPORTED) -> None:
        super().__init__(message)


class KeyType(enum.Enum):
    """The shape of the keys used in a benchmark."""

    INTEGER = "integer"
    STRING26 = "string26"
    STRING90 = "string90"
    STRING250 = "string250"
    STRING506 = "string506"
    UUID = "uuid"

    def __str__(self) -> str:
        return self.value


class Projection(enum.Enum):
    """What a scan returns for each entry."""

    ID = "ID"
    FULL = "FULL"
    COUNT = "COUNT"


_OPTIONAL_INT_FIELDS = ("samples", "start", "limit", "expect")
_OPTIONAL_STR_FIELDS = ("condition", "projection")


@dataclass(frozen=True)
class Scan:
    """A single scan benchmark specification."""

    name: str
    samples: int | None = None
    condition: str | None = None
    start: int | None = None
    limit: int | None = None
    expect: int | None = None
    projection: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Scan:
        """Build a scan from a decoded JSON object, ignoring unknown keys."""
        if not isinstance(data, dict):
            raise ValueError(f"scan specification must be an object, got {type(data).__name__}")
        name = data.get("name")
        if not isinstance(name, str):
            raise ValueError("scan specification requires a string 'name'")
        values: dict[str, Any] = {"name": name}
        for key in _OPTIONAL_INT_FIELDS:
            value = data.get(key)
            if value is not None and (
                isinstance(value, bool) or not isinstance(value, int) or value < 0
            ):
                raise ValueError(f"scan field '{key}' must be a non-negative integer")
            values[key] = value
        for key in _OPTIONAL_STR_FIELDS:
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"scan field '{key}' must be a string")
            values[key] = value
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        """Return the scan as a JSON-compatible dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def resolve_projection(self) -> Projection:
        """Return the projection of this scan, defaulting to a full projection."""
        if self.projection is None:
            return Projection.FULL
        try:
            return Projection(self.projection)
        except ValueError:
            raise ValueError(f"Unsupported projection: {self.projection}") from None


def parse_scans(text: str) -> list[Scan]:
    """Parse a JSON array of scan specifications."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"invalid scan specification: {exc}") from exc
    if not isinstance(data, list):
        raise ValueError("scan specifications must be a JSON array")
    return [Scan.from_dict(item) for item in data]


class KeyProvider(Protocol):
    """Anything that maps a sample number to a key."""

    def key(self, n: int) -> int | str: ...


def _is_integer_provider(key_provider: KeyProvider) -> bool:
    return isinstance(key_provider.key(0), int)


class BenchmarkClient(abc.ABC):
    """A client connection that runs benchmark operations against a datastore."""

    async def startup(self) -> None:
        """Initialise the store at startup; by default only yields to the event loop."""
        await asyncio.sleep(0)

    async def shutdown(self) -> None:
        """Clean up the store at shutdown; by default only yields to the event loop."""
        await asyncio.sleep(0)

    async def compact(self) -> None:
        """Compact the store for performance; by default only yields to the event loop."""
        await asyncio.sleep(0)

    async def create(self, n: int, value: Any, key_provider: KeyProvider) -> None:
        """Create a single entry for sample ``n``."""
        key = key_provider.key(n)
        if isinstance(key, int):
            await self.create_u32(key, value)
        else:
            await self.create_string(key, value)

    async def read(self, n: int, key_provider: KeyProvider) -> None:
        """Read a single entry for sample ``n``."""
        key = key_provider.key(n)
        if isinstance(key, int):
            await self.read_u32(key)
        else:
            await self.read_string(key)

    async def update(self, n: int, value: Any, key_provider: KeyProvider) -> None:
        """Update a single entry for sample ``n``."""
        key = key_provider.key(n)
        if isinstance(key, int):
            await self.update_u32(key, value)
        else:
            await self.update_string(key, value)

    async def delete(self, n: int, key_provider: KeyProvider) -> None:
        """Delete a single entry for sample ``n``."""
        key = key_provider.key(n)
        if isinstance(key, int):
            await self.delete_u32(key)
        else:
            await self.delete_string(key)

    async def scan(self, scan: Scan, key_provider: KeyProvider) -> None:
        """Run a scan and check the result length against the expectation."""
        if _is_integer_provider(key_provider):
            result = await self.scan_u32(scan)
        else:
            result = await self.scan_string(scan)
        if scan.expect is not None and scan.expect != result:
            raise AssertionError(
                f"Expected a length of {scan.expect} but found {result} for {scan.name}"
            )

    @abc.abstractmethod
    async def create_u32(self, key: int, value: Any) -> None:
        """Create a single entry with a numeric id."""

    @abc.abstractmethod
    async def create_string(self, key: str, value: Any) -> None:
        """Create a single entry with a string id."""

    @abc.abstractmethod
    async def read_u32(self, key: int) -> None:
        """Read a single entry with a numeric id."""

    @abc.abstractmethod
    async def read_string(self, key: str) -> None:
        """Read a single entry with a string id."""

    @abc.abstractmethod
    async def update_u32(self, key: int, value: Any) -> None:
        """Update a single entry with a numeric id."""

    @abc.abstractmethod
    async def update_string(self, key: str, value: Any) -> None:
        """Update a single entry with a string id."""

    @abc.abstractmethod
    async def delete_u32(self, key: int) -> None:
        """Delete a single entry with a numeric id."""

    @abc.abstractmethod
    async def delete_string(self, key: str) -> None:
        """Delete a single entry with a string id."""

    async def scan_u32(self, scan: Scan) -> int:
        """Scan a range of entries with numeric ids."""
        raise NotSupportedError()

    async def scan_string(self, scan: Scan) -> int:
        """Scan a range of entries with string ids."""
        raise NotSupportedError()


class BenchmarkEngine(abc.ABC):
    """A datastore under benchmark that sets itself up and hands out clients."""

    @classmethod
    @abc.abstractmethod
    async def setup(cls, key_type: KeyType, columns: Any, options: Any) -> BenchmarkEngine:
        """Initiate a new datastore benchmarking engine."""

    @abc.abstractmethod
    async def create_client(self) -> BenchmarkClient:
        """Create a new client for this engine."""

    def wait_timeout(self) -> float | None:
        """Seconds to wait before each connection attempt, or None for no wait."""
        return DEFAULT_WAIT_TIMEOUT