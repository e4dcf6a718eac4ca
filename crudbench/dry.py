"""A datastore that does nothing, to measure the harness itself."""

from __future__ import annotations

from typing import Any

from crudbench.engine import BenchmarkClient, BenchmarkEngine, KeyType, Scan


class DryClient(BenchmarkClient):
    """A client whose operations all succeed without storing anything."""

    async def create_u32(self, key: int, value: Any) -> None:
        pass

    async def create_string(self, key: str, value: Any) -> None:
        pass

    async def read_u32(self, key: int) -> None:
        pass

    async def read_string(self, key: str) -> None:
        pass

    async def update_u32(self, key: int, value: Any) -> None:
        pass

    async def update_string(self, key: str, value: Any) -> None:
        pass

    async def delete_u32(self, key: int) -> None:
        pass

    async def delete_string(self, key: str) -> None:
        pass

    async def scan_u32(self, scan: Scan) -> int:
        return scan.expect if scan.expect is not None else 0

    async def scan_string(self, scan: Scan) -> int:
        return scan.expect if scan.expect is not None else 0


class DryClientProvider(BenchmarkEngine):
    """An engine that hands out dry clients."""

    @classmethod
    async def setup(cls, key_type: KeyType, columns: Any, options: Any) -> DryClientProvider:
        return cls()

    async def create_client(self) -> DryClient:
        return DryClient()

    def wait_timeout(self) -> float | None:
        return None