"""The datastores that can be benchmarked and how to run each one."""

from __future__ import annotations

import enum
from collections.abc import Callable, Sequence
from typing import Any

from crudbench.benchmark import Benchmark, BenchmarkOptions, BenchmarkOutcome
from crudbench.dry import DryClientProvider
from crudbench.engine import BenchmarkEngine, KeyProvider, KeyType, Scan, parse_scans
from crudbench.helixdb import HelixDBClientProvider
from crudbench.lmdbstore import LmdbClientProvider
from crudbench.mapdb import MapClientProvider


class Database(enum.Enum):
    """A datastore to benchmark."""

    DRY = "dry"
    MAP = "map"
    HELIXDB = "helixdb"
    LMDB = "lmdb"

    def __str__(self) -> str:
        return self.value

    async def setup_engine(self, key_type: KeyType, options: BenchmarkOptions) -> BenchmarkEngine:
        """Set up the benchmarking engine for this datastore."""
        return await _ENGINES[self].setup(key_type, None, options)

    async def run(
        self,
        benchmark: Benchmark,
        key_type: KeyType,
        key_provider: KeyProvider,
        value_factory: Callable[[], Any],
        scans: str | Sequence[Scan],
    ) -> BenchmarkOutcome:
        """Run the benchmark against this datastore."""
        parsed = parse_scans(scans) if isinstance(scans, str) else list(scans)
        engine = await self.setup_engine(key_type, benchmark.options)
        return await benchmark.run(engine, key_provider, value_factory, parsed)


_ENGINES: dict[Database, type[BenchmarkEngine]] = {
    Database.DRY: DryClientProvider,
    Database.MAP: MapClientProvider,
    Database.HELIXDB: HelixDBClientProvider,
    Database.LMDB: LmdbClientProvider,
}