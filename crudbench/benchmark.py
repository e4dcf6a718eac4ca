"""Running the create, read, update, scan and delete phases against an engine."""

from __future__ import annotations

import asyncio
import logging
import math
import os
import sys
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, TextIO

from crudbench.engine import (
    BenchmarkClient,
    BenchmarkEngine,
    KeyProvider,
    NotSupportedError,
    Scan,
)

log = logging.getLogger(__name__)

CLIENT_TIMEOUT = 60.0
COMPACTION_VARIABLE = "COMPACTION"

_KINDS = ("Create", "Read", "Update", "Scan", "Delete")


@dataclass
class BenchmarkOptions:
    """Settings shared by every phase of a benchmark run."""

    samples: int
    clients: int = 1
    threads: int = 1
    database: Any = None
    image: str | None = None
    endpoint: str | None = None
    privileged: bool = False
    pid: int | None = None
    sync: bool = False
    disk_persistence: bool = True

    def __post_init__(self) -> None:
        for name in ("samples", "clients", "threads"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValueError(f"{name} must be a positive integer")


@dataclass(frozen=True)
class BenchmarkOperation:
    """One benchmark phase; scan phases carry their scan specification."""

    kind: str
    scan: Scan | None = None

    def __post_init__(self) -> None:
        if self.kind not in _KINDS:
            raise ValueError(f"unknown operation kind: {self.kind}")
        if (self.kind == "Scan") != (self.scan is not None):
            raise ValueError("a scan operation needs a scan, and only a scan operation has one")

    @classmethod
    def for_scan(cls, scan: Scan) -> BenchmarkOperation:
        """Build the operation that runs the given scan."""
        return cls("Scan", scan)

    def __str__(self) -> str:
        if self.scan is not None:
            return f"Scan::{self.scan.name}"
        return self.kind

    async def perform(
        self,
        client: BenchmarkClient,
        sample: int,
        key_provider: KeyProvider,
        value_factory: Callable[[], Any],
    ) -> None:
        """Run this operation once for the given sample number."""
        if self.kind == "Create":
            await client.create(sample, value_factory(), key_provider)
        elif self.kind == "Read":
            await client.read(sample, key_provider)
        elif self.kind == "Update":
            await client.update(sample, value_factory(), key_provider)
        elif self.kind == "Delete":
            await client.delete(sample, key_provider)
        else:
            await client.scan(self.scan, key_provider)


BenchmarkOperation.CREATE = BenchmarkOperation("Create")
BenchmarkOperation.READ = BenchmarkOperation("Read")
BenchmarkOperation.UPDATE = BenchmarkOperation("Update")
BenchmarkOperation.DELETE = BenchmarkOperation("Delete")


@dataclass(frozen=True)
class OperationTimings:
    """Per-sample latencies in microseconds and the wall time of a phase."""

    samples: int
    durations: tuple[int, ...]
    elapsed: float

    @property
    def count(self) -> int:
        return len(self.durations)

    @property
    def min(self) -> int:
        return min(self.durations, default=0)

    @property
    def max(self) -> int:
        return max(self.durations, default=0)

    @property
    def mean(self) -> float:
        return sum(self.durations) / len(self.durations) if self.durations else 0.0

    def percentile(self, q: float) -> int:
        """Return the nearest-rank latency at percentile ``q`` (0 to 100)."""
        if not 0 <= q <= 100:
            raise ValueError("percentile must lie between 0 and 100")
        if not self.durations:
            return 0
        ordered = sorted(self.durations)
        rank = math.ceil(q / 100 * len(ordered))
        return ordered[max(rank - 1, 0)]

    @property
    def total_time(self) -> str:
        return f"{self.elapsed:.3f}s"


@dataclass(frozen=True)
class BenchmarkOutcome:
    """The results of every phase of a benchmark run."""

    creates: OperationTimings | None
    reads: OperationTimings | None
    updates: OperationTimings | None
    scans: list[tuple[str, int, OperationTimings | None]]
    deletes: OperationTimings | None
    sample: Any


@dataclass
class _Progress:
    current: int = 0
    complete: int = 0
    error: bool = False
    skip: bool = False


class Benchmark:
    """Drives an engine's clients concurrently through the benchmark phases."""

    def __init__(
        self,
        options: BenchmarkOptions,
        out: TextIO | None = None,
        client_timeout: float = CLIENT_TIMEOUT,
    ) -> None:
        self.options = options
        self.client_timeout = client_timeout
        self._out = out if out is not None else sys.stdout

    def _write(self, text: str) -> None:
        self._out.write(text)
        self._out.flush()

    async def _maybe_compact(self, engine: BenchmarkEngine) -> None:
        if os.environ.get(COMPACTION_VARIABLE) is not None:
            await (await self.wait_for_client(engine)).compact()

    async def run(
        self,
        engine: BenchmarkEngine,
        key_provider: KeyProvider,
        value_factory: Callable[[], Any],
        scans: Sequence[Scan],
    ) -> BenchmarkOutcome:
        """Run every phase against the engine and collect the results."""
        sample = value_factory()
        await (await self.wait_for_client(engine)).startup()
        clients = await self.setup_clients(engine)
        samples = self.options.samples

        async def phase(operation: BenchmarkOperation, count: int) -> OperationTimings | None:
            return await self.run_operation(
                clients, operation, key_provider, value_factory, count
            )

        creates = await phase(BenchmarkOperation.CREATE, samples)
        await self._maybe_compact(engine)
        reads = await phase(BenchmarkOperation.READ, samples)
        await self._maybe_compact(engine)
        updates = await phase(BenchmarkOperation.UPDATE, samples)
        await self._maybe_compact(engine)
        scan_results = []
        for scan in scans:
            count = scan.samples if scan.samples is not None else samples
            result = await phase(BenchmarkOperation.for_scan(scan), count)
            scan_results.append((scan.name, count, result))
        await self._maybe_compact(engine)
        deletes = await phase(BenchmarkOperation.DELETE, samples)
        await (await self.wait_for_client(engine)).shutdown()
        return BenchmarkOutcome(
            creates=creates,
            reads=reads,
            updates=updates,
            scans=scan_results,
            deletes=deletes,
            sample=sample,
        )

    async def wait_for_client(self, engine: BenchmarkEngine) -> BenchmarkClient:
        """Keep trying to connect a client until the timeout runs out."""
        deadline = time.monotonic() + self.client_timeout
        wait = engine.wait_timeout()
        while time.monotonic() < deadline:
            if wait is not None:
                await asyncio.sleep(wait)
            try:
                return await engine.create_client()
            except Exception as exc:
                log.debug("Received error: %s", exc)
        raise RuntimeError("Can't create the client")

    async def setup_clients(self, engine: BenchmarkEngine) -> list[BenchmarkClient]:
        """Connect the configured number of clients concurrently."""
        for index in range(self.options.clients):
            log.info("Creating client %d", index + 1)
        return list(
            await asyncio.gather(*(engine.create_client() for _ in range(self.options.clients)))
        )

    async def run_operation(
        self,
        clients: Sequence[BenchmarkClient],
        operation: BenchmarkOperation,
        key_provider: KeyProvider,
        value_factory: Callable[[], Any],
        samples: int,
    ) -> OperationTimings | None:
        """Run one phase over all clients; return None if it is not supported."""
        state = _Progress()
        self._write(f"\r{operation} 0%")
        started = time.perf_counter()
        tasks = [
            asyncio.create_task(
                self._guarded_loop(client, operation, key_provider, value_factory, samples, state)
            )
            for client in clients
            for _ in range(self.options.threads)
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)
        elapsed = time.perf_counter() - started
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            raise failures[0]
        if state.error:
            raise RuntimeError("Task failure")
        durations = tuple(d for r in results if r is not None for d in r)
        timings = OperationTimings(samples=samples, durations=durations, elapsed=elapsed)
        self._write(f"\r{operation} 100%")
        self._write(" - ")
        self._write(f"{operation} took {timings.total_time}\n")
        return None if state.skip else timings

    async def _guarded_loop(
        self,
        client: BenchmarkClient,
        operation: BenchmarkOperation,
        key_provider: KeyProvider,
        value_factory: Callable[[], Any],
        samples: int,
        state: _Progress,
    ) -> list[int] | None:
        try:
            return await self._operation_loop(
                client, operation, key_provider, value_factory, samples, state
            )
        except NotSupportedError:
            state.skip = True
            return None
        except Exception as exc:
            print(exc, file=sys.stderr)
            state.error = True
            raise

    async def _operation_loop(
        self,
        client: BenchmarkClient,
        operation: BenchmarkOperation,
        key_provider: KeyProvider,
        value_factory: Callable[[], Any],
        samples: int,
        state: _Progress,
    ) -> list[int]:
        durations: list[int] = []
        old_percent = 0
        while not state.error:
            sample = state.current
            state.current += 1
            if sample >= samples:
                break
            started = time.perf_counter()
            await operation.perform(client, sample, key_provider, value_factory)
            done = state.complete
            state.complete += 1
            new_percent = 0 if done == 0 else done * 20 // samples
            if new_percent != old_percent:
                old_percent = new_percent
                self._write(f"\r{operation} {new_percent * 5}%")
            durations.append(int((time.perf_counter() - started) * 1_000_000))
        return durations