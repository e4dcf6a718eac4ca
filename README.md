# crudbench

crudbench measures how fast a datastore handles the basic record operations:
creating, reading, updating, scanning and deleting a configurable number of
records, spread over many concurrent clients.

Each run goes through the same stages in order:

1. **Create**: insert one record per sample.
2. **Read**: fetch each record back.
3. **Update**: overwrite each record with a freshly generated value.
4. **Scan**: run every configured scan (count, id-only or full projections,
   with optional start offset and limit).
5. **Delete**: remove every record.

Each stage yields an `OperationTimings` with the per-sample latencies in
microseconds (`min`, `max`, `mean`, `percentile(q)`) and the stage's wall
time (`total_time`). A store that cannot perform an operation raises
`NotSupportedError`; that stage's result is then `None` instead of a failure.

## Datastores

The `Database` enumeration in `crudbench.database` lists the stores that can
be benchmarked:

- `Database.DRY`: touches no storage at all, for measuring the harness
  itself (`crudbench.dry`);
- `Database.MAP`: an in-process dictionary (`crudbench.mapdb`);
- `Database.LMDB`: an LMDB environment in a `lmdb` directory under the
  working directory, removed again at shutdown (`crudbench.lmdbstore`); its
  map size is taken from the `CRUD_BENCH_LMDB_DATABASE_SIZE` environment
  variable and defaults to 1 GiB;
- `Database.HELIXDB`: a HelixDB server reached over HTTP, by default at
  `http://localhost:6969`, with the queries `create_record`, `read_record`,
  `update_record`, `delete_record`, `scan_records` and `count_records`
  already deployed on it (`crudbench.helixdb`).

New stores plug in by subclassing `BenchmarkEngine` and `BenchmarkClient`
from `crudbench.engine`: the engine's `setup` prepares the store and
`create_client` hands out clients; the client implements `create_u32`,
`create_string`, `read_u32`, `read_string`, `update_u32`, `update_string`,
`delete_u32`, `delete_string` and, optionally, `scan_u32` and `scan_string`.

## Keys

`crudbench.keyprovider` generates keys for sample numbers, either in order or
in a pseudo-random order that is still deterministic:

```python
from crudbench.keyprovider import OrderedString, UnorderedString

OrderedString(1).key(12345678)    # '0012345678d79235c904e704c6'
UnorderedString(1).key(12345678)  # 'd79235c904e704c60012345678'
```

Integer keys start at 1, and `UnorderedInteger` shuffles them with a small
Feistel network. String keys come in lengths of 26, 90, 250 and 506
characters, built from XXH64 hashes (`xxh64`, `hash_string`) of the sample
number. Pick one with `make_key_provider(key_type, random)`, where
`key_type` is a `KeyType`. `KeyType.UUID` exists but has no key provider;
asking for it raises `ValueError`.

## Scans

Scans are described as a JSON array and parsed with `parse_scans`:

```python
from crudbench.engine import parse_scans

scans = parse_scans("""[
    {"name": "count_all", "samples": 100, "projection": "COUNT"},
    {"name": "limit_id", "samples": 100, "projection": "ID", "limit": 100, "expect": 100},
    {"name": "limit_start_all", "samples": 100, "projection": "FULL",
     "start": 5000, "limit": 100, "expect": 100}
]""")
```

The projection is one of `ID`, `FULL` or `COUNT` and defaults to `FULL`.
When `expect` is given, a scan that returns a different number of records
fails the run. Scans with a `condition` are not supported by the built-in
stores. `crudbench.engine.DEFAULT_SCANS` holds a ready-made set of scans.

## Running a benchmark

```python
import asyncio

from crudbench.benchmark import Benchmark, BenchmarkOptions
from crudbench.database import Database
from crudbench.engine import KeyType
from crudbench.keyprovider import make_key_provider

options = BenchmarkOptions(samples=10_000, clients=2, threads=2)
benchmark = Benchmark(options)
outcome = asyncio.run(
    Database.MAP.run(
        benchmark,
        KeyType.STRING26,
        make_key_provider(KeyType.STRING26, random=True),
        lambda: {"text": "hello", "integer": 1},
        '[{"name": "limit", "start": 50, "limit": 100, "expect": 100}]',
    )
)
print(outcome.creates.total_time, outcome.reads.percentile(99))
```

`Benchmark` runs `clients × threads` concurrent asyncio tasks per stage and
writes its progress to standard output (or to the stream passed as `out`).
`Database.run` sets up the chosen store and hands it to the benchmark; it
accepts the scans as a JSON string or as a list of `Scan` objects. Setting
the `COMPACTION` environment variable asks the store to compact itself
between stages.

## Query dialects

`crudbench.dialect` turns JSON values into the literal syntax of a query
language: `DefaultDialect`, `AnsiSqlDialect` (double-quoted fields),
`MySqlDialect` (back-quoted fields) and `Neo4jDialect`, which flattens nested
objects and arrays into underscore-joined property names (`flatten`),
dropping empty ones.

## Containers

`crudbench.docker.Container.start` starts a database server with `docker run`
in a container named `crud-bench`, retrying a failed start up to ten times
before raising `DockerError`. Extra arguments can be passed through the
`DOCKER_PRE_ARGS` and `DOCKER_POST_ARGS` environment variables. Used as a
context manager, the container is stopped on leaving the block;
`Container.logs` returns its output.

## What it does not do

- There is no command-line program; benchmarks are run from Python as shown
  above.
- Results are returned as `BenchmarkOutcome` objects; nothing is written to
  JSON or CSV files.
- There is no value generator: the caller supplies the function that makes
  each record's value.
- `Database.run` does not start any Docker container; servers such as
  HelixDB must already be running.