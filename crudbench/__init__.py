"""Create, read, update, scan and delete benchmarks for datastores."""

__version__ = "0.1.0"