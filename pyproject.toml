[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "crudbench"
version = "0.1.0"
description = "Create, read, update, scan and delete benchmarks for datastores"
requires-python = ">=3.10"
keywords = ["benchmark", "database", "crud", "key-value", "lmdb", "performance"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: Database",
    "Topic :: System :: Benchmark",
]
dependencies = [
    "lmdb",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["crudbench"]

[tool.pytest.ini_options]
addopts = "-ra"
