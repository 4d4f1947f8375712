[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "appic_dex"
version = "0.1.0"
description = "Building blocks of a concentrated-liquidity exchange: CBOR codecs, principal guards, amount deltas, history buckets, transfer memos and ledger error mapping."
requires-python = ">=3.10"
dependencies = [
    "cbor2",
]
keywords = ["dex", "amm", "liquidity", "cbor", "ledger", "swap"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial",
]

[project.optional-dependencies]
test = [
    "pytest",
    "hypothesis",
]

[tool.hatch.build.targets.wheel]
packages = ["appic_dex"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
