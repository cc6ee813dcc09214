[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "aael"
version = "0.1.0"
description = "TEE attesters, TSM report quotes and an attestation agent event log with runtime measurement extension"
requires-python = ">=3.10"
dependencies = []
keywords = ["attestation", "tee", "tdx", "tsm", "eventlog", "confidential-computing", "rtmr"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: Security",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
aael = "aael.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["aael"]

[tool.pytest.ini_options]
addopts = "-ra"
