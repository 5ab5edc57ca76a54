[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "stratal"
version = "0.1.0"
description = "Job automation service: store job definitions, schedule pending jobs onto a Redis queue and consume them with a worker, behind a small HTTP API."
requires-python = ">=3.10"
dependencies = [
    "redis",
    "flask",
]
keywords = ["jobs", "scheduler", "queue", "redis", "automation", "worker"]
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
    "Framework :: Flask",
    "Topic :: Office/Business :: Scheduling",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["stratal"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
