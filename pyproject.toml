[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "metafilter"
version = "0.4.2"
description = "Composable, policy-aware filter expressions over key/value metadata"
requires-python = ">=3.10"
dependencies = []
keywords = ["metadata", "filter", "predicate", "query", "builder"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["metafilter"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
