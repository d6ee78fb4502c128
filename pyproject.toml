[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "trackerkit"
version = "0.1.0"
description = "BitTorrent HTTP tracker protocol toolkit: request and response codecs, bencoding and peer client detection"
requires-python = ">=3.11"
dependencies = []
keywords = ["bittorrent", "tracker", "bencode", "peer-id", "announce", "scrape"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: File Sharing",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
    "hypothesis",
]

[tool.hatch.build.targets.wheel]
packages = ["trackerkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
