[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gator"
version = "0.1.0"
description = "A command-line RSS feed aggregator that follows feeds for several users and stores their posts in SQLite."
requires-python = ">=3.10"
dependencies = []
keywords = ["rss", "feed", "aggregator", "blog", "cli", "sqlite"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
gator = "gator.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["gator"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]
