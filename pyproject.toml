[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fdbexplorer"
version = "0.1.0"
description = "Terminal explorer for FoundationDB 'status json' output, with an optional HTTP relay"
requires-python = ">=3.10"
dependencies = [
    "urwid",
]
keywords = ["foundationdb", "status", "monitoring", "tui", "terminal"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Environment :: Console :: Curses",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Front-Ends",
    "Topic :: System :: Monitoring",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
fdbexplorer = "fdbexplorer.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["fdbexplorer"]

[tool.pytest.ini_options]
addopts = "-ra"
