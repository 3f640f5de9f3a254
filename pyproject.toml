[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "barkit"
version = "0.1.0"
description = "Terminal progress output: draw targets, multi-line displays and human-readable formatting"
requires-python = ">=3.10"
dependencies = [
    "wcwidth",
]
keywords = [
    "progress",
    "terminal",
    "cli",
    "ansi",
    "humanize",
    "formatting",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: User Interfaces",
    "Topic :: Terminals",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["barkit"]

[tool.hatch.build.targets.sdist]
include = [
    "barkit",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
