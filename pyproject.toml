[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lobsim"
version = "0.1.0"
description = "Limit order book simulator with a price-time priority matching engine, event bus and live terminal views"
requires-python = ">=3.10"
keywords = [
    "limit order book",
    "matching engine",
    "market simulator",
    "trading",
    "price-time priority",
    "event bus",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial :: Investment",
    "Topic :: Scientific/Engineering",
    "Typing :: Typed",
]
dependencies = [
    "sortedcontainers",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
lobsim = "lobsim.simulator:main"

[tool.hatch.build.targets.wheel]
packages = ["lobsim"]

[tool.hatch.build.targets.sdist]
include = ["lobsim", "tests"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
check_untyped_defs = true
