[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "thirdrail"
version = "0.1"
description = "HTTP API serving live and static MARTA rail data: schedules, alerts, stations and parking updates"
requires-python = ">=3.10"
keywords = ["marta", "transit", "rail", "schedule", "api", "flask", "geohash"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]
dependencies = [
    "flask",
    "sqlalchemy",
    "requests",
    "cachetools",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
third-rail = "thirdrail.cli:main"
third-rail-dbinit = "thirdrail.cli:dbinit"

[tool.hatch.build.targets.wheel]
packages = ["thirdrail"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
