[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gorules"
version = "0.3.18"
description = "Building blocks of a rule-based Go source checker: Go type model, type patterns, text matchers and report rendering"
requires-python = ">=3.10"
dependencies = [
    "regex",
]
keywords = ["go", "linter", "static-analysis", "rules", "pattern-matching", "types"]
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
    "Topic :: Software Development :: Quality Assurance",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["gorules"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
