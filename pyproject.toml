[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "genodatakit"
version = "0.1.0"
description = "Typed matrix interfaces, block transposition, genotype raw-data converters and Cholesky helpers for genetic data"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "genetics",
    "genotypes",
    "snp",
    "illumina",
    "affymetrix",
    "merlin",
    "matrix",
    "cholesky",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Bio-Informatics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["genodatakit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
