"""Typed matrix interfaces, block transposition, genotype raw-data converters and Cholesky helpers."""

__version__ = "0.1.0"