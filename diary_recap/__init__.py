"""Daily video diary: library indexing and weekly/monthly recap generation."""

__version__ = "0.1.0"
