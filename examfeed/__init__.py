"""Exam notice aggregation: multi-source scraping, normalization, dedupe and ranking."""

__version__ = "0.1.0"
