"""Ingestion orchestration."""

from wpsource.orchestration.ingestion import IngestionSummary, WordPressIngestion

__all__ = [
    "IngestionSummary",
    "WordPressIngestion",
]
