"""
wpsource - WordPress REST API ingestion into a typed node graph.

This package contains:
- collectors: REST client with locale fan-out, media downloader, normalization
- orchestration: the ingestion run driving every step
- store: graph store interface and an in-memory implementation
- config: Pydantic settings
- core: exception hierarchy
"""

__version__ = "0.1.0"
