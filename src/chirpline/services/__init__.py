# src/chirpline/services/__init__.py
"""Business logic services for the Chirpline application."""

from .enrichment import FeedEnricher
from .feed_service import FeedService

__all__ = [
    "FeedEnricher",
    "FeedService",
]
