"""Chirpline: social feed backend with read-time post enrichment."""

__version__ = "0.1.0"
