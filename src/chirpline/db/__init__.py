# src/chirpline/db/__init__.py
"""Database configuration and utilities."""

from .session import AsyncSessionLocal, get_session

__all__ = ["get_session", "AsyncSessionLocal"]
