"""Polling watch support."""

from .service import ChangeBatch, WatchService

__all__ = ["ChangeBatch", "WatchService"]
