"""Inventory refresh and scrape-time collection."""

from .orchestrator import CollectionOrchestrator
from .rescan import RescanScheduler

__all__ = ["CollectionOrchestrator", "RescanScheduler"]
