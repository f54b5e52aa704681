"""
Bulk loading of synthetic items.
"""

from .bulk_loader import BulkLoader, LoadSummary, WorkerResult

__all__ = ["BulkLoader", "LoadSummary", "WorkerResult"]
