"""Documentation storage for wp-since.

The store stands in for the content-management host: it keeps imported
entries, their taxonomy terms, per-term metadata and site options.
"""

from .doc_store import DocStore, TAXONOMIES

__all__ = [
    "DocStore",
    "TAXONOMIES",
]
