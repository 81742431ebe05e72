"""Change indexing for wp-since.

This module maintains the per-version change index and the deprecation
tags it depends on.
"""

from .change_index import ChangeIndexBuilder, CHANGE_INDEX_META_KEY, classify_entry
from .deprecation_tagger import DeprecationTagger

__all__ = [
    "ChangeIndexBuilder",
    "CHANGE_INDEX_META_KEY",
    "DeprecationTagger",
    "classify_entry",
]
