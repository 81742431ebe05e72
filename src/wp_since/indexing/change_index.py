"""Per-version change index for wp-since.

For every version term the index records which entries were introduced,
modified or deprecated in that version, grouped by post type.  The report
generator reads it instead of re-deriving classifications at query time.
"""

from typing import Any, Dict, List, Optional
import logging

from ..models import ChangeType, DocEntry
from ..versions import earliest_version

logger = logging.getLogger(__name__)

CHANGE_INDEX_META_KEY = "wp_since_changes"


def classify_entry(entry: DocEntry, changelog: Dict[str, Any], version: str) -> Optional[ChangeType]:
    """Classify an entry's change for a version.

    Introduced wins over deprecated, which wins over modified.

    Returns:
        The change type, or None when the entry has no changelog data for the version
    """
    if version not in changelog:
        return None

    if earliest_version(changelog) == version:
        return ChangeType.INTRODUCED
    if entry.deprecated_version == version:
        return ChangeType.DEPRECATED
    return ChangeType.MODIFIED


class ChangeIndexBuilder:
    """Builds and reads the denormalized change index."""

    def __init__(self, store):
        """Initialize the builder.

        Args:
            store: DocStore holding entries and version terms
        """
        self.store = store

    def rebuild_change_index(self) -> Dict[str, int]:
        """Rebuild the change index for every version term.

        Existing index data is deleted first; each term is then written once.
        Storage errors propagate.

        Returns:
            Counts of versions indexed, entries classified and anomalies skipped
        """
        deleted = self.store.delete_term_meta_by_key(CHANGE_INDEX_META_KEY)
        logger.debug(f"Removed {deleted} existing change index records")

        stats = {"versions": 0, "classified": 0, "skipped": 0}

        for term in self.store.list_terms("since"):
            changes: Dict[str, Dict[str, List[int]]] = {}
            entry_ids = self.store.entry_ids_for_term("since", term.name)

            for entry in self.store.get_entries(entry_ids, order_by=("id",)):
                changelog = self.store.get_changelog(entry.id)
                change_type = classify_entry(entry, changelog, term.name)

                if change_type is None:
                    # tagged with the version but no changelog data for it
                    logger.debug(f"Skipping entry {entry.id} ({entry.title}): no changelog data for {term.name}")
                    stats["skipped"] += 1
                    continue

                bucket = changes.setdefault(change_type.value, {}).setdefault(entry.post_type.value, [])
                bucket.append(entry.id)
                stats["classified"] += 1

            self.store.set_term_meta(term.id, CHANGE_INDEX_META_KEY, changes)
            stats["versions"] += 1

        logger.info(
            f"Rebuilt change index for {stats['versions']} versions "
            f"({stats['classified']} entries classified, {stats['skipped']} skipped)"
        )
        return stats

    def read_change_index(self, version: str) -> Optional[Dict[str, Dict[str, List[int]]]]:
        """Read the stored index for one version, or None if the version or its index is missing."""
        term = self.store.get_term("since", version)
        if term is None:
            return None
        return self.store.get_term_meta(term.id, CHANGE_INDEX_META_KEY)

    def has_change_index(self) -> bool:
        return self.store.has_term_meta_key(CHANGE_INDEX_META_KEY)
