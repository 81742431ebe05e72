"""Deprecation tagging for wp-since.

Entries carrying a "deprecated" tag are given an extra "since" tag for the
deprecation version, so they show up in that version's listing.
"""

from typing import Any, Dict, List
import logging

from .change_index import ChangeIndexBuilder

logger = logging.getLogger(__name__)


class DeprecationTagger:
    """Adds deprecation versions to entries' since tags and keeps the change index current."""

    def __init__(self, store, index_builder: ChangeIndexBuilder = None):
        """Initialize the tagger.

        Args:
            store: DocStore holding the imported entries
            index_builder: Builder used to refresh the change index
        """
        self.store = store
        self.index_builder = index_builder or ChangeIndexBuilder(store)

    def register(self, events):
        """Subscribe to an import pipeline's events."""
        events.on("entry_imported", self.on_entry_imported)
        events.on("import_finished", self.on_import_finished)

    def on_entry_imported(self, entry_id: int, doc_data: Dict[str, Any]):
        """Tag a freshly imported entry with its deprecation version.

        Args:
            entry_id: ID of the imported entry
            doc_data: Parsed documentation data; its "tags" list is inspected
        """
        tags: List[Dict[str, Any]] = list(doc_data.get("tags") or [])
        deprecated = [tag for tag in tags if tag.get("name") == "deprecated"]
        if not deprecated:
            return

        deprecated_version = str(deprecated[0].get("content") or "").strip()
        if not deprecated_version:
            logger.debug(f"Entry {entry_id} has a deprecated tag without a version")
            return

        already_tagged = any(
            tag.get("name") == "since" and str(tag.get("content") or "").strip() == deprecated_version
            for tag in tags
        )
        if not already_tagged:
            tags.append({"name": "since", "content": deprecated_version})
            self.store.set_tags(entry_id, tags)

        term = self.store.get_term("since", deprecated_version)
        if term is not None:
            self.store.attach_term(entry_id, term)
        else:
            logger.debug(f"No since term for {deprecated_version}; entry {entry_id} left unattached")

    def on_import_finished(self):
        self.index_builder.rebuild_change_index()

    def backfill_if_needed(self) -> bool:
        """Tag entries imported before deprecation tagging existed.

        Runs only when since terms exist and no change index has been stored
        for any of them.

        Returns:
            True if the backfill ran
        """
        if not self.store.list_terms("since") or self.index_builder.has_change_index():
            return False

        entry_ids = self.store.entries_with_tag("since")
        logger.info(f"No change index found; backfilling deprecation tags for {len(entry_ids)} entries")

        for entry_id in entry_ids:
            self.on_entry_imported(entry_id, {"tags": self.store.get_tags(entry_id)})

        self.index_builder.rebuild_change_index()
        return True
