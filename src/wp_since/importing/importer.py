"""Import of pre-parsed documentation into the wp-since store."""

from typing import Any, Dict, List, Optional
import logging

import yaml

from ..models import PostType
from ..storage import TAXONOMIES
from ..utils.error_handling import ImportFileError, safe_operation, validate_file_path
from ..versions import CURRENT_VERSION_OPTION, version_key
from .events import ImportEvents

logger = logging.getLogger(__name__)


class DocImporter:
    """Loads parsed documentation entries and fires the import events.

    The input file is YAML (or JSON) with a top-level ``entries`` list; each
    entry looks like::

        post_type: function
        title: wp_insert_post()
        source_file: wp-includes/post.php
        packages: [WordPress]
        ticket: "12345"
        doc:
          tags:
            - {name: since, content: "2.0.0"}
            - {name: since, content: "4.2.0", description: "Added the $fire_after_hooks parameter."}
            - {name: deprecated, content: "5.0.0", description: "Use wp_insert_post_data() instead."}
    """

    def __init__(self, store, events: Optional[ImportEvents] = None):
        """Initialize the importer.

        Args:
            store: DocStore to import into
            events: Event registry notified per entry and at the end of the import
        """
        self.store = store
        self.events = events or ImportEvents()

    def load_file(self, path: str) -> List[Dict[str, Any]]:
        """Read and validate the entries of a parsed-documentation file."""
        file_path = validate_file_path(path)

        def _load():
            with open(file_path, 'r', encoding='utf-8') as f:
                return yaml.safe_load(f)

        data = safe_operation(f"Reading {file_path}", _load, logger)

        if isinstance(data, dict):
            data = data.get("entries")
        if not isinstance(data, list):
            raise ImportFileError(f"{path}: expected a list of entries")

        for position, item in enumerate(data):
            if not isinstance(item, dict) or not item.get("title"):
                raise ImportFileError(f"{path}: entry {position} has no title")
            post_type = item.get("post_type")
            if not post_type or post_type == "any":
                raise ImportFileError(f"{path}: entry {position} has no post_type")
            try:
                PostType.parse(post_type)
            except ValueError:
                raise ImportFileError(f"{path}: entry {position} has unknown post_type {post_type!r}")

        return data

    def import_entry(self, item: Dict[str, Any]) -> int:
        """Store one parsed entry and notify listeners.

        An entry already stored under the same post type and title is updated
        in place: its tags are overwritten and its terms replaced.

        Returns:
            The entry ID
        """
        doc_data = dict(item.get("doc") or {})
        tags = list(doc_data.get("tags") or [])
        doc_data["tags"] = tags

        ticket = item.get("ticket")
        entry_id = self.store.save_entry(
            PostType.parse(item["post_type"]),
            str(item["title"]),
            tags=tags,
            ticket=str(ticket) if ticket else None,
        )
        for taxonomy in TAXONOMIES:
            self.store.detach_terms(entry_id, taxonomy)

        for tag in tags:
            if tag.get("name") == "since" and str(tag.get("content") or "").strip():
                term = self.store.ensure_term("since", str(tag["content"]).strip())
                self.store.attach_term(entry_id, term)

        for package in item.get("packages") or []:
            self.store.attach_term(entry_id, self.store.ensure_term("package", str(package)))

        if item.get("source_file"):
            self.store.attach_term(entry_id, self.store.ensure_term("source_file", str(item["source_file"])))

        self.events.emit("entry_imported", entry_id, doc_data)
        return entry_id

    def import_file(self, path: str, version: Optional[str] = None) -> Dict[str, Any]:
        """Import every entry in a file.

        Args:
            path: YAML or JSON file of parsed entries
            version: Version the import represents; defaults to the highest since version seen

        Returns:
            Import summary
        """
        items = self.load_file(path)
        logger.info(f"Importing {len(items)} entries from {path}")

        seen_versions = set()
        for item in items:
            for tag in (item.get("doc") or {}).get("tags") or []:
                if tag.get("name") == "since" and str(tag.get("content") or "").strip():
                    seen_versions.add(str(tag["content"]).strip())

        # every version term exists before the per-entry listeners run
        for seen_version in sorted(seen_versions, key=version_key):
            self.store.ensure_term("since", seen_version)

        entry_ids = [self.import_entry(item) for item in items]

        if not version and seen_versions:
            version = max(seen_versions, key=version_key)
        if version:
            self.store.set_option(CURRENT_VERSION_OPTION, version)

        self.events.emit("import_finished")

        logger.info(f"Imported {len(entry_ids)} entries (version {version or 'unknown'})")
        return {
            "imported": len(entry_ids),
            "entry_ids": entry_ids,
            "version": version,
        }
