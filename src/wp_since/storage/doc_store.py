"""SQLite-backed documentation store for wp-since.

Holds the imported documentation entries, the taxonomy terms they are
tagged with (since, package, source_file), per-term metadata and a handful
of site options.
"""

import json
import sqlite3
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Optional
from pathlib import Path
import logging

from ..models import DocEntry, PostType, VersionTerm
from ..versions import version_key

logger = logging.getLogger(__name__)

TAXONOMIES = ("since", "package", "source_file")


class DocStore:
    """Entry store, term store and option store on a single SQLite file."""

    def __init__(self, db_path: str = "wp_since.db"):
        """Initialize the store.

        Args:
            db_path: Path to the SQLite database file (":memory:" is not supported,
                since each operation opens its own connection)
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_database()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def _init_database(self):
        """Initialize the SQLite schema."""
        with self._connect() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS entries (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    post_type TEXT NOT NULL,
                    title TEXT NOT NULL,
                    ticket TEXT,
                    tags TEXT NOT NULL DEFAULT '[]'
                );

                CREATE TABLE IF NOT EXISTS terms (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    taxonomy TEXT NOT NULL,
                    name TEXT NOT NULL,
                    UNIQUE (taxonomy, name)
                );

                CREATE TABLE IF NOT EXISTS term_relationships (
                    entry_id INTEGER NOT NULL,
                    term_id INTEGER NOT NULL,
                    PRIMARY KEY (entry_id, term_id),
                    FOREIGN KEY (entry_id) REFERENCES entries (id) ON DELETE CASCADE,
                    FOREIGN KEY (term_id) REFERENCES terms (id) ON DELETE CASCADE
                );

                CREATE TABLE IF NOT EXISTS term_meta (
                    term_id INTEGER NOT NULL,
                    meta_key TEXT NOT NULL,
                    meta_value TEXT NOT NULL,
                    PRIMARY KEY (term_id, meta_key),
                    FOREIGN KEY (term_id) REFERENCES terms (id) ON DELETE CASCADE
                );

                CREATE TABLE IF NOT EXISTS options (
                    name TEXT PRIMARY KEY,
                    value TEXT
                );

                CREATE UNIQUE INDEX IF NOT EXISTS idx_entries_natural_key ON entries (post_type, title);
                CREATE INDEX IF NOT EXISTS idx_relationships_term ON term_relationships (term_id);
                CREATE INDEX IF NOT EXISTS idx_term_meta_key ON term_meta (meta_key);
            """)

    # Options

    def get_option(self, name: str) -> Optional[str]:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM options WHERE name = ?", (name,)).fetchone()
        return row["value"] if row else None

    def set_option(self, name: str, value: str):
        with self._connect() as conn:
            conn.execute("""
                INSERT INTO options (name, value) VALUES (?, ?)
                ON CONFLICT (name) DO UPDATE SET value = excluded.value
            """, (name, value))

    # Entries

    def save_entry(self, post_type: PostType, title: str, tags: Optional[List[Dict[str, Any]]] = None,
                   ticket: Optional[str] = None) -> int:
        """Create a documentation entry, or update the one with the same post type and title.

        Args:
            post_type: Kind of entry
            title: Display title (e.g. "wp_insert_post()")
            tags: Raw doc-comment tags as parsed from source; replaces any stored list
            ticket: Optional ticket number

        Returns:
            The entry ID, unchanged for an existing entry
        """
        with self._connect() as conn:
            conn.execute("""
                INSERT INTO entries (post_type, title, ticket, tags)
                VALUES (?, ?, ?, ?)
                ON CONFLICT (post_type, title) DO UPDATE SET
                    ticket = excluded.ticket,
                    tags = excluded.tags
            """, (post_type.value, title, ticket or None, json.dumps(tags or [])))
            row = conn.execute(
                "SELECT id FROM entries WHERE post_type = ? AND title = ?", (post_type.value, title)
            ).fetchone()
            return row["id"]

    def _row_to_entry(self, conn: sqlite3.Connection, row: sqlite3.Row) -> DocEntry:
        terms = self._entry_terms(conn, row["id"])
        source_files = terms.get("source_file", [])
        return DocEntry(
            id=row["id"],
            post_type=PostType(row["post_type"]),
            title=row["title"],
            tags=json.loads(row["tags"]),
            packages=terms.get("package", []),
            source_file=source_files[0] if source_files else None,
            ticket=row["ticket"],
        )

    def get_entry(self, entry_id: int) -> Optional[DocEntry]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM entries WHERE id = ?", (entry_id,)).fetchone()
            if row is None:
                return None
            return self._row_to_entry(conn, row)

    def get_entries(self, entry_ids: Iterable[int], post_type: Optional[PostType] = None,
                    order_by=("post_type", "title")) -> List[DocEntry]:
        """Fetch entries by ID, ordered for grouped output.

        Args:
            entry_ids: IDs to fetch; unknown IDs are ignored
            post_type: Only return entries of this post type
            order_by: Columns to order by, ascending

        Returns:
            Matching entries
        """
        ids = sorted(set(entry_ids))
        if not ids:
            return []

        allowed_columns = {"id", "post_type", "title"}
        if not set(order_by) <= allowed_columns:
            raise ValueError(f"Unsupported ordering: {order_by}")

        placeholders = ", ".join("?" for _ in ids)
        sql = f"SELECT * FROM entries WHERE id IN ({placeholders})"
        params: List[Any] = list(ids)
        if post_type is not None:
            sql += " AND post_type = ?"
            params.append(post_type.value)
        sql += " ORDER BY " + ", ".join(f"{column} ASC" for column in order_by) + ", id ASC"

        with self._connect() as conn:
            rows = conn.execute(sql, params).fetchall()
            return [self._row_to_entry(conn, row) for row in rows]

    def entry_ids_for_term(self, taxonomy: str, name: str) -> List[int]:
        """Return IDs of all entries (any post type) tagged with a term, ascending."""
        with self._connect() as conn:
            rows = conn.execute("""
                SELECT tr.entry_id
                FROM term_relationships tr
                JOIN terms t ON tr.term_id = t.id
                WHERE t.taxonomy = ? AND t.name = ?
                ORDER BY tr.entry_id
            """, (taxonomy, name)).fetchall()
        return [row["entry_id"] for row in rows]

    def entries_with_tag(self, tag_name: str) -> List[int]:
        """Return IDs of entries whose stored tag list contains a tag with this name."""
        with self._connect() as conn:
            rows = conn.execute("""
                SELECT DISTINCT e.id
                FROM entries e, json_each(e.tags) tag
                WHERE json_extract(tag.value, '$.name') = ?
                ORDER BY e.id
            """, (tag_name,)).fetchall()
        return [row["id"] for row in rows]

    def get_tags(self, entry_id: int) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            row = conn.execute("SELECT tags FROM entries WHERE id = ?", (entry_id,)).fetchone()
        return json.loads(row["tags"]) if row else []

    def set_tags(self, entry_id: int, tags: List[Dict[str, Any]]):
        """Overwrite an entry's stored tag list."""
        with self._connect() as conn:
            conn.execute("UPDATE entries SET tags = ? WHERE id = ?", (json.dumps(tags), entry_id))

    def get_changelog(self, entry_id: int) -> Dict[str, Dict[str, str]]:
        """Per-version changelog data for an entry.

        Built from the entry's "since" tags, ordered by ascending version.
        A version with several since tags keeps the first non-empty description.

        Returns:
            Mapping of version -> {"version", "description"}
        """
        changelog: Dict[str, Dict[str, str]] = {}
        for tag in self.get_tags(entry_id):
            if tag.get("name") != "since":
                continue
            version = str(tag.get("content") or "").strip()
            if not version:
                continue
            description = (tag.get("description") or "").strip()
            existing = changelog.get(version)
            if existing is None or (not existing["description"] and description):
                changelog[version] = {"version": version, "description": description}

        return {version: changelog[version] for version in sorted(changelog, key=version_key)}

    # Terms

    def get_term(self, taxonomy: str, name: str) -> Optional[VersionTerm]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT id, name FROM terms WHERE taxonomy = ? AND name = ?", (taxonomy, name)
            ).fetchone()
        return VersionTerm(id=row["id"], name=row["name"]) if row else None

    def ensure_term(self, taxonomy: str, name: str) -> VersionTerm:
        """Return the term, creating it if it does not exist yet."""
        if taxonomy not in TAXONOMIES:
            raise ValueError(f"Unknown taxonomy: {taxonomy}")
        with self._connect() as conn:
            conn.execute(
                "INSERT OR IGNORE INTO terms (taxonomy, name) VALUES (?, ?)", (taxonomy, name)
            )
        return self.get_term(taxonomy, name)

    def list_terms(self, taxonomy: str) -> List[VersionTerm]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT id, name FROM terms WHERE taxonomy = ? ORDER BY id", (taxonomy,)
            ).fetchall()
        return [VersionTerm(id=row["id"], name=row["name"]) for row in rows]

    def attach_term(self, entry_id: int, term: VersionTerm):
        with self._connect() as conn:
            conn.execute(
                "INSERT OR IGNORE INTO term_relationships (entry_id, term_id) VALUES (?, ?)",
                (entry_id, term.id)
            )

    def detach_terms(self, entry_id: int, taxonomy: str) -> int:
        """Remove an entry from every term of a taxonomy; returns the number of links removed."""
        with self._connect() as conn:
            cursor = conn.execute("""
                DELETE FROM term_relationships
                WHERE entry_id = ?
                  AND term_id IN (SELECT id FROM terms WHERE taxonomy = ?)
            """, (entry_id, taxonomy))
            return cursor.rowcount

    def _entry_terms(self, conn: sqlite3.Connection, entry_id: int) -> Dict[str, List[str]]:
        rows = conn.execute("""
            SELECT t.taxonomy, t.name
            FROM term_relationships tr
            JOIN terms t ON tr.term_id = t.id
            WHERE tr.entry_id = ?
            ORDER BY t.taxonomy, t.name
        """, (entry_id,)).fetchall()

        terms: Dict[str, List[str]] = {}
        for row in rows:
            terms.setdefault(row["taxonomy"], []).append(row["name"])
        return terms

    # Term metadata

    def get_term_meta(self, term_id: int, key: str) -> Optional[Any]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT meta_value FROM term_meta WHERE term_id = ? AND meta_key = ?", (term_id, key)
            ).fetchone()
        return json.loads(row["meta_value"]) if row else None

    def get_raw_term_meta(self, term_id: int, key: str) -> Optional[str]:
        """Stored text of a term meta value, exactly as written."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT meta_value FROM term_meta WHERE term_id = ? AND meta_key = ?", (term_id, key)
            ).fetchone()
        return row["meta_value"] if row else None

    def set_term_meta(self, term_id: int, key: str, value: Any):
        """Write a term meta value, replacing any previous value."""
        with self._connect() as conn:
            conn.execute("""
                INSERT INTO term_meta (term_id, meta_key, meta_value) VALUES (?, ?, ?)
                ON CONFLICT (term_id, meta_key) DO UPDATE SET meta_value = excluded.meta_value
            """, (term_id, key, json.dumps(value, sort_keys=True)))

    def delete_term_meta_by_key(self, key: str) -> int:
        """Delete a meta key from every term; returns the number of rows removed."""
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM term_meta WHERE meta_key = ?", (key,))
            return cursor.rowcount

    def has_term_meta_key(self, key: str) -> bool:
        with self._connect() as conn:
            row = conn.execute("SELECT 1 FROM term_meta WHERE meta_key = ? LIMIT 1", (key,)).fetchone()
        return row is not None

    def get_statistics(self) -> Dict[str, Any]:
        """Counts of stored entries and terms."""
        with self._connect() as conn:
            stats = {}

            cursor = conn.execute("SELECT COUNT(*) FROM entries")
            stats["total_entries"] = cursor.fetchone()[0]

            cursor = conn.execute("SELECT post_type, COUNT(*) FROM entries GROUP BY post_type")
            stats["entries_by_post_type"] = {row[0]: row[1] for row in cursor.fetchall()}

            cursor = conn.execute("SELECT taxonomy, COUNT(*) FROM terms GROUP BY taxonomy")
            stats["terms_by_taxonomy"] = {row[0]: row[1] for row in cursor.fetchall()}

            return stats
