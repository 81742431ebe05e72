"""Changelog report generation for wp-since."""

import re
from dataclasses import dataclass
from itertools import groupby
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

from jinja2 import Environment, FileSystemLoader

from ..indexing.change_index import ChangeIndexBuilder
from ..indexing.deprecation_tagger import DeprecationTagger
from ..models import ChangeQuery, ChangeType, DocEntry, ErrorKind, PostType, Result

logger = logging.getLogger(__name__)

DEFAULT_TICKET_URL = "https://core.trac.wordpress.org/ticket/{ticket}"
TEMPLATES_DIR = Path(__file__).parent / "templates"

_SINCE_DESCRIPTION_MARKUP = re.compile(r'<span class="since-description">(.*)</span>', re.DOTALL)
_SENTENCE_BREAK = re.compile(r'(?<=[.!?])\s+')
_DEPRECATED_BOILERPLATE = re.compile(r'\bhas been deprecated\b', re.IGNORECASE)


@dataclass
class ReportItem:
    """One entry as it appears in a report."""
    entry: DocEntry
    ticket_url: Optional[str] = None
    modification: Optional[str] = None
    alternative: Optional[str] = None

    @property
    def package(self) -> str:
        return ", ".join(self.entry.packages) if self.entry.packages else "unspecified"


@dataclass
class ReportGroup:
    """Entries of one change type, ordered by post type and title."""
    change_type: ChangeType
    items: List[ReportItem]

    def sections(self):
        """Yield (post_type, items) blocks in order."""
        for post_type, items in groupby(self.items, key=lambda item: item.entry.post_type):
            yield post_type, list(items)


class ReportGenerator:
    """Builds the "changes in version X" report."""

    def __init__(self, store, tagger: Optional[DeprecationTagger] = None,
                 ticket_url: str = DEFAULT_TICKET_URL):
        """Initialize the report generator.

        Args:
            store: DocStore to read entries from
            tagger: Tagger used to build the change index lazily when it is missing
            ticket_url: Format string for ticket links, with a ``{ticket}`` field
        """
        self.store = store
        self.index_builder = ChangeIndexBuilder(store)
        self.tagger = tagger or DeprecationTagger(store, self.index_builder)
        self.ticket_url = ticket_url

        self.jinja_env = Environment(
            loader=FileSystemLoader(str(TEMPLATES_DIR)),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True
        )

    def generate_report(self, version: str, change_type: str = "any", post_type: str = "any",
                        output_format: str = "text") -> Result:
        """Generate the report for a version.

        Args:
            version: Version to report on; must name an existing since term
            change_type: "any", "introduced", "modified" or "deprecated"
            post_type: "any", "class", "method", "function" or "hook"
            output_format: "text" or "markdown"

        Returns:
            Result holding the report text, or an input error for an unknown version
        """
        if self.store.get_term("since", version) is None:
            return Result.failure(ErrorKind.INPUT, f"Unknown version: {version}")

        self.tagger.backfill_if_needed()

        post_type_filter = PostType.parse(post_type)
        groups = [
            ReportGroup(ct, self._build_items(ChangeQuery(version, ct, post_type_filter)))
            for ct in ChangeType.expand(change_type)
        ]

        show_change_type = change_type == "any"
        show_post_type = post_type_filter is None

        if output_format == "markdown":
            text = self._render_markdown(version, groups, show_change_type, show_post_type)
        elif output_format == "text":
            text = self._render_text(version, groups, show_change_type, show_post_type)
        else:
            raise ValueError(f"Unknown output format: {output_format}")

        if not any(group.items for group in groups):
            return Result(value=text, error_kind=ErrorKind.EMPTY)
        return Result.success(text)

    def query_changes(self, query: ChangeQuery) -> List[DocEntry]:
        """Entries in one change-type bucket of a version, ordered per the query."""
        index = self.index_builder.read_change_index(query.version)
        if index is None:
            logger.warning(f"No change index for {query.version}; run rebuild-index")
            return []

        bucket = index.get(query.change_type.value, {})
        entry_ids = []
        for post_type in query.post_types():
            entry_ids.extend(bucket.get(post_type.value, []))

        return self.store.get_entries(entry_ids, post_type=query.post_type, order_by=query.order_by)

    def _build_items(self, query: ChangeQuery) -> List[ReportItem]:
        items = []
        for entry in self.query_changes(query):
            item = ReportItem(entry=entry)
            if entry.ticket:
                item.ticket_url = self.ticket_url.format(ticket=entry.ticket)
            if query.change_type is ChangeType.MODIFIED:
                item.modification = self.get_modification(entry, query.version)
            elif query.change_type is ChangeType.DEPRECATED:
                item.alternative = self.get_alternative(entry)
            items.append(item)
        return items

    def get_modification(self, entry: DocEntry, version: str) -> Optional[str]:
        """Description of the change made to an entry in a version."""
        changelog = self.store.get_changelog(entry.id)
        description = changelog.get(version, {}).get("description", "")
        description = _SINCE_DESCRIPTION_MARKUP.sub(r'\1', description).strip()
        return description or None

    def get_alternative(self, entry: DocEntry) -> Optional[str]:
        """What to use instead of a deprecated entry, without the boilerplate sentence."""
        deprecated = entry.tags_named("deprecated")
        if not deprecated:
            return None
        description = deprecated[0].get("description") or ""
        sentences = [
            sentence for sentence in _SENTENCE_BREAK.split(description.strip())
            if not _DEPRECATED_BOILERPLATE.search(sentence)
        ]
        alternative = " ".join(sentences).strip()
        return alternative or None

    def _render_text(self, version: str, groups: List[ReportGroup], show_change_type: bool,
                     show_post_type: bool) -> str:
        lines = [f"Changes in {version}", ""]

        type_indent = "\t" if show_change_type else ""
        title_indent = type_indent + ("\t" if show_post_type else "")
        detail_indent = "\t" + title_indent

        for group in groups:
            if show_change_type:
                lines.extend(["", group.change_type.label, ""])

            if not group.items:
                lines.append(f"{type_indent}No changes.")
                continue

            for post_type, items in group.sections():
                if show_post_type:
                    lines.extend(["", f"{type_indent}{post_type.label}", ""])

                for item in items:
                    lines.append(f"{title_indent}{item.entry.title}")
                    if item.ticket_url:
                        lines.append(f"{detail_indent}trac ticket: {item.ticket_url}")
                    if item.modification:
                        lines.append(f"{detail_indent}modification: {item.modification}")
                    if item.alternative:
                        lines.append(f"{detail_indent}alternative: {item.alternative}")
                    if item.entry.source_file:
                        lines.append(f"{detail_indent}source: {item.entry.source_file}")
                    lines.append(f"{detail_indent}package: {item.package}")

        return "\n".join(lines) + "\n"

    def _render_markdown(self, version: str, groups: List[ReportGroup], show_change_type: bool,
                         show_post_type: bool) -> str:
        template = self.jinja_env.get_template("report.md.j2")
        context: Dict[str, Any] = {
            "version": version,
            "groups": groups,
            "show_change_type": show_change_type,
            "show_post_type": show_post_type,
        }
        return template.render(**context)
