"""Shared fixtures for wp-since tests."""

import pytest

from wp_since.models import PostType
from wp_since.storage import DocStore


@pytest.fixture
def store(tmp_path):
    """An empty documentation store in a temporary directory."""
    return DocStore(str(tmp_path / "docs.db"))


@pytest.fixture
def add_entry(store):
    """Save an entry and attach its terms, without firing import events."""

    def _add(post_type, title, since=(), deprecated=None, descriptions=None, packages=(),
             source_file=None, ticket=None, extra_terms=()):
        descriptions = descriptions or {}
        tags = []
        for version in since:
            tag = {"name": "since", "content": version}
            if version in descriptions:
                tag["description"] = descriptions[version]
            tags.append(tag)
        if deprecated:
            version, description = deprecated
            tags.append({"name": "deprecated", "content": version, "description": description})

        entry_id = store.save_entry(PostType(post_type), title, tags=tags, ticket=ticket)
        for version in list(since) + list(extra_terms):
            store.attach_term(entry_id, store.ensure_term("since", version))
        for package in packages:
            store.attach_term(entry_id, store.ensure_term("package", package))
        if source_file:
            store.attach_term(entry_id, store.ensure_term("source_file", source_file))
        return entry_id

    return _add
