"""Test deprecation tagging and the one-time backfill."""

from wp_since.importing import ImportEvents
from wp_since.indexing import ChangeIndexBuilder, DeprecationTagger


def test_deprecated_entry_gets_since_tag_and_term(store, add_entry):
    term = store.ensure_term("since", "5.0")
    entry_id = add_entry("function", "old_func", since=["4.0"])
    doc_data = {"tags": [
        {"name": "since", "content": "4.0"},
        {"name": "deprecated", "content": "5.0", "description": "Use new_func() instead."},
    ]}

    DeprecationTagger(store).on_entry_imported(entry_id, doc_data)

    tags = store.get_tags(entry_id)
    assert {"name": "since", "content": "5.0"} in tags
    assert tags[:2] == doc_data["tags"]
    assert entry_id in store.entry_ids_for_term("since", term.name)


def test_missing_version_term_is_not_created(store, add_entry):
    entry_id = add_entry("function", "old_func", since=["4.0"])
    doc_data = {"tags": [{"name": "since", "content": "4.0"}, {"name": "deprecated", "content": "6.1"}]}

    DeprecationTagger(store).on_entry_imported(entry_id, doc_data)

    assert store.get_term("since", "6.1") is None
    assert {"name": "since", "content": "6.1"} in store.get_tags(entry_id)


def test_entry_without_deprecation_is_untouched(store, add_entry):
    entry_id = add_entry("hook", "init", since=["1.5.0"])
    before = store.get_tags(entry_id)

    DeprecationTagger(store).on_entry_imported(entry_id, {"tags": before + [{"name": "param"}]})

    assert store.get_tags(entry_id) == before


def test_existing_since_tag_is_not_duplicated(store, add_entry):
    entry_id = add_entry("function", "f", since=["4.0", "5.0"], deprecated=("5.0", ""))
    tagger = DeprecationTagger(store)

    tagger.on_entry_imported(entry_id, {"tags": store.get_tags(entry_id)})
    tagger.on_entry_imported(entry_id, {"tags": store.get_tags(entry_id)})

    since_tags = [t for t in store.get_tags(entry_id) if t["name"] == "since" and t["content"] == "5.0"]
    assert len(since_tags) == 1


def test_backfill_runs_once_when_index_missing(store, add_entry):
    """Entries imported before tagging existed are tagged and indexed."""
    store.ensure_term("since", "4.5")
    entry_id = add_entry("function", "old_func", since=["4.0"], deprecated=("4.5", ""))
    tagger = DeprecationTagger(store)

    assert tagger.backfill_if_needed() is True
    assert ChangeIndexBuilder(store).read_change_index("4.5") == {"deprecated": {"function": [entry_id]}}

    assert tagger.backfill_if_needed() is False


def test_register_runs_tagger_before_index_rebuild(store, add_entry):
    store.ensure_term("since", "4.5")
    entry_id = add_entry("class", "Old_Class", since=["4.0"])
    events = ImportEvents()
    DeprecationTagger(store).register(events)

    events.emit("entry_imported", entry_id, {"tags": [
        {"name": "since", "content": "4.0"},
        {"name": "deprecated", "content": "4.5"},
    ]})
    events.emit("import_finished")

    builder = ChangeIndexBuilder(store)
    assert builder.read_change_index("4.5") == {"deprecated": {"class": [entry_id]}}
    assert builder.read_change_index("4.0") == {"introduced": {"class": [entry_id]}}


def test_backfill_skipped_without_since_terms(store):
    tagger = DeprecationTagger(store)

    assert tagger.backfill_if_needed() is False
    assert tagger.backfill_if_needed() is False
    assert store.list_terms("since") == []
