"""Test the import pipeline."""

import json

import pytest

from wp_since.importing import DocImporter, ImportEvents
from wp_since.indexing import ChangeIndexBuilder, DeprecationTagger
from wp_since.reporting import ReportGenerator
from wp_since.utils import ImportFileError

PARSED = """
entries:
  - post_type: function
    title: wp_old()
    source_file: wp-includes/deprecated.php
    packages: [WordPress]
    doc:
      tags:
        - {name: since, content: "4.0"}
        - {name: deprecated, content: "4.5", description: "Use wp_new() instead."}
  - post_type: function
    title: wp_new()
    ticket: 4242
    doc:
      tags:
        - {name: since, content: "4.5"}
"""


def test_import_tags_indexes_and_records_version(store, tmp_path):
    parsed = tmp_path / "parsed.yaml"
    parsed.write_text(PARSED)
    events = ImportEvents()
    DeprecationTagger(store).register(events)

    summary = DocImporter(store, events).import_file(str(parsed))

    assert summary["imported"] == 2
    assert summary["version"] == "4.5"
    assert store.get_option("imported_version") == "4.5"

    old_id, new_id = summary["entry_ids"]
    old = store.get_entry(old_id)
    assert old.packages == ["WordPress"]
    assert old.source_file == "wp-includes/deprecated.php"
    assert store.get_entry(new_id).ticket == "4242"

    index = ChangeIndexBuilder(store).read_change_index("4.5")
    assert index == {"deprecated": {"function": [old_id]}, "introduced": {"function": [new_id]}}


def test_import_json_file_with_explicit_version(store, tmp_path):
    parsed = tmp_path / "parsed.json"
    parsed.write_text(json.dumps([
        {"post_type": "wp-parser-hook", "title": "save_post", "doc": {"tags": [{"name": "since", "content": "1.5.0"}]}},
    ]))

    summary = DocImporter(store).import_file(str(parsed), version="6.0")

    assert store.get_option("imported_version") == "6.0"
    assert store.get_entry(summary["entry_ids"][0]).post_type.value == "hook"


def test_events_fire_in_order(store, tmp_path):
    parsed = tmp_path / "parsed.yaml"
    parsed.write_text(PARSED)
    seen = []
    events = ImportEvents()
    events.on("entry_imported", lambda entry_id, doc: seen.append(("entry", entry_id)))
    events.on("import_finished", lambda: seen.append(("finished",)))

    DocImporter(store, events).import_file(str(parsed))

    assert seen == [("entry", 1), ("entry", 2), ("finished",)]


def test_unknown_event_rejected():
    with pytest.raises(ValueError):
        ImportEvents().on("entry_deleted", lambda: None)


@pytest.mark.parametrize("content", [
    "just a string",
    "entries:\n  - {post_type: function}\n",
    "entries:\n  - {post_type: widget, title: x}\n",
])
def test_malformed_files_raise(store, tmp_path, content):
    parsed = tmp_path / "bad.yaml"
    parsed.write_text(content)

    with pytest.raises(ImportFileError):
        DocImporter(store).import_file(str(parsed))


def test_missing_file_raises(store, tmp_path):
    with pytest.raises(ImportFileError):
        DocImporter(store).import_file(str(tmp_path / "nope.yaml"))


def test_reimport_updates_entry_in_place(store, tmp_path):
    first = tmp_path / "first.yaml"
    first.write_text("""
entries:
  - post_type: function
    title: wp_foo()
    packages: [Options]
    doc:
      tags:
        - {name: since, content: "4.0"}
        - {name: since, content: "4.1"}
""")
    second = tmp_path / "second.yaml"
    second.write_text("""
entries:
  - post_type: function
    title: wp_foo()
    doc:
      tags:
        - {name: since, content: "4.0"}
        - {name: since, content: "4.2", description: "Added the $bar parameter."}
""")
    events = ImportEvents()
    DeprecationTagger(store).register(events)
    importer = DocImporter(store, events)

    first_id = importer.import_file(str(first))["entry_ids"][0]
    second_id = importer.import_file(str(second))["entry_ids"][0]

    assert second_id == first_id
    assert store.get_statistics()["total_entries"] == 1
    assert store.entry_ids_for_term("since", "4.1") == []
    assert store.get_entry(first_id).packages == []
    assert [tag["content"] for tag in store.get_tags(first_id)] == ["4.0", "4.2"]

    generator = ReportGenerator(store)
    introduced = generator.generate_report("4.0", "introduced", "function").value
    modified = generator.generate_report("4.2", "modified", "function").value

    assert introduced.splitlines()[2:] == ["wp_foo()", "\tpackage: unspecified"]
    assert modified.splitlines()[2:] == [
        "wp_foo()",
        "\tmodification: Added the $bar parameter.",
        "\tpackage: unspecified",
    ]
