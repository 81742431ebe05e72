"""Test CLI functionality."""

import subprocess
import sys

PARSED = """
entries:
  - post_type: function
    title: b_func
    doc:
      tags:
        - {name: since, content: "4.2"}
  - post_type: function
    title: a_func
    ticket: 100
    doc:
      tags:
        - {name: since, content: "4.0"}
        - {name: since, content: "4.2", description: "Added a parameter."}
  - post_type: class
    title: c_class
    doc:
      tags:
        - {name: since, content: "4.2"}
"""


def _run(tmp_path, *args):
    return subprocess.run(
        [sys.executable, "-m", "wp_since.cli", "--database", str(tmp_path / "docs.db"), *args],
        capture_output=True,
        text=True,
        cwd=tmp_path,
    )


def _populated(tmp_path):
    parsed = tmp_path / "parsed.yaml"
    parsed.write_text(PARSED)
    assert _run(tmp_path, "init").returncode == 0
    result = _run(tmp_path, "import", str(parsed))
    assert result.returncode == 0, result.stderr


def test_cli_help_and_description():
    """Test that CLI help command works and contains expected content."""
    result = subprocess.run(
        [sys.executable, "-m", "wp_since.cli", "--help"], capture_output=True, text=True
    )
    assert result.returncode == 0
    assert "List changes in a WordPress version" in result.stdout
    assert "wp-since" in result.stdout
    assert "usage:" in result.stdout.lower()


def test_cli_invalid_change_type(tmp_path):
    result = _run(tmp_path, "since", "4.2", "--change_type=removed")
    assert result.returncode != 0
    assert "invalid choice" in result.stderr


def test_cli_requires_initialized_store(tmp_path):
    result = _run(tmp_path, "since", "4.2")
    assert result.returncode == 1
    assert "Error: Documentation store not found" in result.stderr
    assert result.stdout == ""


def test_cli_requires_active_theme(tmp_path):
    assert _run(tmp_path, "init", "--theme", "twentyseventeen").returncode == 0

    result = _run(tmp_path, "since", "4.2")

    assert result.returncode == 1
    assert "wporg-developer theme must be active" in result.stderr


def test_cli_reports_current_version(tmp_path):
    _populated(tmp_path)

    result = _run(tmp_path, "since")

    assert result.returncode == 0, result.stderr
    lines = result.stdout.splitlines()
    assert lines[0] == "Changes in 4.2"
    assert lines.index("\t\tc_class") < lines.index("\t\tb_func")
    assert "\t\t\tmodification: Added a parameter." in lines
    assert "\t\t\ttrac ticket: https://core.trac.wordpress.org/ticket/100" in lines


def test_cli_filters(tmp_path):
    _populated(tmp_path)

    result = _run(tmp_path, "since", "4.2", "--change_type=introduced", "--post_type=function")

    assert result.returncode == 0, result.stderr
    assert result.stdout == "Changes in 4.2\n\nb_func\n\tpackage: unspecified\n"


def test_cli_unknown_version(tmp_path):
    _populated(tmp_path)

    result = _run(tmp_path, "since", "99.99")

    assert result.returncode == 1
    assert "Error: Unknown version: 99.99" in result.stderr
    assert result.stdout == ""


def test_cli_rebuild_index(tmp_path):
    _populated(tmp_path)

    result = _run(tmp_path, "rebuild-index")

    assert result.returncode == 0
    assert "Rebuilt change index for 2 versions" in result.stdout
