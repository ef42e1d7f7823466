"""Shared test fixtures and helpers for autoreview tests.

Provides:
- CliRunner fixtures: cli_runner, invoke_cli()
- Source helpers: facts_for(), analyze()
- Fixture corpus access: FIXTURES_DIR, fixture_path()
- JSON validation helpers: parse_json_output(), assert_json_envelope()
"""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest
from click.testing import CliRunner

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "resistor-color-duo"

COLORS_ARRAY = (
    "const COLORS = ['black', 'brown', 'red', 'orange', 'yellow', "
    "'green', 'blue', 'violet', 'grey', 'white'];\n"
)

COLORS_OBJECT = (
    "const COLORS = { black: 0, brown: 1, red: 2, orange: 3, yellow: 4, "
    "green: 5, blue: 6, violet: 7, grey: 8, white: 9 };\n"
)


# ===========================================================================
# Source helpers
# ===========================================================================


def fixture_path(fixture_id) -> Path:
    return FIXTURES_DIR / str(fixture_id) / "resistor-color-duo.js"


def facts_for(source_text: str, language: str = "javascript", name: str = "value"):
    """Parse source text and run the fact extractor once."""
    from autoreview.languages.registry import get_extractor
    from autoreview.parser import parse_source

    submission = parse_source(source_text, language)
    return get_extractor(language).extract_facts(submission.tree, submission.source, name)


def analyze(source_text: str, language: str = "javascript"):
    from autoreview.api import analyze_source

    return analyze_source(source_text, language)


def identifiers(result) -> list[str]:
    return [c.identifier for c in result.comments]


# ===========================================================================
# CliRunner helpers
# ===========================================================================


@pytest.fixture
def cli_runner():
    """Provide a Click CliRunner for in-process CLI testing."""
    return CliRunner()


def invoke_cli(runner, args, cwd=None, json_mode=False):
    """Invoke the autoreview CLI via CliRunner.

    Args:
        runner: CliRunner instance
        args: list of CLI arguments (e.g. ["analyze", "a.js"])
        cwd: directory to run in
        json_mode: if True, prepend --json flag
    Returns:
        click.testing.Result
    """
    from autoreview.cli import cli

    full_args = []
    if json_mode:
        full_args.append("--json")
    full_args.extend(args)

    old_cwd = os.getcwd()
    try:
        if cwd:
            os.chdir(str(cwd))
        result = runner.invoke(cli, full_args, catch_exceptions=False)
    finally:
        os.chdir(old_cwd)

    return result


# ===========================================================================
# JSON validation helpers
# ===========================================================================


def parse_json_output(result, command=None, expected_exit=0):
    """Parse JSON from a CliRunner result."""
    assert result.exit_code == expected_exit, (
        f"Command {command or '?'} exited {result.exit_code}, expected {expected_exit}:\n{result.output}"
    )
    try:
        return json.loads(result.stdout)
    except json.JSONDecodeError as e:
        pytest.fail(f"Invalid JSON from {command or '?'}: {e}\nOutput was:\n{result.output[:500]}")


def assert_json_envelope(data, command=None):
    """Validate that a parsed JSON dict follows the envelope contract."""
    assert isinstance(data, dict), f"Expected dict, got {type(data)}"
    for key in ("schema", "command", "version", "summary"):
        assert key in data, f"Missing {key!r} key in envelope"
    assert "timestamp" in data.get("_meta", {}), "Missing 'timestamp' in _meta"
    if command:
        assert data["command"] == command, f"Expected command={command}, got {data['command']}"
    assert isinstance(data["summary"], dict)


# ===========================================================================
# Project fixtures
# ===========================================================================


@pytest.fixture
def submission_factory(tmp_path):
    """Write submissions into a temp dir; returns a callable(name, text) -> Path."""

    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write
