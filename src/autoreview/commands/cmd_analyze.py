"""Analyse submission files and report a verdict for each.

Exit codes:
  0  Every file was approved or referred to a mentor.
  3  At least one file could not be parsed.
  5  At least one file was disapproved.
"""

from __future__ import annotations

import os

import click

from autoreview.api import analyze_file
from autoreview.cli import configure_logging
from autoreview.config import load_config
from autoreview.engine import Verdict
from autoreview.exit_codes import (
    EXIT_DISAPPROVED,
    EXIT_PARSE_FAILURE,
    EXIT_SUCCESS,
    EXIT_USAGE,
    ParseFailureError,
    exit_with,
)
from autoreview.output.formatter import format_result, json_envelope, to_json, verdict_label


def exit_code_for(results: list[dict]) -> int:
    """Parse failures take precedence over disapprovals."""
    if any(r.get("error") for r in results):
        return EXIT_PARSE_FAILURE
    if any(r.get("verdict") == Verdict.DISAPPROVED.value for r in results):
        return EXIT_DISAPPROVED
    return EXIT_SUCCESS


@click.command("analyze")
@click.argument("paths", nargs=-1)
@click.option("--config", "config_path", default=None, help="Path to .autoreview.yml config file.")
@click.option("--verbose", "-v", is_flag=True, help="Log every stage transition to stderr.")
@click.pass_context
def analyze(ctx, paths, config_path, verbose):
    """Analyse one or more solution files.

    Prints the verdict (approve, disapprove or refer to mentor) and the
    feedback comments for every file.

    \b
    Examples:
      autoreview analyze resistor-color-duo.js
      autoreview --json analyze a.js b.ts
    """
    json_mode = ctx.obj.get("json") if ctx.obj else False
    configure_logging(verbose)

    if not paths:
        exit_with(EXIT_USAGE, "provide at least one file path.")

    missing = [p for p in paths if not os.path.isfile(p)]
    if missing:
        exit_with(EXIT_USAGE, f"no such file: {missing[0]}")

    config = load_config(config_path)

    results: list[dict] = []
    reports: list[str] = []
    for path in paths:
        display = path.replace("\\", "/")
        try:
            result = analyze_file(path, config)
        except ParseFailureError as exc:
            results.append({"path": display, "verdict": None, "error": exc.format_message(), "syntax_errors": exc.errors})
            reports.append(f"{display}\nVERDICT: PARSE FAILURE\n  {exc.format_message()}")
            continue
        results.append({"path": display, "error": None, **result.to_dict()})
        reports.append(format_result(display, result))

    counts: dict[str, int] = {}
    for r in results:
        key = r["verdict"] or "parse_failure"
        counts[key] = counts.get(key, 0) + 1

    if json_mode:
        summary = {"verdict": _summary_line(counts), "total_files": len(results), "counts": counts}
        click.echo(to_json(json_envelope("analyze", summary=summary, files=results)))
    else:
        click.echo("\n\n".join(reports))

    code = exit_code_for(results)
    if code != EXIT_SUCCESS:
        ctx.exit(code)


def _summary_line(counts: dict[str, int]) -> str:
    parts = []
    for key in sorted(counts):
        label = "PARSE FAILURE" if key == "parse_failure" else verdict_label(key)
        parts.append(f"{counts[key]} {label.lower()}")
    return ", ".join(parts)
