"""Analyse a directory of submissions, e.g. a fixture corpus laid out as
``DIR/<id>/<exercise>.js``.

Parse failures are counted in the summary instead of aborting the run.
"""

from __future__ import annotations

from pathlib import Path

import click

from autoreview.api import analyze_file
from autoreview.cli import configure_logging
from autoreview.config import load_config
from autoreview.engine import Verdict
from autoreview.exit_codes import EXIT_USAGE, ParseFailureError, exit_with
from autoreview.output.formatter import format_table, json_envelope, to_json, verdict_label

BATCH_PATTERNS = ("*.js", "*.ts")


def collect_submissions(root: Path) -> list[Path]:
    """Every ``*.js`` and ``*.ts`` file below *root*, sorted by path."""
    found: set[Path] = set()
    for pattern in BATCH_PATTERNS:
        found.update(p for p in root.rglob(pattern) if p.is_file() and "node_modules" not in p.parts)
    return sorted(found)


@click.command("batch")
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
@click.option("--config", "config_path", default=None, help="Path to .autoreview.yml config file.")
@click.option("--verbose", "-v", is_flag=True, help="Log every stage transition to stderr.")
@click.pass_context
def batch(ctx, directory, config_path, verbose):
    """Analyse every submission below DIRECTORY and summarise the verdicts."""
    json_mode = ctx.obj.get("json") if ctx.obj else False
    configure_logging(verbose)

    root = Path(directory)
    files = collect_submissions(root)
    if not files:
        exit_with(EXIT_USAGE, f"no .js or .ts files under {directory}")

    config = load_config(config_path)

    rows: list[dict] = []
    counts = {v.value: 0 for v in Verdict}
    counts["parse_failure"] = 0
    for path in files:
        rel = path.relative_to(root).as_posix()
        try:
            result = analyze_file(path, config)
        except ParseFailureError as exc:
            counts["parse_failure"] += 1
            rows.append({"path": rel, "verdict": "parse_failure", "comments": [], "error": exc.format_message()})
            continue
        counts[result.verdict.value] += 1
        rows.append(
            {
                "path": rel,
                "verdict": result.verdict.value,
                "comments": [c.identifier for c in result.comments],
                "error": None,
            }
        )

    if json_mode:
        summary = {"total_files": len(rows), **counts}
        click.echo(to_json(json_envelope("batch", summary=summary, files=rows)))
        return

    table = [
        [
            r["path"],
            "PARSE FAILURE" if r["verdict"] == "parse_failure" else verdict_label(r["verdict"]),
            ", ".join(r["comments"]) or "-",
        ]
        for r in rows
    ]
    click.echo(format_table(["file", "verdict", "comments"], table))
    click.echo("")
    click.echo(
        f"{len(rows)} files: {counts['approve']} approved, {counts['disapprove']} disapproved, "
        f"{counts['refer_to_mentor']} referred, {counts['parse_failure']} parse failures"
    )
