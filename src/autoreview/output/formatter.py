"""Text and JSON rendering of analysis results."""

from __future__ import annotations

import json as _json
import re
from datetime import datetime, timezone

from autoreview.comments import TEMPLATES, Comment

# Envelope schema versioning (semver: major.minor.patch)
ENVELOPE_SCHEMA_VERSION = "1.0.0"
ENVELOPE_SCHEMA_NAME = "autoreview-envelope-v1"

_PLACEHOLDER = re.compile(r"%\{([^}]+)\}")

VERDICT_LABELS = {
    "approve": "APPROVED",
    "disapprove": "DISAPPROVED",
    "refer_to_mentor": "REFERRED TO MENTOR",
}


def to_json(data) -> str:
    """Serialize data to a JSON string with deterministic key ordering."""
    return _json.dumps(data, indent=2, default=str, sort_keys=True)


def render_comment(comment: Comment, templates=TEMPLATES) -> str:
    """Interpolate a comment's parameters into its template.

    Unknown identifiers render as the identifier itself; unknown
    placeholders are left as written.
    """
    template = templates.get(comment.identifier)
    if template is None:
        return comment.identifier
    return _PLACEHOLDER.sub(lambda m: str(comment.params.get(m.group(1), m.group(0))), template)


def verdict_label(verdict: str) -> str:
    return VERDICT_LABELS.get(verdict, verdict.upper())


def format_result(path: str, result) -> str:
    """Plain-text report for one analysed file."""
    lines = [f"{path}", f"VERDICT: {verdict_label(result.verdict.value)}"]
    for comment in result.comments:
        marker = "!" if comment.is_blocking else "~"
        lines.append(f"  {marker} {render_comment(comment)}")
        lines.append(f"    ({comment.identifier})")
    return "\n".join(lines)


def format_table(headers: list[str], rows: list[list[str]]) -> str:
    if not rows:
        return "(none)"
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            if i < len(widths):
                widths[i] = max(widths[i], len(str(cell)))
    lines = ["  ".join(h.ljust(widths[i]) for i, h in enumerate(headers))]
    lines.append("  ".join("-" * w for w in widths))
    for row in rows:
        lines.append("  ".join(str(cell).ljust(widths[i]) for i, cell in enumerate(row)))
    return "\n".join(lines)


def json_envelope(command: str, summary: dict | None = None, **payload) -> dict:
    """Wrap command output in a self-describing envelope.

    The timestamp lives in ``_meta`` so that the content keys stay
    byte-identical across invocations on the same input.
    """
    ts = datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")
    out: dict = {
        "schema": ENVELOPE_SCHEMA_NAME,
        "schema_version": ENVELOPE_SCHEMA_VERSION,
        "command": command,
        "version": _get_version(),
        "summary": summary or {},
    }
    out.update(payload)
    out["_meta"] = {"timestamp": ts}
    return out


def _get_version() -> str:
    from autoreview import __version__

    return __version__
