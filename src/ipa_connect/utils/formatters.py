"""
Diagnostics formatters for Markdown and JSON output.
"""

import json
from collections.abc import Iterable
from typing import Literal

from ..config.validator import Diagnostic

ResponseFormat = Literal["markdown", "json"]


def _escape(value: str) -> str:
    return value.replace("|", "\\|").replace("\n", " ")


def _format_diagnostics_as_markdown(diagnostics: list[Diagnostic]) -> str:
    if not diagnostics:
        return "_No configuration errors_"

    lines = [
        "## Configuration Errors",
        "",
        "| Field | Error | Detail |",
        "| --- | --- | --- |",
    ]

    for diag in diagnostics:
        lines.append(
            f"| {diag.field or '-'} | {_escape(diag.summary)} | {_escape(diag.detail) or '-'} |"
        )

    lines.append("")
    lines.append(f"_{len(diagnostics)} error(s) found_")
    return "\n".join(lines)


def _format_diagnostics_as_json(diagnostics: list[Diagnostic]) -> str:
    return json.dumps(
        [
            {
                "field": diag.field,
                "summary": diag.summary,
                "detail": diag.detail,
            }
            for diag in diagnostics
        ],
        indent=2,
    )


def format_diagnostics(diagnostics: Iterable[Diagnostic], fmt: ResponseFormat = "markdown") -> str:
    """Render violations for the user in the requested format."""
    items = list(diagnostics)
    if fmt == "json":
        return _format_diagnostics_as_json(items)
    return _format_diagnostics_as_markdown(items)
