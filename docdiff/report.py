"""Serialize a :class:`~docdiff.models.Report` to disk."""

import json
from pathlib import Path
from typing import Union

from .errors import DocDiffReportError
from .models import Report


def empty_report() -> Report:
    """Report emitted for empty or unusable input."""
    return Report(changes={}, has_documentation_change=False, commit=None)


def dumps_report(report: Report) -> str:
    return json.dumps(report.to_dict(), indent=2)


def write_report(report: Report, path: Union[str, Path]) -> Path:
    """Write *report* as JSON to *path*; raise DocDiffReportError on failure."""
    path = Path(path)
    try:
        path.write_text(dumps_report(report) + "\n", encoding="utf-8")
    except OSError as exc:
        raise DocDiffReportError(f"cannot write report to {path}: {exc}") from exc
    return path
