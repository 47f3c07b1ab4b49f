"""Drive the scan, enrich and merge stages and assemble the report."""

from typing import Optional

from .config import DocDiffConfig, load_config
from .diff_parser import parse_diff
from .models import Report
from .ranges import merge_changes
from .report import empty_report
from .revisions import NullRevisionSource, RevisionSource, enrich_changes


def run_engine(
    diff_text: str,
    config: Optional[DocDiffConfig] = None,
    source: Optional[RevisionSource] = None,
) -> Report:
    """Build the :class:`Report` for *diff_text*.

    Empty input, and input without a single valid hunk header, short-circuits
    to :func:`~docdiff.report.empty_report` without asking *source* for the
    commit.  In ``docs`` mode single-line records are grown to their
    enclosing block using *source* before merging.
    """
    if config is None:
        config = load_config()
    if source is None:
        source = NullRevisionSource()
    if not diff_text.strip():
        return empty_report()

    result = parse_diff(diff_text, config)
    if result.hunks_seen == 0:
        return empty_report()
    changes = result.changes
    if config.mode != "hunks":
        changes = enrich_changes(changes, source, config)
    changes = merge_changes(changes, config.merge_threshold)
    return Report(
        changes=changes,
        has_documentation_change=result.has_documentation_change,
        commit=source.current_revision(),
    )
