"""Load docdiff configuration from pyproject.toml and optional .docdiff.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

DEFAULT_TAG_MARKERS = ["@param", "@return", "@description", "@example"]


@dataclass
class DocDiffConfig:
    """Runtime configuration for docdiff."""

    # RangeMerger: records whose start is within this many lines of the
    # previous record's end are folded together
    merge_threshold: int = 5
    # Removed doc lines are suppressed when an existing record for the file
    # covers a line within this many lines of them
    dedup_window: int = 3

    # Words kept on each side of a doc-block summary.  Blocks of up to twice
    # this many words are reported in full.
    summary_words: int = 10
    # Words kept from the first and last changed line of a hunk in hunk mode
    hunk_context_words: int = 5

    # Doc-block delimiters
    doc_open: str = "/**"
    doc_close: str = "*/"
    doc_continuation: str = "*"
    # Inline annotations that mark a documentation change on their own
    tag_markers: List[str] = field(default_factory=lambda: list(DEFAULT_TAG_MARKERS))

    # "docs" reports doc blocks and tag markers; "hunks" reports one range per
    # hunk header
    mode: str = "docs"
    # Where the JSON report is written
    output: str = "changed-lines.json"
    # Whether to query git for file revisions and the current commit
    use_git: bool = True
    # Print per-line scanner diagnostics to stderr
    verbose: bool = False


def _read_toml(path: Path) -> dict:
    """Read a TOML file; return empty dict if missing or unparseable."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError):
        return {}


def _apply(cfg: DocDiffConfig, d: dict) -> None:
    """Overlay dict values onto cfg, ignoring unknown keys."""
    valid = set(cfg.__dataclass_fields__)
    for key, val in d.items():
        if key in valid:
            setattr(cfg, key, val)


def load_config(project_root: Optional[Path] = None) -> DocDiffConfig:
    """Load config from pyproject.toml [tool.docdiff], then .docdiff.toml."""
    if project_root is None:
        project_root = Path.cwd()
    cfg = DocDiffConfig()
    pyproject = _read_toml(project_root / "pyproject.toml")
    _apply(cfg, pyproject.get("tool", {}).get("docdiff", {}))
    local = _read_toml(project_root / ".docdiff.toml")
    _apply(cfg, local)
    return cfg
