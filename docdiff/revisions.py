"""Fetch file revisions from git and grow tag records to their doc block."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from typing import List, Optional, Protocol

from .config import DocDiffConfig
from .doc_blocks import summarize_block
from .errors import RevisionFetchError
from .models import ChangeRecord, ChangeSet

# Wall-clock limit for a single git invocation (seconds).
_GIT_TIMEOUT = 30


class RevisionSource(Protocol):
    """Read-only access to the two sides of a change."""

    def get_old_content(self, path: str) -> Optional[str]: ...

    def get_new_content(self, path: str) -> Optional[str]: ...

    def current_revision(self) -> Optional[str]: ...


class NullRevisionSource:
    """Revision source for runs without git: nothing is ever available."""

    def get_old_content(self, path: str) -> Optional[str]:
        return None

    def get_new_content(self, path: str) -> Optional[str]:
        return None

    def current_revision(self) -> Optional[str]:
        return None


class GitRevisionSource:
    """Revision source backed by ``git show`` in *repo_root*.

    Blobs are decoded straight from the subprocess output; nothing is
    written to disk.
    """

    def __init__(
        self,
        repo_root: Optional[Path] = None,
        old_rev: str = "HEAD^",
        new_rev: str = "HEAD",
    ) -> None:
        self._repo_root = repo_root if repo_root is not None else Path.cwd()
        self._old_rev = old_rev
        self._new_rev = new_rev

    def _git(self, *args: str) -> bytes:
        """Run git and return stdout; raise RevisionFetchError on any failure."""
        try:
            proc = subprocess.run(
                ["git", *args],
                cwd=self._repo_root,
                capture_output=True,
                timeout=_GIT_TIMEOUT,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise RevisionFetchError(f"git {' '.join(args)}: {exc}") from exc
        if proc.returncode != 0:
            err = proc.stderr.decode("utf-8", errors="replace").strip()
            raise RevisionFetchError(f"git {' '.join(args)}: {err}")
        return proc.stdout

    def _fetch(self, rev: str, path: str) -> Optional[str]:
        try:
            blob = self._git("show", f"{rev}:{path}")
        except RevisionFetchError:
            # File did not exist at that revision
            return None
        return blob.decode("utf-8", errors="replace")

    def get_old_content(self, path: str) -> Optional[str]:
        """Content at the parent revision.

        Part of the :class:`RevisionSource` interface only: enrichment reads the
        new side, because every reported line number refers to the new file.
        """
        return self._fetch(self._old_rev, path)

    def get_new_content(self, path: str) -> Optional[str]:
        return self._fetch(self._new_rev, path)

    def current_revision(self) -> Optional[str]:
        try:
            rev = self._git("rev-parse", self._new_rev).decode("utf-8").strip()
        except RevisionFetchError:
            return None
        return rev or None


# ---------------------------------------------------------------------------
# Enrichment
# ---------------------------------------------------------------------------


def find_enclosing_block(lines: List[str], line_no: int, config: DocDiffConfig):
    """Return ``(start, end)`` of the doc block around 1-based *line_no*.

    Returns None when the line is not inside a complete ``/** ... */`` block.
    """
    idx = line_no - 1
    if idx < 0 or idx >= len(lines):
        return None

    open_idx = None
    for j in range(idx, -1, -1):
        text = lines[j].strip()
        if text.startswith(config.doc_open):
            if j != idx and text[len(config.doc_open) :].endswith(config.doc_close):
                return None  # one-line block above us
            open_idx = j
            break
        if j != idx and text.endswith(config.doc_close):
            return None  # a previous block closed above us
    if open_idx is None:
        return None

    for k in range(idx, len(lines)):
        text = lines[k].strip()
        if k == open_idx:
            if text[len(config.doc_open) :].endswith(config.doc_close):
                return open_idx + 1, k + 1
            continue
        if text.endswith(config.doc_close):
            return open_idx + 1, k + 1
        if text.startswith(config.doc_open):
            return None  # ran into the next block without closing
    return None


def _enrich_records(
    records: List[ChangeRecord], lines: List[str], config: DocDiffConfig
) -> None:
    for record in records:
        if record.start != record.end:
            continue
        span = find_enclosing_block(lines, record.start, config)
        if span is None:
            continue
        start, end = span
        record.start, record.end = start, end
        record.context = [summarize_block(lines[start - 1 : end], config)]


def enrich_changes(
    changes: ChangeSet, source: RevisionSource, config: DocDiffConfig
) -> ChangeSet:
    """Grow single-line doc records to the full block found in the new file.

    Files are processed one at a time; a failure for one file is reported on
    stderr and leaves that file's records as they were.
    """
    for path, records in changes.items():
        try:
            content = source.get_new_content(path)
            if content is None:
                continue
            _enrich_records(records, content.splitlines(), config)
        except Exception as exc:
            print(
                f"docdiff: enrich: {path}: skipped ({exc})",
                file=sys.stderr,
                flush=True,
            )
    return changes
