"""Parse unified diffs into changed line ranges per file.

The scanner walks the diff once.  File headers open a fresh
:class:`FileContext`, hunk headers open a fresh :class:`HunkCursor` and every
other line inside a hunk is numbered against the new-file side and handed to
the :class:`~docdiff.doc_blocks.DocBlockDetector`.
"""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .config import DocDiffConfig
from .doc_blocks import DocBlockDetector, truncate_words
from .models import (
    ChangeRecord,
    ChangeSet,
    ContextSnippet,
    DiffLine,
    HunkHeader,
    ParseResult,
)

_HUNK_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")

_PREFIX_KIND = {"+": "added", "-": "removed", " ": "context"}


def parse_hunk_header(line: str) -> Optional[HunkHeader]:
    """Parse an ``@@`` line; return None if it does not match.

    Omitted counts default to 1, as in ``@@ -3 +3 @@``.
    """
    m = _HUNK_RE.match(line)
    if m is None:
        return None
    old_start, old_count, new_start, new_count = m.groups()
    return HunkHeader(
        old_start=int(old_start),
        old_count=int(old_count) if old_count is not None else 1,
        new_start=int(new_start),
        new_count=int(new_count) if new_count is not None else 1,
    )


def classify_line(line: str) -> Optional[Tuple[str, str]]:
    """Return ``(kind, content)`` for a hunk body line, or None if it is not one."""
    if not line:
        # Blank context line whose leading space was stripped by an editor
        return "context", ""
    kind = _PREFIX_KIND.get(line[0])
    if kind is None:
        return None
    return kind, line[1:]


def _strip_side_prefix(token: str, prefix: str) -> str:
    token = token.split("\t")[0].strip()
    if token.startswith(prefix):
        return token[len(prefix) :]
    return token


def path_from_git_header(line: str) -> Optional[str]:
    """Return the old-side path of a ``diff --git a/X b/Y`` line."""
    parts = line.split(" ")
    if len(parts) < 3:
        return None
    return _strip_side_prefix(parts[2], "a/")


@dataclass
class HunkCursor:
    """New-file line cursor for the hunk currently being read."""

    header: HunkHeader
    line_no: int
    old_remaining: int
    new_remaining: int
    record: Optional[ChangeRecord] = None  # hunk mode only

    @classmethod
    def from_header(cls, header: HunkHeader) -> "HunkCursor":
        return cls(header, header.new_start, header.old_count, header.new_count)

    @property
    def exhausted(self) -> bool:
        return self.old_remaining <= 0 and self.new_remaining <= 0

    def take(self, kind: str, content: str) -> DiffLine:
        """Number one body line and advance the cursor past it.

        Removed lines are reported at the position they would occupy and do
        not consume a new-file line.
        """
        line = DiffLine(kind, content, self.line_no)
        if kind != "removed":
            self.line_no += 1
            self.new_remaining -= 1
        if kind != "added":
            self.old_remaining -= 1
        return line


@dataclass
class FileContext:
    """Per-file scanning state; replaced whenever a new file section starts."""

    path: str
    from_git_header: bool
    records: List[ChangeRecord] = field(default_factory=list)
    # Records the doc detector deduplicates against; the same list as
    # ``records`` except in hunk mode.
    doc_records: List[ChangeRecord] = field(default_factory=list)
    hunk: Optional[HunkCursor] = None
    hunks_seen: int = 0


class DiffScanner:
    """Single-pass scanner building a :class:`ParseResult` from diff text."""

    def __init__(self, config: DocDiffConfig) -> None:
        self._config = config
        self._hunk_mode = config.mode == "hunks"
        self._detector = DocBlockDetector(config)
        self._file: Optional[FileContext] = None
        self._pending_old_path: Optional[str] = None
        self._hunks_seen = 0
        self.changes: ChangeSet = {}

    def scan(self, diff_text: str) -> ParseResult:
        for line in diff_text.splitlines():
            self.feed(line)
        self._close_file()
        return ParseResult(
            changes=self.changes,
            has_documentation_change=self._detector.has_documentation_change,
            hunks_seen=self._hunks_seen,
        )

    def feed(self, line: str) -> None:
        if line.startswith("diff --git"):
            path = path_from_git_header(line)
            if path is None:
                self._warn(f"skipping malformed file header: {line!r}")
                return
            self._start_file(path, from_git_header=True)
            return
        if line.startswith("@@"):
            self._start_hunk(line)
            return

        ctx = self._file
        hunk = ctx.hunk if ctx is not None else None
        if line.startswith(("--- ", "+++ ")) and (hunk is None or hunk.exhausted):
            self._feed_file_header(line)
            return
        if ctx is None or hunk is None:
            return  # no cursor yet
        if not line and hunk.exhausted:
            return
        self._feed_content(ctx, hunk, line)

    # -- headers ------------------------------------------------------------

    def _feed_file_header(self, line: str) -> None:
        if line.startswith("--- "):
            self._pending_old_path = _strip_side_prefix(line[4:], "a/")
            return
        ctx = self._file
        if ctx is not None and ctx.from_git_header and ctx.hunks_seen == 0:
            return  # path already taken from the diff --git line
        old_path = self._pending_old_path
        if old_path and old_path != "/dev/null":
            path = old_path
        else:
            path = _strip_side_prefix(line[4:], "b/")
        self._start_file(path, from_git_header=False)

    def _start_file(self, path: str, from_git_header: bool) -> None:
        self._close_file()
        self._detector.reset()
        self._pending_old_path = None
        ctx = FileContext(path=path, from_git_header=from_git_header)
        if not self._hunk_mode:
            ctx.doc_records = ctx.records
        self._file = ctx
        if self._config.verbose:
            print(
                f"docdiff: DiffScanner: processing file {path}",
                file=sys.stderr,
                flush=True,
            )

    def _close_file(self) -> None:
        ctx = self._file
        self._file = None
        if ctx is not None and ctx.records:
            self.changes.setdefault(ctx.path, []).extend(ctx.records)

    def _start_hunk(self, line: str) -> None:
        header = parse_hunk_header(line)
        if header is None:
            self._warn(f"skipping malformed hunk header: {line!r}")
            return
        ctx = self._file
        if ctx is None:
            self._warn(f"skipping hunk outside any file section: {line!r}")
            return
        # A block left open by the previous hunk is never reported
        self._detector.reset()
        hunk = HunkCursor.from_header(header)
        ctx.hunk = hunk
        ctx.hunks_seen += 1
        self._hunks_seen += 1
        if self._hunk_mode:
            end = header.new_start + max(header.new_count, 1) - 1
            hunk.record = ChangeRecord(header.new_start, end, [ContextSnippet()])
            ctx.records.append(hunk.record)
        if self._config.verbose:
            print(
                f"docdiff: DiffScanner: {ctx.path}: hunk at line {header.new_start}"
                f" (+{header.new_count}/-{header.old_count})",
                file=sys.stderr,
                flush=True,
            )

    # -- body ---------------------------------------------------------------

    def _feed_content(self, ctx: FileContext, hunk: HunkCursor, line: str) -> None:
        classified = classify_line(line)
        if classified is None:
            return  # "\ No newline at end of file" and other noise
        kind, content = classified
        diff_line = hunk.take(kind, content)
        if kind == "added":
            self._detector.feed_added(diff_line.line_no, content, ctx.doc_records)
        elif kind == "removed":
            self._detector.feed_removed(diff_line.line_no, content, ctx.doc_records)
        else:
            return
        if hunk.record is not None:
            self._note_hunk_context(hunk.record, content)

    def _note_hunk_context(self, record: ChangeRecord, content: str) -> None:
        """Keep the first and last changed line of a hunk as its preview."""
        text = truncate_words(content.strip(), self._config.hunk_context_words)
        if not text:
            return
        snippet = record.context[0]
        if not snippet.start:
            snippet.start = text
        else:
            snippet.end = text

    def _warn(self, message: str) -> None:
        print(f"docdiff: DiffScanner: {message}", file=sys.stderr, flush=True)


def parse_diff(diff_text: str, config: Optional[DocDiffConfig] = None) -> ParseResult:
    """Parse a unified diff string into per-file change records.

    Records are returned unmerged, in the order they were found; see
    :func:`docdiff.ranges.merge_changes`.  Malformed or out-of-order input
    never raises: offending lines are skipped.
    """
    if config is None:
        config = DocDiffConfig()
    return DiffScanner(config).scan(diff_text)
