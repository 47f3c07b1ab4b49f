"""Detect documentation-comment changes among added and removed diff lines.

A doc block is a ``/** ... */`` comment: an opening line, any number of
continuation lines (conventionally starting with ``*``) and a closing line.
Tag markers such as ``@param`` flag a documentation change on their own,
whether or not they sit inside a block the scanner has seen open.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import List, Union

from .config import DocDiffConfig
from .models import ChangeRecord, ContextSnippet

_ELLIPSIS = "..."


@dataclass(frozen=True)
class Outside:
    """No doc block is open."""


@dataclass
class Inside:
    """A doc block opened at *start_line* and has not closed yet."""

    start_line: int
    buffer: List[str] = field(default_factory=list)


BlockState = Union[Outside, Inside]

OUTSIDE = Outside()


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


def strip_doc_markers(text: str, config: DocDiffConfig) -> str:
    """Remove the open/close delimiters and a leading continuation marker."""
    text = text.strip()
    if text.startswith(config.doc_open):
        text = text[len(config.doc_open) :]
    if text.endswith(config.doc_close):
        text = text[: -len(config.doc_close)]
    text = text.strip()
    if text.startswith(config.doc_continuation):
        text = text[len(config.doc_continuation) :]
    return text.strip()


def truncate_words(text: str, max_words: int) -> str:
    """Return the first *max_words* words of *text*, with an ellipsis if cut."""
    words = text.split()
    if len(words) <= max_words:
        return " ".join(words)
    return " ".join(words[:max_words]) + _ELLIPSIS


def summarize_block(lines: List[str], config: DocDiffConfig) -> ContextSnippet:
    """Build the fixed-size two-sided preview of a doc block.

    Blocks of up to ``2 * summary_words`` words are kept whole in ``start``.
    Longer blocks keep the first and last ``summary_words`` words.
    """
    text = " ".join(strip_doc_markers(line, config) for line in lines)
    words = text.split()
    n = config.summary_words
    if len(words) <= 2 * n:
        return ContextSnippet(start=" ".join(words), end="")
    return ContextSnippet(
        start=" ".join(words[:n]) + _ELLIPSIS,
        end=_ELLIPSIS + " ".join(words[-n:]),
    )


# ---------------------------------------------------------------------------
# Detector
# ---------------------------------------------------------------------------


class DocBlockDetector:
    """Two-state machine fed with the added and removed lines of one diff.

    Records are appended to the list the caller passes in, which is the
    current file's record list.  :meth:`reset` must be called whenever a new
    hunk or file section starts so an unclosed block never leaks past it.
    """

    def __init__(self, config: DocDiffConfig) -> None:
        self._config = config
        self.state: BlockState = OUTSIDE
        self.has_documentation_change = False

    def reset(self) -> None:
        """Drop any open block (unclosed blocks are never reported)."""
        if isinstance(self.state, Inside) and self._config.verbose:
            print(
                f"docdiff: DocBlockDetector: dropping unclosed block"
                f" opened at line {self.state.start_line}",
                file=sys.stderr,
                flush=True,
            )
        self.state = OUTSIDE

    def has_tag_marker(self, text: str) -> bool:
        return any(marker in text for marker in self._config.tag_markers)

    def looks_like_doc(self, text: str) -> bool:
        """Return True if the trimmed *text* could belong to a doc block."""
        cfg = self._config
        if text.startswith(cfg.doc_open) or text.endswith(cfg.doc_close):
            return True
        if text.startswith(cfg.doc_continuation):
            return True
        return self.has_tag_marker(text)

    def _single_line_record(self, line_no: int, text: str) -> ChangeRecord:
        snippet = ContextSnippet(start=truncate_words(text, self._config.summary_words))
        return ChangeRecord(line_no, line_no, [snippet])

    def feed_added(
        self, line_no: int, content: str, records: List[ChangeRecord]
    ) -> None:
        cfg = self._config
        text = content.strip()
        state = self.state

        if isinstance(state, Inside):
            state.buffer.append(text)
            if text.endswith(cfg.doc_close):
                records.append(
                    ChangeRecord(
                        state.start_line,
                        line_no,
                        [summarize_block(state.buffer, cfg)],
                    )
                )
                self.state = OUTSIDE
            return

        if text.startswith(cfg.doc_open):
            self.has_documentation_change = True
            rest = text[len(cfg.doc_open) :]
            if rest.endswith(cfg.doc_close):
                # Opens and closes on the same line
                records.append(
                    ChangeRecord(line_no, line_no, [summarize_block([text], cfg)])
                )
            else:
                self.state = Inside(line_no, [text])
            return

        if self.has_tag_marker(text):
            self.has_documentation_change = True
            records.append(self._single_line_record(line_no, text))

    def feed_removed(
        self, line_no: int, content: str, records: List[ChangeRecord]
    ) -> None:
        text = content.strip()
        if not self.looks_like_doc(text):
            return
        self.has_documentation_change = True
        window = self._config.dedup_window
        if any(record.covers_near(line_no, window) for record in records):
            if self._config.verbose:
                print(
                    f"docdiff: DocBlockDetector: removed doc line {line_no}"
                    f" already covered",
                    file=sys.stderr,
                    flush=True,
                )
            return
        records.append(self._single_line_record(line_no, text))
