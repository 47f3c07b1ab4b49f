"""Records produced while scanning a unified diff."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class HunkHeader:
    """Parsed ``@@ -old_start,old_count +new_start,new_count @@`` line."""

    old_start: int
    old_count: int
    new_start: int
    new_count: int


@dataclass(frozen=True)
class DiffLine:
    """One classified line of a hunk body."""

    kind: str  # "added", "removed" or "context"
    content: str  # prefix stripped
    line_no: int  # absolute line number on the new-file side


@dataclass
class ContextSnippet:
    """Two-sided preview of the text behind a change."""

    start: str = ""
    end: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"start": self.start, "end": self.end}


@dataclass
class ChangeRecord:
    """A reported change span (1-based, inclusive) for one file."""

    start: int
    end: int
    context: List[ContextSnippet] = field(default_factory=list)

    @property
    def lines(self) -> str:
        if self.start == self.end:
            return str(self.start)
        return f"{self.start}-{self.end}"

    def covers_near(self, line_no: int, window: int) -> bool:
        """Return True if any line within *window* of *line_no* is in range."""
        return self.start - window <= line_no <= self.end + window

    def to_dict(self) -> dict:
        return {
            "lines": self.lines,
            "context": [snippet.to_dict() for snippet in self.context],
        }


# Insertion order follows hunk encounter order.
ChangeSet = Dict[str, List[ChangeRecord]]


@dataclass
class ParseResult:
    """Output of :func:`docdiff.diff_parser.parse_diff`."""

    changes: ChangeSet = field(default_factory=dict)
    has_documentation_change: bool = False
    # Valid hunk headers read; 0 means the input was not a usable diff
    hunks_seen: int = 0


@dataclass
class Report:
    """Final per-file change list plus the global documentation flag."""

    changes: ChangeSet = field(default_factory=dict)
    has_documentation_change: bool = False
    commit: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "changes": {
                path: [record.to_dict() for record in records]
                for path, records in self.changes.items()
            },
            "hasDocumentationChange": self.has_documentation_change,
            "commit": self.commit,
        }
