"""Line counts for a single docdiff run."""

import sys
from dataclasses import dataclass, field
from typing import List

from unidiff import PatchSet
from unidiff.errors import UnidiffParseError

from .models import ChangeSet


@dataclass
class DiffStats:
    """Holds overall counts for the diff being reported on."""

    files: List[str] = field(default_factory=list)
    lines_added: int = 0
    lines_removed: int = 0

    @classmethod
    def from_diff(cls, diff_text: str) -> "DiffStats":
        """Count files and added/removed lines; zero counts if unparseable."""
        stats = cls()
        if not diff_text.strip():
            return stats
        try:
            patch = PatchSet.from_string(diff_text)
        except UnidiffParseError as exc:
            print(f"docdiff: stats: cannot count lines ({exc})", file=sys.stderr)
            return stats
        for patched_file in patch:
            stats.files.append(patched_file.path)
            stats.lines_added += patched_file.added
            stats.lines_removed += patched_file.removed
        return stats

    def format_summary(self, changes: ChangeSet, has_doc_change: bool) -> List[str]:
        """Return a list of lines forming the human-readable run summary."""
        lines = ["--- docdiff summary ---"]
        if changes:
            for path, records in changes.items():
                ranges = ", ".join(record.lines for record in records)
                lines.append(f"- {path} (lines {ranges})")
        else:
            lines.append("No specific line changes detected.")
        lines.append(f"files in diff: {len(self.files)}")
        lines.append(f"lines added:   {self.lines_added}")
        lines.append(f"lines removed: {self.lines_removed}")
        lines.append(f"documentation changed: {'yes' if has_doc_change else 'no'}")
        return lines
