"""Coalesce nearby change records of a file into fewer, larger ranges."""

from typing import List

from .models import ChangeRecord, ChangeSet


def merge_records(
    records: List[ChangeRecord], threshold: int = 5
) -> List[ChangeRecord]:
    """Fold records whose start is within *threshold* lines of the previous end.

    Records are sorted by start line first.  A folded record extends the
    accumulator's end to the later of the two and appends its context after
    the accumulator's.  Input records are not mutated.
    """
    if len(records) <= 1:
        return list(records)

    ordered = sorted(records, key=lambda r: r.start)
    merged: List[ChangeRecord] = []
    current = ChangeRecord(ordered[0].start, ordered[0].end, list(ordered[0].context))
    for record in ordered[1:]:
        if record.start - current.end <= threshold:
            current.end = max(current.end, record.end)
            current.context.extend(record.context)
        else:
            merged.append(current)
            current = ChangeRecord(record.start, record.end, list(record.context))
    merged.append(current)
    return merged


def merge_changes(changes: ChangeSet, threshold: int = 5) -> ChangeSet:
    """Apply :func:`merge_records` to every file, keeping file order."""
    return {
        path: merge_records(records, threshold) for path, records in changes.items()
    }
