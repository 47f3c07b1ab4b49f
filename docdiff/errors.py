"""Docdiff-specific exceptions."""


class DocDiffError(Exception):
    """Base class for errors raised by docdiff."""


class DocDiffReportError(DocDiffError):
    """Raised when the JSON report cannot be written.

    Callers should print the message and exit non-zero; every other failure
    is contained and still produces a report.
    """


class RevisionFetchError(DocDiffError):
    """Raised when a git query fails; the revision getters turn it into None."""
