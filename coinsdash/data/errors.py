"""
Error types for ingestion and report lineage.
"""
from __future__ import annotations


class IngestionError(ValueError):
    """A single uploaded file could not be turned into records.

    Never fatal to a batch: the file contributes zero reports and the message
    is reported against its file name.
    """

    def __init__(self, filename: str, message: str) -> None:
        super().__init__(message)
        self.filename = filename
        self.message = message

    def __str__(self) -> str:
        return f"{self.filename}: {self.message}"


class LineageError(Exception):
    """Base class for report collection errors."""


class UnknownReportError(LineageError, KeyError):
    def __init__(self, report_id: str) -> None:
        super().__init__(report_id)
        self.report_id = report_id

    def __str__(self) -> str:
        return f"Unknown report: {self.report_id}"


class ReportLockedError(LineageError):
    """Report takes part in a summary and can only be hidden, not removed."""

    def __init__(self, report_id: str, reason: str) -> None:
        super().__init__(reason)
        self.report_id = report_id
        self.reason = reason
