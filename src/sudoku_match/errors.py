"""Shared error types for the match core."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

SEVERITY_ERROR = "ERROR"


@dataclass(frozen=True)
class ValidationIssue:
    """Single finding produced by a contract check."""

    code: str
    msg: str
    path: str
    severity: str


@dataclass(frozen=True)
class ValidationReport:
    """Aggregate result of validating one payload against its contract."""

    ok: bool
    contract: str
    errors: List[ValidationIssue] = field(default_factory=list)


def make_error(code: str, msg: str, path: str) -> ValidationIssue:
    """Construct an error-level :class:`ValidationIssue`."""

    return ValidationIssue(code=code, msg=msg, path=path, severity=SEVERITY_ERROR)


class SudokuMatchError(Exception):
    """Base class for errors raised by this package."""


class ContractViolation(SudokuMatchError, ValueError):
    """Raised when a payload does not satisfy its JSON schema."""

    def __init__(self, message: str, report: ValidationReport) -> None:
        super().__init__(message)
        self.report = report


class InvalidMessage(SudokuMatchError):
    """Raised for inbound client messages that cannot be parsed."""


class SessionLockedError(SudokuMatchError):
    """Raised when a join is attempted on a full, locked or disposing session."""


class MatchServiceError(SudokuMatchError):
    """Raised when the external match service call fails."""

    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


__all__ = [
    "SEVERITY_ERROR",
    "ContractViolation",
    "InvalidMessage",
    "MatchServiceError",
    "SessionLockedError",
    "SudokuMatchError",
    "ValidationIssue",
    "ValidationReport",
    "make_error",
]
