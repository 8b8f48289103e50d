"""Payload contracts for client messages and match-service requests."""

from __future__ import annotations

from typing import Any, List

from ..errors import ContractViolation, ValidationIssue, ValidationReport, make_error
from . import loader


def _json_path(parts: Any) -> str:
    components: List[str] = ["$"]
    for part in parts:
        if isinstance(part, int):
            components.append(f"[{part}]")
        else:
            components.append(f".{part}")
    return "".join(components)


def validate(payload: Any, contract: str) -> ValidationReport:
    """Check ``payload`` against the named contract and collect every finding."""

    validator = loader.compiled(contract)
    issues: List[ValidationIssue] = []
    for error in sorted(validator.iter_errors(payload), key=lambda e: _json_path(e.absolute_path)):
        issues.append(make_error(f"schema.{error.validator}", error.message, _json_path(error.absolute_path)))
    return ValidationReport(ok=not issues, contract=contract, errors=issues)


def assert_valid(payload: Any, contract: str) -> None:
    report = validate(payload, contract)
    if report.ok:
        return
    details = "; ".join(f"{issue.path}: {issue.msg}" for issue in report.errors[:5])
    if len(report.errors) > 5:
        details += "; …"
    raise ContractViolation(f"{contract} payload violates contract: {details}", report)


__all__ = ["assert_valid", "loader", "validate"]
