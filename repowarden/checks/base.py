"""Predicate table helpers shared by the check modules."""

from typing import Callable, List, Optional, Sequence, TypeVar

from ..models.findings import Finding

Snapshot = TypeVar("Snapshot")
Predicate = Callable[[Snapshot], Optional[Finding]]


def evaluate(predicates: Sequence[Predicate], snapshot: Snapshot) -> List[Finding]:
    """Run every predicate against a snapshot, keeping the findings that fired."""
    findings: List[Finding] = []
    for predicate in predicates:
        finding = predicate(snapshot)
        if finding is not None:
            findings.append(finding)
    return findings


def enabled(setting: Optional[dict]) -> bool:
    """Read an ``{"enabled": bool}`` toggle as returned by the platform."""
    return bool(setting and setting.get("enabled"))
