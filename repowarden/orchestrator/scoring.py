"""Severity filtering and scoring of findings."""

from types import MappingProxyType
from typing import Iterable, List

from ..models.findings import Finding, Severity, severity_rank

MAX_SCORE = 100

SEVERITY_WEIGHTS = MappingProxyType({
    'critical': 25,
    'high': 15,
    'medium': 8,
    'low': 3,
    'info': 0,
})


def calculate_score(findings: Iterable[Finding]) -> int:
    """Score findings from 100 down, subtracting a fixed weight per finding."""
    score = MAX_SCORE
    for finding in findings:
        score -= SEVERITY_WEIGHTS[finding.severity]
    return max(0, score)


def filter_by_severity(findings: Iterable[Finding], threshold: Severity) -> List[Finding]:
    """Keep findings at least as severe as the threshold."""
    cutoff = severity_rank(threshold)
    return [f for f in findings if f.rank <= cutoff]
