"""Scan, compliance and remediation orchestration."""

from .compliance import CONTROL_CATALOG, EVIDENCE_RULES, map_compliance
from .remediation import REMEDIATION_ACTIONS, SUPPORTED_FIXES, RemediationDispatcher, is_fixable
from .scanner import SecurityScanner, split_full_name
from .scoring import SEVERITY_WEIGHTS, calculate_score, filter_by_severity

__all__ = [
    "CONTROL_CATALOG",
    "EVIDENCE_RULES",
    "REMEDIATION_ACTIONS",
    "RemediationDispatcher",
    "SEVERITY_WEIGHTS",
    "SUPPORTED_FIXES",
    "SecurityScanner",
    "calculate_score",
    "filter_by_severity",
    "is_fixable",
    "map_compliance",
    "split_full_name",
]
