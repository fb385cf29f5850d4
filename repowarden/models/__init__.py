"""Data models for RepoWarden."""

from .compliance import ComplianceControl, ComplianceReport, ControlDefinition, ControlStatus
from .findings import SEVERITY_ORDER, CheckCategory, Finding, Severity, severity_rank
from .remediation import UNSUPPORTED_FIX, FixResult
from .results import RepoScanResult, RepositoryIdentity, ScanSummary

__all__ = [
    "CheckCategory",
    "ComplianceControl",
    "ComplianceReport",
    "ControlDefinition",
    "ControlStatus",
    "Finding",
    "FixResult",
    "RepoScanResult",
    "RepositoryIdentity",
    "ScanSummary",
    "SEVERITY_ORDER",
    "Severity",
    "UNSUPPORTED_FIX",
    "severity_rank",
]
