"""Scan result data models for RepoWarden."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal

from dataclasses_json import DataClassJsonMixin, config

from .findings import Finding

# Type aliases
Visibility = Literal['public', 'private', 'internal']


@dataclass(frozen=True, slots=True)
class RepositoryIdentity(DataClassJsonMixin):
    """Identity of a scanned repository, resolved once per scan."""

    owner: str
    name: str
    full_name: str
    visibility: Visibility
    default_branch: str
    url: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> RepositoryIdentity:
        """Create an identity from provider repository metadata."""
        visibility = data.get('visibility')
        if visibility is None:
            visibility = 'private' if data.get('private') else 'public'

        return cls(
            owner=data['owner']['login'],
            name=data['name'],
            full_name=data['full_name'],
            visibility=visibility,
            default_branch=data.get('default_branch') or 'main',
            url=data.get('html_url', ''),
        )


@dataclass(frozen=True, slots=True)
class ScanSummary(DataClassJsonMixin):
    """Counts of retained findings per severity."""

    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    info: int = 0
    # Checks only report problems, so nothing is counted as passed
    passed: int = 0

    @classmethod
    def from_findings(cls, findings: List[Finding]) -> ScanSummary:
        """Count findings per severity."""
        counts = {'critical': 0, 'high': 0, 'medium': 0, 'low': 0, 'info': 0}
        for finding in findings:
            counts[finding.severity] += 1
        return cls(**counts, passed=0)

    @property
    def total(self) -> int:
        """Total number of counted findings."""
        return self.critical + self.high + self.medium + self.low + self.info


@dataclass(frozen=True, slots=True)
class RepoScanResult(DataClassJsonMixin):
    """The outcome of scanning one repository."""

    repository: RepositoryIdentity
    findings: List[Finding]
    score: int
    summary: ScanSummary
    scanned_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc),
        metadata=config(encoder=datetime.isoformat, decoder=datetime.fromisoformat)
    )

    def __post_init__(self) -> None:
        """Validate scan result data after initialization."""
        if not 0 <= self.score <= 100:
            raise ValueError(f"Score must be within 0..100, got {self.score}")

    def has_finding(self, finding_id: str) -> bool:
        """Check whether a finding with the given id was retained."""
        return any(f.id == finding_id for f in self.findings)

    @property
    def full_name(self) -> str:
        """Full name of the scanned repository."""
        return self.repository.full_name
