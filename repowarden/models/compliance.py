"""Compliance report data models for RepoWarden."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Literal

from dataclasses_json import DataClassJsonMixin, config

from .findings import Finding

# Type aliases
ControlStatus = Literal['compliant', 'partial', 'non-compliant']


@dataclass(frozen=True, slots=True)
class ControlDefinition:
    """A catalog entry for an external compliance control."""

    name: str
    description: str


@dataclass(frozen=True, slots=True)
class ComplianceControl(DataClassJsonMixin):
    """Derived status of one control across a batch of scan results."""

    id: str
    name: str
    description: str
    status: ControlStatus
    findings: List[Finding] = field(default_factory=list)
    evidence: List[str] = field(default_factory=list)

    @property
    def is_compliant(self) -> bool:
        """Check if the control resolved to compliant."""
        return self.status == 'compliant'


@dataclass(frozen=True, slots=True)
class ComplianceReport(DataClassJsonMixin):
    """Compliance posture of a batch of repositories."""

    repositories: List[str]
    controls: List[ComplianceControl]
    overall_compliance: int
    generated_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc),
        metadata=config(encoder=datetime.isoformat, decoder=datetime.fromisoformat)
    )

    def control(self, control_id: str) -> ComplianceControl:
        """Look up a control by id."""
        for control in self.controls:
            if control.id == control_id:
                return control
        raise KeyError(control_id)
