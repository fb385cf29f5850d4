"""Remediation data models for RepoWarden."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from dataclasses_json import DataClassJsonMixin

UNSUPPORTED_FIX = "UNSUPPORTED_FIX"


@dataclass(frozen=True, slots=True)
class FixResult(DataClassJsonMixin):
    """One-shot outcome of a single remediation attempt."""

    success: bool
    finding_id: str
    message: str
    error: Optional[str] = field(default=None)

    @classmethod
    def unsupported(cls, finding_id: str) -> FixResult:
        """Result for a finding with no automatic fix."""
        return cls(
            success=False,
            finding_id=finding_id,
            message="No automatic fix available for this finding",
            error=UNSUPPORTED_FIX,
        )

    @classmethod
    def failed(cls, finding_id: str, error: str) -> FixResult:
        """Result for a remediation the provider rejected."""
        return cls(
            success=False,
            finding_id=finding_id,
            message=f"Failed: {error}",
            error=error,
        )

    @property
    def is_unsupported(self) -> bool:
        """Check if no fix exists for the finding."""
        return self.error == UNSUPPORTED_FIX
