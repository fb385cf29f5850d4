"""Finding data models for RepoWarden."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Literal, Optional, get_args

from dataclasses_json import DataClassJsonMixin

# Type aliases for better type safety
Severity = Literal['critical', 'high', 'medium', 'low', 'info']
CheckCategory = Literal[
    'branch-protection',
    'security-features',
    'access-control',
    'repository-settings',
    'secrets',
    'dependencies',
]

# Most to least severe
SEVERITY_ORDER = ('critical', 'high', 'medium', 'low', 'info')
CHECK_CATEGORIES = get_args(CheckCategory)


def severity_rank(severity: str) -> int:
    """Position of a severity in SEVERITY_ORDER (0 is most severe)."""
    try:
        return SEVERITY_ORDER.index(severity)
    except ValueError:
        raise ValueError(f"Unknown severity: {severity!r}") from None


@dataclass(frozen=True, slots=True)
class Finding(DataClassJsonMixin):
    """A single configuration issue detected by a check module."""

    id: str
    category: CheckCategory
    severity: Severity
    title: str
    description: str
    recommendation: str
    documentation_url: Optional[str] = field(default=None)
    control_id: Optional[str] = field(default=None)
    current_value: Optional[Any] = field(default=None)
    expected_value: Optional[Any] = field(default=None)

    def __post_init__(self) -> None:
        """Validate finding data after initialization."""
        if not self.id:
            raise ValueError("Finding ID cannot be empty")
        if not self.title:
            raise ValueError("Title cannot be empty")
        if self.severity not in SEVERITY_ORDER:
            raise ValueError(f"Unknown severity: {self.severity!r}")
        if self.category not in CHECK_CATEGORIES:
            raise ValueError(f"Unknown category: {self.category!r}")

    def with_repository_prefix(self, full_name: str) -> Finding:
        """Copy of this finding with the description tagged by repository."""
        return replace(self, description=f"[{full_name}] {self.description}")

    @property
    def rank(self) -> int:
        """Severity rank, 0 being critical."""
        return severity_rank(self.severity)

    @property
    def is_critical(self) -> bool:
        """Check if finding is critical severity."""
        return self.severity == 'critical'

    @property
    def is_high_or_critical(self) -> bool:
        """Check if finding is high or critical severity."""
        return self.severity in ('high', 'critical')
