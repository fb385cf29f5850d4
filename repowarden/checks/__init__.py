"""Repository configuration check modules."""

from . import access_control, branch_protection, repository_settings, security_features
from .access_control import check_access_control
from .branch_protection import check_branch_protection
from .repository_settings import check_repository_settings
from .security_features import check_dependency_alerts, check_security_features

# Every finding id the check battery can emit
ALL_FINDING_IDS = (
    branch_protection.FINDING_IDS
    + security_features.FINDING_IDS
    + security_features.DEPENDENCY_FINDING_IDS
    + access_control.FINDING_IDS
    + repository_settings.FINDING_IDS
)

__all__ = [
    "ALL_FINDING_IDS",
    "check_access_control",
    "check_branch_protection",
    "check_dependency_alerts",
    "check_repository_settings",
    "check_security_features",
]
