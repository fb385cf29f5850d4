"""
RepoWarden: security configuration audits for GitHub repositories

RepoWarden inspects how repositories are configured and:
- Reports branch protection, security feature and access control gaps
- Scores each repository and maps findings onto SOC 2 controls
- Applies automatic fixes for a closed set of findings

Usage:
    from repowarden import GitHubProvider, SecurityScanner

    # Or use CLI:
    $ repowarden scan octo-org/service
"""

__version__ = "0.1.0"

# Core functionality
from .config import get_settings
from .logging import get_logger

# Providers and orchestration for programmatic use
from .adapters import ConfigurationProvider, GitHubProvider
from .orchestrator import RemediationDispatcher, SecurityScanner, calculate_score, map_compliance

__all__ = [
    "ConfigurationProvider",
    "GitHubProvider",
    "RemediationDispatcher",
    "SecurityScanner",
    "calculate_score",
    "get_logger",
    "get_settings",
    "map_compliance",
    "__version__",
]
