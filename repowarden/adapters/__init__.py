"""Adapters for repository configuration providers."""

from .base import ConfigurationProvider
from .github_client import GitHubProvider

__all__ = [
    "ConfigurationProvider",
    "GitHubProvider",
]
