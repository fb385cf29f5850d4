"""Repository configuration provider interface."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..errors import NotFoundError


class ConfigurationProvider(ABC):
    """Read and write access to one platform's repository configuration.

    Read methods raise ``NotFoundError`` when a resource does not exist or a
    feature is not configured, ``ForbiddenError`` when the platform refuses
    the request, and ``ProviderError`` for any other failure. Check modules
    rely on that distinction: not-found is a result, everything else is a
    failure.
    """

    # Repository metadata

    @abstractmethod
    async def get_repository(self, owner: str, repo: str) -> Dict[str, Any]:
        """Read repository metadata."""

    @abstractmethod
    async def list_repositories(self, org: Optional[str] = None) -> List[Dict[str, Any]]:
        """List repositories of an organization, or of the authenticated user."""

    @abstractmethod
    async def update_repository(self, owner: str, repo: str, **settings: Any) -> Dict[str, Any]:
        """Set repository-level toggles (forking, merge strategies, branch cleanup)."""

    # Branch protection

    @abstractmethod
    async def get_branch_protection(self, owner: str, repo: str, branch: str) -> Dict[str, Any]:
        """Read the protection policy of a branch."""

    @abstractmethod
    async def update_branch_protection(
        self, owner: str, repo: str, branch: str, policy: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Replace the protection policy of a branch."""

    @abstractmethod
    async def update_pull_request_review_protection(
        self, owner: str, repo: str, branch: str, reviews: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Update the pull request review rules of a protected branch."""

    @abstractmethod
    async def set_admin_enforcement(self, owner: str, repo: str, branch: str) -> None:
        """Apply branch protection to administrators."""

    # Security features

    @abstractmethod
    async def check_vulnerability_alerts(self, owner: str, repo: str) -> None:
        """Return normally when vulnerability alerts are on, raise NotFoundError otherwise."""

    @abstractmethod
    async def enable_vulnerability_alerts(self, owner: str, repo: str) -> None:
        """Turn vulnerability alerts on."""

    @abstractmethod
    async def list_secret_scanning_alerts(
        self, owner: str, repo: str, state: str = "open"
    ) -> List[Dict[str, Any]]:
        """List secret scanning alerts; NotFoundError when secret scanning is off."""

    @abstractmethod
    async def list_dependabot_alerts(
        self, owner: str, repo: str, state: str = "open"
    ) -> List[Dict[str, Any]]:
        """List Dependabot alerts. Raises NotFoundError when alerts are disabled."""

    @abstractmethod
    async def get_private_vulnerability_reporting(self, owner: str, repo: str) -> Dict[str, Any]:
        """Read whether private vulnerability reporting is enabled."""

    # Files

    @abstractmethod
    async def get_content(self, owner: str, repo: str, path: str) -> Dict[str, Any]:
        """Read file metadata at a path."""

    @abstractmethod
    async def get_readme(self, owner: str, repo: str) -> Dict[str, Any]:
        """Read the preferred README."""

    @abstractmethod
    async def get_license(self, owner: str, repo: str) -> Dict[str, Any]:
        """Read the detected license."""

    async def file_exists(self, owner: str, repo: str, path: str) -> bool:
        """Check whether a file exists at a path."""
        try:
            await self.get_content(owner, repo, path)
        except NotFoundError:
            return False
        return True

    # Actions

    @abstractmethod
    async def list_workflows(self, owner: str, repo: str) -> List[Dict[str, Any]]:
        """List Actions workflows."""

    @abstractmethod
    async def get_actions_permissions(self, owner: str, repo: str) -> Dict[str, Any]:
        """Read whether Actions are enabled and which actions are allowed."""

    @abstractmethod
    async def get_workflow_permissions(self, owner: str, repo: str) -> Dict[str, Any]:
        """Read the default workflow token permissions."""

    @abstractmethod
    async def set_workflow_permissions(self, owner: str, repo: str, **permissions: Any) -> None:
        """Set the default workflow token permissions."""

    @abstractmethod
    async def list_environments(self, owner: str, repo: str) -> List[Dict[str, Any]]:
        """List deployment environments."""

    # Access

    @abstractmethod
    async def list_collaborators(self, owner: str, repo: str) -> List[Dict[str, Any]]:
        """List collaborators with their permissions."""

    @abstractmethod
    async def list_deploy_keys(self, owner: str, repo: str) -> List[Dict[str, Any]]:
        """List deploy keys."""

    @abstractmethod
    async def list_webhooks(self, owner: str, repo: str) -> List[Dict[str, Any]]:
        """List repository webhooks."""
