"""Shared fixtures for RepoWarden tests."""

import copy
from typing import Any, Dict, List, Optional

import pytest

from repowarden.adapters.base import ConfigurationProvider
from repowarden.config import ScanOptions
from repowarden.errors import NotFoundError


def hardened_protection() -> Dict[str, Any]:
    """Branch protection that passes every branch protection predicate."""
    return {
        "required_status_checks": {"strict": True, "contexts": ["ci/build"], "checks": [{"context": "ci/build"}]},
        "enforce_admins": {"enabled": True},
        "required_pull_request_reviews": {
            "dismiss_stale_reviews": True,
            "require_code_owner_reviews": True,
            "required_approving_review_count": 2,
            "require_last_push_approval": True,
        },
        "allow_force_pushes": {"enabled": False},
        "allow_deletions": {"enabled": False},
        "required_conversation_resolution": {"enabled": True},
        "required_signatures": {"enabled": True},
        "required_linear_history": {"enabled": True},
    }


def hardened_repository(owner: str = "acme", name: str = "api") -> Dict[str, Any]:
    """Repository metadata that passes every metadata predicate."""
    return {
        "name": name,
        "full_name": f"{owner}/{name}",
        "owner": {"login": owner},
        "private": True,
        "visibility": "private",
        "default_branch": "main",
        "html_url": f"https://github.com/{owner}/{name}",
        "archived": False,
        "fork": False,
        "has_wiki": False,
        "has_issues": True,
        "allow_forking": False,
        "allow_merge_commit": False,
        "delete_branch_on_merge": True,
        "security_and_analysis": {
            "secret_scanning": {"status": "enabled"},
            "secret_scanning_push_protection": {"status": "enabled"},
            "dependabot_security_updates": {"status": "enabled"},
        },
    }


class FakeProvider(ConfigurationProvider):
    """In-memory provider for one repository that records every call.

    Defaults describe a fully hardened repository. Tests weaken it by editing
    the public attributes, and make any method fail by putting an exception
    into ``errors`` under the method name, or under
    ``"method:owner/repo"`` to fail for one repository only.
    """

    def __init__(self, owner: str = "acme", name: str = "api"):
        self.repository = hardened_repository(owner, name)
        self.repositories: List[Dict[str, Any]] = []
        # None means no protection rule exists
        self.protection: Optional[Dict[str, Any]] = hardened_protection()
        self.vulnerability_alerts = True
        self.secret_scanning = True
        self.private_vulnerability_reporting = True
        self.files = {
            "SECURITY.md",
            ".github/dependabot.yml",
            ".github/CODEOWNERS",
            ".gitignore",
        }
        self.has_readme = True
        self.has_license = True
        self.workflows = [
            {"name": "CodeQL", "path": ".github/workflows/codeql.yml"},
            {"name": "Dependency Review", "path": ".github/workflows/dependency-review.yml"},
        ]
        self.actions_permissions: Optional[Dict[str, Any]] = {"enabled": True, "allowed_actions": "selected"}
        self.workflow_permissions: Optional[Dict[str, Any]] = {
            "default_workflow_permissions": "read",
            "can_approve_pull_request_reviews": False,
        }
        self.environments: List[Dict[str, Any]] = [
            {"name": "production", "protection_rules": [{"type": "required_reviewers"}]},
        ]
        self.collaborators: List[Dict[str, Any]] = [
            {"login": owner, "permissions": {"admin": True, "push": True, "pull": True}},
        ]
        self.deploy_keys: List[Dict[str, Any]] = []
        self.webhooks: List[Dict[str, Any]] = []
        self.dependabot_alerts: List[Dict[str, Any]] = []

        self.errors: Dict[str, Exception] = {}
        self.calls: List[tuple] = []

    def _record(self, method: str, *args: Any) -> None:
        self.calls.append((method,) + args)
        scoped = f"{method}:{args[0]}/{args[1]}" if len(args) >= 2 else None
        for key in (method, scoped):
            if key in self.errors:
                raise self.errors[key]

    def state(self) -> Dict[str, Any]:
        """Snapshot of everything the write methods can change."""
        return copy.deepcopy({
            "repository": self.repository,
            "protection": self.protection,
            "vulnerability_alerts": self.vulnerability_alerts,
            "workflow_permissions": self.workflow_permissions,
        })

    # Repository metadata

    async def get_repository(self, owner, repo):
        self._record("get_repository", owner, repo)
        repository = copy.deepcopy(self.repository)
        repository.update(name=repo, full_name=f"{owner}/{repo}", owner={"login": owner})
        return repository

    async def list_repositories(self, org=None):
        self._record("list_repositories", org)
        return copy.deepcopy(self.repositories)

    async def update_repository(self, owner, repo, **settings):
        self._record("update_repository", owner, repo, settings)
        self.repository.update(settings)
        return copy.deepcopy(self.repository)

    # Branch protection

    async def get_branch_protection(self, owner, repo, branch):
        self._record("get_branch_protection", owner, repo, branch)
        if self.protection is None:
            raise NotFoundError("Branch not protected", status=404)
        return copy.deepcopy(self.protection)

    async def update_branch_protection(self, owner, repo, branch, policy):
        self._record("update_branch_protection", owner, repo, branch, policy)
        reviews = policy.get("required_pull_request_reviews")
        # A full replacement: anything not in the policy is reset
        self.protection = {
            "required_status_checks": policy.get("required_status_checks"),
            "enforce_admins": {"enabled": bool(policy.get("enforce_admins"))},
            "required_pull_request_reviews": dict(reviews) if reviews else None,
            "allow_force_pushes": {"enabled": False},
            "allow_deletions": {"enabled": False},
        }
        return copy.deepcopy(self.protection)

    async def update_pull_request_review_protection(self, owner, repo, branch, reviews):
        self._record("update_pull_request_review_protection", owner, repo, branch, reviews)
        if self.protection is None:
            raise NotFoundError("Branch not protected", status=404)
        current = self.protection.get("required_pull_request_reviews") or {}
        current.update(reviews)
        self.protection["required_pull_request_reviews"] = current
        return copy.deepcopy(current)

    async def set_admin_enforcement(self, owner, repo, branch):
        self._record("set_admin_enforcement", owner, repo, branch)
        if self.protection is None:
            raise NotFoundError("Branch not protected", status=404)
        self.protection["enforce_admins"] = {"enabled": True}

    # Security features

    async def check_vulnerability_alerts(self, owner, repo):
        self._record("check_vulnerability_alerts", owner, repo)
        if not self.vulnerability_alerts:
            raise NotFoundError("Vulnerability alerts are disabled.", status=404)

    async def enable_vulnerability_alerts(self, owner, repo):
        self._record("enable_vulnerability_alerts", owner, repo)
        self.vulnerability_alerts = True

    async def list_secret_scanning_alerts(self, owner, repo, state="open"):
        self._record("list_secret_scanning_alerts", owner, repo, state)
        if not self.secret_scanning:
            raise NotFoundError("Secret scanning is disabled on this repository.", status=404)
        return []

    async def list_dependabot_alerts(self, owner, repo, state="open"):
        self._record("list_dependabot_alerts", owner, repo, state)
        return copy.deepcopy(self.dependabot_alerts)

    async def get_private_vulnerability_reporting(self, owner, repo):
        self._record("get_private_vulnerability_reporting", owner, repo)
        return {"enabled": self.private_vulnerability_reporting}

    # Files

    async def get_content(self, owner, repo, path):
        self._record("get_content", owner, repo, path)
        if path not in self.files:
            raise NotFoundError("Not Found", status=404)
        return {"path": path, "type": "file"}

    async def get_readme(self, owner, repo):
        self._record("get_readme", owner, repo)
        if not self.has_readme:
            raise NotFoundError("Not Found", status=404)
        return {"path": "README.md"}

    async def get_license(self, owner, repo):
        self._record("get_license", owner, repo)
        if not self.has_license:
            raise NotFoundError("Not Found", status=404)
        return {"license": {"spdx_id": "MIT"}}

    # Actions

    async def list_workflows(self, owner, repo):
        self._record("list_workflows", owner, repo)
        return copy.deepcopy(self.workflows)

    async def get_actions_permissions(self, owner, repo):
        self._record("get_actions_permissions", owner, repo)
        if self.actions_permissions is None:
            raise NotFoundError("Not Found", status=404)
        return copy.deepcopy(self.actions_permissions)

    async def get_workflow_permissions(self, owner, repo):
        self._record("get_workflow_permissions", owner, repo)
        if self.workflow_permissions is None:
            raise NotFoundError("Not Found", status=404)
        return copy.deepcopy(self.workflow_permissions)

    async def set_workflow_permissions(self, owner, repo, **permissions):
        self._record("set_workflow_permissions", owner, repo, permissions)
        if self.workflow_permissions is None:
            self.workflow_permissions = {}
        self.workflow_permissions.update(permissions)

    async def list_environments(self, owner, repo):
        self._record("list_environments", owner, repo)
        return copy.deepcopy(self.environments)

    # Access

    async def list_collaborators(self, owner, repo):
        self._record("list_collaborators", owner, repo)
        return copy.deepcopy(self.collaborators)

    async def list_deploy_keys(self, owner, repo):
        self._record("list_deploy_keys", owner, repo)
        return copy.deepcopy(self.deploy_keys)

    async def list_webhooks(self, owner, repo):
        self._record("list_webhooks", owner, repo)
        return copy.deepcopy(self.webhooks)


@pytest.fixture
def provider():
    """A hardened single-repository fake provider."""
    return FakeProvider()


@pytest.fixture
def options():
    """Scan options independent of the environment."""
    return ScanOptions(severity_threshold="low")
