"""Unit tests for repository settings checks."""

import pytest

from repowarden.checks.repository_settings import FINDING_IDS, PREDICATES, check_repository_settings
from repowarden.errors import NotFoundError, ProviderError


class TestCheckRepositorySettings:
    """Test cases for check_repository_settings."""

    def test_fourteen_predicates(self):
        """Test the predicate table size matches the published ids."""
        assert len(PREDICATES) == 14
        assert len(FINDING_IDS) == 14

    @pytest.mark.asyncio
    async def test_hardened_repository(self, provider):
        """Test a well configured repository has no findings."""
        assert await check_repository_settings(provider, "acme", "api") == []

    @pytest.mark.asyncio
    async def test_everything_wrong(self, provider):
        """Test every predicate fires, in table order."""
        provider.repository.update(
            visibility="internal",
            has_wiki=True,
            has_issues=False,
            default_branch="master",
            delete_branch_on_merge=False,
            allow_forking=True,
            allow_merge_commit=True,
        )
        provider.has_readme = False
        provider.has_license = False
        provider.files = set()
        provider.actions_permissions = {"enabled": True, "allowed_actions": "all"}
        provider.workflow_permissions = {
            "default_workflow_permissions": "write",
            "can_approve_pull_request_reviews": True,
        }
        provider.environments = [{"name": "production", "protection_rules": []}]

        findings = await check_repository_settings(provider, "acme", "api")

        # The wiki is only reported for public repositories
        assert [f.id for f in findings] == list(FINDING_IDS[1:])

    @pytest.mark.asyncio
    async def test_public_wiki(self, provider):
        """Test a wiki on a public repository is reported."""
        provider.repository.update(visibility="public", has_wiki=True, allow_forking=True)

        findings = await check_repository_settings(provider, "acme", "api")

        # Forking is expected on public repositories
        assert [f.id for f in findings] == ["rs-wiki-enabled"]

    @pytest.mark.asyncio
    async def test_codeowners_locations(self, provider):
        """Test every supported CODEOWNERS location is accepted."""
        for path in (".github/CODEOWNERS", "CODEOWNERS", "docs/CODEOWNERS"):
            provider.files = {".gitignore", path}
            findings = await check_repository_settings(provider, "acme", "api")
            assert findings == [], path

    @pytest.mark.asyncio
    async def test_actions_unavailable(self, provider):
        """Test missing Actions settings produce no Actions findings."""
        provider.actions_permissions = None
        provider.workflow_permissions = None

        assert await check_repository_settings(provider, "acme", "api") == []

    @pytest.mark.asyncio
    async def test_actions_disabled(self, provider):
        """Test an allow-all policy is ignored while Actions are off."""
        provider.actions_permissions = {"enabled": False, "allowed_actions": "all"}

        assert await check_repository_settings(provider, "acme", "api") == []

    @pytest.mark.asyncio
    async def test_unprotected_environments(self, provider):
        """Test environments without protection rules are counted."""
        provider.environments = [
            {"name": "production", "protection_rules": [{"type": "required_reviewers"}]},
            {"name": "staging", "protection_rules": []},
            {"name": "preview"},
        ]

        findings = await check_repository_settings(provider, "acme", "api")

        assert [f.id for f in findings] == ["rs-unprotected-environments"]
        assert findings[0].current_value == 2
        assert "staging, preview" in findings[0].description

    @pytest.mark.asyncio
    async def test_environments_not_found(self, provider):
        """Test a repository without environment support."""
        provider.errors["list_environments"] = NotFoundError("Not Found", status=404)

        assert await check_repository_settings(provider, "acme", "api") == []

    @pytest.mark.asyncio
    async def test_provider_error_propagates(self, provider):
        """Test unexpected failures are not mistaken for missing files."""
        provider.errors["get_readme"] = ProviderError("Server Error", status=500)

        with pytest.raises(ProviderError, match="Server Error"):
            await check_repository_settings(provider, "acme", "api")
