"""Unit tests for access control checks."""

from datetime import datetime, timezone

import pytest

from repowarden.checks.access_control import FINDING_IDS, check_access_control
from repowarden.errors import ForbiddenError

NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)


def collaborator(login, admin=False, push=False):
    return {"login": login, "permissions": {"admin": admin, "push": push or admin, "pull": True}}


def webhook(url, secret="s3cret", insecure_ssl="0"):
    config = {"url": url, "content_type": "json", "insecure_ssl": insecure_ssl}
    if secret:
        config["secret"] = secret
    return {"id": 1, "active": True, "config": config}


class TestCheckAccessControl:
    """Test cases for check_access_control."""

    @pytest.mark.asyncio
    async def test_hardened_repository(self, provider):
        """Test a private repository with one admin and no keys or hooks."""
        assert await check_access_control(provider, "acme", "api", now=NOW) == []

    @pytest.mark.asyncio
    async def test_public_repository(self, provider):
        """Test public visibility is reported for review."""
        provider.repository["visibility"] = "public"

        findings = await check_access_control(provider, "acme", "api", now=NOW)

        assert [f.id for f in findings] == ["ac-public-repo"]
        assert findings[0].severity == "info"

    @pytest.mark.asyncio
    async def test_admin_limit(self, provider):
        """Test more than five admins is reported, five is not."""
        provider.collaborators = [collaborator(f"admin{i}", admin=True) for i in range(5)]
        assert await check_access_control(provider, "acme", "api", now=NOW) == []

        provider.collaborators.append(collaborator("admin5", admin=True))
        findings = await check_access_control(provider, "acme", "api", now=NOW)

        assert [f.id for f in findings] == ["ac-too-many-admins"]
        assert findings[0].current_value == 6
        assert findings[0].description == "Repository has 6 users with admin access."

    @pytest.mark.asyncio
    async def test_writers(self, provider):
        """Test non-admin collaborators with push access are counted."""
        provider.collaborators.extend([
            collaborator("dev1", push=True),
            collaborator("dev2", push=True),
            collaborator("reader"),
        ])

        findings = await check_access_control(provider, "acme", "api", now=NOW)

        assert [f.id for f in findings] == ["ac-outside-collaborators"]
        assert findings[0].current_value == 2
        assert findings[0].control_id == "CC6.2"

    @pytest.mark.asyncio
    async def test_deploy_keys(self, provider):
        """Test write access and age of deploy keys."""
        provider.deploy_keys = [
            {"id": 1, "read_only": False, "created_at": "2025-05-01T00:00:00Z"},
            {"id": 2, "read_only": True, "created_at": "2023-01-15T08:30:00Z"},
            {"id": 3, "read_only": True, "created_at": "2024-06-02T00:00:00Z"},
        ]

        findings = {f.id: f for f in await check_access_control(provider, "acme", "api", now=NOW)}

        assert set(findings) == {"ac-write-deploy-keys", "ac-old-deploy-keys"}
        assert findings["ac-write-deploy-keys"].current_value == 1
        assert findings["ac-old-deploy-keys"].current_value == 1

    @pytest.mark.asyncio
    async def test_webhooks(self, provider):
        """Test webhook transport and signing problems."""
        provider.webhooks = [
            webhook("http://ci.example.com/hook"),
            webhook("https://chat.example.com/hook", secret=None),
            webhook("https://deploy.example.com/hook", insecure_ssl="1"),
            webhook("https://ok.example.com/hook"),
        ]

        findings = await check_access_control(provider, "acme", "api", now=NOW)

        assert [f.id for f in findings] == [
            "ac-insecure-webhooks",
            "ac-webhooks-no-secret",
            "ac-webhook-ssl-disabled",
        ]
        assert all(f.control_id == "CC6.7" for f in findings)
        assert [f.current_value for f in findings] == [1, 1, 1]

    @pytest.mark.asyncio
    async def test_all_predicates_in_order(self, provider):
        """Test findings follow the predicate table order."""
        provider.repository["visibility"] = "public"
        provider.collaborators = [collaborator(f"admin{i}", admin=True) for i in range(6)]
        provider.collaborators.append(collaborator("dev", push=True))
        provider.deploy_keys = [{"id": 1, "read_only": False, "created_at": "2020-01-01T00:00:00Z"}]
        provider.webhooks = [webhook("http://ci.example.com/hook", secret=None, insecure_ssl="1")]

        findings = await check_access_control(provider, "acme", "api", now=NOW)

        assert [f.id for f in findings] == list(FINDING_IDS)

    @pytest.mark.asyncio
    async def test_forbidden_propagates(self, provider):
        """Test a refused collaborator listing fails the check."""
        provider.errors["list_collaborators"] = ForbiddenError("Must have push access", status=403)

        with pytest.raises(ForbiddenError):
            await check_access_control(provider, "acme", "api", now=NOW)
