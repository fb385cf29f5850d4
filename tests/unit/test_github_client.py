"""Unit tests for the GitHub REST provider."""

import pytest
from aiohttp import test_utils, web

from repowarden.adapters.github_client import GitHubProvider
from repowarden.checks import check_dependency_alerts
from repowarden.config import reset_settings
from repowarden.errors import ForbiddenError, NotFoundError, ProviderError, TransientProviderError


@pytest.fixture
def no_token_env(monkeypatch):
    """Settings without a configured GitHub token."""
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    reset_settings()
    yield
    reset_settings()


async def start_server(routes):
    app = web.Application()
    app.add_routes(routes)
    server = test_utils.TestServer(app)
    await server.start_server()
    return server


def provider_for(server):
    return GitHubProvider(token="test-token", api_url=str(server.make_url("/")))


class TestErrorMapping:
    """Test cases for status code mapping."""

    def test_status_codes(self):
        """Test HTTP statuses map onto provider errors."""
        assert type(GitHubProvider._error_for_status(404, "Not Found")) is NotFoundError
        assert type(GitHubProvider._error_for_status(403, "Forbidden")) is ForbiddenError
        assert type(GitHubProvider._error_for_status(502, "Bad Gateway")) is TransientProviderError
        assert type(GitHubProvider._error_for_status(422, "Validation Failed")) is ProviderError

    def test_error_keeps_status(self):
        """Test errors carry the HTTP status and message."""
        error = GitHubProvider._error_for_status(404, "Branch not protected")

        assert error.status == 404
        assert error.message == "Branch not protected"
        assert str(error) == "Branch not protected"


class TestGitHubProvider:
    """Test cases for GitHubProvider against a local server."""

    def test_missing_token(self, no_token_env):
        """Test the provider refuses to start without a token."""
        with pytest.raises(ValueError, match="GitHub token not configured"):
            GitHubProvider()

    @pytest.mark.asyncio
    async def test_get_repository(self):
        """Test a plain read sends auth headers and decodes JSON."""
        seen = {}

        async def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            seen["accept"] = request.headers.get("Accept")
            return web.json_response({"full_name": "acme/api", "default_branch": "main"})

        server = await start_server([web.get("/repos/acme/api", handler)])
        try:
            data = await provider_for(server).get_repository("acme", "api")
        finally:
            await server.close()

        assert data["full_name"] == "acme/api"
        assert seen["auth"] == "Bearer test-token"
        assert seen["accept"] == "application/vnd.github+json"

    @pytest.mark.asyncio
    async def test_not_found(self):
        """Test a 404 raises NotFoundError with the API message."""
        async def handler(request):
            return web.json_response({"message": "Branch not protected"}, status=404)

        server = await start_server([web.get("/repos/acme/api/branches/main/protection", handler)])
        try:
            with pytest.raises(NotFoundError, match="Branch not protected"):
                await provider_for(server).get_branch_protection("acme", "api", "main")
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_forbidden(self):
        """Test a 403 raises ForbiddenError."""
        async def handler(request):
            return web.json_response({"message": "Upgrade to GitHub Pro"}, status=403)

        server = await start_server([web.get("/repos/acme/api/branches/main/protection", handler)])
        try:
            with pytest.raises(ForbiddenError):
                await provider_for(server).get_branch_protection("acme", "api", "main")
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_no_content(self):
        """Test a 204 response means the feature is enabled."""
        async def handler(request):
            return web.Response(status=204)

        server = await start_server([web.get("/repos/acme/api/vulnerability-alerts", handler)])
        try:
            assert await provider_for(server).check_vulnerability_alerts("acme", "api") is None
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_pagination(self):
        """Test listings follow Link headers across pages."""
        async def handler(request):
            page = int(request.query.get("page", "1"))
            headers = {}
            if page == 1:
                next_url = request.url.with_query(page="2", per_page=request.query["per_page"])
                headers["Link"] = f'<{next_url}>; rel="next"'
            return web.json_response([{"login": f"user{page}"}], headers=headers)

        server = await start_server([web.get("/repos/acme/api/collaborators", handler)])
        try:
            collaborators = await provider_for(server).list_collaborators("acme", "api")
        finally:
            await server.close()

        assert [c["login"] for c in collaborators] == ["user1", "user2"]

    @pytest.mark.asyncio
    async def test_wrapped_listing(self):
        """Test listings wrapped in an object are unwrapped."""
        async def handler(request):
            return web.json_response({"total_count": 1, "workflows": [{"name": "CodeQL"}]})

        server = await start_server([web.get("/repos/acme/api/actions/workflows", handler)])
        try:
            workflows = await provider_for(server).list_workflows("acme", "api")
        finally:
            await server.close()

        assert workflows == [{"name": "CodeQL"}]

    @pytest.mark.asyncio
    async def test_write_sends_payload(self):
        """Test writes send their settings as a JSON body."""
        received = {}

        async def handler(request):
            received.update(await request.json())
            return web.json_response({"allow_forking": False})

        server = await start_server([web.patch("/repos/acme/api", handler)])
        try:
            await provider_for(server).update_repository("acme", "api", allow_forking=False)
        finally:
            await server.close()

        assert received == {"allow_forking": False}

    @pytest.mark.asyncio
    async def test_server_errors_are_retried(self):
        """Test a transient 5xx is retried until it succeeds."""
        attempts = []

        async def handler(request):
            attempts.append(1)
            if len(attempts) < 2:
                return web.json_response({"message": "Server Error"}, status=502)
            return web.json_response({"enabled": True})

        server = await start_server([web.get("/repos/acme/api/private-vulnerability-reporting", handler)])
        try:
            data = await provider_for(server).get_private_vulnerability_reporting("acme", "api")
        finally:
            await server.close()

        assert data == {"enabled": True}
        assert len(attempts) == 2

    @pytest.mark.asyncio
    async def test_dependabot_alerts_disabled(self):
        """Test disabled Dependabot alerts read as not configured."""
        async def handler(request):
            return web.json_response(
                {"message": "Dependabot alerts are disabled for this repository."}, status=403
            )

        server = await start_server([web.get("/repos/acme/api/dependabot/alerts", handler)])
        try:
            provider = provider_for(server)
            with pytest.raises(NotFoundError, match="disabled"):
                await provider.list_dependabot_alerts("acme", "api")
            assert await check_dependency_alerts(provider, "acme", "api") == []
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_dependabot_alerts_forbidden(self):
        """Test other refusals of the Dependabot listing stay forbidden."""
        async def handler(request):
            return web.json_response({"message": "Resource not accessible by integration"}, status=403)

        server = await start_server([web.get("/repos/acme/api/dependabot/alerts", handler)])
        try:
            with pytest.raises(ForbiddenError):
                await provider_for(server).list_dependabot_alerts("acme", "api")
        finally:
            await server.close()
