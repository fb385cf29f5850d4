"""GitHub REST API configuration provider."""

import asyncio
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import aiohttp
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..config import get_settings
from ..errors import ForbiddenError, NotFoundError, ProviderError, TransientProviderError
from ..logging import get_logger, log_provider_call
from .base import ConfigurationProvider

logger = get_logger(__name__)

API_VERSION = "2022-11-28"
PER_PAGE = 100


class GitHubProvider(ConfigurationProvider):
    """Repository configuration provider backed by the GitHub REST API."""

    def __init__(
        self,
        token: Optional[str] = None,
        *,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize the GitHub provider."""
        settings = get_settings()
        self._token = token or settings.github_token
        self._api_url = (api_url or settings.github_api_url).rstrip('/')
        self._timeout = timeout or settings.http_timeout

        if not self._token:
            raise ValueError("GitHub token not configured")

    def _headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self._token}",
            "X-GitHub-Api-Version": API_VERSION,
            "User-Agent": "repowarden",
        }

    @staticmethod
    def _error_for_status(status: int, message: str) -> ProviderError:
        if status == 404:
            return NotFoundError(message, status=status)
        if status == 403:
            return ForbiddenError(message, status=status)
        if status >= 500:
            return TransientProviderError(message, status=status)
        return ProviderError(message, status=status)

    @staticmethod
    async def _error_message(response: aiohttp.ClientResponse) -> str:
        try:
            body = await response.json(content_type=None)
        except (aiohttp.ContentTypeError, ValueError):
            return await response.text() or response.reason or ""
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return response.reason or ""

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(TransientProviderError),
        reraise=True
    )
    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Any, Optional[str]]:
        """Make one API call, returning the decoded body and the next page URL."""
        url = path if path.startswith("http") else f"{self._api_url}{path}"

        log_provider_call(logger, method, path, payload=payload)

        try:
            async with aiohttp.ClientSession(
                headers=self._headers(),
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            ) as session:
                async with session.request(method, url, params=params, json=payload) as response:
                    if response.status >= 400:
                        message = await self._error_message(response)
                        raise self._error_for_status(response.status, message)

                    data = None
                    if response.status != 204:
                        data = await response.json(content_type=None)

                    next_link = response.links.get("next")
                    next_url = str(next_link["url"]) if next_link else None
                    return data, next_url

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(
                "GitHub API call failed",
                http_method=method,
                path=path,
                error=str(e)
            )
            raise TransientProviderError(str(e) or type(e).__name__) from e

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        data, _ = await self._request("GET", path, params=params)
        return data

    async def _get_all(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        *,
        key: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Follow Link headers and collect every page of a listing."""
        items: List[Dict[str, Any]] = []
        params = {"per_page": PER_PAGE, **(params or {})}
        url: Optional[str] = path

        while url:
            data, url = await self._request("GET", url, params=params)
            # The next URL already carries the query string
            params = None
            page = data.get(key, []) if key else data
            items.extend(page or [])

        return items

    @staticmethod
    def _repo_path(owner: str, repo: str) -> str:
        return f"/repos/{quote(owner, safe='')}/{quote(repo, safe='')}"

    def _branch_path(self, owner: str, repo: str, branch: str) -> str:
        return f"{self._repo_path(owner, repo)}/branches/{quote(branch, safe='')}/protection"

    # Repository metadata

    async def get_repository(self, owner: str, repo: str) -> Dict[str, Any]:
        return await self._get(self._repo_path(owner, repo))

    async def list_repositories(self, org: Optional[str] = None) -> List[Dict[str, Any]]:
        if org:
            return await self._get_all(f"/orgs/{quote(org, safe='')}/repos")
        return await self._get_all("/user/repos")

    async def update_repository(self, owner: str, repo: str, **settings: Any) -> Dict[str, Any]:
        data, _ = await self._request("PATCH", self._repo_path(owner, repo), payload=settings)
        return data

    # Branch protection

    async def get_branch_protection(self, owner: str, repo: str, branch: str) -> Dict[str, Any]:
        return await self._get(self._branch_path(owner, repo, branch))

    async def update_branch_protection(
        self, owner: str, repo: str, branch: str, policy: Dict[str, Any]
    ) -> Dict[str, Any]:
        data, _ = await self._request("PUT", self._branch_path(owner, repo, branch), payload=policy)
        return data

    async def update_pull_request_review_protection(
        self, owner: str, repo: str, branch: str, reviews: Dict[str, Any]
    ) -> Dict[str, Any]:
        path = f"{self._branch_path(owner, repo, branch)}/required_pull_request_reviews"
        data, _ = await self._request("PATCH", path, payload=reviews)
        return data

    async def set_admin_enforcement(self, owner: str, repo: str, branch: str) -> None:
        await self._request("POST", f"{self._branch_path(owner, repo, branch)}/enforce_admins")

    # Security features

    async def check_vulnerability_alerts(self, owner: str, repo: str) -> None:
        await self._get(f"{self._repo_path(owner, repo)}/vulnerability-alerts")

    async def enable_vulnerability_alerts(self, owner: str, repo: str) -> None:
        await self._request("PUT", f"{self._repo_path(owner, repo)}/vulnerability-alerts")

    async def list_secret_scanning_alerts(
        self, owner: str, repo: str, state: str = "open"
    ) -> List[Dict[str, Any]]:
        # First page only; callers use this to check whether scanning is on
        return await self._get(
            f"{self._repo_path(owner, repo)}/secret-scanning/alerts",
            params={"state": state, "per_page": PER_PAGE},
        )

    async def list_dependabot_alerts(
        self, owner: str, repo: str, state: str = "open"
    ) -> List[Dict[str, Any]]:
        try:
            return await self._get_all(
                f"{self._repo_path(owner, repo)}/dependabot/alerts",
                params={"state": state},
            )
        except ForbiddenError as e:
            # GitHub answers 403 when alerts are switched off for the repository
            if "disabled" not in e.message.lower():
                raise
            raise NotFoundError(e.message, status=e.status) from e

    async def get_private_vulnerability_reporting(self, owner: str, repo: str) -> Dict[str, Any]:
        return await self._get(f"{self._repo_path(owner, repo)}/private-vulnerability-reporting")

    # Files

    async def get_content(self, owner: str, repo: str, path: str) -> Dict[str, Any]:
        return await self._get(f"{self._repo_path(owner, repo)}/contents/{quote(path)}")

    async def get_readme(self, owner: str, repo: str) -> Dict[str, Any]:
        return await self._get(f"{self._repo_path(owner, repo)}/readme")

    async def get_license(self, owner: str, repo: str) -> Dict[str, Any]:
        return await self._get(f"{self._repo_path(owner, repo)}/license")

    # Actions

    async def list_workflows(self, owner: str, repo: str) -> List[Dict[str, Any]]:
        return await self._get_all(
            f"{self._repo_path(owner, repo)}/actions/workflows", key="workflows"
        )

    async def get_actions_permissions(self, owner: str, repo: str) -> Dict[str, Any]:
        return await self._get(f"{self._repo_path(owner, repo)}/actions/permissions")

    async def get_workflow_permissions(self, owner: str, repo: str) -> Dict[str, Any]:
        return await self._get(f"{self._repo_path(owner, repo)}/actions/permissions/workflow")

    async def set_workflow_permissions(self, owner: str, repo: str, **permissions: Any) -> None:
        await self._request(
            "PUT",
            f"{self._repo_path(owner, repo)}/actions/permissions/workflow",
            payload=permissions,
        )

    async def list_environments(self, owner: str, repo: str) -> List[Dict[str, Any]]:
        return await self._get_all(
            f"{self._repo_path(owner, repo)}/environments", key="environments"
        )

    # Access

    async def list_collaborators(self, owner: str, repo: str) -> List[Dict[str, Any]]:
        return await self._get_all(f"{self._repo_path(owner, repo)}/collaborators")

    async def list_deploy_keys(self, owner: str, repo: str) -> List[Dict[str, Any]]:
        return await self._get_all(f"{self._repo_path(owner, repo)}/keys")

    async def list_webhooks(self, owner: str, repo: str) -> List[Dict[str, Any]]:
        return await self._get_all(f"{self._repo_path(owner, repo)}/hooks")
