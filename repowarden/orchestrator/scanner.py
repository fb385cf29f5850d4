"""Scan orchestrator for RepoWarden."""

import asyncio
import time
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..adapters.base import ConfigurationProvider
from ..checks import (
    check_access_control,
    check_branch_protection,
    check_dependency_alerts,
    check_repository_settings,
    check_security_features,
)
from ..config import ScanOptions
from ..logging import get_logger, log_scan_event
from ..models.findings import Finding
from ..models.results import RepoScanResult, RepositoryIdentity, ScanSummary
from .scoring import calculate_score, filter_by_severity

logger = get_logger(__name__)


def split_full_name(full_name: str) -> Tuple[str, str]:
    """Split ``owner/repo`` into its two parts."""
    owner, sep, repo = full_name.strip().partition('/')
    if not sep or not owner or not repo or '/' in repo:
        raise ValueError(f"Invalid repository name {full_name!r}, expected owner/repo")
    return owner, repo


class SecurityScanner:
    """Runs the check battery against one or many repositories."""

    def __init__(self, provider: ConfigurationProvider, options: Optional[ScanOptions] = None):
        """Initialize the scanner."""
        self.provider = provider
        self.options = options or ScanOptions.from_settings()

    async def list_available_repos(
        self,
        org: Optional[str] = None,
        *,
        include_archived: Optional[bool] = None,
        include_forks: Optional[bool] = None,
    ) -> List[RepositoryIdentity]:
        """List repositories the provider can see, honouring archive and fork filters."""
        org = org or self.options.org
        if include_archived is None:
            include_archived = self.options.include_archived
        if include_forks is None:
            include_forks = self.options.include_forks

        repositories = await self.provider.list_repositories(org=org)

        identities = []
        for data in repositories:
            if not include_archived and data.get('archived'):
                continue
            if not include_forks and data.get('fork'):
                continue
            identities.append(RepositoryIdentity.from_api(data))

        logger.info(
            "Listed repositories",
            org=org,
            available=len(repositories),
            selected=len(identities)
        )
        return identities

    async def scan_repository(self, owner: str, repo: str) -> RepoScanResult:
        """Scan one repository and build its result."""
        full_name = f"{owner}/{repo}"
        start_time = time.time()

        log_scan_event(logger, full_name, "started")

        try:
            repository = await self.provider.get_repository(owner, repo)
            identity = RepositoryIdentity.from_api(repository)
            findings = await self._run_checks(owner, repo, identity.default_branch, repository)
        except Exception as e:
            log_scan_event(
                logger,
                full_name,
                "failed",
                error=str(e),
                error_type=type(e).__name__
            )
            raise

        retained = filter_by_severity(findings, self.options.severity_threshold)
        result = RepoScanResult(
            repository=identity,
            findings=retained,
            score=calculate_score(retained),
            summary=ScanSummary.from_findings(retained),
        )

        log_scan_event(
            logger,
            full_name,
            "completed",
            findings=len(retained),
            filtered_out=len(findings) - len(retained),
            score=result.score,
            duration_ms=int((time.time() - start_time) * 1000)
        )
        return result

    async def _run_checks(
        self, owner: str, repo: str, branch: str, repository: Dict[str, Any]
    ) -> List[Finding]:
        """Run every check module concurrently and concatenate their findings."""
        tasks = [
            asyncio.ensure_future(check_branch_protection(self.provider, owner, repo, branch)),
            asyncio.ensure_future(check_security_features(self.provider, owner, repo, repository=repository)),
            asyncio.ensure_future(check_dependency_alerts(self.provider, owner, repo)),
            asyncio.ensure_future(check_access_control(self.provider, owner, repo, repository=repository)),
            asyncio.ensure_future(check_repository_settings(self.provider, owner, repo, repository=repository)),
        ]

        try:
            results = await asyncio.gather(*tasks)
        except Exception:
            # First failure wins; stop the checks still in flight
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        findings: List[Finding] = []
        for module_findings in results:
            findings.extend(module_findings)
        return findings

    async def scan_many(self, full_names: Sequence[str]) -> List[RepoScanResult]:
        """Scan repositories one after another, skipping the ones that fail."""
        results: List[RepoScanResult] = []

        for full_name in full_names:
            try:
                owner, repo = split_full_name(full_name)
                results.append(await self.scan_repository(owner, repo))
            except Exception as e:
                logger.error(
                    "Skipping repository after scan error",
                    repository=full_name,
                    error=str(e),
                    error_type=type(e).__name__
                )

        if len(results) < len(full_names):
            logger.warning(
                "Batch scan incomplete",
                requested=len(full_names),
                scanned=len(results)
            )

        return results
