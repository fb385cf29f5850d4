"""Automatic remediation of supported findings."""

import time
from types import MappingProxyType
from typing import Awaitable, Callable, Optional

from ..adapters.base import ConfigurationProvider
from ..logging import get_logger, log_remediation_event
from ..models.remediation import FixResult

logger = get_logger(__name__)

DEFAULT_BRANCH = 'main'

RemediationAction = Callable[[ConfigurationProvider, str, str, str], Awaitable[str]]


def _baseline_protection(enforce_admins: Optional[bool]) -> dict:
    # Full replacement policy: settings not listed here are cleared
    return {
        'required_status_checks': None,
        'enforce_admins': enforce_admins,
        'required_pull_request_reviews': {
            'dismiss_stale_reviews': True,
            'required_approving_review_count': 1,
        },
        'restrictions': None,
    }


async def _enable_branch_protection(provider, owner, repo, branch) -> str:
    await provider.update_branch_protection(owner, repo, branch, _baseline_protection(True))
    return 'Branch protection enabled'


async def _require_pull_request_reviews(provider, owner, repo, branch) -> str:
    await provider.update_branch_protection(owner, repo, branch, _baseline_protection(None))
    return 'PR reviews now required'


async def _enforce_admins(provider, owner, repo, branch) -> str:
    await provider.set_admin_enforcement(owner, repo, branch)
    return 'Admin enforcement enabled'


async def _dismiss_stale_reviews(provider, owner, repo, branch) -> str:
    await provider.update_pull_request_review_protection(
        owner, repo, branch, {'dismiss_stale_reviews': True}
    )
    return 'Stale review dismissal enabled'


async def _require_two_approvals(provider, owner, repo, branch) -> str:
    await provider.update_pull_request_review_protection(
        owner, repo, branch, {'required_approving_review_count': 2}
    )
    return 'Required reviewers set to 2'


async def _enable_dependabot_alerts(provider, owner, repo, branch) -> str:
    await provider.enable_vulnerability_alerts(owner, repo)
    return 'Dependabot alerts enabled'


async def _read_only_workflow_token(provider, owner, repo, branch) -> str:
    await provider.set_workflow_permissions(owner, repo, default_workflow_permissions='read')
    return 'GITHUB_TOKEN set to read-only'


async def _disable_workflow_approvals(provider, owner, repo, branch) -> str:
    await provider.set_workflow_permissions(owner, repo, can_approve_pull_request_reviews=False)
    return 'Actions PR approval disabled'


async def _enable_auto_delete_branches(provider, owner, repo, branch) -> str:
    await provider.update_repository(owner, repo, delete_branch_on_merge=True)
    return 'Auto-delete branches enabled'


async def _disable_forking(provider, owner, repo, branch) -> str:
    await provider.update_repository(owner, repo, allow_forking=False)
    return 'Forking disabled'


REMEDIATION_ACTIONS = MappingProxyType({
    'bp-not-enabled': _enable_branch_protection,
    'bp-no-pr-reviews': _require_pull_request_reviews,
    'bp-admin-bypass': _enforce_admins,
    'bp-stale-reviews': _dismiss_stale_reviews,
    'bp-low-review-count': _require_two_approvals,
    'sf-no-dependabot-alerts': _enable_dependabot_alerts,
    'rs-token-write-permissions': _read_only_workflow_token,
    'rs-token-can-approve-prs': _disable_workflow_approvals,
    'rs-no-auto-delete-branches': _enable_auto_delete_branches,
    'rs-private-forking-allowed': _disable_forking,
})

SUPPORTED_FIXES = frozenset(REMEDIATION_ACTIONS)


def is_fixable(finding_id: str) -> bool:
    """Check whether a finding has an automatic fix."""
    return finding_id in REMEDIATION_ACTIONS


class RemediationDispatcher:
    """Applies the fix registered for a finding id."""

    def __init__(self, provider: ConfigurationProvider):
        self.provider = provider

    async def fix(
        self,
        owner: str,
        repo: str,
        finding_id: str,
        branch: Optional[str] = None,
    ) -> FixResult:
        """Apply the automatic fix for one finding and report the outcome."""
        full_name = f"{owner}/{repo}"
        action = REMEDIATION_ACTIONS.get(finding_id)

        if action is None:
            log_remediation_event(logger, full_name, finding_id, "unsupported")
            return FixResult.unsupported(finding_id)

        start_time = time.time()
        try:
            message = await action(self.provider, owner, repo, branch or DEFAULT_BRANCH)
        except Exception as e:
            log_remediation_event(
                logger,
                full_name,
                finding_id,
                "failed",
                duration_ms=int((time.time() - start_time) * 1000),
                error=str(e)
            )
            return FixResult.failed(finding_id, str(e))

        log_remediation_event(
            logger,
            full_name,
            finding_id,
            "applied",
            duration_ms=int((time.time() - start_time) * 1000)
        )
        return FixResult(success=True, finding_id=finding_id, message=message)
