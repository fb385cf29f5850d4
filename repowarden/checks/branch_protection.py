"""Branch protection checks."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..adapters.base import ConfigurationProvider
from ..errors import ForbiddenError, NotFoundError
from ..logging import get_logger
from ..models.findings import Finding
from .base import enabled, evaluate

logger = get_logger(__name__)

DOCS = "https://docs.github.com/en/repositories/configuring-branches-and-merges-in-your-repository/managing-protected-branches"
MIN_APPROVING_REVIEWS = 2

FINDING_IDS = (
    'bp-not-enabled',
    'bp-not-available',
    'bp-no-pr-reviews',
    'bp-stale-reviews',
    'bp-no-codeowner-review',
    'bp-low-review-count',
    'bp-no-last-push-approval',
    'bp-admin-bypass',
    'bp-no-status-checks',
    'bp-force-push-allowed',
    'bp-deletions-allowed',
    'bp-no-conversation-resolution',
    'bp-no-signed-commits',
    'bp-no-linear-history',
)


@dataclass(frozen=True)
class BranchProtectionSnapshot:
    """Protection policy of one branch."""

    branch: str
    protection: Dict[str, Any]

    @property
    def reviews(self) -> Optional[Dict[str, Any]]:
        return self.protection.get("required_pull_request_reviews")


def _no_pr_reviews(snapshot: BranchProtectionSnapshot) -> Optional[Finding]:
    if snapshot.reviews:
        return None
    return Finding(
        id='bp-no-pr-reviews',
        category='branch-protection',
        severity='high',
        title='Pull request reviews not required',
        description=f"The {snapshot.branch} branch does not require pull request reviews before merging.",
        recommendation='Enable "Require pull request reviews before merging" in branch protection settings.',
        documentation_url=f"{DOCS}/about-protected-branches#require-pull-request-reviews-before-merging",
        control_id='CC6.1',
    )


def _stale_reviews(snapshot: BranchProtectionSnapshot) -> Optional[Finding]:
    reviews = snapshot.reviews
    if not reviews or reviews.get("dismiss_stale_reviews"):
        return None
    return Finding(
        id='bp-stale-reviews',
        category='branch-protection',
        severity='medium',
        title='Stale reviews not dismissed',
        description='Approved reviews are not dismissed when new commits are pushed.',
        recommendation='Enable "Dismiss stale pull request approvals when new commits are pushed".',
        documentation_url=f"{DOCS}/about-protected-branches#dismiss-stale-pull-request-approvals-when-new-commits-are-pushed",
        control_id='CC6.1',
    )


def _no_codeowner_review(snapshot: BranchProtectionSnapshot) -> Optional[Finding]:
    reviews = snapshot.reviews
    if not reviews or reviews.get("require_code_owner_reviews"):
        return None
    return Finding(
        id='bp-no-codeowner-review',
        category='branch-protection',
        severity='medium',
        title='Code owner reviews not required',
        description='Reviews from code owners are not required for changes to owned files.',
        recommendation='Enable "Require review from Code Owners" and create a CODEOWNERS file.',
        documentation_url='https://docs.github.com/en/repositories/managing-your-repositorys-settings-and-features/customizing-your-repository/about-code-owners',
        control_id='CC6.1',
    )


def _low_review_count(snapshot: BranchProtectionSnapshot) -> Optional[Finding]:
    reviews = snapshot.reviews
    if not reviews:
        return None
    count = reviews.get("required_approving_review_count") or 0
    if count >= MIN_APPROVING_REVIEWS:
        return None
    return Finding(
        id='bp-low-review-count',
        category='branch-protection',
        severity='medium',
        title='Insufficient required reviewers',
        description=f"Only {count} reviewer(s) required. Best practice is at least {MIN_APPROVING_REVIEWS}.",
        recommendation=f"Increase required approving reviews to at least {MIN_APPROVING_REVIEWS}.",
        control_id='CC6.1',
        current_value=count,
        expected_value=MIN_APPROVING_REVIEWS,
    )


def _no_last_push_approval(snapshot: BranchProtectionSnapshot) -> Optional[Finding]:
    reviews = snapshot.reviews
    if not reviews or reviews.get("require_last_push_approval"):
        return None
    return Finding(
        id='bp-no-last-push-approval',
        category='branch-protection',
        severity='low',
        title='Last push approval not required',
        description='The author of the most recent push can approve their own changes.',
        recommendation='Enable "Require approval of the most recent reviewable push".',
        documentation_url=f"{DOCS}/about-protected-branches#require-pull-request-reviews-before-merging",
        control_id='CC6.1',
    )


def _admin_bypass(snapshot: BranchProtectionSnapshot) -> Optional[Finding]:
    if enabled(snapshot.protection.get("enforce_admins")):
        return None
    return Finding(
        id='bp-admin-bypass',
        category='branch-protection',
        severity='high',
        title='Administrators can bypass protection',
        description='Repository administrators can bypass branch protection rules.',
        recommendation='Enable "Do not allow bypassing the above settings" for administrators.',
        documentation_url=f"{DOCS}/about-protected-branches#do-not-allow-bypassing-the-above-settings",
        control_id='CC6.1',
    )


def _no_status_checks(snapshot: BranchProtectionSnapshot) -> Optional[Finding]:
    status_checks = snapshot.protection.get("required_status_checks") or {}
    if status_checks.get("contexts") or status_checks.get("checks"):
        return None
    return Finding(
        id='bp-no-status-checks',
        category='branch-protection',
        severity='high',
        title='No required status checks',
        description='No CI/CD status checks are required before merging.',
        recommendation='Configure required status checks (e.g., CI tests, linting) before merging.',
        documentation_url=f"{DOCS}/about-protected-branches#require-status-checks-before-merging",
        control_id='CC7.1',
    )


def _force_push_allowed(snapshot: BranchProtectionSnapshot) -> Optional[Finding]:
    if not enabled(snapshot.protection.get("allow_force_pushes")):
        return None
    return Finding(
        id='bp-force-push-allowed',
        category='branch-protection',
        severity='high',
        title='Force pushes allowed',
        description='Force pushes are allowed, which can rewrite history and remove commits.',
        recommendation='Disable "Allow force pushes" to prevent history rewriting.',
        control_id='CC6.1',
    )


def _deletions_allowed(snapshot: BranchProtectionSnapshot) -> Optional[Finding]:
    if not enabled(snapshot.protection.get("allow_deletions")):
        return None
    return Finding(
        id='bp-deletions-allowed',
        category='branch-protection',
        severity='medium',
        title='Branch deletion allowed',
        description='The protected branch can be deleted.',
        recommendation='Disable "Allow deletions" to prevent accidental branch removal.',
        control_id='CC6.1',
    )


def _no_conversation_resolution(snapshot: BranchProtectionSnapshot) -> Optional[Finding]:
    if enabled(snapshot.protection.get("required_conversation_resolution")):
        return None
    return Finding(
        id='bp-no-conversation-resolution',
        category='branch-protection',
        severity='low',
        title='Conversation resolution not required',
        description='PRs can be merged without resolving all review comments.',
        recommendation='Enable "Require conversation resolution before merging".',
        control_id='CC6.1',
    )


def _no_signed_commits(snapshot: BranchProtectionSnapshot) -> Optional[Finding]:
    if enabled(snapshot.protection.get("required_signatures")):
        return None
    return Finding(
        id='bp-no-signed-commits',
        category='branch-protection',
        severity='medium',
        title='Signed commits not required',
        description='Commits are not required to be signed with GPG or SSH keys.',
        recommendation='Enable "Require signed commits" to verify commit authenticity.',
        documentation_url=f"{DOCS}/about-protected-branches#require-signed-commits",
        control_id='CC6.1',
    )


def _no_linear_history(snapshot: BranchProtectionSnapshot) -> Optional[Finding]:
    if enabled(snapshot.protection.get("required_linear_history")):
        return None
    return Finding(
        id='bp-no-linear-history',
        category='branch-protection',
        severity='low',
        title='Linear history not required',
        description='Merge commits are allowed, which can complicate history.',
        recommendation='Enable "Require linear history" to enforce squash or rebase merging.',
        documentation_url=f"{DOCS}/about-protected-branches#require-linear-history",
        control_id='CC6.1',
    )


PREDICATES = (
    _no_pr_reviews,
    _stale_reviews,
    _no_codeowner_review,
    _low_review_count,
    _no_last_push_approval,
    _admin_bypass,
    _no_status_checks,
    _force_push_allowed,
    _deletions_allowed,
    _no_conversation_resolution,
    _no_signed_commits,
    _no_linear_history,
)


def _not_enabled(branch: str) -> Finding:
    return Finding(
        id='bp-not-enabled',
        category='branch-protection',
        severity='critical',
        title='Branch protection not enabled',
        description=f"The {branch} branch has no protection rules configured.",
        recommendation='Enable branch protection for the default branch immediately.',
        documentation_url=f"{DOCS}/managing-a-branch-protection-rule",
        control_id='CC6.1',
    )


def _not_available() -> Finding:
    return Finding(
        id='bp-not-available',
        category='branch-protection',
        severity='info',
        title='Branch protection not available',
        description='Branch protection requires GitHub Pro for private repositories.',
        recommendation='Upgrade to GitHub Pro or make the repository public to enable branch protection.',
        documentation_url=f"{DOCS}/about-protected-branches",
        control_id='CC6.1',
    )


async def check_branch_protection(
    provider: ConfigurationProvider,
    owner: str,
    repo: str,
    branch: str,
) -> List[Finding]:
    """Inspect the protection policy of one branch."""
    try:
        protection = await provider.get_branch_protection(owner, repo, branch)
    except NotFoundError:
        return [_not_enabled(branch)]
    except ForbiddenError as e:
        logger.info(
            "Branch protection refused by platform",
            repository=f"{owner}/{repo}",
            branch=branch,
            error=str(e)
        )
        return [_not_available()]

    return evaluate(PREDICATES, BranchProtectionSnapshot(branch=branch, protection=protection or {}))
