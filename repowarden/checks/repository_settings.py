"""Repository settings checks over metadata, files, Actions and environments."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..adapters.base import ConfigurationProvider
from ..errors import NotFoundError
from ..models.findings import Finding
from .base import evaluate

CODEOWNERS_PATHS = ('.github/CODEOWNERS', 'CODEOWNERS', 'docs/CODEOWNERS')

FINDING_IDS = (
    'rs-wiki-enabled',
    'rs-issues-disabled',
    'rs-legacy-branch-name',
    'rs-no-readme',
    'rs-no-license',
    'rs-no-codeowners',
    'rs-actions-all-allowed',
    'rs-no-gitignore',
    'rs-token-write-permissions',
    'rs-token-can-approve-prs',
    'rs-no-auto-delete-branches',
    'rs-private-forking-allowed',
    'rs-unprotected-environments',
    'rs-merge-commits-allowed',
)


@dataclass(frozen=True)
class RepositorySettingsSnapshot:
    """Repository-level configuration."""

    repository: Dict[str, Any]
    has_readme: bool
    has_license: bool
    has_codeowners: bool
    has_gitignore: bool
    # None when Actions settings cannot be read for the repository
    actions_permissions: Optional[Dict[str, Any]] = None
    workflow_permissions: Optional[Dict[str, Any]] = None
    environments: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def is_public(self) -> bool:
        return self.repository.get("visibility") == 'public'


def _wiki_enabled(snapshot: RepositorySettingsSnapshot) -> Optional[Finding]:
    if not (snapshot.repository.get("has_wiki") and snapshot.is_public):
        return None
    return Finding(
        id='rs-wiki-enabled',
        category='repository-settings',
        severity='info',
        title='Wiki enabled on public repository',
        description='Wiki is enabled and publicly accessible.',
        recommendation='Review wiki content for sensitive information or disable if not needed.',
        control_id='CC6.1',
    )


def _issues_disabled(snapshot: RepositorySettingsSnapshot) -> Optional[Finding]:
    if snapshot.repository.get("has_issues"):
        return None
    return Finding(
        id='rs-issues-disabled',
        category='repository-settings',
        severity='low',
        title='Issues disabled',
        description='GitHub Issues are disabled, which may limit security vulnerability reporting.',
        recommendation='Consider enabling Issues or ensure SECURITY.md has alternative reporting instructions.',
        control_id='CC7.4',
    )


def _legacy_branch_name(snapshot: RepositorySettingsSnapshot) -> Optional[Finding]:
    if snapshot.repository.get("default_branch") != 'master':
        return None
    return Finding(
        id='rs-legacy-branch-name',
        category='repository-settings',
        severity='info',
        title='Legacy default branch name',
        description='Repository uses "master" as default branch. Consider renaming to "main".',
        recommendation='Rename default branch to "main" for consistency with GitHub standards.',
    )


def _no_readme(snapshot: RepositorySettingsSnapshot) -> Optional[Finding]:
    if snapshot.has_readme:
        return None
    return Finding(
        id='rs-no-readme',
        category='repository-settings',
        severity='low',
        title='No README file',
        description='Repository lacks a README file.',
        recommendation='Add a README.md with project documentation.',
    )


def _no_license(snapshot: RepositorySettingsSnapshot) -> Optional[Finding]:
    if snapshot.has_license:
        return None
    return Finding(
        id='rs-no-license',
        category='repository-settings',
        severity='low',
        title='No license file',
        description='Repository lacks a LICENSE file.',
        recommendation='Add a LICENSE file to clarify usage terms.',
    )


def _no_codeowners(snapshot: RepositorySettingsSnapshot) -> Optional[Finding]:
    if snapshot.has_codeowners:
        return None
    return Finding(
        id='rs-no-codeowners',
        category='repository-settings',
        severity='medium',
        title='No CODEOWNERS file',
        description='Repository lacks a CODEOWNERS file for automatic review assignment.',
        recommendation='Create a CODEOWNERS file to ensure proper code review coverage.',
        control_id='CC6.1',
    )


def _actions_all_allowed(snapshot: RepositorySettingsSnapshot) -> Optional[Finding]:
    permissions = snapshot.actions_permissions
    if not permissions or not permissions.get("enabled") or permissions.get("allowed_actions") != 'all':
        return None
    return Finding(
        id='rs-actions-all-allowed',
        category='repository-settings',
        severity='medium',
        title='All GitHub Actions allowed',
        description='Repository allows all GitHub Actions without restrictions.',
        recommendation='Restrict Actions to verified creators or specific allowed actions.',
        control_id='CC6.1',
    )


def _no_gitignore(snapshot: RepositorySettingsSnapshot) -> Optional[Finding]:
    if snapshot.has_gitignore:
        return None
    return Finding(
        id='rs-no-gitignore',
        category='repository-settings',
        severity='low',
        title='No .gitignore file',
        description='Repository lacks a .gitignore file, risking accidental commits of sensitive files.',
        recommendation='Add a .gitignore file appropriate for your project type.',
        control_id='CC6.7',
    )


def _token_write_permissions(snapshot: RepositorySettingsSnapshot) -> Optional[Finding]:
    permissions = snapshot.workflow_permissions
    if not permissions or permissions.get("default_workflow_permissions") != 'write':
        return None
    return Finding(
        id='rs-token-write-permissions',
        category='repository-settings',
        severity='medium',
        title='GITHUB_TOKEN has write permissions by default',
        description='Workflows receive a read-write GITHUB_TOKEN unless they request less.',
        recommendation='Set the default workflow permissions to read-only and grant write scopes per job.',
        documentation_url='https://docs.github.com/en/actions/security-guides/automatic-token-authentication#modifying-the-permissions-for-the-github_token',
        control_id='CC6.1',
        current_value='write',
        expected_value='read',
    )


def _token_can_approve_prs(snapshot: RepositorySettingsSnapshot) -> Optional[Finding]:
    permissions = snapshot.workflow_permissions
    if not permissions or not permissions.get("can_approve_pull_request_reviews"):
        return None
    return Finding(
        id='rs-token-can-approve-prs',
        category='repository-settings',
        severity='medium',
        title='GitHub Actions can approve pull requests',
        description='Workflows can approve pull requests, which can bypass required reviews.',
        recommendation='Disable "Allow GitHub Actions to create and approve pull requests".',
        control_id='CC8.1',
        current_value=True,
        expected_value=False,
    )


def _no_auto_delete_branches(snapshot: RepositorySettingsSnapshot) -> Optional[Finding]:
    if snapshot.repository.get("delete_branch_on_merge"):
        return None
    return Finding(
        id='rs-no-auto-delete-branches',
        category='repository-settings',
        severity='low',
        title='Head branches not deleted after merge',
        description='Merged pull request branches are kept, leaving stale branches behind.',
        recommendation='Enable "Automatically delete head branches".',
        current_value=False,
        expected_value=True,
    )


def _private_forking_allowed(snapshot: RepositorySettingsSnapshot) -> Optional[Finding]:
    if snapshot.is_public or not snapshot.repository.get("allow_forking"):
        return None
    return Finding(
        id='rs-private-forking-allowed',
        category='repository-settings',
        severity='medium',
        title='Forking allowed on non-public repository',
        description='Private code can be copied into forks outside the repository access controls.',
        recommendation='Disable forking for private and internal repositories.',
        control_id='CC6.7',
        current_value=True,
        expected_value=False,
    )


def _unprotected_environments(snapshot: RepositorySettingsSnapshot) -> Optional[Finding]:
    unprotected = [e.get("name") for e in snapshot.environments if not e.get("protection_rules")]
    if not unprotected:
        return None
    return Finding(
        id='rs-unprotected-environments',
        category='repository-settings',
        severity='medium',
        title='Deployment environments without protection rules',
        description=f"{len(unprotected)} environment(s) can be deployed to without approval: {', '.join(unprotected)}.",
        recommendation='Add required reviewers or wait timers to deployment environments.',
        documentation_url='https://docs.github.com/en/actions/deployment/targeting-different-environments/using-environments-for-deployment',
        control_id='CC8.1',
        current_value=len(unprotected),
        expected_value=0,
    )


def _merge_commits_allowed(snapshot: RepositorySettingsSnapshot) -> Optional[Finding]:
    if not snapshot.repository.get("allow_merge_commit"):
        return None
    return Finding(
        id='rs-merge-commits-allowed',
        category='repository-settings',
        severity='info',
        title='Merge commits allowed',
        description='Pull requests can be merged with merge commits.',
        recommendation='Allow only squash or rebase merging to keep history reviewable.',
        control_id='CC8.1',
    )


PREDICATES = (
    _wiki_enabled,
    _issues_disabled,
    _legacy_branch_name,
    _no_readme,
    _no_license,
    _no_codeowners,
    _actions_all_allowed,
    _no_gitignore,
    _token_write_permissions,
    _token_can_approve_prs,
    _no_auto_delete_branches,
    _private_forking_allowed,
    _unprotected_environments,
    _merge_commits_allowed,
)


async def _exists(lookup) -> bool:
    try:
        await lookup
    except NotFoundError:
        return False
    return True


async def _collect_snapshot(
    provider: ConfigurationProvider,
    owner: str,
    repo: str,
    repository: Optional[Dict[str, Any]],
) -> RepositorySettingsSnapshot:
    if repository is None:
        repository = await provider.get_repository(owner, repo)

    has_readme = await _exists(provider.get_readme(owner, repo))
    has_license = await _exists(provider.get_license(owner, repo))

    has_codeowners = False
    for path in CODEOWNERS_PATHS:
        if await provider.file_exists(owner, repo, path):
            has_codeowners = True
            break

    try:
        actions_permissions = await provider.get_actions_permissions(owner, repo)
    except NotFoundError:
        actions_permissions = None

    has_gitignore = await provider.file_exists(owner, repo, '.gitignore')

    try:
        workflow_permissions = await provider.get_workflow_permissions(owner, repo)
    except NotFoundError:
        workflow_permissions = None

    try:
        environments = await provider.list_environments(owner, repo)
    except NotFoundError:
        environments = []

    return RepositorySettingsSnapshot(
        repository=repository,
        has_readme=has_readme,
        has_license=has_license,
        has_codeowners=has_codeowners,
        has_gitignore=has_gitignore,
        actions_permissions=actions_permissions,
        workflow_permissions=workflow_permissions,
        environments=environments,
    )


async def check_repository_settings(
    provider: ConfigurationProvider,
    owner: str,
    repo: str,
    *,
    repository: Optional[Dict[str, Any]] = None,
) -> List[Finding]:
    """Inspect repository metadata, key files, Actions configuration and environments."""
    snapshot = await _collect_snapshot(provider, owner, repo, repository)
    return evaluate(PREDICATES, snapshot)
