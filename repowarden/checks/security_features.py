"""Security feature and dependency alert checks."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..adapters.base import ConfigurationProvider
from ..errors import NotFoundError
from ..models.findings import Finding
from .base import evaluate

SECURITY_POLICY_PATHS = ('SECURITY.md', '.github/SECURITY.md')
DEPENDABOT_CONFIG_PATH = '.github/dependabot.yml'

FINDING_IDS = (
    'sf-no-security-policy',
    'sf-no-dependabot-alerts',
    'sf-no-dependabot-config',
    'sf-no-code-scanning',
    'sf-no-secret-scanning',
    'sf-no-push-protection',
    'sf-no-dependabot-security-updates',
    'sf-no-private-vuln-reporting',
    'sf-no-dependency-review',
)

DEPENDENCY_FINDING_IDS = (
    'dep-critical-vulns',
    'dep-high-vulns',
)


@dataclass(frozen=True)
class SecurityFeaturesSnapshot:
    """Security feature state of a repository."""

    has_security_policy: bool
    vulnerability_alerts_enabled: bool
    has_dependabot_config: bool
    secret_scanning_enabled: bool
    private_vulnerability_reporting: bool
    workflows: List[Dict[str, Any]] = field(default_factory=list)
    security_and_analysis: Dict[str, Any] = field(default_factory=dict)

    def has_workflow(self, marker: str) -> bool:
        """Check whether any workflow name or path mentions a marker."""
        return any(
            marker in (w.get("name") or "").lower() or marker in (w.get("path") or "")
            for w in self.workflows
        )

    def feature_status(self, feature: str) -> Optional[str]:
        """Status of a security_and_analysis feature, None when not reported."""
        return (self.security_and_analysis.get(feature) or {}).get("status")


def _no_security_policy(snapshot: SecurityFeaturesSnapshot) -> Optional[Finding]:
    if snapshot.has_security_policy:
        return None
    return Finding(
        id='sf-no-security-policy',
        category='security-features',
        severity='medium',
        title='No security policy',
        description='Repository lacks a SECURITY.md file for vulnerability reporting.',
        recommendation='Create a SECURITY.md file with instructions for reporting security vulnerabilities.',
        documentation_url='https://docs.github.com/en/code-security/getting-started/adding-a-security-policy-to-your-repository',
        control_id='CC7.4',
    )


def _no_dependabot_alerts(snapshot: SecurityFeaturesSnapshot) -> Optional[Finding]:
    if snapshot.vulnerability_alerts_enabled:
        return None
    return Finding(
        id='sf-no-dependabot-alerts',
        category='security-features',
        severity='high',
        title='Dependabot alerts disabled',
        description='Dependabot vulnerability alerts are not enabled.',
        recommendation='Enable Dependabot alerts to receive notifications about vulnerable dependencies.',
        documentation_url='https://docs.github.com/en/code-security/dependabot/dependabot-alerts/about-dependabot-alerts',
        control_id='CC7.1',
    )


def _no_dependabot_config(snapshot: SecurityFeaturesSnapshot) -> Optional[Finding]:
    if snapshot.has_dependabot_config:
        return None
    return Finding(
        id='sf-no-dependabot-config',
        category='security-features',
        severity='medium',
        title='Dependabot version updates not configured',
        description='No dependabot.yml configuration file found.',
        recommendation='Create .github/dependabot.yml to enable automatic dependency updates.',
        documentation_url='https://docs.github.com/en/code-security/dependabot/dependabot-version-updates/configuring-dependabot-version-updates',
        control_id='CC7.1',
    )


def _no_code_scanning(snapshot: SecurityFeaturesSnapshot) -> Optional[Finding]:
    if snapshot.has_workflow('codeql'):
        return None
    return Finding(
        id='sf-no-code-scanning',
        category='security-features',
        severity='high',
        title='Code scanning not configured',
        description='No CodeQL or code scanning workflow detected.',
        recommendation='Enable GitHub code scanning with CodeQL to detect security vulnerabilities in code.',
        documentation_url='https://docs.github.com/en/code-security/code-scanning/introduction-to-code-scanning/about-code-scanning',
        control_id='CC7.1',
    )


def _no_secret_scanning(snapshot: SecurityFeaturesSnapshot) -> Optional[Finding]:
    if snapshot.secret_scanning_enabled:
        return None
    return Finding(
        id='sf-no-secret-scanning',
        category='security-features',
        severity='high',
        title='Secret scanning not enabled',
        description='Secret scanning is not enabled for this repository.',
        recommendation='Enable secret scanning to detect accidentally committed secrets.',
        documentation_url='https://docs.github.com/en/code-security/secret-scanning/about-secret-scanning',
        control_id='CC6.7',
    )


def _no_push_protection(snapshot: SecurityFeaturesSnapshot) -> Optional[Finding]:
    if snapshot.feature_status('secret_scanning_push_protection') != 'disabled':
        return None
    return Finding(
        id='sf-no-push-protection',
        category='security-features',
        severity='high',
        title='Secret scanning push protection disabled',
        description='Pushes containing detected secrets are not blocked.',
        recommendation='Enable push protection so commits with secrets are rejected before they land.',
        documentation_url='https://docs.github.com/en/code-security/secret-scanning/push-protection-for-repositories-and-organizations',
        control_id='CC6.7',
    )


def _no_dependabot_security_updates(snapshot: SecurityFeaturesSnapshot) -> Optional[Finding]:
    if snapshot.feature_status('dependabot_security_updates') != 'disabled':
        return None
    return Finding(
        id='sf-no-dependabot-security-updates',
        category='security-features',
        severity='medium',
        title='Dependabot security updates disabled',
        description='Dependabot does not open pull requests to fix vulnerable dependencies.',
        recommendation='Enable Dependabot security updates.',
        documentation_url='https://docs.github.com/en/code-security/dependabot/dependabot-security-updates/about-dependabot-security-updates',
        control_id='CC7.1',
    )


def _no_private_vuln_reporting(snapshot: SecurityFeaturesSnapshot) -> Optional[Finding]:
    if snapshot.private_vulnerability_reporting:
        return None
    return Finding(
        id='sf-no-private-vuln-reporting',
        category='security-features',
        severity='low',
        title='Private vulnerability reporting disabled',
        description='Security researchers cannot privately report vulnerabilities through the repository.',
        recommendation='Enable private vulnerability reporting in the repository security settings.',
        documentation_url='https://docs.github.com/en/code-security/security-advisories/working-with-repository-security-advisories/configuring-private-vulnerability-reporting-for-a-repository',
        control_id='CC7.4',
    )


def _no_dependency_review(snapshot: SecurityFeaturesSnapshot) -> Optional[Finding]:
    if snapshot.has_workflow('dependency-review'):
        return None
    return Finding(
        id='sf-no-dependency-review',
        category='security-features',
        severity='low',
        title='Dependency review not configured',
        description='Pull requests are not checked for newly introduced vulnerable dependencies.',
        recommendation='Add the dependency-review action to pull request workflows.',
        documentation_url='https://docs.github.com/en/code-security/supply-chain-security/understanding-your-software-supply-chain/about-dependency-review',
        control_id='CC8.1',
    )


PREDICATES = (
    _no_security_policy,
    _no_dependabot_alerts,
    _no_dependabot_config,
    _no_code_scanning,
    _no_secret_scanning,
    _no_push_protection,
    _no_dependabot_security_updates,
    _no_private_vuln_reporting,
    _no_dependency_review,
)


async def _collect_snapshot(
    provider: ConfigurationProvider,
    owner: str,
    repo: str,
    repository: Optional[Dict[str, Any]],
) -> SecurityFeaturesSnapshot:
    if repository is None:
        repository = await provider.get_repository(owner, repo)

    has_security_policy = False
    for path in SECURITY_POLICY_PATHS:
        if await provider.file_exists(owner, repo, path):
            has_security_policy = True
            break

    try:
        await provider.check_vulnerability_alerts(owner, repo)
        vulnerability_alerts_enabled = True
    except NotFoundError:
        vulnerability_alerts_enabled = False

    has_dependabot_config = await provider.file_exists(owner, repo, DEPENDABOT_CONFIG_PATH)

    try:
        workflows = await provider.list_workflows(owner, repo)
    except NotFoundError:
        workflows = []

    try:
        await provider.list_secret_scanning_alerts(owner, repo, state="open")
        secret_scanning_enabled = True
    except NotFoundError:
        secret_scanning_enabled = False

    try:
        reporting = await provider.get_private_vulnerability_reporting(owner, repo)
        private_vulnerability_reporting = bool(reporting.get("enabled"))
    except NotFoundError:
        private_vulnerability_reporting = False

    return SecurityFeaturesSnapshot(
        has_security_policy=has_security_policy,
        vulnerability_alerts_enabled=vulnerability_alerts_enabled,
        has_dependabot_config=has_dependabot_config,
        secret_scanning_enabled=secret_scanning_enabled,
        private_vulnerability_reporting=private_vulnerability_reporting,
        workflows=workflows,
        security_and_analysis=repository.get("security_and_analysis") or {},
    )


async def check_security_features(
    provider: ConfigurationProvider,
    owner: str,
    repo: str,
    *,
    repository: Optional[Dict[str, Any]] = None,
) -> List[Finding]:
    """Inspect security policy, Dependabot, code scanning and secret scanning.

    ``repository`` is the already fetched repository metadata, if the caller has it.
    """
    snapshot = await _collect_snapshot(provider, owner, repo, repository)
    return evaluate(PREDICATES, snapshot)


@dataclass(frozen=True)
class DependencyAlertsSnapshot:
    """Open Dependabot alerts of a repository."""

    alerts: List[Dict[str, Any]] = field(default_factory=list)

    def count(self, severity: str) -> int:
        """Number of open alerts at a severity."""
        total = 0
        for alert in self.alerts:
            vulnerability = alert.get("security_vulnerability") or alert.get("security_advisory") or {}
            if vulnerability.get("severity") == severity:
                total += 1
        return total


def _critical_vulns(snapshot: DependencyAlertsSnapshot) -> Optional[Finding]:
    count = snapshot.count('critical')
    if count == 0:
        return None
    return Finding(
        id='dep-critical-vulns',
        category='dependencies',
        severity='critical',
        title=f"{count} critical vulnerability alert(s)",
        description=f"Repository has {count} unresolved critical Dependabot alerts.",
        recommendation='Review and remediate critical Dependabot alerts immediately.',
        control_id='CC7.1',
        current_value=count,
        expected_value=0,
    )


def _high_vulns(snapshot: DependencyAlertsSnapshot) -> Optional[Finding]:
    count = snapshot.count('high')
    if count == 0:
        return None
    return Finding(
        id='dep-high-vulns',
        category='dependencies',
        severity='high',
        title=f"{count} high severity vulnerability alert(s)",
        description=f"Repository has {count} unresolved high severity Dependabot alerts.",
        recommendation='Review and remediate high severity Dependabot alerts.',
        control_id='CC7.1',
        current_value=count,
        expected_value=0,
    )


DEPENDENCY_PREDICATES = (
    _critical_vulns,
    _high_vulns,
)


async def check_dependency_alerts(
    provider: ConfigurationProvider,
    owner: str,
    repo: str,
) -> List[Finding]:
    """Count unresolved critical and high Dependabot alerts."""
    try:
        alerts = await provider.list_dependabot_alerts(owner, repo, state="open")
    except NotFoundError:
        return []

    return evaluate(DEPENDENCY_PREDICATES, DependencyAlertsSnapshot(alerts=alerts))
