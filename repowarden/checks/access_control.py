"""Access control checks over collaborators, deploy keys and webhooks."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from ..adapters.base import ConfigurationProvider
from ..models.findings import Finding
from .base import evaluate

MAX_ADMINS = 5
DEPLOY_KEY_MAX_AGE = timedelta(days=365)

FINDING_IDS = (
    'ac-public-repo',
    'ac-too-many-admins',
    'ac-outside-collaborators',
    'ac-write-deploy-keys',
    'ac-old-deploy-keys',
    'ac-insecure-webhooks',
    'ac-webhooks-no-secret',
    'ac-webhook-ssl-disabled',
)


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class AccessControlSnapshot:
    """Who and what can reach a repository."""

    repository: Dict[str, Any]
    now: datetime
    collaborators: List[Dict[str, Any]] = field(default_factory=list)
    deploy_keys: List[Dict[str, Any]] = field(default_factory=list)
    webhooks: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def admins(self) -> List[Dict[str, Any]]:
        return [c for c in self.collaborators if (c.get("permissions") or {}).get("admin")]

    @property
    def writers(self) -> List[Dict[str, Any]]:
        return [
            c for c in self.collaborators
            if (c.get("permissions") or {}).get("push") and not (c.get("permissions") or {}).get("admin")
        ]


def _public_repo(snapshot: AccessControlSnapshot) -> Optional[Finding]:
    if snapshot.repository.get("visibility") != 'public':
        return None
    return Finding(
        id='ac-public-repo',
        category='access-control',
        severity='info',
        title='Repository is public',
        description='This repository is publicly accessible. Ensure no sensitive data is exposed.',
        recommendation='Review repository contents for sensitive information. Consider making private if needed.',
        control_id='CC6.1',
    )


def _too_many_admins(snapshot: AccessControlSnapshot) -> Optional[Finding]:
    admins = len(snapshot.admins)
    if admins <= MAX_ADMINS:
        return None
    return Finding(
        id='ac-too-many-admins',
        category='access-control',
        severity='medium',
        title='High number of administrators',
        description=f"Repository has {admins} users with admin access.",
        recommendation='Review admin access and apply principle of least privilege.',
        control_id='CC6.1',
        current_value=admins,
        expected_value=f"<={MAX_ADMINS}",
    )


def _outside_collaborators(snapshot: AccessControlSnapshot) -> Optional[Finding]:
    writers = len(snapshot.writers)
    if writers == 0:
        return None
    return Finding(
        id='ac-outside-collaborators',
        category='access-control',
        severity='info',
        title='Outside collaborators with write access',
        description=f"{writers} collaborator(s) have write access.",
        recommendation='Periodically review outside collaborator access.',
        control_id='CC6.2',
        current_value=writers,
    )


def _write_deploy_keys(snapshot: AccessControlSnapshot) -> Optional[Finding]:
    write_keys = [k for k in snapshot.deploy_keys if not k.get("read_only")]
    if not write_keys:
        return None
    return Finding(
        id='ac-write-deploy-keys',
        category='access-control',
        severity='medium',
        title='Deploy keys with write access',
        description=f"{len(write_keys)} deploy key(s) have write access to the repository.",
        recommendation='Review deploy keys and use read-only keys where possible.',
        control_id='CC6.1',
        current_value=len(write_keys),
    )


def _old_deploy_keys(snapshot: AccessControlSnapshot) -> Optional[Finding]:
    cutoff = snapshot.now - DEPLOY_KEY_MAX_AGE
    old_keys = []
    for key in snapshot.deploy_keys:
        created_at = _parse_timestamp(key.get("created_at"))
        if created_at is not None and created_at < cutoff:
            old_keys.append(key)
    if not old_keys:
        return None
    return Finding(
        id='ac-old-deploy-keys',
        category='access-control',
        severity='low',
        title='Old deploy keys detected',
        description=f"{len(old_keys)} deploy key(s) are over 1 year old.",
        recommendation='Rotate deploy keys periodically. Remove unused keys.',
        control_id='CC6.1',
        current_value=len(old_keys),
    )


def _insecure_webhooks(snapshot: AccessControlSnapshot) -> Optional[Finding]:
    insecure = [
        w for w in snapshot.webhooks
        if (w.get("config") or {}).get("url") and not w["config"]["url"].startswith("https://")
    ]
    if not insecure:
        return None
    return Finding(
        id='ac-insecure-webhooks',
        category='access-control',
        severity='high',
        title='Insecure webhook URLs',
        description=f"{len(insecure)} webhook(s) use non-HTTPS URLs.",
        recommendation='Update webhooks to use HTTPS URLs only.',
        control_id='CC6.7',
        current_value=len(insecure),
        expected_value=0,
    )


def _webhooks_no_secret(snapshot: AccessControlSnapshot) -> Optional[Finding]:
    unsigned = [w for w in snapshot.webhooks if not (w.get("config") or {}).get("secret")]
    if not unsigned:
        return None
    return Finding(
        id='ac-webhooks-no-secret',
        category='access-control',
        severity='medium',
        title='Webhooks without secret validation',
        description=f"{len(unsigned)} webhook(s) don't have a secret configured.",
        recommendation='Configure webhook secrets to validate incoming payloads.',
        control_id='CC6.7',
        current_value=len(unsigned),
        expected_value=0,
    )


def _webhook_ssl_disabled(snapshot: AccessControlSnapshot) -> Optional[Finding]:
    unverified = [
        w for w in snapshot.webhooks
        if str((w.get("config") or {}).get("insecure_ssl", "0")) == "1"
    ]
    if not unverified:
        return None
    return Finding(
        id='ac-webhook-ssl-disabled',
        category='access-control',
        severity='high',
        title='Webhook SSL verification disabled',
        description=f"{len(unverified)} webhook(s) deliver payloads without verifying SSL certificates.",
        recommendation='Enable SSL verification on every webhook.',
        control_id='CC6.7',
        current_value=len(unverified),
        expected_value=0,
    )


PREDICATES = (
    _public_repo,
    _too_many_admins,
    _outside_collaborators,
    _write_deploy_keys,
    _old_deploy_keys,
    _insecure_webhooks,
    _webhooks_no_secret,
    _webhook_ssl_disabled,
)


async def check_access_control(
    provider: ConfigurationProvider,
    owner: str,
    repo: str,
    now: Optional[datetime] = None,
    *,
    repository: Optional[Dict[str, Any]] = None,
) -> List[Finding]:
    """Inspect visibility, collaborators, deploy keys and webhooks."""
    if repository is None:
        repository = await provider.get_repository(owner, repo)
    collaborators = await provider.list_collaborators(owner, repo)
    deploy_keys = await provider.list_deploy_keys(owner, repo)
    webhooks = await provider.list_webhooks(owner, repo)

    snapshot = AccessControlSnapshot(
        repository=repository,
        now=now or datetime.now(timezone.utc),
        collaborators=collaborators,
        deploy_keys=deploy_keys,
        webhooks=webhooks,
    )
    return evaluate(PREDICATES, snapshot)
