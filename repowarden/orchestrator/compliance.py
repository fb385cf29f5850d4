"""SOC 2 control mapping over scan results."""

import math
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Dict, List, Optional, Sequence

from ..logging import get_logger
from ..models.compliance import ComplianceControl, ComplianceReport, ControlDefinition, ControlStatus
from ..models.findings import Finding
from ..models.results import RepoScanResult

logger = get_logger(__name__)

# Most non-severe findings a control may carry and still be compliant
COMPLIANT_FINDING_LIMIT = 2

CONTROL_CATALOG = MappingProxyType({
    'CC6.1': ControlDefinition(
        name='Logical and Physical Access Controls',
        description=(
            'The entity implements logical access security software, infrastructure, '
            'and architectures over protected information assets.'
        ),
    ),
    'CC6.2': ControlDefinition(
        name='User Access Management',
        description=(
            'Prior to issuing system credentials and granting system access, the entity '
            'registers and authorizes new internal and external users.'
        ),
    ),
    'CC6.7': ControlDefinition(
        name='Data Transmission Protection',
        description=(
            'The entity restricts the transmission, movement, and removal of information '
            'to authorized internal and external users.'
        ),
    ),
    'CC7.1': ControlDefinition(
        name='Vulnerability Management',
        description=(
            'To meet its objectives, the entity uses detection and monitoring procedures '
            'to identify changes to configurations that result in vulnerabilities.'
        ),
    ),
    'CC7.4': ControlDefinition(
        name='Security Incident Response',
        description=(
            'The entity responds to identified security incidents by executing a defined '
            'incident response program.'
        ),
    ),
    'CC8.1': ControlDefinition(
        name='Change Management',
        description=(
            'The entity authorizes, designs, develops or acquires, configures, documents, '
            'tests, approves, and implements changes to infrastructure, data, software, '
            'and procedures.'
        ),
    ),
})

# (absent finding id, control id, evidence sentence), applied in this order
EVIDENCE_RULES = (
    ('bp-not-enabled', 'CC6.1', 'Branch protection is enabled on default branch.'),
    ('sf-no-dependabot-alerts', 'CC7.1', 'Dependabot alerts are enabled for vulnerability detection.'),
    ('sf-no-code-scanning', 'CC7.1', 'Code scanning is configured for security analysis.'),
    ('sf-no-security-policy', 'CC7.4', 'Security policy (SECURITY.md) is in place.'),
    ('sf-no-secret-scanning', 'CC6.7', 'Secret scanning is enabled to prevent credential leaks.'),
)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values."""
    return int(math.floor(value + 0.5))


def control_status(findings: Sequence[Finding]) -> ControlStatus:
    """Derive a control status from its pooled findings."""
    if any(f.is_high_or_critical for f in findings):
        return 'non-compliant'
    if len(findings) <= COMPLIANT_FINDING_LIMIT:
        return 'compliant'
    return 'partial'


def map_compliance(
    results: Sequence[RepoScanResult],
    generated_at: Optional[datetime] = None,
) -> ComplianceReport:
    """Map a batch of scan results onto the control catalog."""
    pooled: Dict[str, List[Finding]] = {control_id: [] for control_id in CONTROL_CATALOG}
    evidence: Dict[str, List[str]] = {control_id: [] for control_id in CONTROL_CATALOG}

    for result in results:
        full_name = result.full_name

        for finding in result.findings:
            if finding.control_id in pooled:
                pooled[finding.control_id].append(finding.with_repository_prefix(full_name))

        for finding_id, control_id, sentence in EVIDENCE_RULES:
            if not result.has_finding(finding_id):
                evidence[control_id].append(f"{full_name}: {sentence}")

    controls = []
    for control_id, definition in CONTROL_CATALOG.items():
        controls.append(ComplianceControl(
            id=control_id,
            name=definition.name,
            description=definition.description,
            status=control_status(pooled[control_id]),
            findings=pooled[control_id],
            evidence=evidence[control_id],
        ))

    compliant = sum(1 for c in controls if c.status == 'compliant')
    partial = sum(1 for c in controls if c.status == 'partial')
    overall = round_half_up(100 * (compliant + 0.5 * partial) / len(controls))

    logger.info(
        "Compliance report generated",
        repositories=len(results),
        compliant=compliant,
        partial=partial,
        non_compliant=len(controls) - compliant - partial,
        overall_compliance=overall
    )

    return ComplianceReport(
        repositories=[r.full_name for r in results],
        controls=controls,
        overall_compliance=overall,
        generated_at=generated_at or datetime.now(timezone.utc),
    )
