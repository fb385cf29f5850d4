"""Rendering of compliance reports and scan results."""

from typing import List

from dataclasses_json import DataClassJsonMixin

from .models.compliance import ComplianceReport

STATUS_ICONS = {
    'compliant': '✅',
    'partial': '⚠️',
    'non-compliant': '❌',
}

SEVERITY_ICONS = {
    'critical': '🔴',
    'high': '🟠',
    'medium': '🟡',
    'low': '🔵',
    'info': '🔵',
}


def format_compliance_markdown(report: ComplianceReport) -> str:
    """Render a compliance report as a Markdown document."""
    lines: List[str] = [
        '# SOC 2 Compliance Report',
        '',
        f"**Generated:** {report.generated_at.isoformat()}",
        f"**Repositories Scanned:** {len(report.repositories)}",
        f"**Overall Compliance:** {report.overall_compliance}%",
        '',
        '---',
        '',
        '## Control Summary',
        '',
        '| Control | Name | Status |',
        '|---------|------|--------|',
    ]

    for control in report.controls:
        lines.append(f"| {control.id} | {control.name} | {STATUS_ICONS[control.status]} {control.status} |")

    lines.extend(['', '---', '', '## Detailed Findings', ''])

    for control in report.controls:
        lines.extend([
            f"### {control.id}: {control.name}",
            '',
            f"> {control.description}",
            '',
            f"**Status:** {control.status.upper()}",
            '',
        ])

        if control.evidence:
            lines.append('**Evidence of Compliance:**')
            lines.extend(f"- {evidence}" for evidence in control.evidence)
            lines.append('')

        if control.findings:
            lines.extend(['**Findings Requiring Attention:**', ''])
            for finding in control.findings:
                lines.extend([
                    f"- {SEVERITY_ICONS[finding.severity]} **{finding.title}** ({finding.severity})",
                    f"  - {finding.description}",
                    f"  - *Recommendation:* {finding.recommendation}",
                    '',
                ])
        else:
            lines.extend(['*No findings for this control.*', ''])

        lines.extend(['---', ''])

    lines.extend(['## Repositories Included', ''])
    lines.extend(f"- {repository}" for repository in report.repositories)

    return '\n'.join(lines)


def format_json(model: DataClassJsonMixin) -> str:
    """Render any result model as indented JSON."""
    return model.to_json(indent=2, ensure_ascii=False)
