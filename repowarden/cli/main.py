"""Main CLI application for RepoWarden."""

import asyncio
import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from ..adapters.github_client import GitHubProvider
from ..config import ScanOptions
from ..logging import get_logger
from ..models.results import RepoScanResult
from ..orchestrator.compliance import map_compliance
from ..orchestrator.remediation import RemediationDispatcher, is_fixable
from ..orchestrator.scanner import SecurityScanner, split_full_name
from ..reports import format_compliance_markdown, format_json

app = typer.Typer(
    name="repowarden",
    help="Security configuration audits for GitHub repositories",
    add_completion=False
)

console = Console()
logger = get_logger(__name__)

SEVERITY_COLORS = {
    'critical': 'red',
    'high': 'yellow',
    'medium': 'blue',
    'low': 'green',
    'info': 'white',
}


def _scanner(threshold: Optional[str] = None, org: Optional[str] = None) -> SecurityScanner:
    options = ScanOptions.from_settings(severity_threshold=threshold, org=org)
    return SecurityScanner(GitHubProvider(), options)


@app.command()
def repos(
    org: Optional[str] = typer.Option(
        None, "--org", "-o", help="Organization to list (default: authenticated user)"
    ),
    include_archived: Optional[bool] = typer.Option(
        None, "--include-archived/--exclude-archived", help="Include archived repositories (default: from settings)"
    ),
    include_forks: Optional[bool] = typer.Option(
        None, "--include-forks/--exclude-forks", help="Include forked repositories (default: from settings)"
    ),
) -> None:
    """List repositories available for scanning."""
    asyncio.run(_list_repos(org, include_archived, include_forks))


@app.command()
def scan(
    repositories: List[str] = typer.Argument(..., help="Repositories to scan, as owner/repo"),
    threshold: Optional[str] = typer.Option(
        None, "--threshold", "-t", help="Least severe level to report: critical, high, medium, low, info"
    ),
    as_json: bool = typer.Option(
        False, "--json", help="Print results as JSON"
    ),
) -> None:
    """Scan one or more repositories."""
    if not as_json:
        console.print("[bold blue]RepoWarden[/bold blue] - Repository Scan")
        console.print(f"Repositories: {len(repositories)}")
        console.print()

    asyncio.run(_run_scan(repositories, threshold, as_json))


@app.command()
def report(
    repositories: List[str] = typer.Argument(..., help="Repositories to include, as owner/repo"),
    output_format: str = typer.Option(
        "markdown", "--format", "-f", help="Report format: markdown, json"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the report to a file instead of stdout"
    ),
) -> None:
    """Generate a SOC 2 compliance report."""
    if output_format not in ("markdown", "json"):
        console.print(f"[red]Unknown report format: {output_format}[/red]")
        raise typer.Exit(2)

    asyncio.run(_run_report(repositories, output_format, output))


@app.command()
def fix(
    repository: str = typer.Argument(..., help="Repository to fix, as owner/repo"),
    finding_id: str = typer.Argument(..., help="Finding id to remediate, e.g. bp-admin-bypass"),
    branch: Optional[str] = typer.Option(
        None, "--branch", "-b", help="Branch for branch protection fixes (default: main)"
    ),
) -> None:
    """Apply the automatic fix for a finding."""
    asyncio.run(_run_fix(repository, finding_id, branch))


async def _list_repos(
    org: Optional[str], include_archived: Optional[bool], include_forks: Optional[bool]
) -> None:
    """List repositories and print them as a table."""
    try:
        scanner = _scanner(org=org)
        identities = await scanner.list_available_repos(
            include_archived=include_archived,
            include_forks=include_forks
        )
    except Exception as e:
        console.print(f"[red]Failed to list repositories: {e}[/red]")
        logger.error("Repository listing failed", error=str(e))
        raise typer.Exit(1)

    table = Table(title=f"Repositories ({len(identities)})")
    table.add_column("Repository", style="cyan")
    table.add_column("Visibility", style="magenta")
    table.add_column("Default Branch", style="green")

    for identity in identities:
        table.add_row(identity.full_name, identity.visibility, identity.default_branch)

    console.print(table)


async def _run_scan(repositories: List[str], threshold: Optional[str], as_json: bool) -> None:
    """Scan repositories and display the results."""
    try:
        scanner = _scanner(threshold=threshold)
    except Exception as e:
        console.print(f"[red]Scan failed: {e}[/red]")
        logger.error("Scan setup failed", error=str(e))
        raise typer.Exit(1)

    results = await scanner.scan_many(repositories)

    if as_json:
        print(json.dumps([r.to_dict(encode_json=True) for r in results], indent=2))
    else:
        for result in results:
            _display_scan_result(result)

    if len(results) < len(repositories):
        console.print(f"[red]{len(repositories) - len(results)} repository scan(s) failed[/red]")
        raise typer.Exit(1)


async def _run_report(repositories: List[str], output_format: str, output: Optional[Path]) -> None:
    """Scan repositories and render a compliance report."""
    try:
        scanner = _scanner()
    except Exception as e:
        console.print(f"[red]Report failed: {e}[/red]")
        logger.error("Report setup failed", error=str(e))
        raise typer.Exit(1)

    results = await scanner.scan_many(repositories)
    compliance = map_compliance(results)

    if output_format == "json":
        rendered = format_json(compliance)
    else:
        rendered = format_compliance_markdown(compliance)

    if output:
        output.write_text(rendered, encoding="utf-8")
        console.print(f"[green]Report saved to: {output}[/green]")
        console.print(f"Overall compliance: {compliance.overall_compliance}%")
    else:
        print(rendered)


async def _run_fix(repository: str, finding_id: str, branch: Optional[str]) -> None:
    """Apply one fix and report the outcome."""
    try:
        owner, repo = split_full_name(repository)
        dispatcher = RemediationDispatcher(GitHubProvider())
    except Exception as e:
        console.print(f"[red]Fix failed: {e}[/red]")
        logger.error("Fix setup failed", error=str(e))
        raise typer.Exit(1)

    result = await dispatcher.fix(owner, repo, finding_id, branch=branch)

    if result.success:
        console.print(f"✅ {result.message}")
    else:
        console.print(f"❌ [red]{result.message}[/red]")
        raise typer.Exit(1)


def _display_scan_result(result: RepoScanResult) -> None:
    """Display one scan result in a nice format."""
    summary = result.summary
    score_color = 'green' if result.score >= 80 else 'yellow' if result.score >= 50 else 'red'

    console.print(f"[bold]{result.full_name}[/bold] ({result.repository.visibility})")
    console.print(f"Score: [{score_color}]{result.score}/100[/{score_color}]")
    console.print(
        f"Critical: {summary.critical}  High: {summary.high}  Medium: {summary.medium}  "
        f"Low: {summary.low}  Info: {summary.info}"
    )

    if result.findings:
        table = Table(title="Findings")
        table.add_column("ID", style="cyan")
        table.add_column("Title", style="white")
        table.add_column("Severity")
        table.add_column("Control", style="magenta")
        table.add_column("Fixable", style="green")

        for finding in result.findings:
            color = SEVERITY_COLORS[finding.severity]
            table.add_row(
                finding.id,
                finding.title,
                f"[{color}]{finding.severity}[/{color}]",
                finding.control_id or '',
                "yes" if is_fixable(finding.id) else ""
            )

        console.print(table)

    console.print()


if __name__ == "__main__":
    app()
