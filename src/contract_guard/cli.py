"""Command-line interface for ContractGuard.

Provides ``analyze`` and ``detect`` commands with rich terminal output
using the ``click`` and ``rich`` libraries.

Usage::

    contract-guard analyze contract.pdf
    contract-guard analyze --offline --report report.md contract.pdf
    contract-guard detect contract.pdf
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .config import Settings
from .engine import ContractRiskEngine
from .llm import LLMClient
from .models import Recommendation, RiskyClause, Severity
from .parsers import DocumentError, extract_text
from .records import ProcessingStatus, process_contract
from .report import render_markdown

console = Console()


def _get_severity_style(severity: Severity) -> str:
    """Return a rich style string for a clause severity."""
    return {
        Severity.HIGH: "bold red",
        Severity.MEDIUM: "bold yellow",
        Severity.LOW: "dim green",
    }.get(severity, "")


def _get_recommendation_style(recommendation: Recommendation) -> str:
    return {
        Recommendation.AVOID: "bold red",
        Recommendation.REVIEW: "bold yellow",
        Recommendation.SAFE: "bold green",
    }.get(recommendation, "")


@click.group()
@click.version_option(package_name="contract-guard")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
def main(verbose: bool) -> None:
    """ContractGuard: contract clause risk analysis.

    Detects risky clauses, scores the contract and recommends whether
    to sign it.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("file", type=click.Path(exists=True, path_type=Path))
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@click.option("--save", "-s", type=click.Path(path_type=Path), default=None,
              help="Save the contract record to a JSON file.")
@click.option("--report", "-r", type=click.Path(path_type=Path), default=None,
              help="Write a Markdown report.")
@click.option("--offline", is_flag=True, help="Skip the language model; rule-based only.")
@click.option("--model", "-m", default=None, help="Override the analysis model.")
def analyze(
    file: Path,
    output: str,
    save: Path | None,
    report: Path | None,
    offline: bool,
    model: str | None,
) -> None:
    """Run the full risk analysis on a contract.

    Example: contract-guard analyze contract.pdf
    """
    settings = Settings.from_env()
    if model:
        settings.analysis_model = model
    client = None if offline else LLMClient(settings)
    engine = ContractRiskEngine(client=client, settings=settings)

    with console.status("[bold blue]Analyzing contract...", spinner="dots"):
        record = process_contract(file, engine, max_bytes=settings.max_file_size)

    if record.status == ProcessingStatus.FAILED:
        console.print(f"[bold red]Error:[/] {record.error_message}")
        sys.exit(1)

    result = record.analysis
    if output == "json":
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _render_analysis(result, record.file_name, record.processing_duration)

    if save:
        save.write_text(json.dumps(record.to_dict(), indent=2), encoding="utf-8")
        console.print(f"\n[dim]Record saved to {save}[/]")
    if report:
        report.write_text(render_markdown(result, record.file_name), encoding="utf-8")
        console.print(f"[dim]Report written to {report}[/]")


@main.command()
@click.argument("file", type=click.Path(exists=True, path_type=Path))
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
def detect(file: Path, output: str) -> None:
    """List rule-based risky clauses without contacting a model.

    Example: contract-guard detect contract.pdf
    """
    settings = Settings.from_env()
    try:
        document = extract_text(file, max_bytes=settings.max_file_size)
    except DocumentError as e:
        console.print(f"[bold red]Error:[/] {e}")
        sys.exit(1)

    clauses = ContractRiskEngine(settings=settings).detect_only(document.text)

    if output == "json":
        click.echo(json.dumps([c.to_dict() for c in clauses], indent=2))
    else:
        _render_clauses(clauses, file.name)


# ------------------------------------------------------------------
# Rich rendering helpers
# ------------------------------------------------------------------

def _render_analysis(result, file_name: str, duration: str | None) -> None:
    """Render a full AnalysisResult with rich formatting."""
    console.print()

    source = "rule-based fallback" if result.is_fallback else result.ai_model
    console.print(Panel(
        f"[bold]{file_name}[/]\n"
        f"Type: {result.contract_type.value} | "
        f"Clauses: {len(result.risky_clauses)} | "
        f"Analysis: {source} | "
        f"Confidence: {result.confidence:.0%}"
        + (f" | Took {duration}" if duration else ""),
        title="ContractGuard Analysis",
        border_style="blue",
    ))

    console.print(Panel(result.summary, title="Summary", border_style="dim"))

    if result.key_highlights:
        console.print("[bold]Key Highlights[/]")
        for highlight in result.key_highlights:
            console.print(f"  • {highlight}")
        console.print()

    if result.risky_clauses:
        _render_clauses(result.risky_clauses, file_name)

    if result.negotiation_tips:
        console.print("[bold]Negotiation Tips[/]")
        for tip in result.negotiation_tips:
            console.print(f"  💡 {tip}")
        console.print()

    rec_style = _get_recommendation_style(result.recommendation)
    console.print(
        f"Overall Risk Score: [{rec_style}]{result.overall_risk_score}/100[/] "
        f"({result.risk_level.value})"
    )
    console.print(f"Recommendation: [{rec_style}]{result.recommendation.value}[/]")
    console.print()


def _render_clauses(clauses: list[RiskyClause], filename: str) -> None:
    """Render clauses as a rich table."""
    table = Table(title=f"Risky Clauses — {filename}", show_lines=True)
    table.add_column("#", justify="right", width=4)
    table.add_column("Title", style="cyan", width=26)
    table.add_column("Quote (excerpt)", style="white", max_width=60)
    table.add_column("Category", width=20)
    table.add_column("Score", justify="center", width=6)
    table.add_column("Severity", justify="center", width=9)

    for i, clause in enumerate(clauses, 1):
        excerpt = clause.quote[:120].replace("\n", " ") + ("..." if len(clause.quote) > 120 else "")
        table.add_row(
            str(i),
            clause.title,
            excerpt,
            clause.category.value,
            str(clause.risk_score),
            Text(clause.severity.value.upper(), style=_get_severity_style(clause.severity)),
        )

    console.print(table)
    console.print()


if __name__ == "__main__":
    main()
