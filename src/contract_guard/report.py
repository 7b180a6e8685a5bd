"""Markdown report of a contract analysis."""

from __future__ import annotations

from datetime import date

from .models import AnalysisResult

DISCLAIMER = (
    "DISCLAIMER: This analysis is for informational purposes only and does not constitute "
    "legal advice. ContractGuard is not a law firm and does not provide legal services. "
    "For legal advice, please consult with a qualified attorney licensed in your jurisdiction."
)


def _numbered(items: list[str]) -> list[str]:
    return [f"{i}. {item}" for i, item in enumerate(items, 1)]


def render_markdown(
    result: AnalysisResult,
    file_name: str,
    analyzed_on: date | None = None,
) -> str:
    """Render ``result`` as a printable Markdown report."""
    analyzed_on = analyzed_on or date.today()
    parts: list[str] = [
        "# ContractGuard Analysis Report",
        "",
        f"**Contract:** {file_name}  ",
        f"**Analyzed:** {analyzed_on.isoformat()}",
        "",
        "## Overall Risk Assessment",
        "",
        f"Risk Score: {result.overall_risk_score}/100 ({result.risk_level.value} Risk)  ",
        f"Recommendation: {result.recommendation.value}",
    ]
    if result.is_fallback:
        parts.append("")
        parts.append("_Model assistance was unavailable; findings are rule-based only._")

    if result.summary:
        parts += ["", "## Executive Summary", "", result.summary]

    if result.key_highlights:
        parts += ["", "## Key Highlights", ""] + _numbered(result.key_highlights)

    if result.risky_clauses:
        parts += ["", "## Risky Clauses Identified", ""]
        for i, clause in enumerate(result.risky_clauses, 1):
            parts.append(f"### {i}. {clause.title} ({clause.severity.value} Risk)")
            parts.append("")
            parts.append(f'> "{clause.quote}"')
            parts.append("")
            if clause.explanation:
                parts.append(f"Risk: {clause.explanation}")
                parts.append("")

    if result.negotiation_tips:
        parts += ["", "## Negotiation Recommendations", ""] + _numbered(result.negotiation_tips)

    parts += ["", "---", "", f"_{DISCLAIMER}_", ""]
    return "\n".join(parts)
