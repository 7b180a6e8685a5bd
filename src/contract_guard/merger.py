"""Combine rule-based and model-reported clauses."""

from __future__ import annotations

from .models import MAX_RISKY_CLAUSES, RiskyClause

# Quote prefix compared when deciding that two clauses collide
MERGE_PREFIX_CHARS = 50


def _collides(existing: RiskyClause, candidate: RiskyClause) -> bool:
    return (
        existing.category == candidate.category
        and existing.quote[:MERGE_PREFIX_CHARS] == candidate.quote[:MERGE_PREFIX_CHARS]
    )


def merge(
    rule_based: list[RiskyClause],
    model_based: list[RiskyClause],
    limit: int = MAX_RISKY_CLAUSES,
) -> list[RiskyClause]:
    """Append model clauses that don't collide with an earlier one, then cap.

    Rule-based clauses come first, so they win every collision.
    """
    merged = list(rule_based)
    for clause in model_based:
        if not any(_collides(existing, clause) for existing in merged):
            merged.append(clause)
    return merged[:limit]
