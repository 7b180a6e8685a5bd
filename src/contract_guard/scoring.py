"""Aggregate risk score and signing recommendation."""

from __future__ import annotations

from .models import Recommendation, RiskLevel, RiskyClause
from .patterns import SEVERITY_MULTIPLIER, category_weight, round_half_up

BASELINE_SCORE = 20
# riskScore <= 10, multiplier <= 3, weight <= 1.0
MAX_CLAUSE_CONTRIBUTION = 30

AVOID_THRESHOLD = 70
REVIEW_THRESHOLD = 40


def score(clauses: list[RiskyClause]) -> int:
    """Overall risk score in [0, 100].

    An empty list scores the baseline of 20. Otherwise the weighted sum
    is normalized against the per-clause ceiling, and never drops below
    ``min(30 + 5 * n, 70)`` so any detection leaves the safe band.
    """
    if not clauses:
        return BASELINE_SCORE

    total = 0.0
    max_possible = 0
    for clause in clauses:
        total += (
            clause.risk_score
            * SEVERITY_MULTIPLIER[clause.severity]
            * category_weight(clause.category)
        )
        max_possible += MAX_CLAUSE_CONTRIBUTION

    normalized = min(100, round_half_up(total / max_possible * 100))
    floor = min(30 + 5 * len(clauses), 70)
    return max(normalized, floor)


def recommend(overall_score: int, clauses: list[RiskyClause]) -> Recommendation:
    high_count = sum(1 for c in clauses if c.is_high)
    if overall_score >= AVOID_THRESHOLD or high_count >= 2:
        return Recommendation.AVOID
    if overall_score >= REVIEW_THRESHOLD or high_count >= 1:
        return Recommendation.REVIEW
    return Recommendation.SAFE


def risk_level(overall_score: int) -> RiskLevel:
    """Coarse level shown next to the score."""
    if overall_score >= AVOID_THRESHOLD:
        return RiskLevel.HIGH
    if overall_score >= REVIEW_THRESHOLD:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW
