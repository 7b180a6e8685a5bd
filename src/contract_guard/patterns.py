"""Fixed rule tables shared by the detector and the scorer.

The weights are hand-tuned constants; keep them as they are so scores
stay comparable across releases.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field

from .models import Category, Severity


@dataclass
class _RiskPattern:
    """Internal definition of one rule-based risk category."""

    key: str
    title: str
    severity: Severity
    category: Category
    # Case-insensitive regexes, evaluated in order
    patterns: list[re.Pattern] = field(default_factory=list)


def _compile(*patterns: str) -> list[re.Pattern]:
    return [re.compile(p, re.IGNORECASE) for p in patterns]


# Iteration order is part of the detector's output order
RISK_PATTERNS: list[_RiskPattern] = [
    _RiskPattern(
        key="auto-renewal",
        title="Automatic Renewal Clause",
        severity=Severity.MEDIUM,
        category=Category.AUTO_RENEWAL,
        patterns=_compile(
            r"automatically renew",
            r"auto.?renewal",
            r"unless.*notice.*terminate",
            r"shall continue.*unless.*terminated",
            r"renew.*additional.*term",
        ),
    ),
    _RiskPattern(
        key="termination-penalty",
        title="Early Termination Penalty",
        severity=Severity.HIGH,
        category=Category.PENALTY,
        patterns=_compile(
            r"early termination.*fee",
            r"penalty.*cancel",
            r"liquidated damages",
            r"termination.*penalty",
            r"cancellation.*fee",
        ),
    ),
    _RiskPattern(
        key="non-compete",
        title="Non-Compete Restriction",
        severity=Severity.HIGH,
        category=Category.NON_COMPETE,
        patterns=_compile(
            r"non.?compete",
            r"restraint.*trade",
            r"competing.*business",
            r"solicit.*customers",
            r"covenant.*not.*compete",
        ),
    ),
    _RiskPattern(
        key="arbitration",
        title="Mandatory Arbitration",
        severity=Severity.MEDIUM,
        category=Category.ARBITRATION,
        patterns=_compile(
            r"binding arbitration",
            r"waive.*right.*jury",
            r"dispute.*arbitration",
            r"mandatory arbitration",
            r"arbitration.*agreement",
        ),
    ),
    _RiskPattern(
        key="liability-limitation",
        title="Liability Limitation",
        severity=Severity.MEDIUM,
        category=Category.LIABILITY,
        patterns=_compile(
            r"limit.*liability",
            r"exclude.*damages",
            r"no.*consequential.*damages",
            r"liability.*limited.*to",
            r"maximum.*liability",
        ),
    ),
    _RiskPattern(
        key="hidden-fees",
        title="Additional Fees",
        severity=Severity.MEDIUM,
        category=Category.HIDDEN_FEES,
        patterns=_compile(
            r"additional.*fees",
            r"service.*charges",
            r"processing.*fee",
            r"administrative.*cost",
            r"miscellaneous.*charges",
        ),
    ),
    _RiskPattern(
        key="refund-restrictions",
        title="Refund Restrictions",
        severity=Severity.MEDIUM,
        category=Category.REFUND_RESTRICTIONS,
        patterns=_compile(
            r"no.*refund",
            r"non.?refundable",
            r"refund.*policy",
            r"no.*return",
            r"final.*sale",
        ),
    ),
]

SEVERITY_BASE_SCORE: dict[Severity, int] = {
    Severity.LOW: 3,
    Severity.MEDIUM: 6,
    Severity.HIGH: 9,
}

SEVERITY_MULTIPLIER: dict[Severity, int] = {
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
}

CATEGORY_WEIGHT: dict[Category, float] = {
    Category.TERMINATION: 1.0,
    Category.PENALTY: 0.9,
    Category.NON_COMPETE: 1.0,
    Category.AUTO_RENEWAL: 0.7,
    Category.ARBITRATION: 0.8,
    Category.LIABILITY: 0.8,
    Category.HIDDEN_FEES: 0.6,
    Category.REFUND_RESTRICTIONS: 0.7,
}

DEFAULT_CATEGORY_WEIGHT = 0.7

DEFAULT_EXPLANATIONS: dict[Category, str] = {
    Category.AUTO_RENEWAL: (
        "This clause automatically extends your contract without your explicit consent, "
        "potentially locking you into unwanted terms."
    ),
    Category.PENALTY: (
        "This clause imposes financial penalties for early termination, which could be "
        "costly if you need to exit the contract."
    ),
    Category.NON_COMPETE: (
        "This clause restricts your ability to work in your field after the contract ends, "
        "potentially limiting your career options."
    ),
    Category.ARBITRATION: (
        "This clause requires disputes to be resolved through arbitration instead of court, "
        "limiting your legal options."
    ),
    Category.LIABILITY: (
        "This clause limits the other party's responsibility for damages, potentially "
        "leaving you unprotected."
    ),
    Category.HIDDEN_FEES: (
        "This clause allows for additional charges that may not be clearly disclosed upfront."
    ),
    Category.REFUND_RESTRICTIONS: (
        "This clause limits your ability to get refunds, potentially putting your money at risk."
    ),
}

GENERIC_EXPLANATION = "This clause contains terms that could be disadvantageous to you."


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for non-negative input."""
    return int(math.floor(value + 0.5))


def category_weight(category: Category) -> float:
    return CATEGORY_WEIGHT.get(category, DEFAULT_CATEGORY_WEIGHT)


def clause_risk_score(severity: Severity, category: Category) -> int:
    """Per-clause score in [1, 10] for a rule-based detection."""
    score = round_half_up(SEVERITY_BASE_SCORE[severity] * category_weight(category))
    return max(1, min(10, score))


def default_explanation(category: Category) -> str:
    return DEFAULT_EXPLANATIONS.get(category, GENERIC_EXPLANATION)
