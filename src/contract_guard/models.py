"""Data models for contract risk analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

QUOTE_MAX_CHARS = 300
EXPLANATION_MAX_CHARS = 500
MAX_RISKY_CLAUSES = 10


class Severity(str, Enum):
    """Coarse risk tier of a single clause."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class Category(str, Enum):
    """Closed set of risky clause categories."""

    TERMINATION = "termination"
    PENALTY = "penalty"
    AUTO_RENEWAL = "auto-renewal"
    NON_COMPETE = "non-compete"
    ARBITRATION = "arbitration"
    LIABILITY = "liability"
    HIDDEN_FEES = "hidden-fees"
    REFUND_RESTRICTIONS = "refund-restrictions"
    DATA_PRIVACY = "data-privacy"
    INTELLECTUAL_PROPERTY = "intellectual-property"
    OTHER = "other"


class ContractType(str, Enum):
    """Contract classification reported by the model."""

    EMPLOYMENT = "employment"
    SERVICE_AGREEMENT = "service-agreement"
    RENTAL_LEASE = "rental-lease"
    PURCHASE_AGREEMENT = "purchase-agreement"
    NON_DISCLOSURE = "non-disclosure"
    PARTNERSHIP = "partnership"
    LICENSING = "licensing"
    CONSULTING = "consulting"
    OTHER = "other"


class Recommendation(str, Enum):
    """Signing advice derived from the overall score."""

    SAFE = "Safe to sign"
    REVIEW = "Review carefully"
    AVOID = "Avoid signing"


class RiskLevel(str, Enum):
    """Coarse band of the overall risk score."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


def truncate(text: str, limit: int) -> str:
    """Cut ``text`` to ``limit`` characters, marking the cut with an ellipsis."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


@dataclass
class RiskyClause:
    """A candidate risky provision found in the contract text."""

    title: str
    quote: str
    severity: Severity
    category: Category
    risk_score: int
    explanation: Optional[str] = None
    source: str = "rule"

    def __post_init__(self) -> None:
        if not 1 <= self.risk_score <= 10:
            raise ValueError(f"risk_score must be within [1, 10], got {self.risk_score}")

    @property
    def is_high(self) -> bool:
        return self.severity == Severity.HIGH

    def with_explanation(self, explanation: str) -> RiskyClause:
        """Return a copy carrying ``explanation`` (bounded in length)."""
        return RiskyClause(
            title=self.title,
            quote=self.quote,
            severity=self.severity,
            category=self.category,
            risk_score=self.risk_score,
            explanation=truncate(explanation.strip(), EXPLANATION_MAX_CHARS),
            source=self.source,
        )

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "quote": self.quote,
            "explanation": self.explanation,
            "severity": self.severity.value,
            "category": self.category.value,
            "riskScore": self.risk_score,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Complete risk analysis of one contract.

    Produced once per processing attempt and embedded as a value in the
    owning contract record. ``fallback_reason`` is set only when the
    result was built without model assistance.
    """

    summary: str
    overall_risk_score: int
    recommendation: Recommendation
    risky_clauses: list[RiskyClause] = field(default_factory=list)
    key_highlights: list[str] = field(default_factory=list)
    contract_type: ContractType = ContractType.OTHER
    negotiation_tips: list[str] = field(default_factory=list)
    confidence: float = 0.8
    ai_model: str = "rule-based-fallback"
    analysis_version: str = "1.0"
    fallback_reason: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.fallback_reason is not None

    @property
    def risk_level(self) -> RiskLevel:
        from .scoring import risk_level

        return risk_level(self.overall_risk_score)

    @property
    def high_risk_clauses(self) -> list[RiskyClause]:
        return [c for c in self.risky_clauses if c.is_high]

    def to_dict(self) -> dict:
        return {
            "summary": self.summary,
            "keyHighlights": list(self.key_highlights),
            "contractType": self.contract_type.value,
            "riskyClauses": [c.to_dict() for c in self.risky_clauses],
            "overallRiskScore": self.overall_risk_score,
            "recommendation": self.recommendation.value,
            "negotiationTips": list(self.negotiation_tips),
            "analysisVersion": self.analysis_version,
            "aiModel": self.ai_model,
            "confidence": round(self.confidence, 3),
            "riskLevel": self.risk_level.value,
            "fallbackReason": self.fallback_reason,
        }
