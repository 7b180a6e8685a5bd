"""Pydantic schemas validating the model's JSON reply."""

from __future__ import annotations

import math
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import (
    EXPLANATION_MAX_CHARS,
    QUOTE_MAX_CHARS,
    Category,
    ContractType,
    RiskyClause,
    Severity,
    truncate,
)


def _is_finite_number(value) -> bool:
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


class ModelClause(BaseModel):
    """One risky clause as reported by the model."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(min_length=1)
    quote: str = Field(min_length=1)
    explanation: Optional[str] = None
    severity: Severity
    category: Category = Category.OTHER
    risk_score: int = Field(default=5, alias="riskScore")

    @field_validator("title", "quote", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("quote")
    @classmethod
    def _bound_quote(cls, value: str) -> str:
        return truncate(value, QUOTE_MAX_CHARS)

    @field_validator("explanation", mode="before")
    @classmethod
    def _bound_explanation(cls, value):
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValueError("explanation must be a string")
        value = value.strip()
        return truncate(value, EXPLANATION_MAX_CHARS) if value else None

    @field_validator("severity", mode="before")
    @classmethod
    def _severity_case(cls, value):
        if isinstance(value, str):
            return value.strip().capitalize()
        return value

    @field_validator("category", mode="before")
    @classmethod
    def _known_category(cls, value):
        if isinstance(value, str):
            value = value.strip().lower()
            if value in {c.value for c in Category}:
                return value
        return Category.OTHER

    @field_validator("risk_score", mode="before")
    @classmethod
    def _clamp_score(cls, value):
        if isinstance(value, bool):
            raise ValueError("riskScore must be a number")
        if isinstance(value, str):
            value = float(value)
        if _is_finite_number(value):
            return max(1, min(10, int(round(value))))
        raise ValueError("riskScore must be a finite number")

    def to_clause(self) -> RiskyClause:
        return RiskyClause(
            title=self.title,
            quote=self.quote,
            explanation=self.explanation,
            severity=self.severity,
            category=self.category,
            risk_score=self.risk_score,
            source="model",
        )


class ModelReply(BaseModel):
    """Top-level JSON object returned by the analysis prompt."""

    model_config = ConfigDict(populate_by_name=True)

    summary: str = "Contract analysis completed."
    key_highlights: list[str] = Field(default_factory=list, alias="keyHighlights")
    contract_type: ContractType = Field(default=ContractType.OTHER, alias="contractType")
    risky_clauses: list[ModelClause] = Field(default_factory=list, alias="riskyClauses")
    negotiation_tips: list[str] = Field(default_factory=list, alias="negotiationTips")
    confidence: float = 0.8

    @field_validator("summary", mode="before")
    @classmethod
    def _summary_default(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return "Contract analysis completed."
        return value

    @field_validator("key_highlights", "negotiation_tips", "risky_clauses", mode="before")
    @classmethod
    def _null_list(cls, value):
        return [] if value is None else value

    @field_validator("contract_type", mode="before")
    @classmethod
    def _known_contract_type(cls, value):
        if isinstance(value, str):
            value = value.strip().lower()
            if value in {t.value for t in ContractType}:
                return value
        return ContractType.OTHER

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value):
        if value is None:
            return 0.8
        if isinstance(value, bool):
            raise ValueError("confidence must be a number")
        if isinstance(value, str):
            value = float(value)
        if _is_finite_number(value):
            return float(max(0, min(1, value)))
        raise ValueError("confidence must be a finite number")
