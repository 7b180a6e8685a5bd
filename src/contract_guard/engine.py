"""Clause risk engine orchestrating detection, model analysis and scoring.

``ContractRiskEngine.analyze`` is the primary entry point. It always
returns an ``AnalysisResult``: when the model call fails for any reason
the result is built from the rule-based detections alone.
"""

from __future__ import annotations

import logging

from .adapter import Failure, ModelAnalysisAdapter
from .config import Settings
from .detector import PatternDetector
from .llm import CompletionClient
from .merger import merge
from .models import AnalysisResult, ContractType, RiskyClause
from .patterns import default_explanation
from .scoring import recommend, score

logger = logging.getLogger(__name__)

FALLBACK_MODEL = "rule-based-fallback"
FALLBACK_CONFIDENCE = 0.6


class ContractRiskEngine:
    """Hybrid rule-based and model-assisted contract risk analyzer.

    Example::

        engine = ContractRiskEngine(client=LLMClient(settings), settings=settings)
        result = engine.analyze(contract_text, "lease.pdf")

        print(result.overall_risk_score, result.recommendation.value)
        for clause in result.risky_clauses:
            print(f"[{clause.severity.value}] {clause.title}")

    Args:
        client: Completion client used for model assistance. Without one
            every analysis takes the rule-based fallback path.
        settings: Model names and limits.
        detector: Custom PatternDetector instance (optional).
    """

    def __init__(
        self,
        client: CompletionClient | None = None,
        settings: Settings | None = None,
        detector: PatternDetector | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._detector = detector or PatternDetector()
        self._adapter = ModelAnalysisAdapter(client, self._settings)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def analyze(self, text: str, file_name: str) -> AnalysisResult:
        """Run the full pipeline on extracted contract text.

        Args:
            text: Full contract text.
            file_name: Display name, embedded in prompts and summaries.

        Returns:
            A complete AnalysisResult; never raises for model failures.
        """
        rule_clauses = self._detector.detect(text)
        model_result = self._adapter.analyze_via_model(text, file_name)

        if isinstance(model_result, Failure):
            logger.info(
                "Falling back to rule-based analysis for %s (%s)",
                file_name,
                model_result.reason.value,
            )
            return self._fallback(rule_clauses, file_name, model_result)

        merged = merge(rule_clauses, model_result.risky_clauses)
        clauses = self._adapter.explain_all(merged)
        overall = score(clauses)

        return AnalysisResult(
            summary=model_result.summary,
            key_highlights=model_result.key_highlights,
            contract_type=model_result.contract_type,
            risky_clauses=clauses,
            overall_risk_score=overall,
            recommendation=recommend(overall, clauses),
            negotiation_tips=model_result.negotiation_tips,
            confidence=model_result.confidence,
            ai_model=self._adapter.model,
        )

    def detect_only(self, text: str) -> list[RiskyClause]:
        """Rule-based clauses with default explanations; no network access."""
        return _with_default_explanations(merge(self._detector.detect(text), []))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _fallback(
        self,
        rule_clauses: list[RiskyClause],
        file_name: str,
        failure: Failure,
    ) -> AnalysisResult:
        clauses = _with_default_explanations(merge(rule_clauses, []))
        overall = score(clauses)
        count = len(clauses)

        return AnalysisResult(
            summary=(
                f"This appears to be a legal contract ({file_name}). Our analysis has "
                f"identified {count} areas that require attention. Please review carefully "
                "before signing."
            ),
            key_highlights=[
                "Contract contains standard legal terms",
                f"{count} potential risk areas identified",
                "Consider consulting a legal professional for complex terms",
            ],
            contract_type=ContractType.OTHER,
            risky_clauses=clauses,
            overall_risk_score=overall,
            recommendation=recommend(overall, clauses),
            negotiation_tips=[
                "Review all terms carefully before signing",
                "Consider negotiating unfavorable clauses",
                "Seek legal advice if unsure about any terms",
                "Ask for clarification on complex language",
            ],
            confidence=FALLBACK_CONFIDENCE,
            ai_model=FALLBACK_MODEL,
            fallback_reason=failure.reason.value,
        )


def _with_default_explanations(clauses: list[RiskyClause]) -> list[RiskyClause]:
    return [
        c if c.explanation else c.with_explanation(default_explanation(c.category))
        for c in clauses
    ]
