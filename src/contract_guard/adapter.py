"""Model-assisted contract analysis.

The adapter never raises into the pipeline: every call either yields a
``ModelAnalysis`` or a ``Failure`` carrying a ``FailureReason``.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from pydantic import ValidationError

from .config import Settings
from .llm import CompletionClient, CompletionError, FailureReason
from .models import ContractType, RiskyClause
from .patterns import default_explanation
from .prompts import ANALYSIS_PROMPT, EXPLANATION_PROMPT, SYSTEM_PROMPT, TRUNCATION_MARKER
from .schemas import ModelReply

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Failure:
    """A model-assisted step that produced nothing usable."""

    reason: FailureReason
    detail: str = ""


@dataclass(frozen=True)
class ModelAnalysis:
    """Validated narrative fields and clauses from the model."""

    summary: str
    key_highlights: list[str] = field(default_factory=list)
    contract_type: ContractType = ContractType.OTHER
    risky_clauses: list[RiskyClause] = field(default_factory=list)
    negotiation_tips: list[str] = field(default_factory=list)
    confidence: float = 0.8


def strip_code_fence(response: str) -> str:
    """Return the body of a Markdown code block if the reply is wrapped in one."""
    if "```json" in response:
        start = response.find("```json") + 7
        end = response.find("```", start)
        return response[start:end if end != -1 else None].strip()
    if "```" in response:
        start = response.find("```") + 3
        end = response.find("```", start)
        return response[start:end if end != -1 else None].strip()
    return response.strip()


def parse_model_reply(response: str) -> ModelAnalysis | Failure:
    """Decode and validate the analysis reply."""
    try:
        payload = json.loads(strip_code_fence(response))
    except json.JSONDecodeError as exc:
        return Failure(FailureReason.PARSE_ERROR, f"invalid JSON: {exc}")
    if not isinstance(payload, dict):
        return Failure(FailureReason.PARSE_ERROR, "reply is not a JSON object")

    try:
        reply = ModelReply.model_validate(payload)
    except ValidationError as exc:
        return Failure(FailureReason.PARSE_ERROR, f"schema mismatch: {exc.error_count()} error(s)")

    return ModelAnalysis(
        summary=reply.summary,
        key_highlights=list(reply.key_highlights),
        contract_type=reply.contract_type,
        risky_clauses=[c.to_clause() for c in reply.risky_clauses],
        negotiation_tips=list(reply.negotiation_tips),
        confidence=reply.confidence,
    )


class ModelAnalysisAdapter:
    """Run the analysis and explanation prompts against a completion client.

    Args:
        client: Completion client. ``None`` means no model is configured
            and every call reports ``NOT_CONFIGURED``.
        settings: Models, token limits and worker count.
    """

    def __init__(self, client: CompletionClient | None, settings: Settings | None = None) -> None:
        self._client = client
        self._settings = settings or Settings()

    @property
    def model(self) -> str:
        return self._settings.analysis_model

    def build_prompt(self, text: str, file_name: str) -> str:
        limit = self._settings.max_prompt_chars
        contract_text = text[:limit]
        if len(text) > limit:
            contract_text += TRUNCATION_MARKER
        return ANALYSIS_PROMPT.format(file_name=file_name, contract_text=contract_text)

    def analyze_via_model(self, text: str, file_name: str) -> ModelAnalysis | Failure:
        """Ask the model for a structured analysis of ``text``."""
        if self._client is None:
            return Failure(FailureReason.NOT_CONFIGURED, "no completion client")

        try:
            response = self._client.complete(
                self.build_prompt(text, file_name),
                model=self._settings.analysis_model,
                system_prompt=SYSTEM_PROMPT,
                temperature=self._settings.analysis_temperature,
                max_tokens=self._settings.analysis_max_tokens,
            )
        except CompletionError as exc:
            logger.warning("Model analysis of %s failed: %s", file_name, exc.reason.value)
            return Failure(exc.reason, str(exc))
        except Exception as exc:
            logger.exception("Unexpected error from completion client for %s", file_name)
            return Failure(FailureReason.API_ERROR, repr(exc))
        if not isinstance(response, str):
            return Failure(FailureReason.API_ERROR, "completion client returned no text")

        result = parse_model_reply(response)
        if isinstance(result, Failure):
            logger.warning("Model reply for %s rejected: %s", file_name, result.detail)
        return result

    def explain_clause(self, clause: RiskyClause) -> str:
        """Short plain-language explanation of why ``clause`` is risky.

        Falls back to the category's default text on any failure.
        """
        if self._client is None:
            return default_explanation(clause.category)
        try:
            explanation = self._client.complete(
                EXPLANATION_PROMPT.format(quote=clause.quote),
                model=self._settings.explanation_model,
                temperature=self._settings.analysis_temperature,
                max_tokens=self._settings.explanation_max_tokens,
            )
        except CompletionError as exc:
            logger.info("Explanation for %r unavailable: %s", clause.title, exc.reason.value)
            return default_explanation(clause.category)
        except Exception:
            logger.exception("Unexpected error explaining %r", clause.title)
            return default_explanation(clause.category)
        if not isinstance(explanation, str):
            return default_explanation(clause.category)
        return explanation.strip() or default_explanation(clause.category)

    def explain_all(self, clauses: list[RiskyClause]) -> list[RiskyClause]:
        """Fill in every missing explanation, keeping clause order."""
        missing = [i for i, c in enumerate(clauses) if not c.explanation]
        if not missing:
            return list(clauses)

        workers = min(self._settings.explanation_workers, len(missing))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            explanations = list(pool.map(lambda i: self.explain_clause(clauses[i]), missing))

        enriched = list(clauses)
        for index, explanation in zip(missing, explanations):
            enriched[index] = clauses[index].with_explanation(explanation)
        return enriched
