"""Rule-based risky clause detection.

Scans contract text against a fixed table of regular expressions per
risk category. No network access and no state: the same text always
yields the same clauses in the same order.
"""

from __future__ import annotations

import re

from .models import QUOTE_MAX_CHARS, RiskyClause, truncate
from .patterns import RISK_PATTERNS, _RiskPattern, clause_risk_score

# Prefix length used to collapse repeated detections of one sentence
DUPLICATE_PREFIX_CHARS = 100


class PatternDetector:
    """Detect risky clauses with regex patterns.

    Example::

        detector = PatternDetector()
        for clause in detector.detect(contract_text):
            print(f"[{clause.severity.value}] {clause.title}: {clause.quote[:60]}")

    Args:
        patterns: Custom pattern table. Uses the built-in table if None.
    """

    _SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")

    def __init__(self, patterns: list[_RiskPattern] | None = None) -> None:
        self.patterns = patterns if patterns is not None else RISK_PATTERNS

    def detect(self, text: str) -> list[RiskyClause]:
        """Return candidate risky clauses found in ``text``.

        Order is category order, then pattern order, then match order.
        Explanations are left unset.
        """
        if not text or not text.strip():
            return []

        sentences = self._SENTENCE_SPLIT_RE.split(text)
        clauses: list[RiskyClause] = []

        for risk in self.patterns:
            for pattern in risk.patterns:
                for match in pattern.finditer(text):
                    sentence = self._find_sentence(sentences, match.group(0))
                    if not sentence:
                        continue
                    clauses.append(
                        RiskyClause(
                            title=risk.title,
                            quote=truncate(sentence, QUOTE_MAX_CHARS),
                            severity=risk.severity,
                            category=risk.category,
                            risk_score=clause_risk_score(risk.severity, risk.category),
                        )
                    )

        return self._remove_duplicates(clauses)

    @staticmethod
    def _find_sentence(sentences: list[str], matched: str) -> str:
        """First sentence containing ``matched`` (case-insensitive), stripped."""
        needle = matched.lower()
        for sentence in sentences:
            if needle in sentence.lower():
                return sentence.strip()
        # Matches spanning a sentence boundary have no containing sentence
        return ""

    @staticmethod
    def _remove_duplicates(clauses: list[RiskyClause]) -> list[RiskyClause]:
        unique: list[RiskyClause] = []
        seen: set[tuple] = set()
        for clause in clauses:
            key = (clause.category, clause.quote[:DUPLICATE_PREFIX_CHARS])
            if key not in seen:
                seen.add(key)
                unique.append(clause)
        return unique
