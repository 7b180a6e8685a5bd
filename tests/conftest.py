"""Shared test fixtures for contract-guard tests."""

from __future__ import annotations

import json
import threading
from pathlib import Path

import pytest

from contract_guard.config import Settings

EXAMPLES_DIR = Path(__file__).parent.parent / "examples"

AUTO_RENEWAL_SENTENCE = (
    "This agreement automatically renews for additional 12-month terms "
    "unless terminated with 90 days written notice."
)


class FakeCompletionClient:
    """Scripted completion client; no network.

    ``analysis`` answers calls for the analysis model, ``explanation``
    answers everything else. Either may be a string or an exception
    instance, which is raised instead.
    """

    def __init__(self, analysis="{}", explanation="Explained.", analysis_model="gpt-4"):
        self.analysis = analysis
        self.explanation = explanation
        self.analysis_model = analysis_model
        self.calls: list[dict] = []
        self._lock = threading.Lock()

    def complete(self, prompt, *, model, system_prompt=None, temperature=0.3, max_tokens=2000):
        with self._lock:
            self.calls.append(
                {
                    "prompt": prompt,
                    "model": model,
                    "system_prompt": system_prompt,
                    "temperature": temperature,
                    "max_tokens": max_tokens,
                }
            )
        answer = self.analysis if model == self.analysis_model else self.explanation
        if isinstance(answer, Exception):
            raise answer
        return answer

    def calls_for(self, model: str) -> list[dict]:
        return [c for c in self.calls if c["model"] == model]


@pytest.fixture
def settings() -> Settings:
    """Deterministic settings: sequential explanations, single attempt."""
    return Settings(
        analysis_model="gpt-4",
        explanation_model="gpt-3.5-turbo",
        explanation_workers=1,
        llm_max_attempts=1,
    )


@pytest.fixture
def employment_contract_path() -> Path:
    return EXAMPLES_DIR / "sample_employment_contract.txt"


@pytest.fixture
def employment_contract_text(employment_contract_path: Path) -> str:
    """Employment contract with auto-renewal, penalties, non-compete,
    arbitration and hidden fees."""
    return employment_contract_path.read_text(encoding="utf-8")


@pytest.fixture
def rental_agreement_path() -> Path:
    return EXAMPLES_DIR / "sample_rental_agreement.txt"


@pytest.fixture
def rental_agreement_text(rental_agreement_path: Path) -> str:
    """Plain lease that matches none of the risk patterns."""
    return rental_agreement_path.read_text(encoding="utf-8")


@pytest.fixture
def auto_renewal_text() -> str:
    return AUTO_RENEWAL_SENTENCE


@pytest.fixture
def model_reply() -> dict:
    """A well-formed analysis reply as the model would send it."""
    return {
        "summary": "An employment agreement with several one-sided terms.",
        "keyHighlights": ["Renews automatically", "Two-year non-compete"],
        "contractType": "employment",
        "riskyClauses": [
            {
                "title": "Automatic renewal",
                "quote": AUTO_RENEWAL_SENTENCE,
                "explanation": "You stay bound unless you remember to cancel.",
                "severity": "Medium",
                "category": "auto-renewal",
                "riskScore": 6,
            },
            {
                "title": "Data sharing",
                "quote": "The Company may share employee data with affiliates.",
                "explanation": "Your personal data can travel widely.",
                "severity": "Low",
                "category": "data-privacy",
                "riskScore": 3,
            },
            {
                "title": "IP assignment",
                "quote": "All inventions made by the Employee belong to the Company.",
                "severity": "High",
                "category": "intellectual-property",
                "riskScore": 8,
            },
        ],
        "negotiationTips": ["Ask for a shorter non-compete"],
        "confidence": 0.9,
    }


@pytest.fixture
def model_reply_json(model_reply: dict) -> str:
    return json.dumps(model_reply)


@pytest.fixture
def fake_client_factory():
    return FakeCompletionClient
