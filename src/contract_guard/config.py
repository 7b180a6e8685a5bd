"""Runtime configuration for ContractGuard.

Values come from the environment; a ``.env`` file in the working
directory is loaded first when present.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


@dataclass
class Settings:
    """Configuration for the risk engine and its model client."""

    analysis_model: str = "gpt-4"
    explanation_model: str = "gpt-3.5-turbo"
    openai_api_key: str | None = None
    anthropic_api_key: str | None = None
    analysis_temperature: float = 0.3
    analysis_max_tokens: int = 2000
    explanation_max_tokens: int = 150
    max_prompt_chars: int = 8000
    llm_timeout_seconds: float = 60.0
    llm_max_attempts: int = 1
    explanation_workers: int = 4
    max_file_size: int = 10 * 1024 * 1024

    @classmethod
    def from_env(cls, dotenv: bool = True) -> Settings:
        """Build settings from environment variables."""
        if dotenv:
            load_dotenv()
        return cls(
            analysis_model=os.getenv("CONTRACT_GUARD_MODEL", cls.analysis_model),
            explanation_model=os.getenv(
                "CONTRACT_GUARD_EXPLANATION_MODEL", cls.explanation_model
            ),
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY"),
            max_prompt_chars=_int_env("MAX_PROMPT_CHARS", cls.max_prompt_chars),
            llm_timeout_seconds=_float_env("LLM_TIMEOUT_SECONDS", cls.llm_timeout_seconds),
            llm_max_attempts=max(1, _int_env("LLM_MAX_ATTEMPTS", cls.llm_max_attempts)),
            explanation_workers=max(1, _int_env("EXPLANATION_WORKERS", cls.explanation_workers)),
            max_file_size=_int_env("MAX_FILE_SIZE", cls.max_file_size),
        )

    def api_key_for(self, model: str) -> str | None:
        """API key matching the provider that serves ``model``."""
        if model.startswith("claude"):
            return self.anthropic_api_key
        return self.openai_api_key
