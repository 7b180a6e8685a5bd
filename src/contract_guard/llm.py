"""
Language-model completion client.
Wraps the OpenAI and Anthropic SDKs behind one ``complete`` call and
maps their errors onto a small set of failure reasons.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Protocol

import anthropic
import openai
from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_exponential

from .config import Settings

logger = logging.getLogger(__name__)


class FailureReason(str, Enum):
    """Why a model-assisted step could not produce a usable answer."""

    QUOTA_EXCEEDED = "quota_exceeded"
    RATE_LIMITED = "rate_limited"
    TRANSPORT_ERROR = "transport_error"
    TIMEOUT = "timeout"
    AUTH_ERROR = "auth_error"
    API_ERROR = "api_error"
    PARSE_ERROR = "parse_error"
    NOT_CONFIGURED = "not_configured"


TRANSIENT_REASONS = frozenset(
    {FailureReason.RATE_LIMITED, FailureReason.TRANSPORT_ERROR, FailureReason.TIMEOUT}
)


class CompletionError(Exception):
    """A completion call failed; ``reason`` says how."""

    def __init__(self, reason: FailureReason, message: str = "") -> None:
        super().__init__(message or reason.value)
        self.reason = reason


class CompletionClient(Protocol):
    """Anything that turns a prompt into completion text."""

    def complete(
        self,
        prompt: str,
        *,
        model: str,
        system_prompt: str | None = None,
        temperature: float = 0.3,
        max_tokens: int = 2000,
    ) -> str: ...


def classify_error(exc: Exception) -> FailureReason:
    """Map an SDK exception to a ``FailureReason``."""
    # Timeout errors subclass the connection errors, check them first
    if isinstance(exc, (openai.APITimeoutError, anthropic.APITimeoutError)):
        return FailureReason.TIMEOUT
    if isinstance(exc, (openai.RateLimitError, anthropic.RateLimitError)):
        code = getattr(exc, "code", None)
        if code == "insufficient_quota" or "quota" in str(exc).lower():
            return FailureReason.QUOTA_EXCEEDED
        return FailureReason.RATE_LIMITED
    if isinstance(
        exc,
        (
            openai.AuthenticationError,
            openai.PermissionDeniedError,
            anthropic.AuthenticationError,
            anthropic.PermissionDeniedError,
        ),
    ):
        return FailureReason.AUTH_ERROR
    if isinstance(exc, (openai.APIConnectionError, anthropic.APIConnectionError)):
        return FailureReason.TRANSPORT_ERROR
    return FailureReason.API_ERROR


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, CompletionError) and exc.reason in TRANSIENT_REASONS


def _response_text(read, model: str) -> str:
    """Pull the completion text out of an SDK response.

    Raises:
        CompletionError: The response has no text where it should.
    """
    try:
        text = read()
    except (IndexError, AttributeError, TypeError) as exc:
        raise CompletionError(
            FailureReason.API_ERROR, f"malformed response from {model}: {exc!r}"
        ) from exc
    if not isinstance(text, str):
        raise CompletionError(FailureReason.API_ERROR, f"non-text response from {model}")
    return text


class LLMClient:
    """
    Completion client backed by OpenAI or Anthropic models.
    Models whose name starts with ``claude`` go to Anthropic, everything
    else to OpenAI.
    """

    def __init__(self, settings: Settings | None = None):
        """
        Initialize the client.

        Args:
            settings: API keys, timeout and retry policy. Read from the
                environment if omitted.
        """
        self.settings = settings or Settings.from_env()
        self._clients: dict[str, object] = {}

    def _client_for(self, model: str):
        """Return (and cache) the SDK client serving ``model``."""
        provider = "anthropic" if model.startswith("claude") else "openai"
        if provider in self._clients:
            return self._clients[provider]

        api_key = self.settings.api_key_for(model)
        if not api_key:
            env_name = "ANTHROPIC_API_KEY" if provider == "anthropic" else "OPENAI_API_KEY"
            raise CompletionError(
                FailureReason.NOT_CONFIGURED, f"{env_name} not found in environment"
            )

        timeout = self.settings.llm_timeout_seconds
        if provider == "anthropic":
            client = anthropic.Anthropic(api_key=api_key, timeout=timeout, max_retries=0)
        else:
            client = openai.OpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        self._clients[provider] = client
        return client

    def complete(
        self,
        prompt: str,
        *,
        model: str,
        system_prompt: str | None = None,
        temperature: float = 0.3,
        max_tokens: int = 2000,
    ) -> str:
        """
        Send one prompt and return the completion text.

        Transient failures are retried with exponential back-off when
        ``llm_max_attempts`` is above one.

        Raises:
            CompletionError: The call failed or no API key is configured.
        """
        retrying = Retrying(
            stop=stop_after_attempt(self.settings.llm_max_attempts),
            wait=wait_exponential(multiplier=1, min=4, max=10),
            retry=retry_if_exception(_is_transient),
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                return self._call(prompt, model, system_prompt, temperature, max_tokens)
        raise CompletionError(FailureReason.API_ERROR, "no completion attempt was made")

    def _call(
        self,
        prompt: str,
        model: str,
        system_prompt: str | None,
        temperature: float,
        max_tokens: int,
    ) -> str:
        client = self._client_for(model)
        try:
            if isinstance(client, anthropic.Anthropic):
                kwargs = {"system": system_prompt} if system_prompt else {}
                response = client.messages.create(
                    model=model,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    messages=[{"role": "user", "content": prompt}],
                    **kwargs,
                )
                return _response_text(lambda: response.content[0].text, model)
            messages = []
            if system_prompt:
                messages.append({"role": "system", "content": system_prompt})
            messages.append({"role": "user", "content": prompt})
            response = client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )
            return _response_text(lambda: response.choices[0].message.content or "", model)
        except (openai.OpenAIError, anthropic.AnthropicError) as exc:
            reason = classify_error(exc)
            logger.debug("Completion call to %s failed (%s): %s", model, reason.value, exc)
            raise CompletionError(reason, str(exc)) from exc
