"""Tests for the model adapter, reply parsing and the LLM client."""

from __future__ import annotations

import json

from types import SimpleNamespace

import anthropic
import httpx
import openai
import pytest

from contract_guard.adapter import (
    Failure,
    ModelAnalysis,
    ModelAnalysisAdapter,
    parse_model_reply,
    strip_code_fence,
)
from contract_guard.config import Settings
from contract_guard.llm import CompletionError, FailureReason, LLMClient, classify_error
from contract_guard.models import Category, ContractType, RiskyClause, Severity
from contract_guard.patterns import default_explanation
from contract_guard.prompts import SYSTEM_PROMPT, TRUNCATION_MARKER

_REQUEST = httpx.Request("POST", "https://api.example.com/v1/chat/completions")


def _response(status: int) -> httpx.Response:
    return httpx.Response(status, request=_REQUEST)


def _clause(quote: str = "Fees are non-refundable", explanation: str | None = None) -> RiskyClause:
    return RiskyClause(
        title="Refund Restrictions",
        quote=quote,
        severity=Severity.MEDIUM,
        category=Category.REFUND_RESTRICTIONS,
        risk_score=4,
        explanation=explanation,
    )


# ---------------------------------------------------------------------------
# Reply parsing
# ---------------------------------------------------------------------------


class TestParseModelReply:
    def test_valid_reply(self, model_reply_json: str) -> None:
        result = parse_model_reply(model_reply_json)
        assert isinstance(result, ModelAnalysis)
        assert result.contract_type == ContractType.EMPLOYMENT
        assert result.confidence == 0.9
        assert len(result.risky_clauses) == 3
        assert all(c.source == "model" for c in result.risky_clauses)
        assert result.risky_clauses[1].category == Category.DATA_PRIVACY
        assert result.risky_clauses[2].explanation is None

    def test_fenced_reply(self, model_reply_json: str) -> None:
        result = parse_model_reply(f"Here you go:\n```json\n{model_reply_json}\n```")
        assert isinstance(result, ModelAnalysis)

    def test_plain_fence(self, model_reply_json: str) -> None:
        assert strip_code_fence(f"```\n{model_reply_json}\n```") == model_reply_json

    def test_invalid_json(self) -> None:
        result = parse_model_reply("The contract looks fine to me.")
        assert isinstance(result, Failure)
        assert result.reason == FailureReason.PARSE_ERROR

    def test_non_object_json(self) -> None:
        result = parse_model_reply("[1, 2, 3]")
        assert isinstance(result, Failure)
        assert result.reason == FailureReason.PARSE_ERROR

    def test_clause_missing_quote(self, model_reply: dict) -> None:
        del model_reply["riskyClauses"][0]["quote"]
        result = parse_model_reply(json.dumps(model_reply))
        assert isinstance(result, Failure)
        assert result.reason == FailureReason.PARSE_ERROR

    def test_unknown_severity_rejected(self, model_reply: dict) -> None:
        model_reply["riskyClauses"][0]["severity"] = "Catastrophic"
        assert isinstance(parse_model_reply(json.dumps(model_reply)), Failure)

    def test_fields_are_normalized(self, model_reply: dict) -> None:
        clause = model_reply["riskyClauses"][0]
        clause["severity"] = "HIGH"
        clause["category"] = "Something New"
        clause["riskScore"] = 15
        clause["quote"] = "q" * 400
        model_reply["riskyClauses"][1]["riskScore"] = "0"
        model_reply["contractType"] = "lease"
        model_reply["confidence"] = 3
        model_reply["keyHighlights"] = None

        result = parse_model_reply(json.dumps(model_reply))
        assert isinstance(result, ModelAnalysis)
        first = result.risky_clauses[0]
        assert first.severity == Severity.HIGH
        assert first.category == Category.OTHER
        assert first.risk_score == 10
        assert len(first.quote) == 303
        assert result.risky_clauses[1].risk_score == 1
        assert result.contract_type == ContractType.OTHER
        assert result.confidence == 1.0
        assert result.key_highlights == []

    @pytest.mark.parametrize("literal", ["1e400", "-1e400", "Infinity", "NaN"])
    def test_non_finite_risk_score_rejected(self, model_reply: dict, literal: str) -> None:
        model_reply["riskyClauses"][0]["riskScore"] = "__SCORE__"
        reply = json.dumps(model_reply).replace('"__SCORE__"', literal)
        result = parse_model_reply(reply)
        assert isinstance(result, Failure)
        assert result.reason == FailureReason.PARSE_ERROR

    def test_non_finite_confidence_rejected(self, model_reply: dict) -> None:
        model_reply["confidence"] = "__CONFIDENCE__"
        reply = json.dumps(model_reply).replace('"__CONFIDENCE__"', "1e400")
        result = parse_model_reply(reply)
        assert isinstance(result, Failure)
        assert result.reason == FailureReason.PARSE_ERROR

    def test_huge_integer_score_clamped(self, model_reply: dict) -> None:
        model_reply["riskyClauses"][0]["riskScore"] = 10**400
        model_reply["confidence"] = 10**400
        result = parse_model_reply(json.dumps(model_reply))
        assert isinstance(result, ModelAnalysis)
        assert result.risky_clauses[0].risk_score == 10
        assert result.confidence == 1.0

    def test_non_numeric_confidence_rejected(self, model_reply: dict) -> None:
        model_reply["confidence"] = ["high"]
        assert isinstance(parse_model_reply(json.dumps(model_reply)), Failure)

    def test_minimal_object_uses_defaults(self) -> None:
        result = parse_model_reply("{}")
        assert isinstance(result, ModelAnalysis)
        assert result.summary == "Contract analysis completed."
        assert result.confidence == 0.8
        assert result.risky_clauses == []


# ---------------------------------------------------------------------------
# Adapter
# ---------------------------------------------------------------------------


class TestModelAnalysisAdapter:
    def test_success(self, fake_client_factory, settings, model_reply_json) -> None:
        client = fake_client_factory(analysis=model_reply_json)
        adapter = ModelAnalysisAdapter(client, settings)
        result = adapter.analyze_via_model("Some contract text.", "nda.pdf")

        assert isinstance(result, ModelAnalysis)
        call = client.calls[0]
        assert call["model"] == "gpt-4"
        assert call["system_prompt"] == SYSTEM_PROMPT
        assert call["temperature"] == 0.3
        assert call["max_tokens"] == 2000
        assert "CONTRACT FILE: nda.pdf" in call["prompt"]
        assert "Some contract text." in call["prompt"]

    def test_prompt_is_capped(self, settings) -> None:
        settings.max_prompt_chars = 100
        adapter = ModelAnalysisAdapter(None, settings)
        prompt = adapter.build_prompt("a" * 100 + "b" * 50, "big.pdf")
        assert "a" * 100 + TRUNCATION_MARKER in prompt
        assert "b" not in prompt.split("CONTRACT TEXT:")[1].split("Please provide")[0]

    def test_short_text_not_marked(self, settings) -> None:
        prompt = ModelAnalysisAdapter(None, settings).build_prompt("short", "a.pdf")
        assert TRUNCATION_MARKER not in prompt

    @pytest.mark.parametrize(
        "reason",
        [
            FailureReason.QUOTA_EXCEEDED,
            FailureReason.RATE_LIMITED,
            FailureReason.TRANSPORT_ERROR,
            FailureReason.TIMEOUT,
            FailureReason.AUTH_ERROR,
        ],
    )
    def test_call_failure(self, fake_client_factory, settings, reason) -> None:
        client = fake_client_factory(analysis=CompletionError(reason))
        result = ModelAnalysisAdapter(client, settings).analyze_via_model("text", "x.pdf")
        assert isinstance(result, Failure)
        assert result.reason == reason

    def test_bad_reply(self, fake_client_factory, settings) -> None:
        client = fake_client_factory(analysis="not json at all")
        result = ModelAnalysisAdapter(client, settings).analyze_via_model("text", "x.pdf")
        assert isinstance(result, Failure)
        assert result.reason == FailureReason.PARSE_ERROR

    def test_unexpected_client_error(self, fake_client_factory, settings) -> None:
        client = fake_client_factory(analysis=IndexError("list index out of range"))
        result = ModelAnalysisAdapter(client, settings).analyze_via_model("text", "x.pdf")
        assert isinstance(result, Failure)
        assert result.reason == FailureReason.API_ERROR
        assert "IndexError" in result.detail

    def test_non_text_reply(self, fake_client_factory, settings) -> None:
        client = fake_client_factory(analysis=None)
        result = ModelAnalysisAdapter(client, settings).analyze_via_model("text", "x.pdf")
        assert isinstance(result, Failure)
        assert result.reason == FailureReason.API_ERROR

    def test_no_client(self, settings) -> None:
        result = ModelAnalysisAdapter(None, settings).analyze_via_model("text", "x.pdf")
        assert isinstance(result, Failure)
        assert result.reason == FailureReason.NOT_CONFIGURED


class TestExplanations:
    def test_explain_clause(self, fake_client_factory, settings) -> None:
        client = fake_client_factory(explanation="  You may never get money back.\n")
        adapter = ModelAnalysisAdapter(client, settings)
        assert adapter.explain_clause(_clause()) == "You may never get money back."

        call = client.calls[0]
        assert call["model"] == "gpt-3.5-turbo"
        assert call["max_tokens"] == 150
        assert '"Fees are non-refundable"' in call["prompt"]

    def test_explain_clause_failure_uses_default(self, fake_client_factory, settings) -> None:
        client = fake_client_factory(explanation=CompletionError(FailureReason.TIMEOUT))
        adapter = ModelAnalysisAdapter(client, settings)
        assert adapter.explain_clause(_clause()) == default_explanation(
            Category.REFUND_RESTRICTIONS
        )

    @pytest.mark.parametrize("answer", [AttributeError("no attribute 'text'"), None])
    def test_unexpected_explanation_reply_uses_default(
        self, fake_client_factory, settings, answer
    ) -> None:
        adapter = ModelAnalysisAdapter(fake_client_factory(explanation=answer), settings)
        assert adapter.explain_clause(_clause()) == default_explanation(
            Category.REFUND_RESTRICTIONS
        )

    def test_explain_all_survives_unexpected_errors(self, fake_client_factory, settings) -> None:
        settings.explanation_workers = 4
        client = fake_client_factory(explanation=IndexError("list index out of range"))
        enriched = ModelAnalysisAdapter(client, settings).explain_all([_clause("a"), _clause("b")])
        assert [c.explanation for c in enriched] == [
            default_explanation(Category.REFUND_RESTRICTIONS)
        ] * 2

    def test_empty_explanation_uses_default(self, fake_client_factory, settings) -> None:
        adapter = ModelAnalysisAdapter(fake_client_factory(explanation="   "), settings)
        assert adapter.explain_clause(_clause()) == default_explanation(
            Category.REFUND_RESTRICTIONS
        )

    def test_no_client_uses_default(self, settings) -> None:
        adapter = ModelAnalysisAdapter(None, settings)
        assert adapter.explain_clause(_clause()) == default_explanation(
            Category.REFUND_RESTRICTIONS
        )

    @pytest.mark.parametrize("workers", [1, 4])
    def test_explain_all_fills_missing_only(self, fake_client_factory, settings, workers) -> None:
        settings.explanation_workers = workers
        client = fake_client_factory(explanation="Generated.")
        adapter = ModelAnalysisAdapter(client, settings)
        clauses = [
            _clause("first"),
            _clause("second", explanation="Already known."),
            _clause("third"),
        ]
        enriched = adapter.explain_all(clauses)

        assert [c.quote for c in enriched] == ["first", "second", "third"]
        assert [c.explanation for c in enriched] == ["Generated.", "Already known.", "Generated."]
        assert len(client.calls) == 2
        assert clauses[0].explanation is None

    def test_explain_all_nothing_missing(self, fake_client_factory, settings) -> None:
        client = fake_client_factory()
        clauses = [_clause(explanation="Known.")]
        assert ModelAnalysisAdapter(client, settings).explain_all(clauses) == clauses
        assert client.calls == []


# ---------------------------------------------------------------------------
# LLM client
# ---------------------------------------------------------------------------


class TestClassifyError:
    def test_openai_rate_limit(self) -> None:
        exc = openai.RateLimitError("Rate limit reached", response=_response(429), body=None)
        assert classify_error(exc) == FailureReason.RATE_LIMITED

    def test_openai_quota(self) -> None:
        exc = openai.RateLimitError(
            "You exceeded your current quota",
            response=_response(429),
            body={"code": "insufficient_quota"},
        )
        assert classify_error(exc) == FailureReason.QUOTA_EXCEEDED

    def test_openai_auth(self) -> None:
        exc = openai.AuthenticationError("Invalid key", response=_response(401), body=None)
        assert classify_error(exc) == FailureReason.AUTH_ERROR

    def test_openai_connection(self) -> None:
        assert classify_error(openai.APIConnectionError(request=_REQUEST)) == (
            FailureReason.TRANSPORT_ERROR
        )

    def test_openai_timeout(self) -> None:
        assert classify_error(openai.APITimeoutError(request=_REQUEST)) == FailureReason.TIMEOUT

    def test_openai_other(self) -> None:
        exc = openai.BadRequestError("Bad request", response=_response(400), body=None)
        assert classify_error(exc) == FailureReason.API_ERROR

    def test_anthropic_rate_limit(self) -> None:
        exc = anthropic.RateLimitError("Too many requests", response=_response(429), body=None)
        assert classify_error(exc) == FailureReason.RATE_LIMITED

    def test_anthropic_connection(self) -> None:
        assert classify_error(anthropic.APIConnectionError(request=_REQUEST)) == (
            FailureReason.TRANSPORT_ERROR
        )


class TestLLMClient:
    def test_missing_key(self) -> None:
        client = LLMClient(Settings(openai_api_key=None))
        with pytest.raises(CompletionError) as info:
            client.complete("hello", model="gpt-4")
        assert info.value.reason == FailureReason.NOT_CONFIGURED

    def test_provider_routing(self) -> None:
        client = LLMClient(Settings(openai_api_key="sk-test", anthropic_api_key="ak-test"))
        assert isinstance(client._client_for("gpt-4"), openai.OpenAI)
        assert isinstance(client._client_for("claude-3-haiku-20240307"), anthropic.Anthropic)

    def test_non_transient_error_not_retried(self, monkeypatch) -> None:
        client = LLMClient(Settings(openai_api_key="sk-test", llm_max_attempts=3))
        calls = []

        def failing_call(*args):
            calls.append(args)
            raise CompletionError(FailureReason.AUTH_ERROR)

        monkeypatch.setattr(client, "_call", failing_call)
        with pytest.raises(CompletionError):
            client.complete("hello", model="gpt-4")
        assert len(calls) == 1

    def test_single_attempt_by_default(self, monkeypatch) -> None:
        client = LLMClient(Settings(openai_api_key="sk-test"))
        calls = []

        def failing_call(*args):
            calls.append(args)
            raise CompletionError(FailureReason.RATE_LIMITED)

        monkeypatch.setattr(client, "_call", failing_call)
        with pytest.raises(CompletionError) as info:
            client.complete("hello", model="gpt-4")
        assert info.value.reason == FailureReason.RATE_LIMITED
        assert len(calls) == 1

    @pytest.mark.parametrize(
        "content",
        [[], [SimpleNamespace(type="tool_use", id="tool_1", name="lookup", input={})]],
    )
    def test_malformed_anthropic_response(self, monkeypatch, content) -> None:
        client = LLMClient(Settings(anthropic_api_key="ak-test"))
        sdk = client._client_for("claude-3-haiku-20240307")
        monkeypatch.setattr(
            sdk.messages, "create", lambda **kwargs: SimpleNamespace(content=content)
        )
        with pytest.raises(CompletionError) as info:
            client.complete("hello", model="claude-3-haiku-20240307")
        assert info.value.reason == FailureReason.API_ERROR

    def test_malformed_openai_response(self, monkeypatch) -> None:
        client = LLMClient(Settings(openai_api_key="sk-test"))
        sdk = client._client_for("gpt-4")
        monkeypatch.setattr(
            sdk.chat.completions, "create", lambda **kwargs: SimpleNamespace(choices=[])
        )
        with pytest.raises(CompletionError) as info:
            client.complete("hello", model="gpt-4")
        assert info.value.reason == FailureReason.API_ERROR

    def test_anthropic_text_response(self, monkeypatch) -> None:
        client = LLMClient(Settings(anthropic_api_key="ak-test"))
        sdk = client._client_for("claude-3-haiku-20240307")
        monkeypatch.setattr(
            sdk.messages,
            "create",
            lambda **kwargs: SimpleNamespace(content=[SimpleNamespace(type="text", text="ok")]),
        )
        assert client.complete("hello", model="claude-3-haiku-20240307") == "ok"
