"""Tests for ModelQueryOrchestrator and response parsing."""

import asyncio
import json
from datetime import datetime, timezone

import pytest

from src.journal.audit_trail import AuditTrail
from src.llm.base import ModelClient, ModelQueryError, ModelResponse
from src.orchestrator.models import AllModelsFailedError, DecisionParseError
from src.orchestrator.query_orchestrator import ModelQueryOrchestrator, parse_decision_response

NOON = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)

VALID_RESPONSE = json.dumps(
    {
        "decisions": [
            {
                "action": "BUY",
                "symbol": "AAPL",
                "quantity_percent": 5,
                "confidence": 0.8,
                "reasoning": "Breakout",
                "prediction": {"direction": "bullish", "price_target": 210.0, "timeframe_days": 5},
            },
            {
                "action": "HOLD",
                "symbol": "NVDA",
                "quantity_percent": 0,
                "confidence": 0.5,
                "reasoning": "Waiting",
            },
        ],
        "market_outlook": "Constructive",
    }
)


class ScriptedClient(ModelClient):
    """Returns a canned outcome per model and records the call order."""

    def __init__(self, outcomes: dict):
        self.outcomes = outcomes
        self.calls: list[str] = []

    def supports(self, model: str) -> bool:
        return True

    async def query(self, prompt: str, system: str, model: str) -> ModelResponse:
        self.calls.append(model)
        outcome = self.outcomes[model]
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, ModelResponse):
            return outcome
        return ModelResponse(text=outcome)


class SlowClient(ScriptedClient):
    async def query(self, prompt: str, system: str, model: str) -> ModelResponse:
        if model == "slow":
            self.calls.append(model)
            await asyncio.sleep(10)
        return await super().query(prompt, system, model)


def make_orchestrator(tmp_path, client: ModelClient, models: list[str], timeout: float = 300.0):
    trail = AuditTrail(tmp_path)
    orchestrator = ModelQueryOrchestrator(
        client=client,
        audit_trail=trail,
        models=models,
        system_prompt="system",
        timeout_seconds=timeout,
        clock=lambda: NOON,
    )
    return orchestrator, trail


class TestParseDecisionResponse:
    """Tests for parse_decision_response."""

    def test_plain_json(self):
        response = parse_decision_response(VALID_RESPONSE)

        assert len(response.decisions) == 2
        assert response.market_outlook == "Constructive"

    def test_json_wrapped_in_prose_and_fences(self):
        text = f"Here is my analysis.\n```json\n{VALID_RESPONSE}\n```\nGood luck!"

        assert parse_decision_response(text).decisions[0].symbol == "AAPL"

    def test_no_json(self):
        with pytest.raises(DecisionParseError):
            parse_decision_response("I would rather not trade today.")

    def test_malformed_json(self):
        with pytest.raises(DecisionParseError):
            parse_decision_response('{"decisions": [ {"action": "BUY", }')

    def test_schema_violation(self):
        with pytest.raises(DecisionParseError):
            parse_decision_response('{"decisions": [{"action": "BUY", "symbol": "AAPL"}]}')


class TestModelQueryOrchestrator:
    """Tests for the fallback chain."""

    def test_requires_models(self, tmp_path):
        with pytest.raises(ValueError):
            make_orchestrator(tmp_path, ScriptedClient({}), [])

    async def test_first_model_success(self, tmp_path):
        client = ScriptedClient({"primary": VALID_RESPONSE, "backup": VALID_RESPONSE})
        orchestrator, trail = make_orchestrator(tmp_path, client, ["primary", "backup"])

        outcome = await orchestrator.query("context")

        assert outcome.model == "primary"
        assert client.calls == ["primary"]
        assert len(outcome.attempts) == 1
        assert outcome.attempts[0].succeeded
        assert outcome.index_ids == ["20260310120000_AAPL", "20260310120000_NVDA"]

    async def test_falls_back_through_chain(self, tmp_path):
        client = ScriptedClient(
            {
                "primary": ModelQueryError("connection refused"),
                "secondary": "Sorry, I cannot produce JSON right now.",
                "tertiary": VALID_RESPONSE,
            }
        )
        orchestrator, trail = make_orchestrator(tmp_path, client, ["primary", "secondary", "tertiary"])

        outcome = await orchestrator.query("context")

        assert outcome.model == "tertiary"
        assert client.calls == ["primary", "secondary", "tertiary"]
        assert [a.succeeded for a in outcome.attempts] == [False, False, True]
        assert outcome.attempts[0].error.startswith("Query error")
        assert outcome.attempts[1].error.startswith("Parse error")

        attempt_files = sorted(tmp_path.glob("ai_decision_*.json"))
        assert len(attempt_files) == 3
        assert len(list((tmp_path / "raw").glob("raw_*.txt"))) == 2
        assert len((tmp_path / "decisions_20260310.jsonl").read_text().splitlines()) == 3

        index = await trail.load_index()
        assert index.total_decisions == 2
        assert all(e.model == "tertiary" for e in index.entries)

    async def test_all_models_fail(self, tmp_path):
        client = ScriptedClient(
            {"primary": ModelQueryError("down"), "secondary": "{not valid json}"}
        )
        orchestrator, trail = make_orchestrator(tmp_path, client, ["primary", "secondary"])

        with pytest.raises(AllModelsFailedError) as exc_info:
            await orchestrator.query("context")

        assert len(exc_info.value.attempts) == 2
        assert "primary" in str(exc_info.value)
        assert len(list(tmp_path.glob("ai_decision_*.json"))) == 2
        assert (await trail.load_index()).total_decisions == 0

    async def test_timeout_moves_to_next_model(self, tmp_path):
        client = SlowClient({"slow": VALID_RESPONSE, "fast": VALID_RESPONSE})
        orchestrator, _ = make_orchestrator(tmp_path, client, ["slow", "fast"], timeout=0.05)

        outcome = await orchestrator.query("context")

        assert outcome.model == "fast"
        assert "timed out" in outcome.attempts[0].error

    async def test_raw_response_includes_thinking(self, tmp_path):
        client = ScriptedClient({"primary": ModelResponse(text=VALID_RESPONSE, thinking="Let me think")})
        orchestrator, _ = make_orchestrator(tmp_path, client, ["primary"])

        outcome = await orchestrator.query("context")

        assert outcome.attempts[0].raw_response.startswith("=== THINKING ===\nLet me think")
        saved = json.loads(next(tmp_path.glob("ai_decision_*.json")).read_text())
        assert saved["parsed_decisions"]["decisions"][0]["symbol"] == "AAPL"
        assert saved["error"] is None
