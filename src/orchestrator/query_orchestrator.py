"""Queries an ordered chain of models until one returns valid decisions."""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Callable

from pydantic import ValidationError

from src.journal.audit_trail import AuditTrail
from src.journal.models import AttemptLog
from src.llm.base import ModelClient, ModelQueryError
from src.llm.decision_schema import DecisionResponse
from src.orchestrator.models import AllModelsFailedError, DecisionParseError, QueryOutcome

logger = logging.getLogger(__name__)


def parse_decision_response(text: str) -> DecisionResponse:
    """Extract and validate the decision payload from a model response.

    The payload is the span from the first ``{`` to the last ``}``, so prose
    or code fences around the JSON are tolerated.

    Args:
        text: Model response text, without the reasoning trace.

    Returns:
        Validated DecisionResponse.

    Raises:
        DecisionParseError: No JSON object, invalid JSON, or schema violation.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise DecisionParseError("No JSON object found in response")

    try:
        return DecisionResponse.model_validate_json(text[start : end + 1])
    except ValidationError as e:
        raise DecisionParseError(f"Invalid decision payload: {e}") from e


class ModelQueryOrchestrator:
    """Priority fallback over several models with a per-attempt audit trail.

    Models are tried one at a time in order. A transport failure, timeout
    or unparseable response moves on to the next model. Every attempt is
    written to the audit trail before the next one starts.
    """

    def __init__(
        self,
        client: ModelClient,
        audit_trail: AuditTrail,
        models: list[str],
        system_prompt: str,
        timeout_seconds: float | None = 300.0,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize the orchestrator.

        Args:
            client: Backend (usually a ModelRouter) used for every model.
            audit_trail: Sink for attempt logs, raw dumps and the index.
            models: Model identifiers in priority order.
            system_prompt: System prompt sent with every query.
            timeout_seconds: Limit per attempt, None for no limit.
            clock: Returns the current UTC time.

        Raises:
            ValueError: ``models`` is empty.
        """
        if not models:
            raise ValueError("At least one model is required")

        self._client = client
        self._audit = audit_trail
        self._models = list(models)
        self._system_prompt = system_prompt
        self._timeout = timeout_seconds
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def models(self) -> list[str]:
        return list(self._models)

    async def query(self, prompt: str) -> QueryOutcome:
        """Query the chain until a model returns a valid decision payload.

        Args:
            prompt: Formatted market context.

        Returns:
            QueryOutcome for the first model that succeeded.

        Raises:
            AllModelsFailedError: Every model failed.
        """
        attempts: list[AttemptLog] = []

        for model in self._models:
            attempt = AttemptLog(timestamp=self._clock(), model=model, prompt=prompt)
            attempts.append(attempt)
            started = time.monotonic()

            logger.info(f"Querying {model} with extended reasoning")
            try:
                response = await asyncio.wait_for(
                    self._client.query(prompt, self._system_prompt, model),
                    timeout=self._timeout,
                )
            except asyncio.TimeoutError:
                attempt.error = f"Query error: timed out after {self._timeout}s"
                attempt.duration_seconds = time.monotonic() - started
                await self._audit.record_attempt(attempt)
                logger.warning(f"Model {model} timed out, trying next")
                continue
            except ModelQueryError as e:
                attempt.error = f"Query error: {e}"
                attempt.duration_seconds = time.monotonic() - started
                await self._audit.record_attempt(attempt)
                logger.warning(f"Model {model} failed: {e}, trying next")
                continue

            attempt.duration_seconds = time.monotonic() - started
            attempt.raw_response = response.raw_text()
            await self._audit.write_raw_dump(model, prompt, attempt.raw_response, attempt.timestamp)

            try:
                parsed = parse_decision_response(response.text)
            except DecisionParseError as e:
                attempt.error = f"Parse error: {e}"
                await self._audit.record_attempt(attempt)
                logger.warning(f"Model {model} returned invalid response, trying next")
                continue

            attempt.parsed_decisions = parsed.model_dump()
            log_file = await self._audit.record_attempt(attempt)
            index_ids = await self._audit.index_decisions(
                model, parsed.decisions, str(log_file), attempt.timestamp
            )

            logger.info(
                f"Received {len(parsed.decisions)} decisions from {model} "
                f"(thinking: {'YES' if response.thinking else 'NO'})"
            )
            return QueryOutcome(
                model=model,
                response=parsed,
                attempts=attempts,
                log_file=str(log_file),
                index_ids=index_ids,
            )

        raise AllModelsFailedError(attempts)
