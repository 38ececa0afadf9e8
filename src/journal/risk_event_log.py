"""Append-only audit log of guardrail rejections and circuit breaker trips."""
import json
import logging
from collections import Counter
from pathlib import Path

from src.journal.models import CircuitBreakerEvent, TradeRejection

logger = logging.getLogger(__name__)


class RiskEventLog:
    """Stores rejections and breaker events as JSON Lines.

    Files: ``{data_dir}/rejections.jsonl`` and
    ``{data_dir}/circuit_breaker_events.jsonl``.
    """

    REJECTIONS_FILE = "rejections.jsonl"
    BREAKER_EVENTS_FILE = "circuit_breaker_events.jsonl"

    def __init__(self, data_dir: Path | str):
        """Initialize the log.

        Args:
            data_dir: Directory holding the JSONL files.
        """
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)

    def _append(self, filename: str, record: dict) -> None:
        with open(self._data_dir / filename, "a") as f:
            f.write(json.dumps(record, default=str) + "\n")

    def _read(self, filename: str) -> list[dict]:
        path = self._data_dir / filename
        if not path.exists():
            return []
        with open(path) as f:
            return [json.loads(line) for line in f if line.strip()]

    def record_rejection(self, rejection: TradeRejection) -> None:
        self._append(self.REJECTIONS_FILE, rejection.to_dict())

    def record_circuit_breaker_event(self, event: CircuitBreakerEvent) -> None:
        self._append(self.BREAKER_EVENTS_FILE, event.to_dict())

    def recent_rejections(self, limit: int = 50) -> list[TradeRejection]:
        """Return rejections, most recent first."""
        rows = self._read(self.REJECTIONS_FILE)
        return [TradeRejection.from_dict(r) for r in reversed(rows)][:limit]

    def recent_circuit_breaker_events(self, limit: int = 20) -> list[CircuitBreakerEvent]:
        """Return breaker trips, most recent first."""
        rows = self._read(self.BREAKER_EVENTS_FILE)
        return [CircuitBreakerEvent.from_dict(r) for r in reversed(rows)][:limit]

    def rejection_counts(self) -> dict[str, int]:
        """Count rejections per rule tag."""
        return dict(Counter(r["rule_triggered"] for r in self._read(self.REJECTIONS_FILE)))
