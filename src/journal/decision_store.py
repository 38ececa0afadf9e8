"""Persistence layer for decision rows and trading sessions."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from src.journal.models import AiTradeDecision, PredictionAccuracy, TradingSession

logger = logging.getLogger(__name__)


class DecisionStore:
    """Stores decisions and sessions in two JSON files with an in-memory cache.

    Files: ``{data_dir}/decisions.json`` and ``{data_dir}/sessions.json``.
    """

    def __init__(self, data_dir: Path = Path("data/ai_trader")):
        """Initialize the store.

        Args:
            data_dir: Directory to store the JSON files.
        """
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._decisions_path = self._data_dir / "decisions.json"
        self._sessions_path = self._data_dir / "sessions.json"
        self._decisions = [AiTradeDecision.from_dict(d) for d in self._load(self._decisions_path)]
        self._sessions = [TradingSession.from_dict(s) for s in self._load(self._sessions_path)]

    def _load(self, path: Path) -> list[dict]:
        if not path.exists():
            return []
        with open(path) as f:
            return json.load(f)

    def _flush_decisions(self) -> None:
        with open(self._decisions_path, "w") as f:
            json.dump([d.to_dict() for d in self._decisions], f, indent=2)

    def _flush_sessions(self) -> None:
        with open(self._sessions_path, "w") as f:
            json.dump([s.to_dict() for s in self._sessions], f, indent=2)

    # Decisions

    def save_decision(self, decision: AiTradeDecision) -> int:
        """Append a decision row and assign its id.

        Returns:
            The new decision id.
        """
        decision.id = len(self._decisions) + 1
        self._decisions.append(decision)
        self._flush_decisions()
        return decision.id

    def get_decision(self, decision_id: int) -> AiTradeDecision | None:
        for decision in self._decisions:
            if decision.id == decision_id:
                return decision
        return None

    def decisions(self, limit: int | None = None) -> list[AiTradeDecision]:
        """Return decisions, most recent first."""
        ordered = list(reversed(self._decisions))
        return ordered[:limit] if limit is not None else ordered

    def count_decisions(self) -> int:
        return len(self._decisions)

    def unevaluated(self, now: datetime | None = None) -> list[AiTradeDecision]:
        """Ungraded decisions with a prediction whose horizon has elapsed."""
        now = now or datetime.now(timezone.utc)
        return [
            d
            for d in self._decisions
            if d.has_prediction
            and not d.is_graded
            and d.price_at_decision is not None
            and d.prediction_due_at() <= now
        ]

    def update_outcome(
        self,
        decision_id: int,
        outcome: str,
        actual_price: float,
        accurate: bool,
    ) -> None:
        decision = self.get_decision(decision_id)
        if decision is None:
            raise KeyError(f"Decision {decision_id} not found")

        decision.actual_outcome = outcome
        decision.actual_price_at_timeframe = actual_price
        decision.prediction_accurate = accurate
        self._flush_decisions()

    def prediction_accuracy(self) -> PredictionAccuracy:
        """Accuracy over all graded decisions, recomputed from the rows."""
        graded = [d for d in self._decisions if d.is_graded]
        accurate = sum(1 for d in graded if d.prediction_accurate)
        percent = accurate / len(graded) * 100.0 if graded else 0.0
        return PredictionAccuracy(
            total_predictions=len(graded),
            accurate_predictions=accurate,
            accuracy_percent=percent,
        )

    # Sessions

    def start_session(self, starting_value: float, now: datetime | None = None) -> TradingSession:
        session = TradingSession(
            id=len(self._sessions) + 1,
            start_time=now or datetime.now(timezone.utc),
            starting_portfolio_value=starting_value,
        )
        self._sessions.append(session)
        self._flush_sessions()
        logger.info(f"Started trading session {session.id}")
        return session

    def end_session(
        self,
        session_id: int,
        ending_value: float,
        notes: str | None = None,
        now: datetime | None = None,
    ) -> TradingSession:
        session = self.get_session(session_id)
        if session is None:
            raise KeyError(f"Session {session_id} not found")

        session.end_time = now or datetime.now(timezone.utc)
        session.ending_portfolio_value = ending_value
        session.session_notes = notes
        session.status = "completed"
        self._flush_sessions()
        logger.info(f"Ended trading session {session.id}")
        return session

    def record_session_activity(self, session_id: int, decisions: int, trades: int) -> None:
        """Add decision and trade counts to a session."""
        session = self.get_session(session_id)
        if session is None:
            raise KeyError(f"Session {session_id} not found")

        session.decisions_count += decisions
        session.trades_count += trades
        self._flush_sessions()

    def get_session(self, session_id: int) -> TradingSession | None:
        for session in self._sessions:
            if session.id == session_id:
                return session
        return None

    def active_session(self) -> TradingSession | None:
        for session in reversed(self._sessions):
            if session.status == "active":
                return session
        return None

    def sessions(self) -> list[TradingSession]:
        """Return sessions, most recent first."""
        return list(reversed(self._sessions))

    def count_completed_sessions(self) -> int:
        return sum(1 for s in self._sessions if s.status == "completed")
