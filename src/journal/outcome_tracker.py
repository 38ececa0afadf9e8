"""Grades model predictions once their horizon has elapsed."""

import logging
from datetime import datetime, timezone

from src.journal.audit_trail import AuditTrail
from src.journal.decision_store import DecisionStore
from src.journal.models import AiTradeDecision
from src.ledger.base import PriceSource

logger = logging.getLogger(__name__)


def is_prediction_accurate(direction: str, price_at_decision: float, current_price: float) -> bool:
    """Bullish is right when the price rose, bearish when it fell.

    Neutral predictions are never graded accurate.
    """
    if direction == "bullish":
        return current_price > price_at_decision
    if direction == "bearish":
        return current_price < price_at_decision
    return False


class PredictionOutcomeTracker:
    """Evaluates due predictions against the current market price.

    Graded results go to the decision row and to the matching decision
    index entry, whose accuracy aggregate is recomputed on each update.
    """

    def __init__(
        self,
        store: DecisionStore,
        price_source: PriceSource,
        audit_trail: AuditTrail | None = None,
    ):
        """Initialize the tracker.

        Args:
            store: Decision rows to grade.
            price_source: Current price lookup.
            audit_trail: Decision index to annotate with outcomes.
        """
        self._store = store
        self._prices = price_source
        self._audit = audit_trail

    async def evaluate_predictions(self, now: datetime | None = None) -> int:
        """Grade every ungraded decision whose horizon has elapsed.

        Decisions without a current price are left for a later pass.

        Returns:
            Number of decisions graded.
        """
        now = now or datetime.now(timezone.utc)
        evaluated = 0

        for decision in self._store.unevaluated(now):
            current = self._prices.latest_price(decision.symbol)
            if current is None:
                logger.debug(f"No price for {decision.symbol}, grading deferred")
                continue

            await self._grade(decision, current)
            evaluated += 1

        if evaluated:
            logger.info(f"Evaluated {evaluated} predictions")
        return evaluated

    async def _grade(self, decision: AiTradeDecision, current: float) -> None:
        price_at = decision.price_at_decision
        accurate = is_prediction_accurate(decision.predicted_direction, price_at, current)
        outcome = f"{price_at:.2f} -> {current:.2f} (predicted: {decision.predicted_price_target:.2f})"

        self._store.update_outcome(decision.id, outcome, current, accurate)

        if self._audit is not None and decision.index_id is not None:
            await self._audit.attach_outcome(decision.index_id, current - price_at, accurate)

        logger.info(
            f"Evaluated decision {decision.id} ({decision.symbol} {decision.predicted_direction}): "
            f"{'CORRECT' if accurate else 'INCORRECT'}"
        )
