"""Ordered rule chain that validates proposed trades against guardrails."""

import logging
from dataclasses import asdict
from datetime import datetime, timezone

from src.guardrails.models import Executed, ProposedTrade, Rejected, RuleTag, TradeResult, TradingMode
from src.guardrails.state import TraderState
from src.journal.models import TradeRejection
from src.journal.risk_event_log import RiskEventLog
from src.ledger.base import Ledger

logger = logging.getLogger(__name__)


class DecisionValidator:
    """Turns a ProposedTrade into an Executed, Queued or Rejected verdict.

    Rules run in a fixed order and the first failure wins:
    1. Paused mode
    2. Circuit breaker pause
    3. Position size against the effective cap (override aware)
    4. Single trade value
    5. Confluence support
    6. Daily trade count
    7. Blocked hours (UTC)
    """

    def __init__(
        self,
        state: TraderState,
        ledger: Ledger,
        risk_log: RiskEventLog | None = None,
    ):
        """Initialize the validator.

        Args:
            state: Shared trader state (mode, breaker, override).
            ledger: Ledger used to count today's trades.
            risk_log: Sink for rejection records.
        """
        self._state = state
        self._ledger = ledger
        self._risk_log = risk_log

    def validate(
        self,
        proposed: ProposedTrade,
        has_confluence: bool,
        now: datetime | None = None,
        session_id: int | None = None,
    ) -> TradeResult:
        """Validate a proposed trade.

        Args:
            proposed: Trade built from a model decision.
            has_confluence: Whether indicators agree on the symbol.
            now: Current UTC time. Defaults to the system clock.
            session_id: Active session, recorded on rejections.

        Returns:
            Executed with trade_id and price unset, or Rejected.
        """
        now = now or datetime.now(timezone.utc)
        result = self._check(proposed, has_confluence, now)

        if isinstance(result, Rejected):
            logger.warning(
                f"Rejected {proposed.action} {proposed.symbol} "
                f"[{result.rule_triggered.value}]: {result.reason}"
            )
            self._record_rejection(result, now, session_id)

        return result

    def _check(self, proposed: ProposedTrade, has_confluence: bool, now: datetime) -> TradeResult:
        guardrails = self._state.guardrails
        breaker = self._state.circuit_breaker

        # Rule 1: paused
        if guardrails.mode == TradingMode.PAUSED:
            return Rejected("Trading is paused", RuleTag.MODE_PAUSED, proposed)

        # Rule 2: circuit breaker
        if breaker.triggered and not breaker.can_resume(now):
            resume_at = breaker.resume_at.isoformat() if breaker.resume_at else "reset"
            return Rejected(
                f"Circuit breaker active until {resume_at}",
                RuleTag.CIRCUIT_BREAKER_PAUSE,
                proposed,
            )

        # Rule 3: position size
        max_pct = self._state.effective_max_position_pct(now)
        if proposed.quantity_percent > max_pct:
            return Rejected(
                f"Position size {proposed.quantity_percent:.1f}% exceeds max {max_pct:.1f}%",
                RuleTag.MAX_POSITION_SIZE,
                proposed,
            )

        # Rule 4: trade value
        if proposed.estimated_value > guardrails.max_single_trade_value:
            return Rejected(
                f"Trade value ${proposed.estimated_value:.2f} exceeds max "
                f"${guardrails.max_single_trade_value:.2f}",
                RuleTag.MAX_TRADE_VALUE,
                proposed,
            )

        # Rule 5: confluence
        if guardrails.require_confluence and not has_confluence:
            return Rejected(
                "Trade requires confluence signal support",
                RuleTag.REQUIRE_CONFLUENCE,
                proposed,
            )

        # Rule 6: daily trade count
        trades_today = len(self._ledger.trades_today(now))
        if trades_today >= guardrails.max_daily_trades:
            return Rejected(
                f"Daily trade limit reached ({trades_today}/{guardrails.max_daily_trades})",
                RuleTag.MAX_DAILY_TRADES,
                proposed,
            )

        # Rule 7: blocked hours
        blocked = guardrails.blocked_range_for(now.hour)
        if blocked is not None:
            start, end = blocked
            return Rejected(
                f"Trading blocked during hours {start}-{end}",
                RuleTag.BLOCKED_HOURS,
                proposed,
            )

        return Executed(
            symbol=proposed.symbol,
            action=proposed.action.upper(),
            quantity=proposed.quantity,
            value=proposed.estimated_value,
            timestamp=now,
        )

    def _record_rejection(self, result: Rejected, now: datetime, session_id: int | None) -> None:
        if self._risk_log is None:
            return

        proposed = result.proposed_trade
        self._risk_log.record_rejection(
            TradeRejection(
                timestamp=now,
                session_id=session_id,
                attempted_action=proposed.action,
                symbol=proposed.symbol,
                quantity=proposed.quantity,
                quantity_percent=proposed.quantity_percent,
                estimated_value=proposed.estimated_value,
                reason=result.reason,
                rule_triggered=result.rule_triggered.value,
                trading_mode=self._state.mode.value,
                raw_request=asdict(proposed),
            )
        )
