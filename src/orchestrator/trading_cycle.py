"""Autonomous trader that runs model-driven trading cycles."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable

from src.execution.models import MissingPriceError
from src.execution.trade_executor import TradeExecutor
from src.guardrails.circuit_breaker import CircuitBreakerTrigger
from src.guardrails.models import Executed, GuardrailSet, ProposedTrade, TradingMode
from src.guardrails.override import Override
from src.guardrails.settings import CircuitBreakerSettings
from src.guardrails.state import StateStore, TraderState
from src.guardrails.validator import DecisionValidator
from src.journal.decision_store import DecisionStore
from src.journal.models import CircuitBreakerEvent, TradingSession
from src.journal.outcome_tracker import PredictionOutcomeTracker
from src.journal.risk_event_log import RiskEventLog
from src.ledger.base import ConfluenceSource, Ledger, PriceSource
from src.ledger.models import LedgerError
from src.llm.decision_schema import ParsedDecision
from src.orchestrator.models import (
    BankruptcyError,
    CycleReport,
    DecisionOutcome,
    MarketContext,
    PortfolioSnapshot,
    PositionInfo,
    RecentTrade,
    SymbolContext,
    TraderStatus,
    TradingConstraints,
)
from src.orchestrator.prompts import format_context_prompt
from src.orchestrator.query_orchestrator import ModelQueryOrchestrator
from src.orchestrator.settings import TraderSettings
from src.performance.tracker import PerformanceTracker

logger = logging.getLogger(__name__)


class AutonomousTrader:
    """Runs trading cycles and owns the mode, breaker and override state.

    Each cycle: bankruptcy check, circuit breaker refresh, market context,
    model query with fallback, then per decision validation, execution
    and recording, and finally a performance snapshot.

    Cycles are serialized; a second concurrent ``run_cycle`` call raises
    RuntimeError instead of interleaving with the first.
    """

    RECENT_TRADES = 10

    def __init__(
        self,
        settings: TraderSettings,
        breaker_settings: CircuitBreakerSettings,
        ledger: Ledger,
        price_source: PriceSource,
        confluence_source: ConfluenceSource,
        orchestrator: ModelQueryOrchestrator,
        executor: TradeExecutor,
        state: TraderState,
        state_store: StateStore,
        decision_store: DecisionStore,
        risk_log: RiskEventLog,
        performance: PerformanceTracker,
        outcome_tracker: PredictionOutcomeTracker | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._settings = settings
        self._breaker_settings = breaker_settings
        self._ledger = ledger
        self._prices = price_source
        self._confluence = confluence_source
        self._orchestrator = orchestrator
        self._executor = executor
        self._state = state
        self._state_store = state_store
        self._store = decision_store
        self._risk_log = risk_log
        self._performance = performance
        self._outcomes = outcome_tracker
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        self._validator = DecisionValidator(state, ledger, risk_log)
        self._cycle_lock = asyncio.Lock()
        self._session: TradingSession | None = decision_store.active_session()

    # Mode and override

    @property
    def mode(self) -> TradingMode:
        return self._state.mode

    @property
    def guardrails(self) -> GuardrailSet:
        return self._state.guardrails

    @property
    def state(self) -> TraderState:
        return self._state

    def switch_mode(self, new_mode: TradingMode, reason: str | None = None) -> TradingMode:
        """Switch trading mode and persist it.

        Returns:
            The previous mode.
        """
        previous = self._state.switch_mode(TradingMode(new_mode))
        self._state_store.save(self._state)
        logger.info(
            f"Trading mode {previous.value} -> {self._state.mode.value}"
            + (f": {reason}" if reason else "")
        )
        return previous

    def apply_override(self, hours: float, max_pct: float, reason: str) -> Override:
        """Grant a timed position-cap override and persist it."""
        self._state.override = Override.timed(hours, max_pct, reason, self._clock())
        self._state_store.save(self._state)
        logger.info(f"Override active for {hours}h, max position {max_pct:.1f}%: {reason}")
        return self._state.override

    def clear_override(self) -> None:
        self._state.override.clear()
        self._state_store.save(self._state)
        logger.info("Override cleared")

    def effective_max_position_pct(self) -> float:
        return self._state.effective_max_position_pct(self._clock())

    # Circuit breaker

    def check_circuit_breaker(self, now: datetime | None = None) -> CircuitBreakerTrigger | None:
        """Refresh the daily P&L and trip the breaker if a threshold is hit.

        Daily P&L is measured against the equity at the first check of the
        UTC day. While a pause is running the breaker is not re-evaluated.

        Returns:
            The trigger if the breaker tripped on this call.
        """
        now = now or self._clock()
        breaker = self._state.circuit_breaker

        equity = self._ledger.portfolio_value().total
        day_start = self._state.roll_day(equity, now)
        pnl_percent = (equity - day_start) / day_start * 100.0 if day_start else 0.0
        breaker.update_daily_pnl(pnl_percent)

        trigger = None
        if not breaker.triggered or breaker.can_resume(now):
            trigger = breaker.should_trigger()
            if trigger is not None:
                self._trip(trigger, self._breaker_settings.pause_hours, now)

        # Mode and breaker land in the same write
        self._state_store.save(self._state)
        return trigger

    def pause_trading(self, hours: float, now: datetime | None = None) -> None:
        """Manually trip the circuit breaker for ``hours``."""
        now = now or self._clock()
        self._trip(CircuitBreakerTrigger.MANUAL_PAUSE, hours, now)
        self._state_store.save(self._state)

    def _trip(self, trigger: CircuitBreakerTrigger, pause_hours: float, now: datetime) -> None:
        breaker = self._state.circuit_breaker
        previous_mode = self._state.mode

        breaker.trigger(pause_hours, now)
        if (
            trigger != CircuitBreakerTrigger.MANUAL_PAUSE
            and breaker.auto_conservative_on_trigger
            and previous_mode.permissiveness > TradingMode.CONSERVATIVE.permissiveness
        ):
            self._state.switch_mode(TradingMode.CONSERVATIVE)

        logger.warning(
            f"Circuit breaker tripped ({trigger.value}): daily P&L {breaker.daily_pnl_percent:.2f}%, "
            f"{breaker.consecutive_losses} consecutive losses, mode {previous_mode.value} -> "
            f"{self._state.mode.value}, paused until {breaker.resume_at.isoformat()}"
        )
        self._risk_log.record_circuit_breaker_event(
            CircuitBreakerEvent(
                timestamp=now,
                trigger=trigger.value,
                previous_mode=previous_mode.value,
                new_mode=self._state.mode.value,
                daily_pnl=breaker.daily_pnl_percent,
                consecutive_losses=breaker.consecutive_losses,
                resume_at=breaker.resume_at,
            )
        )

    def reset_circuit_breaker(self) -> None:
        """Re-arm the breaker. The trading mode is left as it is."""
        self._state.circuit_breaker.reset()
        self._state_store.save(self._state)
        logger.info(f"Circuit breaker reset (mode stays {self._state.mode.value})")

    def record_trade_outcome(self, is_win: bool) -> None:
        breaker = self._state.circuit_breaker
        if is_win:
            breaker.record_win()
        else:
            breaker.record_loss()
        self._state_store.save(self._state)

    # Sessions and status

    def start_session(self) -> TradingSession:
        if self._session is not None:
            raise RuntimeError(f"Session {self._session.id} already active")

        equity = self._ledger.portfolio_value().total
        self._session = self._store.start_session(equity, self._clock())
        return self._session

    def end_session(self, notes: str | None = None) -> TradingSession | None:
        if self._session is None:
            return None

        equity = self._ledger.portfolio_value().total
        session = self._store.end_session(self._session.id, equity, notes, self._clock())
        self._session = None
        return session

    def status(self) -> TraderStatus:
        value = self._ledger.portfolio_value()
        return TraderStatus(
            is_running=self._session is not None,
            current_session=self._session,
            portfolio_value=value.total,
            cash=value.cash,
            positions_value=value.positions_value,
            is_bankrupt=value.total < self._settings.bankruptcy_threshold,
            sessions_completed=self._store.count_completed_sessions(),
            total_decisions=self._store.count_decisions(),
            total_trades=len(self._ledger.trades()),
            trading_mode=self._state.mode.value,
            circuit_breaker_triggered=self._state.circuit_breaker.triggered,
            override_active=self._state.override.is_active(self._clock()),
        )

    # Market context

    def build_market_context(self, now: datetime | None = None) -> MarketContext:
        now = now or self._clock()
        value = self._ledger.portfolio_value()

        positions = []
        for pos in self._ledger.positions():
            price = self._prices.latest_price(pos.symbol)
            current = price if price is not None else pos.entry_price
            positions.append(
                PositionInfo(
                    symbol=pos.symbol,
                    quantity=pos.quantity,
                    entry_price=pos.entry_price,
                    current_price=current,
                    unrealized_pnl=(current - pos.entry_price) * pos.quantity,
                    unrealized_pnl_percent=(current - pos.entry_price) / pos.entry_price * 100.0,
                )
            )

        total_pnl = value.total - self._settings.starting_capital
        portfolio = PortfolioSnapshot(
            cash=value.cash,
            positions=positions,
            total_value=value.total,
            total_pnl=total_pnl,
            total_pnl_percent=total_pnl / self._settings.starting_capital * 100.0,
        )

        symbols = list(dict.fromkeys([p.symbol for p in positions] + self._settings.watchlist))
        symbols_data = [
            SymbolContext(
                symbol=symbol,
                current_price=self._prices.latest_price(symbol),
                has_confluence=self._confluence.has_confluence_support(symbol),
            )
            for symbol in symbols
        ]

        recent_trades = [
            RecentTrade(
                symbol=t.symbol,
                action=t.action.value,
                quantity=t.quantity,
                price=t.price,
                pnl=t.pnl,
                timestamp=t.timestamp,
            )
            for t in self._ledger.trades(limit=self.RECENT_TRADES)
        ]

        accuracy = self._store.prediction_accuracy()
        guardrails = self._state.guardrails
        constraints = TradingConstraints(
            trading_mode=guardrails.mode.value,
            max_position_size_percent=self._state.effective_max_position_pct(now),
            max_daily_trades=guardrails.max_daily_trades,
            max_single_trade_value=guardrails.max_single_trade_value,
            require_confluence=guardrails.require_confluence,
            stop_loss_percent=self._settings.stop_loss_percent,
            take_profit_percent=self._settings.take_profit_percent,
            min_cash_reserve_percent=self._settings.min_cash_reserve_percent,
        )

        return MarketContext(
            timestamp=now,
            portfolio=portfolio,
            symbols_data=symbols_data,
            recent_trades=recent_trades,
            prediction_accuracy=accuracy.accuracy_percent if accuracy.total_predictions else None,
            constraints=constraints,
        )

    # Cycle

    async def evaluate_predictions(self, now: datetime | None = None) -> int:
        if self._outcomes is None:
            return 0
        return await self._outcomes.evaluate_predictions(now or self._clock())

    async def run_cycle(self, now: datetime | None = None) -> CycleReport:
        """Run one trading cycle.

        Raises:
            RuntimeError: A cycle is already running.
            BankruptcyError: Equity is below the bankruptcy threshold.
            AllModelsFailedError: No model returned valid decisions.
        """
        if self._cycle_lock.locked():
            raise RuntimeError("A trading cycle is already running")

        async with self._cycle_lock:
            return await self._run_cycle(now or self._clock())

    async def _run_cycle(self, now: datetime) -> CycleReport:
        self._prices.clear_cache()
        equity = self._ledger.portfolio_value().total
        if equity < self._settings.bankruptcy_threshold:
            logger.error(f"Portfolio value ${equity:,.2f} below bankruptcy threshold, stopping")
            raise BankruptcyError(equity, self._settings.bankruptcy_threshold)

        self.check_circuit_breaker(now)

        context = self.build_market_context(now)
        prompt = format_context_prompt(context)
        outcome = await self._orchestrator.query(prompt)

        report = CycleReport(
            started_at=now,
            model_used=outcome.model,
            market_outlook=outcome.response.market_outlook,
        )
        for decision, index_id in zip(outcome.response.decisions, outcome.index_ids):
            report.outcomes.append(self._process_decision(decision, outcome.model, index_id, now))

        if self._session is not None:
            self._store.record_session_activity(
                self._session.id, len(report.outcomes), report.trades_executed
            )

        snapshot = self._performance.record_snapshot(now)
        report.portfolio_value = snapshot.portfolio_value

        logger.info(
            f"Cycle complete: {len(report.outcomes)} decisions, "
            f"{report.trades_executed} trades, {len(report.errors)} errors"
        )
        return report

    def _process_decision(
        self,
        decision: ParsedDecision,
        model: str,
        index_id: str | None,
        now: datetime,
    ) -> DecisionOutcome:
        outcome = DecisionOutcome(decision=decision)
        session_id = self._session.id if self._session else None

        if decision.action == "HOLD":
            outcome.execution = self._executor.execute(decision, model, session_id, index_id, now)
            self._store.save_decision(outcome.execution.decision)
            return outcome

        price = self._prices.latest_price(decision.symbol)
        record = self._executor.decision_record(decision, model, price, session_id, index_id, now)

        try:
            if price is None or price <= 0:
                raise MissingPriceError(f"No valid price for {decision.symbol}")

            quantity = self._executor.resolve_quantity(decision, price)
            proposed = ProposedTrade(
                action=decision.action,
                symbol=decision.symbol,
                quantity=quantity,
                quantity_percent=decision.quantity_percent,
                estimated_value=quantity * price,
                confidence=decision.confidence,
                reasoning=decision.reasoning,
            )
            verdict = self._validator.validate(
                proposed,
                has_confluence=self._confluence.has_confluence_support(decision.symbol),
                now=now,
                session_id=session_id,
            )
            outcome.verdict = verdict

            if isinstance(verdict, Executed):
                result = self._executor.execute(decision, model, session_id, index_id, now)
                outcome.execution = result
                record = result.decision

                if result.trade is not None:
                    verdict.trade_id = result.trade.id
                    verdict.price = result.trade.price
                    verdict.quantity = result.trade.quantity
                    verdict.value = result.trade.quantity * result.trade.price

                if result.realized_pnl:
                    self.record_trade_outcome(result.realized_pnl > 0)
        except (LedgerError, MissingPriceError) as e:
            outcome.error = f"{decision.action} {decision.symbol}: {e}"
            logger.warning(f"Skipped decision {outcome.error}")

        self._store.save_decision(record)
        return outcome
