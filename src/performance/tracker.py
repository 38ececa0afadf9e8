"""Equity curve snapshots, benchmark comparison and compounding forecast."""

import json
import logging
import math
from datetime import datetime, timezone
from pathlib import Path

from src.journal.decision_store import DecisionStore
from src.ledger.base import Ledger, PriceSource
from src.performance.models import BenchmarkComparison, CompoundingForecast, PerformanceSnapshot

logger = logging.getLogger(__name__)


class PerformanceTracker:
    """Records periodic equity snapshots against a benchmark.

    The benchmark is tracked on relative return: the first snapshot's
    benchmark value (the starting capital) is scaled by the ratio of the
    benchmark's current price to its price at that snapshot.

    Snapshots are appended to ``{data_dir}/performance_snapshots.jsonl``.
    """

    SNAPSHOTS_FILE = "performance_snapshots.jsonl"
    FORECAST_WINDOW = 30

    def __init__(
        self,
        data_dir: Path | str,
        ledger: Ledger,
        price_source: PriceSource,
        starting_capital: float,
        bankruptcy_threshold: float,
        benchmark_symbol: str = "SPY",
        decision_store: DecisionStore | None = None,
    ):
        """Initialize the tracker.

        Args:
            data_dir: Directory for the snapshot file.
            ledger: Ledger to value.
            price_source: Latest price lookup for positions and the benchmark.
            starting_capital: Capital the P&L is measured against.
            bankruptcy_threshold: Equity level used by the forecast.
            benchmark_symbol: Benchmark ticker.
            decision_store: Source of prediction accuracy.
        """
        self._path = Path(data_dir) / self.SNAPSHOTS_FILE
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._ledger = ledger
        self._prices = price_source
        self._starting_capital = starting_capital
        self._bankruptcy_threshold = bankruptcy_threshold
        self._benchmark_symbol = benchmark_symbol
        self._decision_store = decision_store

    def snapshots(self, limit: int | None = None) -> list[PerformanceSnapshot]:
        """Return snapshots in chronological order, the last ``limit`` if given."""
        if not self._path.exists():
            return []
        with open(self._path) as f:
            rows = [PerformanceSnapshot.from_dict(json.loads(line)) for line in f if line.strip()]
        return rows[-limit:] if limit is not None else rows

    def positions_value(self) -> float:
        total = 0.0
        for pos in self._ledger.positions():
            price = self._prices.latest_price(pos.symbol)
            total += pos.quantity * (price if price is not None else pos.entry_price)
        return total

    def _benchmark_value(self, history: list[PerformanceSnapshot], price: float | None) -> float:
        anchor = next((s for s in history if s.benchmark_price is not None), None)
        if anchor is None:
            return self._starting_capital
        if price is None:
            return history[-1].benchmark_value
        return anchor.benchmark_value * price / anchor.benchmark_price

    def record_snapshot(self, now: datetime | None = None) -> PerformanceSnapshot:
        """Capture and persist the current equity and benchmark values."""
        history = self.snapshots()
        cash = self._ledger.portfolio_value().cash
        positions_value = self.positions_value()
        total_value = cash + positions_value

        benchmark_price = self._prices.latest_price(self._benchmark_symbol)
        benchmark_value = self._benchmark_value(history, benchmark_price)

        trades = self._ledger.trades()
        winning = sum(1 for t in trades if (t.pnl or 0.0) > 0.0)
        losing = sum(1 for t in trades if (t.pnl or 0.0) < 0.0)
        closed = winning + losing

        accuracy = None
        if self._decision_store is not None:
            stats = self._decision_store.prediction_accuracy()
            if stats.total_predictions > 0:
                accuracy = stats.accuracy_percent

        total_pnl = total_value - self._starting_capital
        snapshot = PerformanceSnapshot(
            timestamp=now or datetime.now(timezone.utc),
            portfolio_value=total_value,
            cash=cash,
            positions_value=positions_value,
            benchmark_value=benchmark_value,
            benchmark_symbol=self._benchmark_symbol,
            benchmark_price=benchmark_price,
            total_pnl=total_pnl,
            total_pnl_percent=total_pnl / self._starting_capital * 100.0,
            benchmark_pnl_percent=(benchmark_value - self._starting_capital) / self._starting_capital * 100.0,
            prediction_accuracy=accuracy,
            trades_to_date=len(trades),
            winning_trades=winning,
            losing_trades=losing,
            win_rate=winning / closed * 100.0 if closed else None,
        )

        with open(self._path, "a") as f:
            f.write(json.dumps(snapshot.to_dict()) + "\n")

        logger.info(
            f"Performance snapshot: ${total_value:,.2f} ({snapshot.total_pnl_percent:+.2f}%) "
            f"vs {self._benchmark_symbol} {snapshot.benchmark_pnl_percent:+.2f}%"
        )
        return snapshot

    def benchmark_comparison(self, limit: int = 365) -> BenchmarkComparison:
        """Compare portfolio and benchmark returns over the recorded history."""
        history = self.snapshots(limit)
        if not history:
            return BenchmarkComparison()

        first, last = history[0], history[-1]
        portfolio_return = (
            (last.portfolio_value - first.portfolio_value) / first.portfolio_value * 100.0
            if first.portfolio_value
            else 0.0
        )
        benchmark_return = (
            (last.benchmark_value - first.benchmark_value) / first.benchmark_value * 100.0
            if first.benchmark_value
            else 0.0
        )
        return BenchmarkComparison(
            portfolio_return_percent=portfolio_return,
            benchmark_return_percent=benchmark_return,
            alpha=portfolio_return - benchmark_return,
            tracking_data=[(s.timestamp, s.portfolio_value, s.benchmark_value) for s in history],
        )

    def compounding_forecast(self) -> CompoundingForecast:
        """Project equity by compounding the mean per-snapshot return.

        Uses the pairwise returns of the last 30 snapshots. Periods are
        snapshot intervals.
        """
        history = self.snapshots(self.FORECAST_WINDOW)
        if len(history) < 2:
            return CompoundingForecast.insufficient_data()

        returns = [
            (b.portfolio_value - a.portfolio_value) / a.portfolio_value
            for a, b in zip(history, history[1:])
            if a.portfolio_value
        ]
        if not returns:
            return CompoundingForecast.insufficient_data()
        rate = sum(returns) / len(returns)

        current_value = self._ledger.portfolio_value().cash + self.positions_value()

        trades = self._ledger.trades()
        winning = sum(1 for t in trades if (t.pnl or 0.0) > 0.0)
        losing = sum(1 for t in trades if (t.pnl or 0.0) < 0.0)
        win_rate = winning / (winning + losing) * 100.0 if winning + losing else 0.0

        return CompoundingForecast(
            current_daily_return=rate * 100.0,
            current_win_rate=win_rate,
            projected_30_days=current_value * (1.0 + rate) ** 30,
            projected_90_days=current_value * (1.0 + rate) ** 90,
            projected_365_days=current_value * (1.0 + rate) ** 365,
            time_to_double=self._time_to_double(rate),
            time_to_bankruptcy=self._time_to_bankruptcy(rate, current_value),
        )

    @staticmethod
    def _time_to_double(rate: float) -> int | None:
        if rate <= 0.0:
            return None
        return math.ceil(math.log(2.0) / math.log(1.0 + rate))

    def _time_to_bankruptcy(self, rate: float, current_value: float) -> int | None:
        if rate >= 0.0:
            return None
        if current_value <= self._bankruptcy_threshold:
            return 0
        # A loss of 100% or more per period wipes out equity in one step
        if 1.0 + rate <= 0.0:
            return 1
        return math.ceil(
            math.log(self._bankruptcy_threshold / current_value) / math.log(1.0 + rate)
        )
