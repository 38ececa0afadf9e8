"""Data models for performance tracking."""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class PerformanceSnapshot:
    """Equity and benchmark values at one point in time.

    Attributes:
        timestamp: Snapshot time (UTC).
        portfolio_value: Cash plus positions value.
        cash: Cash balance.
        positions_value: Marked-to-market positions value.
        benchmark_value: Starting capital scaled by the benchmark's return.
        benchmark_symbol: Benchmark ticker.
        benchmark_price: Benchmark price at this snapshot.
        total_pnl: Portfolio value minus starting capital.
        total_pnl_percent: total_pnl as percent of starting capital.
        benchmark_pnl_percent: Benchmark return since the first snapshot.
        prediction_accuracy: Graded prediction accuracy (percent).
        trades_to_date: Trades executed so far.
        winning_trades: Sells with positive realized P&L.
        losing_trades: Sells with negative realized P&L.
        win_rate: Winning share of closed trades (percent).
    """

    timestamp: datetime
    portfolio_value: float
    cash: float
    positions_value: float
    benchmark_value: float
    benchmark_symbol: str
    benchmark_price: float | None
    total_pnl: float
    total_pnl_percent: float
    benchmark_pnl_percent: float
    prediction_accuracy: float | None
    trades_to_date: int
    winning_trades: int
    losing_trades: int
    win_rate: float | None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PerformanceSnapshot":
        data = dict(data)
        data["timestamp"] = datetime.fromisoformat(data["timestamp"])
        return cls(**data)


@dataclass
class BenchmarkComparison:
    """Portfolio versus benchmark since the first snapshot.

    ``tracking_data`` holds (timestamp, portfolio_value, benchmark_value).
    """

    portfolio_return_percent: float = 0.0
    benchmark_return_percent: float = 0.0
    alpha: float = 0.0
    tracking_data: list[tuple[datetime, float, float]] = field(default_factory=list)


@dataclass
class CompoundingForecast:
    """Projection of equity from the recent average per-period return."""

    current_daily_return: float
    current_win_rate: float
    projected_30_days: float
    projected_90_days: float
    projected_365_days: float
    time_to_double: int | None
    time_to_bankruptcy: int | None

    @classmethod
    def insufficient_data(cls) -> "CompoundingForecast":
        return cls(
            current_daily_return=0.0,
            current_win_rate=0.0,
            projected_30_days=0.0,
            projected_90_days=0.0,
            projected_365_days=0.0,
            time_to_double=None,
            time_to_bankruptcy=None,
        )
