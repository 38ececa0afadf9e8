"""Configuration for the autonomous trader."""

from pydantic import BaseModel, Field

from src.guardrails.models import TradingMode


class TraderSettings(BaseModel):
    """Settings for AutonomousTrader."""

    starting_capital: float = Field(default=1_000_000.0, gt=0.0)
    bankruptcy_threshold: float = Field(default=1_000.0, ge=0.0)
    benchmark_symbol: str = "SPY"
    watchlist: list[str] = Field(default_factory=lambda: ["SPY", "QQQ", "AAPL", "NVDA"])
    model_priority: list[str] = Field(
        default_factory=lambda: ["deepseek-v3.2:cloud", "gpt-oss:120b-cloud", "qwen3:235b"],
        min_length=1,
    )
    trading_mode: TradingMode = TradingMode.NORMAL
    cycle_interval_minutes: int = Field(default=60, ge=1)
    query_timeout_seconds: float = Field(default=300.0, gt=0.0)
    stop_loss_percent: float = Field(default=5.0, gt=0.0)
    take_profit_percent: float = Field(default=15.0, gt=0.0)
    min_cash_reserve_percent: float = Field(default=0.0, ge=0.0, le=100.0)
    system_prompt: str | None = None
    state_file: str = "data/ai_trader/trader_state.json"
