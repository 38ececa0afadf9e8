"""Settings for the guardrails module."""

from pydantic import BaseModel, Field


class CircuitBreakerSettings(BaseModel):
    """Circuit breaker thresholds.

    Attributes:
        daily_loss_threshold: Daily P&L percent that trips the breaker (negative).
        consecutive_loss_limit: Losing trades in a row that trip the breaker.
        auto_conservative_on_trigger: Switch to conservative mode on a trip.
        pause_hours: How long a trip suspends trading.
    """

    daily_loss_threshold: float = Field(default=-10.0, le=0.0)
    consecutive_loss_limit: int = Field(default=5, ge=1)
    auto_conservative_on_trigger: bool = True
    pause_hours: float = Field(default=1.0, gt=0.0)
