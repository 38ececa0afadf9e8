"""Circuit breaker that suspends trading after losses."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any


class CircuitBreakerTrigger(str, Enum):
    """Reason the circuit breaker tripped."""

    DAILY_LOSS_THRESHOLD = "daily_loss_threshold"
    CONSECUTIVE_LOSSES = "consecutive_losses"
    MANUAL_PAUSE = "manual_pause"


@dataclass
class CircuitBreaker:
    """Tracks loss state and decides when trading must be suspended.

    Attributes:
        daily_loss_threshold: Daily P&L percent at or below which to trip (e.g. -10.0).
        consecutive_loss_limit: Losing trades in a row before tripping.
        auto_conservative_on_trigger: Whether the owner should switch to
            conservative mode when this trips.
        triggered: Whether the breaker is tripped.
        resume_at: End of the pause period, if tripped.
        consecutive_losses: Current run of realized losses.
        daily_pnl_percent: Latest daily P&L percent.
    """

    daily_loss_threshold: float = -10.0
    consecutive_loss_limit: int = 5
    auto_conservative_on_trigger: bool = True
    triggered: bool = False
    resume_at: datetime | None = None
    consecutive_losses: int = 0
    daily_pnl_percent: float = 0.0

    def should_trigger(self) -> CircuitBreakerTrigger | None:
        """Check trip conditions, daily loss first."""
        if self.daily_pnl_percent <= self.daily_loss_threshold:
            return CircuitBreakerTrigger.DAILY_LOSS_THRESHOLD
        if self.consecutive_losses >= self.consecutive_loss_limit:
            return CircuitBreakerTrigger.CONSECUTIVE_LOSSES
        return None

    def record_loss(self) -> None:
        self.consecutive_losses += 1

    def record_win(self) -> None:
        self.consecutive_losses = 0

    def update_daily_pnl(self, pnl_percent: float) -> None:
        self.daily_pnl_percent = pnl_percent

    def trigger(self, pause_hours: float, now: datetime | None = None) -> None:
        """Trip the breaker for ``pause_hours``.

        Does not touch the trading mode; the owner decides whether to switch.
        """
        now = now or datetime.now(timezone.utc)
        self.triggered = True
        self.resume_at = now + timedelta(hours=pause_hours)

    def can_resume(self, now: datetime | None = None) -> bool:
        """Return True when not tripped or when the pause period has elapsed.

        This only reports elapsed time; ``reset()`` is what re-arms the breaker.
        """
        if not self.triggered:
            return True
        if self.resume_at is None:
            return True
        now = now or datetime.now(timezone.utc)
        return now >= self.resume_at

    def reset(self) -> None:
        self.triggered = False
        self.resume_at = None
        self.consecutive_losses = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "daily_loss_threshold": self.daily_loss_threshold,
            "consecutive_loss_limit": self.consecutive_loss_limit,
            "auto_conservative_on_trigger": self.auto_conservative_on_trigger,
            "triggered": self.triggered,
            "resume_at": self.resume_at.isoformat() if self.resume_at else None,
            "consecutive_losses": self.consecutive_losses,
            "daily_pnl_percent": self.daily_pnl_percent,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CircuitBreaker":
        return cls(
            daily_loss_threshold=data["daily_loss_threshold"],
            consecutive_loss_limit=data["consecutive_loss_limit"],
            auto_conservative_on_trigger=data["auto_conservative_on_trigger"],
            triggered=data.get("triggered", False),
            resume_at=(
                datetime.fromisoformat(data["resume_at"])
                if data.get("resume_at")
                else None
            ),
            consecutive_losses=data.get("consecutive_losses", 0),
            daily_pnl_percent=data.get("daily_pnl_percent", 0.0),
        )
