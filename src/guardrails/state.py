"""Persisted trader state: mode, circuit breaker and override."""

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path

from src.guardrails.circuit_breaker import CircuitBreaker
from src.guardrails.models import GuardrailSet, TradingMode
from src.guardrails.override import Override, effective_max_position_pct
from src.guardrails.policy import for_mode

logger = logging.getLogger(__name__)


@dataclass
class TraderState:
    """Mutable risk state shared by the validator and the trading cycle.

    Attributes:
        guardrails: Limits for the current mode. Replaced wholesale on a switch.
        circuit_breaker: Loss tracking and pause state.
        override: Optional position-cap override.
        day: UTC date the day-start equity belongs to.
        day_start_equity: Portfolio equity at the first check of ``day``.
    """

    guardrails: GuardrailSet = field(default_factory=lambda: for_mode(TradingMode.NORMAL))
    circuit_breaker: CircuitBreaker = field(default_factory=CircuitBreaker)
    override: Override = field(default_factory=Override)
    day: date | None = None
    day_start_equity: float | None = None

    @property
    def mode(self) -> TradingMode:
        return self.guardrails.mode

    def switch_mode(self, new_mode: TradingMode) -> TradingMode:
        """Replace the guardrails with those of ``new_mode``.

        Returns:
            The previous mode.
        """
        previous = self.guardrails.mode
        self.guardrails = for_mode(new_mode)
        return previous

    def effective_max_position_pct(self, now: datetime | None = None) -> float:
        return effective_max_position_pct(self.guardrails, self.override, now)

    def roll_day(self, equity: float, now: datetime | None = None) -> float:
        """Return day-start equity, starting a new day at each UTC date change."""
        today = (now or datetime.now(timezone.utc)).date()
        if self.day != today or self.day_start_equity is None:
            self.day = today
            self.day_start_equity = equity
        return self.day_start_equity

    def to_dict(self) -> dict:
        return {
            "trading_mode": self.mode.value,
            "circuit_breaker": self.circuit_breaker.to_dict(),
            "override": self.override.to_dict(),
            "day": self.day.isoformat() if self.day else None,
            "day_start_equity": self.day_start_equity,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TraderState":
        return cls(
            guardrails=for_mode(TradingMode(data["trading_mode"])),
            circuit_breaker=CircuitBreaker.from_dict(data["circuit_breaker"]),
            override=Override.from_dict(data.get("override", {})),
            day=date.fromisoformat(data["day"]) if data.get("day") else None,
            day_start_equity=data.get("day_start_equity"),
        )


class StateStore:
    """Stores TraderState as a single JSON document.

    Mode and circuit breaker are written together through a temp file and
    ``os.replace``, so a crash leaves either the old or the new state on disk.
    """

    def __init__(self, path: Path):
        """Initialize the store.

        Args:
            path: JSON file holding the state.
        """
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    def load(self, default: TraderState) -> TraderState:
        """Load the persisted state, or return ``default`` when none exists."""
        if not self._path.exists():
            return default

        with open(self._path) as f:
            data = json.load(f)
        state = TraderState.from_dict(data)
        logger.info(f"Loaded trader state from {self._path} (mode: {state.mode.value})")
        return state

    def save(self, state: TraderState) -> None:
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        with open(tmp_path, "w") as f:
            json.dump(state.to_dict(), f, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, self._path)
