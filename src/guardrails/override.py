"""Time-boxed override of the position-size guardrail."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from src.guardrails.models import GuardrailSet


@dataclass
class Override:
    """Manually granted, self-expiring relaxation of the position cap.

    Only ``max_position_pct`` is replaced while active. Every other guardrail
    stays in force. No background task clears an expired override;
    ``is_active`` checks the clock on every call.
    """

    enabled: bool = False
    expires_at: datetime | None = None
    max_position_pct: float | None = None
    reason: str | None = None

    @classmethod
    def timed(
        cls,
        hours: float,
        max_pct: float,
        reason: str,
        now: datetime | None = None,
    ) -> "Override":
        """Create an override expiring ``hours`` from now."""
        now = now or datetime.now(timezone.utc)
        return cls(
            enabled=True,
            expires_at=now + timedelta(hours=hours),
            max_position_pct=max_pct,
            reason=reason,
        )

    def is_active(self, now: datetime | None = None) -> bool:
        if not self.enabled:
            return False
        if self.expires_at is None:
            return True
        now = now or datetime.now(timezone.utc)
        return now < self.expires_at

    def clear(self) -> None:
        self.enabled = False
        self.expires_at = None
        self.max_position_pct = None
        self.reason = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "max_position_pct": self.max_position_pct,
            "reason": self.reason,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Override":
        return cls(
            enabled=data.get("enabled", False),
            expires_at=(
                datetime.fromisoformat(data["expires_at"])
                if data.get("expires_at")
                else None
            ),
            max_position_pct=data.get("max_position_pct"),
            reason=data.get("reason"),
        )


def effective_max_position_pct(
    guardrails: GuardrailSet,
    override: Override,
    now: datetime | None = None,
) -> float:
    """Position cap in force right now, considering any active override."""
    if override.is_active(now) and override.max_position_pct is not None:
        return override.max_position_pct
    return guardrails.max_position_pct
