"""Tiered guardrail policy keyed by trading mode."""

from src.guardrails.models import GuardrailSet, TradingMode


_GUARDRAILS: dict[TradingMode, GuardrailSet] = {
    TradingMode.AGGRESSIVE: GuardrailSet(
        mode=TradingMode.AGGRESSIVE,
        max_position_pct=33.0,
        max_daily_trades=20,
        max_single_trade_value=100_000.0,
        require_confluence=False,
        blocked_hours=(),
    ),
    TradingMode.NORMAL: GuardrailSet(
        mode=TradingMode.NORMAL,
        max_position_pct=10.0,
        max_daily_trades=10,
        max_single_trade_value=50_000.0,
        require_confluence=True,
        blocked_hours=((9, 9), (15, 16)),
    ),
    TradingMode.CONSERVATIVE: GuardrailSet(
        mode=TradingMode.CONSERVATIVE,
        max_position_pct=5.0,
        max_daily_trades=5,
        max_single_trade_value=25_000.0,
        require_confluence=True,
        blocked_hours=((9, 10), (15, 16)),
    ),
    TradingMode.PAUSED: GuardrailSet(
        mode=TradingMode.PAUSED,
        max_position_pct=0.0,
        max_daily_trades=0,
        max_single_trade_value=0.0,
        require_confluence=True,
        blocked_hours=((0, 24),),
    ),
}


def for_mode(mode: TradingMode) -> GuardrailSet:
    """Return the guardrails for a trading mode.

    Args:
        mode: Trading mode to look up.

    Returns:
        The frozen GuardrailSet for that mode.
    """
    return _GUARDRAILS[TradingMode(mode)]
