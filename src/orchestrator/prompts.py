"""Prompt templates for the autonomous trader."""

from src.orchestrator.models import MarketContext

SYSTEM_PROMPT = """You are an autonomous trading agent managing a virtual portfolio.
Your goal is to maximize returns through decisive trades grounded in technical analysis.

RULES:
1. You decide autonomously; no human confirms your trades
2. Idle cash earns nothing; keep capital deployed across several positions
3. The portfolio is finished once its value drops below the bankruptcy threshold
4. Respect the mental stop-loss and take-profit levels given in the constraints
5. Every BUY and SELL is checked against hard guardrails; oversized trades are rejected

DECISION FRAMEWORK:
1. Confluence signals (several indicators agreeing) are your strongest entries
2. Cut positions early when their supporting signals disappear
3. Let winners run while confluence remains strong
4. Size positions by conviction: higher confidence, larger position

RESPONSE FORMAT:
Respond with ONLY valid JSON, no other text:
{
  "decisions": [
    {
      "action": "BUY" | "SELL" | "HOLD",
      "symbol": "TICKER",
      "quantity_percent": 0-100 (percent of available cash for BUY, percent of position for SELL),
      "confidence": 0.0-1.0,
      "reasoning": "Why this decision was made",
      "prediction": {
        "direction": "bullish" | "bearish" | "neutral",
        "price_target": 123.45,
        "timeframe_days": 5
      }
    }
  ],
  "market_outlook": "Brief overall market assessment",
  "session_notes": "Notes about this trading session"
}"""


def format_context_prompt(context: MarketContext) -> str:
    """Render the market context as the user prompt.

    Args:
        context: Portfolio, symbols, trades and constraints for this cycle.

    Returns:
        Prompt text.
    """
    portfolio = context.portfolio
    lines = [
        "=== PORTFOLIO STATUS ===",
        f"Cash: ${portfolio.cash:.2f}",
        f"Total Value: ${portfolio.total_value:.2f}",
        f"P/L: ${portfolio.total_pnl:.2f} ({portfolio.total_pnl_percent:+.2f}%)",
    ]

    if portfolio.positions:
        lines.append("")
        lines.append("Positions:")
        for pos in portfolio.positions:
            lines.append(
                f"  {pos.symbol} - {pos.quantity:g} shares @ ${pos.entry_price:.2f} "
                f"(current: ${pos.current_price:.2f}, P/L: ${pos.unrealized_pnl:.2f} / "
                f"{pos.unrealized_pnl_percent:+.2f}%)"
            )

    lines.append("")
    lines.append("=== MARKET SIGNALS ===")
    for sym in context.symbols_data:
        price = f"${sym.current_price:.2f}" if sym.current_price is not None else "n/a"
        confluence = "confluence support" if sym.has_confluence else "no confluence"
        lines.append(f"{sym.symbol}: {price} ({confluence})")

    if context.recent_trades:
        lines.append("")
        lines.append("=== RECENT TRADES ===")
        for trade in context.recent_trades:
            pnl = f", P/L ${trade.pnl:.2f}" if trade.pnl is not None else ""
            lines.append(
                f"{trade.timestamp:%Y-%m-%d %H:%M} {trade.action} {trade.quantity:g} "
                f"{trade.symbol} @ ${trade.price:.2f}{pnl}"
            )

    constraints = context.constraints
    lines.append("")
    lines.append("=== CONSTRAINTS ===")
    lines.append(f"Trading mode: {constraints.trading_mode}")
    lines.append(f"Max position size: {constraints.max_position_size_percent:.0f}% of portfolio")
    lines.append(f"Max single trade value: ${constraints.max_single_trade_value:,.0f}")
    lines.append(f"Max trades per day: {constraints.max_daily_trades}")
    if constraints.require_confluence:
        lines.append("New positions require confluence support")
    lines.append(
        f"Stop-loss: {constraints.stop_loss_percent:.0f}%, "
        f"Take-profit: {constraints.take_profit_percent:.0f}%"
    )
    lines.append(f"Min cash reserve: {constraints.min_cash_reserve_percent:.0f}%")

    lines.append("")
    if context.prediction_accuracy is not None:
        lines.append(f"Past prediction accuracy: {context.prediction_accuracy:.1f}%")
    else:
        lines.append("Past prediction accuracy: no graded predictions yet")

    lines.append("")
    lines.append("Provide your trading decisions as JSON.")
    return "\n".join(lines)
