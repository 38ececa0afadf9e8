# main.py
"""Main entry point for the autonomous AI paper trader."""
import asyncio
import sys
import logging
from pathlib import Path

from dotenv import load_dotenv

from src.config.settings import Settings
from src.guardrails import CircuitBreaker, StateStore, TraderState, for_mode
from src.journal import AuditTrail, DecisionStore, PredictionOutcomeTracker, RiskEventLog
from src.ledger import FileConfluenceSource, PaperLedger, YFinancePriceSource
from src.llm import ClaudeBackend, ModelClient, ModelRouter, OllamaBackend
from src.execution import TradeExecutor
from src.orchestrator import (
    SYSTEM_PROMPT,
    AllModelsFailedError,
    AutonomousTrader,
    BankruptcyError,
    ModelQueryOrchestrator,
)
from src.performance import PerformanceTracker


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='[%(asctime)s] %(levelname)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)


def create_data_dirs(settings: Settings) -> None:
    """Create required data directories if they don't exist."""
    dirs = [
        Path(settings.journal.logs_dir),
        Path(settings.journal.logs_dir) / "raw",
        Path(settings.journal.data_dir),
        Path(settings.trader.state_file).parent,
    ]

    for dir_path in dirs:
        dir_path.mkdir(parents=True, exist_ok=True)

    logger.info("Data directories verified")


def print_startup_banner(settings: Settings) -> None:
    """Print system startup banner."""
    logger.info("=" * 60)
    logger.info(f"Starting {settings.system.name}")
    logger.info(f"Mode: {settings.system.mode}")
    logger.info(f"Version: {settings.system.version}")
    logger.info("=" * 60)


def load_and_validate_config() -> Settings:
    """Load and validate configuration.

    Returns:
        Settings object loaded from YAML.

    Raises:
        SystemExit: If config file missing or YAML parsing fails.
    """
    # Load environment variables
    load_dotenv()
    logger.info("✓ Loaded environment variables")

    # Check settings.yaml exists
    config_path = Path("config/settings.yaml")
    if not config_path.exists():
        logger.error("config/settings.yaml not found")
        sys.exit(1)

    # Load settings
    try:
        settings = Settings.from_yaml(config_path)
        logger.info("✓ Settings loaded from config/settings.yaml")
    except Exception as e:
        logger.error(f"Failed to parse settings.yaml: {e}")
        sys.exit(1)

    # Create data directories
    create_data_dirs(settings)

    return settings


def initialize_model_client(settings: Settings) -> ModelClient:
    """Build the model router.

    Claude models are served by the Anthropic API when a key is configured.
    Every other model name goes to Ollama.

    Args:
        settings: Loaded settings object.

    Returns:
        ModelRouter over the available backends.
    """
    backends: list[ModelClient] = []

    if settings.anthropic.api_key:
        backends.append(
            ClaudeBackend(
                api_key=settings.anthropic.api_key,
                max_tokens=settings.anthropic.max_tokens,
                thinking_budget_tokens=settings.anthropic.thinking_budget_tokens,
            )
        )
        logger.info("✓ Claude backend initialized")
    elif any(m.startswith("claude") for m in settings.trader.model_priority):
        logger.warning("ANTHROPIC_API_KEY not set - Claude models will fail and fall through")

    # Ollama accepts any model name, so it goes last
    backends.append(OllamaBackend(base_url=settings.ollama.base_url))
    logger.info(f"✓ Ollama backend initialized ({settings.ollama.base_url})")

    return ModelRouter(backends)


def initialize_state(settings: Settings) -> tuple[TraderState, StateStore]:
    """Load persisted trader state, falling back to configured defaults.

    Breaker thresholds always come from config; only runtime state is
    taken from the state file.

    Args:
        settings: Loaded settings object.

    Returns:
        Tuple of (TraderState, StateStore).
    """
    breaker_settings = settings.circuit_breaker
    store = StateStore(Path(settings.trader.state_file))
    default = TraderState(
        guardrails=for_mode(settings.trader.trading_mode),
        circuit_breaker=CircuitBreaker(
            daily_loss_threshold=breaker_settings.daily_loss_threshold,
            consecutive_loss_limit=breaker_settings.consecutive_loss_limit,
            auto_conservative_on_trigger=breaker_settings.auto_conservative_on_trigger,
        ),
    )

    try:
        state = store.load(default)
    except (OSError, ValueError, KeyError) as e:
        logger.error(f"Failed to load trader state from {store.path}: {e}")
        sys.exit(1)

    breaker = state.circuit_breaker
    breaker.daily_loss_threshold = breaker_settings.daily_loss_threshold
    breaker.consecutive_loss_limit = breaker_settings.consecutive_loss_limit
    breaker.auto_conservative_on_trigger = breaker_settings.auto_conservative_on_trigger
    store.save(state)

    logger.info(
        f"✓ Trader state ready (mode: {state.mode.value}, "
        f"breaker {'TRIPPED' if breaker.triggered else 'armed'})"
    )
    return state, store


def initialize_trader(settings: Settings) -> AutonomousTrader:
    """Wire all components into an AutonomousTrader.

    Args:
        settings: Loaded settings object.

    Returns:
        AutonomousTrader instance.
    """
    data_dir = Path(settings.journal.data_dir)

    price_source = YFinancePriceSource()
    ledger = PaperLedger(starting_cash=settings.trader.starting_capital, price_source=price_source)
    logger.info(f"✓ Paper ledger initialized (Cash: ${ledger.cash:,.2f})")

    confluence_source = FileConfluenceSource(settings.confluence.flags_file)

    audit_trail = AuditTrail(settings.journal.logs_dir)
    decision_store = DecisionStore(data_dir)
    risk_log = RiskEventLog(data_dir)
    logger.info(f"✓ Journal initialized ({settings.journal.logs_dir}, {data_dir})")

    state, state_store = initialize_state(settings)

    orchestrator = ModelQueryOrchestrator(
        client=initialize_model_client(settings),
        audit_trail=audit_trail,
        models=settings.trader.model_priority,
        system_prompt=settings.trader.system_prompt or SYSTEM_PROMPT,
        timeout_seconds=settings.trader.query_timeout_seconds,
    )
    logger.info(f"✓ Model chain: {' -> '.join(orchestrator.models)}")

    performance = PerformanceTracker(
        data_dir=data_dir,
        ledger=ledger,
        price_source=price_source,
        starting_capital=settings.trader.starting_capital,
        bankruptcy_threshold=settings.trader.bankruptcy_threshold,
        benchmark_symbol=settings.trader.benchmark_symbol,
        decision_store=decision_store,
    )

    trader = AutonomousTrader(
        settings=settings.trader,
        breaker_settings=settings.circuit_breaker,
        ledger=ledger,
        price_source=price_source,
        confluence_source=confluence_source,
        orchestrator=orchestrator,
        executor=TradeExecutor(ledger, price_source),
        state=state,
        state_store=state_store,
        decision_store=decision_store,
        risk_log=risk_log,
        performance=performance,
        outcome_tracker=PredictionOutcomeTracker(decision_store, price_source, audit_trail),
    )
    logger.info("✓ AutonomousTrader initialized")

    return trader


async def run_trading_loop(trader: AutonomousTrader, settings: Settings) -> None:
    """Run cycles until bankruptcy or interruption."""
    interval = settings.trader.cycle_interval_minutes * 60

    while True:
        try:
            report = await trader.run_cycle()
            logger.info(
                f"Cycle via {report.model_used}: {report.trades_executed} trades, "
                f"portfolio ${report.portfolio_value:,.2f}"
            )
        except BankruptcyError as e:
            logger.error(f"Stopping: {e}")
            return
        except AllModelsFailedError as e:
            logger.error(f"Cycle skipped: {e}")

        graded = await trader.evaluate_predictions()
        if graded:
            logger.info(f"Graded {graded} predictions")

        await asyncio.sleep(interval)


async def main() -> None:
    """Main entry point."""
    settings = load_and_validate_config()
    print_startup_banner(settings)

    trader = initialize_trader(settings)
    status = trader.status()
    if status.current_session is None:
        trader.start_session()
    else:
        logger.info(f"Resuming session {status.current_session.id}")

    try:
        await run_trading_loop(trader, settings)
    finally:
        session = trader.end_session()
        if session is not None:
            logger.info(
                f"Session {session.id} ended: ${session.starting_portfolio_value:,.2f} -> "
                f"${session.ending_portfolio_value:,.2f}"
            )


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested")
