# tests/config/test_settings.py
import pytest
from pydantic import ValidationError

from src.config.settings import AnthropicConfig, OllamaConfig, Settings
from src.guardrails.models import TradingMode


class TestSettings:
    def test_load_settings_from_yaml(self, tmp_path):
        config_content = """
system:
  name: "Test Trader"
  mode: "paper"

trader:
  starting_capital: 250000
  watchlist: ["AAPL", "MSFT"]
  model_priority: ["claude-sonnet-4-5", "qwen3:235b"]
  trading_mode: "aggressive"

circuit_breaker:
  daily_loss_threshold: -7.5
  consecutive_loss_limit: 3

journal:
  logs_dir: "logs/test"

confluence:
  flags_file: "flags.json"
"""
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(config_content)

        settings = Settings.from_yaml(config_file)

        assert settings.system.name == "Test Trader"
        assert settings.trader.starting_capital == 250_000.0
        assert settings.trader.watchlist == ["AAPL", "MSFT"]
        assert settings.trader.model_priority == ["claude-sonnet-4-5", "qwen3:235b"]
        assert settings.trader.trading_mode == TradingMode.AGGRESSIVE
        assert settings.circuit_breaker.daily_loss_threshold == -7.5
        assert settings.circuit_breaker.consecutive_loss_limit == 3
        assert settings.circuit_breaker.auto_conservative_on_trigger is True
        assert settings.journal.logs_dir == "logs/test"
        assert settings.journal.data_dir == "data/ai_trader"
        assert settings.confluence.flags_file == "flags.json"

    def test_empty_yaml_uses_defaults(self, tmp_path):
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("")

        settings = Settings.from_yaml(config_file)

        assert settings.system.mode == "paper"
        assert settings.trader.trading_mode == TradingMode.NORMAL
        assert settings.circuit_breaker.daily_loss_threshold == -10.0

    def test_env_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
        monkeypatch.setenv("OLLAMA_BASE_URL", "http://gpu-box:11434")
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("system:\n  name: Test\n")

        settings = Settings.from_yaml(config_file)

        assert settings.anthropic.api_key == "sk-test"
        assert settings.ollama.base_url == "http://gpu-box:11434"

    def test_invalid_trading_mode_rejected(self, tmp_path):
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("trader:\n  trading_mode: reckless\n")

        with pytest.raises(ValidationError):
            Settings.from_yaml(config_file)

    def test_positive_loss_threshold_rejected(self, tmp_path):
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("circuit_breaker:\n  daily_loss_threshold: 5.0\n")

        with pytest.raises(ValidationError):
            Settings.from_yaml(config_file)

    def test_empty_model_priority_rejected(self, tmp_path):
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("trader:\n  model_priority: []\n")

        with pytest.raises(ValidationError):
            Settings.from_yaml(config_file)


class TestBackendConfigs:
    def test_ollama_default(self, monkeypatch):
        monkeypatch.delenv("OLLAMA_BASE_URL", raising=False)

        assert OllamaConfig().base_url == "http://localhost:11434"

    def test_thinking_budget_minimum(self):
        with pytest.raises(ValidationError):
            AnthropicConfig(api_key="k", thinking_budget_tokens=100)


def test_project_settings_file_loads():
    from pathlib import Path

    settings = Settings.from_yaml(Path("config/settings.yaml"))

    assert settings.trader.benchmark_symbol == "SPY"
    assert len(settings.trader.model_priority) == 3
