from pathlib import Path

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.guardrails.settings import CircuitBreakerSettings
from src.journal.settings import JournalSettings
from src.orchestrator.settings import TraderSettings


class SystemConfig(BaseModel):
    name: str = "Autonomous AI Paper Trader"
    version: str = "1.0.0"
    mode: str = "paper"


class ConfluenceConfig(BaseModel):
    flags_file: str = "data/ai_trader/confluence.json"


class OllamaConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="OLLAMA_")

    base_url: str = "http://localhost:11434"


class AnthropicConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ANTHROPIC_")

    api_key: str = ""
    max_tokens: int = Field(default=16000, ge=1024)
    thinking_budget_tokens: int = Field(default=8000, ge=1024)


class Settings(BaseModel):
    system: SystemConfig = Field(default_factory=SystemConfig)
    trader: TraderSettings = Field(default_factory=TraderSettings)
    circuit_breaker: CircuitBreakerSettings = Field(default_factory=CircuitBreakerSettings)
    journal: JournalSettings = Field(default_factory=JournalSettings)
    confluence: ConfluenceConfig = Field(default_factory=ConfluenceConfig)
    ollama: OllamaConfig = Field(default_factory=OllamaConfig)
    anthropic: AnthropicConfig = Field(default_factory=AnthropicConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> "Settings":
        """Load settings from YAML file with env var overrides."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        ollama = OllamaConfig()
        anthropic = AnthropicConfig()

        return cls(
            **data,
            ollama=ollama,
            anthropic=anthropic,
        )
