"""LLM backends used to query trading decisions."""

from .base import ModelClient, ModelQueryError, ModelResponse, ModelRouter
from .decision_schema import DecisionResponse, ParsedDecision, Prediction
from .claude_backend import ClaudeBackend
from .ollama_backend import OllamaBackend

__all__ = [
    "ClaudeBackend",
    "DecisionResponse",
    "ModelClient",
    "ModelQueryError",
    "ModelResponse",
    "ModelRouter",
    "OllamaBackend",
    "ParsedDecision",
    "Prediction",
]
