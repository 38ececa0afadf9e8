"""Model client interface shared by every LLM backend."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


class ModelQueryError(Exception):
    """Raised when a backend cannot produce a response (transport, HTTP, SDK)."""


@dataclass
class ModelResponse:
    """Text returned by a model, with its reasoning trace if any."""

    text: str
    thinking: str | None = None

    def raw_text(self) -> str:
        """Response with the reasoning trace prepended, for audit logs."""
        if self.thinking:
            return f"=== THINKING ===\n{self.thinking}\n\n=== RESPONSE ===\n{self.text}"
        return self.text


class ModelClient(ABC):
    """A backend able to answer prompts with extended reasoning."""

    @abstractmethod
    def supports(self, model: str) -> bool:
        """Whether this backend serves ``model``."""
        pass

    @abstractmethod
    async def query(self, prompt: str, system: str, model: str) -> ModelResponse:
        """Query ``model``.

        Raises:
            ModelQueryError: The backend failed to answer.
        """
        pass


class ModelRouter(ModelClient):
    """Dispatches each query to the first backend that supports the model."""

    def __init__(self, backends: list[ModelClient]):
        self._backends = backends

    def supports(self, model: str) -> bool:
        return any(b.supports(model) for b in self._backends)

    async def query(self, prompt: str, system: str, model: str) -> ModelResponse:
        for backend in self._backends:
            if backend.supports(model):
                return await backend.query(prompt, system, model)
        raise ModelQueryError(f"No backend configured for model {model}")
