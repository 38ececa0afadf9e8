"""Claude backend with extended thinking."""

import asyncio
import logging

from anthropic import Anthropic, AnthropicError

from src.llm.base import ModelClient, ModelQueryError, ModelResponse

logger = logging.getLogger(__name__)


class ClaudeBackend(ModelClient):
    """Queries Claude models (identifiers starting with ``claude``)."""

    DEFAULT_MAX_TOKENS = 16000
    DEFAULT_THINKING_BUDGET = 8000

    def __init__(
        self,
        api_key: str,
        max_tokens: int | None = None,
        thinking_budget_tokens: int | None = None,
    ):
        self.client = Anthropic(api_key=api_key)
        self.max_tokens = max_tokens or self.DEFAULT_MAX_TOKENS
        self.thinking_budget_tokens = thinking_budget_tokens or self.DEFAULT_THINKING_BUDGET

    def supports(self, model: str) -> bool:
        return model.startswith("claude")

    async def query(self, prompt: str, system: str, model: str) -> ModelResponse:
        try:
            # Anthropic client is sync, run in thread
            message = await asyncio.to_thread(
                self.client.messages.create,
                model=model,
                max_tokens=self.max_tokens,
                system=system,
                thinking={"type": "enabled", "budget_tokens": self.thinking_budget_tokens},
                messages=[{"role": "user", "content": prompt}],
            )
        except AnthropicError as e:
            raise ModelQueryError(f"Claude query to {model} failed: {e}") from e

        thinking_parts = []
        text_parts = []
        for block in message.content:
            if block.type == "thinking":
                thinking_parts.append(block.thinking)
            elif block.type == "text":
                text_parts.append(block.text)

        if not text_parts:
            raise ModelQueryError(f"Claude returned no text content for {model}")

        return ModelResponse(
            text="\n".join(text_parts),
            thinking="\n".join(thinking_parts) or None,
        )
