"""Ollama backend using its OpenAI-compatible endpoint."""

import logging

from openai import AsyncOpenAI, OpenAIError

from src.llm.base import ModelClient, ModelQueryError, ModelResponse

logger = logging.getLogger(__name__)


class OllamaBackend(ModelClient):
    """Queries local or cloud models served by Ollama.

    Every model not claimed by a more specific backend is routed here, so
    register this one last in a ModelRouter.
    """

    def __init__(self, base_url: str = "http://localhost:11434", api_key: str = "ollama"):
        """Initialize the backend.

        Args:
            base_url: Ollama server URL, without the ``/v1`` suffix.
            api_key: Ignored by Ollama but required by the client.
        """
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=f"{base_url.rstrip('/')}/v1",
        )

    def supports(self, model: str) -> bool:
        return True

    async def query(self, prompt: str, system: str, model: str) -> ModelResponse:
        try:
            response = await self._client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                extra_body={"think": True},
            )
        except OpenAIError as e:
            raise ModelQueryError(f"Ollama query to {model} failed: {e}") from e

        if not response.choices:
            raise ModelQueryError(f"Ollama returned no choices for {model}")

        message = response.choices[0].message
        content = message.content or ""
        thinking = getattr(message, "reasoning", None) or None

        logger.debug(f"Ollama {model} responded with {len(content)} chars")
        return ModelResponse(text=content, thinking=thinking)
