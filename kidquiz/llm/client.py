import logging
from typing import Any

from openai import AsyncOpenAI, OpenAIError

from kidquiz.config import settings
from kidquiz.exceptions import GenerationError

logger = logging.getLogger(__name__)

_client: AsyncOpenAI | None = None


def _get_client() -> AsyncOpenAI:
    global _client
    if _client is None:
        _client = AsyncOpenAI(
            base_url=settings.LLM_BASE_URL,
            api_key=settings.LLM_API_KEY or "not-needed",
            timeout=settings.LLM_TIMEOUT,
        )
    return _client


async def chat_completion(
    prompt: str,
    temperature: float | None = None,
    max_tokens: int | None = None,
    response_format: dict[str, Any] | None = None,
) -> str:
    """Send a prompt to the generator and return the response text."""
    kwargs: dict[str, Any] = {}
    if response_format is not None:
        kwargs["response_format"] = response_format
    try:
        response = await _get_client().chat.completions.create(
            model=settings.LLM_MODEL,
            messages=[{"role": "user", "content": prompt}],
            temperature=settings.LLM_TEMPERATURE if temperature is None else temperature,
            max_tokens=max_tokens or settings.LLM_MAX_TOKENS,
            **kwargs,
        )
    except OpenAIError as e:
        logger.error(f"LLM request failed: {e}")
        raise GenerationError(f"LLM request failed: {e}") from e

    if not response.choices or not response.choices[0].message.content:
        raise GenerationError("No response from AI")
    return response.choices[0].message.content


async def close_client():
    """Close the HTTP session of the generator client."""
    global _client
    if _client is not None:
        await _client.close()
        _client = None
