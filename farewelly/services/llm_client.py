"""
LLM chat completions client (OpenAI-compatible endpoint).
"""

import logging

import httpx

from ..config import LLM_API_KEY, LLM_API_URL, LLM_MODEL, LLM_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 800


class LLMError(Exception):
    """The LLM call failed or returned something unusable"""


async def generate_reply(
    messages: list[dict],
    temperature: float = DEFAULT_TEMPERATURE,
    max_tokens: int = DEFAULT_MAX_TOKENS,
) -> str:
    """
    Send a chat conversation and return the assistant's reply text.

    Args:
        messages: [{"role": "system"|"user"|"assistant", "content": str}, ...]

    Raises:
        LLMError: when the key is missing, the request fails or the reply is empty
    """
    if not LLM_API_KEY:
        raise LLMError("LLM_API_KEY not configured")

    payload = {
        "model": LLM_MODEL,
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens,
    }

    try:
        async with httpx.AsyncClient(timeout=LLM_TIMEOUT_SECONDS) as client:
            response = await client.post(
                LLM_API_URL,
                json=payload,
                headers={
                    "Authorization": f"Bearer {LLM_API_KEY}",
                    "Content-Type": "application/json",
                },
            )
    except httpx.HTTPError as e:
        logger.error(f"❌ LLM request failed: {e}")
        raise LLMError(str(e)) from e

    if response.status_code != 200:
        logger.error(f"❌ LLM API error {response.status_code}: {response.text[:500]}")
        raise LLMError(f"LLM API returned {response.status_code}")

    try:
        reply = response.json()["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise LLMError("Invalid response from LLM API") from e

    if not reply or not reply.strip():
        raise LLMError("Empty reply from LLM API")

    logger.info(f"🤖 LLM reply received ({len(reply)} chars)")
    return reply.strip()
