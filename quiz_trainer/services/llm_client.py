"""
LLM Client
Unified interface for generating JSON content via OpenAI-compatible and Anthropic APIs
"""
import logging
from enum import Enum
from typing import Optional

import httpx

from quiz_trainer.core.config import Settings

logger = logging.getLogger(__name__)


class LLMProvider(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


class LLMClientError(Exception):
    """Base exception for LLM client errors"""
    pass


class LLMTimeoutError(LLMClientError):
    """Raised when LLM request times out"""
    pass


class LLMAPIError(LLMClientError):
    """Raised when LLM API returns an error"""
    pass


async def _call_openai(
    prompt: str,
    system: str,
    settings: Settings
) -> str:
    """
    Call an OpenAI-compatible Chat Completions API in JSON-object mode

    Args:
        prompt: The user prompt
        system: System instruction
        settings: Application settings (key, model, timeout)

    Returns:
        Raw response content string
    """
    if not settings.openai_api_key:
        raise LLMClientError("OPENAI_API_KEY environment variable not set")

    headers = {
        "Authorization": f"Bearer {settings.openai_api_key}",
        "Content-Type": "application/json"
    }

    payload = {
        "model": settings.openai_model,
        "messages": [
            {"role": "system", "content": system},
            {"role": "user", "content": prompt}
        ],
        "temperature": settings.llm_temperature,
        "max_tokens": settings.llm_max_tokens,
        "response_format": {"type": "json_object"}
    }

    try:
        async with httpx.AsyncClient(timeout=settings.llm_timeout) as client:
            response = await client.post(settings.openai_api_url, headers=headers, json=payload)
            response.raise_for_status()
            data = response.json()

    except httpx.TimeoutException as e:
        logger.error(f"❌ OpenAI request timed out after {settings.llm_timeout}s")
        raise LLMTimeoutError(f"OpenAI request timed out: {e}")

    except httpx.HTTPStatusError as e:
        logger.error(f"❌ OpenAI API error: {e.response.status_code}")
        raise LLMAPIError(f"OpenAI API error: {e.response.text}")

    except httpx.HTTPError as e:
        logger.error(f"❌ OpenAI transport error: {e}")
        raise LLMAPIError(f"OpenAI request failed: {e}")

    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        raise LLMAPIError("OpenAI response contained no message content")

    if not content:
        raise LLMAPIError("Keine Antwort von OpenAI erhalten")

    logger.info(f"✅ OpenAI response received ({len(content)} chars)")
    return content


async def _call_anthropic(
    prompt: str,
    system: str,
    settings: Settings
) -> str:
    """Call Anthropic Messages API"""
    if not settings.anthropic_api_key:
        raise LLMClientError("ANTHROPIC_API_KEY environment variable not set")

    headers = {
        "x-api-key": settings.anthropic_api_key,
        "Content-Type": "application/json",
        "anthropic-version": "2023-06-01"
    }

    payload = {
        "model": settings.anthropic_model,
        "max_tokens": settings.llm_max_tokens,
        "temperature": settings.llm_temperature,
        "system": system,
        "messages": [
            {"role": "user", "content": prompt}
        ]
    }

    try:
        async with httpx.AsyncClient(timeout=settings.llm_timeout) as client:
            response = await client.post(settings.anthropic_api_url, headers=headers, json=payload)
            response.raise_for_status()
            data = response.json()

    except httpx.TimeoutException as e:
        logger.error(f"❌ Anthropic request timed out after {settings.llm_timeout}s")
        raise LLMTimeoutError(f"Anthropic request timed out: {e}")

    except httpx.HTTPStatusError as e:
        logger.error(f"❌ Anthropic API error: {e.response.status_code}")
        raise LLMAPIError(f"Anthropic API error: {e.response.text}")

    except httpx.HTTPError as e:
        logger.error(f"❌ Anthropic transport error: {e}")
        raise LLMAPIError(f"Anthropic request failed: {e}")

    try:
        content = data["content"][0]["text"]
    except (KeyError, IndexError, TypeError):
        raise LLMAPIError("Anthropic response contained no text content")

    logger.info(f"✅ Anthropic response received ({len(content)} chars)")
    return content


async def generate_json(
    prompt: str,
    system: str,
    settings: Settings,
    provider: Optional[str] = None
) -> str:
    """
    Generate a JSON document using the configured LLM provider

    A single attempt is made; failures are surfaced to the caller.

    Args:
        prompt: The generation prompt
        system: System instruction demanding JSON-only output
        settings: Application settings
        provider: "openai" or "anthropic" (defaults to settings.llm_provider)

    Returns:
        Raw string output from the LLM (no parsing)

    Raises:
        LLMClientError: If API key is missing
        LLMTimeoutError: If request times out
        LLMAPIError: If API returns an error
        ValueError: If invalid provider specified
    """
    provider = (provider or settings.llm_provider).lower()

    logger.info(f"🤖 Generating via {provider} (timeout: {settings.llm_timeout}s)")

    if provider == LLMProvider.OPENAI:
        return await _call_openai(prompt, system, settings)

    elif provider == LLMProvider.ANTHROPIC:
        return await _call_anthropic(prompt, system, settings)

    else:
        raise ValueError(
            f"Invalid provider: {provider}. "
            f"Supported providers: {[p.value for p in LLMProvider]}"
        )


def health_check(settings: Settings) -> dict:
    """
    Check if the configured LLM provider has credentials

    Returns:
        Health status dictionary
    """
    provider = settings.llm_provider.lower()

    if provider == LLMProvider.OPENAI:
        api_key = settings.openai_api_key
        model = settings.openai_model
    elif provider == LLMProvider.ANTHROPIC:
        api_key = settings.anthropic_api_key
        model = settings.anthropic_model
    else:
        return {"provider": provider, "status": "error", "message": "Invalid provider"}

    configured = bool(api_key)

    return {
        "provider": provider,
        "configured": configured,
        "model": model,
        "status": "ready" if configured else "not_configured"
    }
