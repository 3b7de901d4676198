"""LLM access through LiteLLM.

One entry point, ``call_llm``, for every prompt the service sends. The call is
bounded by ``EXTERNAL_CALL_TIMEOUT_SECONDS`` and failures are mapped onto the
shared upstream errors so callers never see provider-specific exceptions.
"""

import asyncio
import json
import time
from typing import Optional

from libs.common.config import get_settings
from libs.common.errors import UpstreamError, UpstreamTimeout
from libs.common.logging import get_logger

logger = get_logger(__name__)


class AIProviderResponse:
    """Standardized response from any AI provider."""

    def __init__(
        self,
        content: str,
        model: str,
        provider: str,
        input_tokens: int = 0,
        output_tokens: int = 0,
        latency_ms: int = 0,
    ):
        self.content = content
        self.model = model
        self.provider = provider
        self.input_tokens = input_tokens
        self.output_tokens = output_tokens
        self.latency_ms = latency_ms

    def parse_json(self) -> dict:
        """Parse the content as JSON. Handles markdown code blocks."""
        text = self.content.strip()
        if text.startswith("```"):
            lines = [line for line in text.split("\n") if not line.strip().startswith("```")]
            text = "\n".join(lines).strip()
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as exc:
            raise UpstreamError("AI response was not valid JSON") from exc
        if not isinstance(parsed, dict):
            raise UpstreamError("AI response was not a JSON object")
        return parsed


def provider_for(model: str) -> str:
    if "gpt" in model or "o1" in model or "o3" in model:
        return "openai"
    if "claude" in model:
        return "anthropic"
    if "gemini" in model:
        return "google"
    return "unknown"


async def call_llm(
    system_prompt: str,
    user_prompt: str,
    model: Optional[str] = None,
    temperature: float = 0.2,
    max_tokens: int = 4096,
) -> AIProviderResponse:
    """
    Call an LLM via LiteLLM.

    Args:
        system_prompt: System message
        user_prompt: User message
        model: LiteLLM model string (e.g., "gpt-4o-mini", "gemini/gemini-2.5-flash-lite")
        temperature: Sampling temperature
        max_tokens: Max output tokens

    Raises:
        UpstreamTimeout: the provider did not answer within the time budget
        UpstreamError: the provider call failed
    """
    import litellm

    settings = get_settings()
    model = model or settings.AI_DEFAULT_MODEL
    provider = provider_for(model)
    timeout = settings.EXTERNAL_CALL_TIMEOUT_SECONDS

    start = time.monotonic()
    try:
        response = await asyncio.wait_for(
            litellm.acompletion(
                model=model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
                api_key=settings.AI_API_KEY,
            ),
            timeout=timeout,
        )
    except asyncio.TimeoutError as exc:
        logger.error(
            f"LLM call timed out after {timeout}s",
            extra={"extra_fields": {"model": model}},
        )
        raise UpstreamTimeout(f"AI generation timed out after {timeout:g}s") from exc
    except Exception as exc:
        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.error(
            f"LLM call failed: {exc}",
            extra={"extra_fields": {"model": model, "latency_ms": elapsed_ms}},
        )
        raise UpstreamError(f"AI provider error: {exc}") from exc

    elapsed_ms = int((time.monotonic() - start) * 1000)
    usage = getattr(response, "usage", None)
    content = response.choices[0].message.content or ""

    return AIProviderResponse(
        content=content,
        model=model,
        provider=provider,
        input_tokens=usage.prompt_tokens if usage else 0,
        output_tokens=usage.completion_tokens if usage else 0,
        latency_ms=elapsed_ms,
    )
