"""OpenAI-compatible chat completion backend."""

import logging

from openai import APIConnectionError, APIStatusError, AsyncOpenAI, RateLimitError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .base import BackendNotConfiguredError, ModelBackend, ModelBackendError

logger = logging.getLogger(__name__)


class OpenAIBackend(ModelBackend):
    """Secondary backend: chat completions on an OpenAI-compatible API."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: str | None = None,
        timeout: float = 30.0,
        client: AsyncOpenAI | None = None,
    ):
        if not api_key and client is None:
            raise BackendNotConfiguredError("OpenAI API key not configured")
        self.model = model
        self.client = client or AsyncOpenAI(
            api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0
        )

    @property
    def model_name(self) -> str:
        return f"openai:{self.model}"

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(APIConnectionError),
        reraise=True
    )
    async def _call_openai(self, messages: list[dict], temperature: float) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=temperature,
        )
        return (response.choices[0].message.content or "").strip()

    async def generate(self, prompt: str, system_instruction: str, temperature: float) -> str:
        messages = [
            {"role": "system", "content": system_instruction},
            {"role": "user", "content": prompt},
        ]

        try:
            return await self._call_openai(messages, temperature)
        except RateLimitError as e:
            logger.warning("OpenAI API rate limit hit")
            raise ModelBackendError("rate limited") from e
        except APIStatusError as e:
            logger.error(f"OpenAI API error {e.status_code}: {e.message}")
            raise ModelBackendError(f"OpenAI API error: {e.status_code}") from e
        except APIConnectionError as e:
            logger.error(f"OpenAI request failed: {str(e)}")
            raise ModelBackendError(f"OpenAI request failed: {str(e)}") from e

    async def close(self) -> None:
        await self.client.close()
