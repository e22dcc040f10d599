"""Gemini generation backend over the Generative Language REST API."""

import logging

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .base import BackendNotConfiguredError, ModelBackend, ModelBackendError

logger = logging.getLogger(__name__)


class GeminiBackend(ModelBackend):
    """Primary backend: Gemini ``generateContent``."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-3-flash-preview",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        if not api_key:
            raise BackendNotConfiguredError("Gemini API key not configured")
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def model_name(self) -> str:
        return f"gemini:{self.model}"

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(httpx.RequestError),
        reraise=True
    )
    async def _call_gemini(self, payload: dict) -> dict:
        """Make API call to Gemini with retry on transport errors."""
        response = await self.client.post(
            f"{self.base_url}/models/{self.model}:generateContent",
            params={"key": self.api_key},
            json=payload,
        )
        response.raise_for_status()
        return response.json()

    async def generate(self, prompt: str, system_instruction: str, temperature: float) -> str:
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "systemInstruction": {"parts": [{"text": system_instruction}]},
            "generationConfig": {"temperature": temperature},
        }

        try:
            result = await self._call_gemini(payload)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 429:
                logger.warning("Gemini API rate limit hit")
                raise ModelBackendError("rate limited") from e
            logger.error(f"Gemini API error {e.response.status_code}: {e.response.text}")
            raise ModelBackendError(f"Gemini API error: {e.response.status_code}") from e
        except (httpx.RequestError, ValueError) as e:
            logger.error(f"Gemini request failed: {str(e)}")
            raise ModelBackendError(f"Gemini request failed: {str(e)}") from e

        try:
            parts = result["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as e:
            raise ModelBackendError("Gemini returned no candidates") from e
        return "".join(part.get("text", "") for part in parts).strip()

    async def close(self) -> None:
        await self.client.aclose()
