import asyncio
import re
from typing import Any, Dict, Optional

from groq import AsyncGroq

from claimledger.constants.config import (
    LLM_BASE_BACKOFF,
    LLM_MAX_BACKOFF,
    LLM_MAX_RETRIES,
    LLM_MODEL_NAME,
    LLM_TEMPERATURE,
)
from claimledger.core.errors import ConfigurationError
from claimledger.core.logger import get_logger

logger = get_logger(__name__)


class GroqService:
    def __init__(self, api_key: Optional[str], model: str = LLM_MODEL_NAME) -> None:
        if not api_key:
            raise ConfigurationError("Missing GROQ_API_KEY")

        self.client = AsyncGroq(api_key=api_key)
        self.model = model

        # Rate limit retry configuration
        self.max_retries = LLM_MAX_RETRIES
        self.base_backoff = LLM_BASE_BACKOFF
        self.max_backoff = LLM_MAX_BACKOFF

    def _extract_retry_after(self, error_msg: str) -> float | None:
        """Extract retry-after time from error message if available."""
        match = re.search(r"Please try again in ([0-9.]+)s", error_msg)
        if match:
            return float(match.group(1))
        return None

    async def ainvoke(self, prompt: str) -> Dict[str, Any]:
        """
        Calls Groq async chat completion endpoint and returns `{"text": content}`.
        Rate limit errors (429) are retried with exponential backoff.
        """
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": LLM_TEMPERATURE,
        }

        attempt = 0
        while True:
            try:
                response = await self.client.chat.completions.create(**kwargs)
                break
            except Exception as e:
                error_str = str(e)
                if "429" not in error_str or attempt >= self.max_retries:
                    logger.error(f"[GroqService] Groq call failed: {e}")
                    raise

                retry_after = self._extract_retry_after(error_str)
                wait_time = min(retry_after or self.base_backoff * (2**attempt), self.max_backoff)
                logger.warning(
                    f"[GroqService] Rate limit hit. Retrying in {wait_time:.1f}s "
                    f"(attempt {attempt + 1}/{self.max_retries})"
                )
                await asyncio.sleep(wait_time)
                attempt += 1

        content = response.choices[0].message.content if response.choices else None
        return {"text": content}

    async def aclose(self) -> None:
        await self.client.close()
