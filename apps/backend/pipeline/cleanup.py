"""
Description cleanup post-processor.

Uses an LLM (OpenRouter) to strip navigation and boilerplate from raw
extracted descriptions. Fails open: any problem returns the raw text.
"""

import logging
from typing import Optional

import httpx

from .errors import CleanupFailed

logger = logging.getLogger(__name__)

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_MODEL = "anthropic/claude-3-haiku"

CLEANUP_PROMPT = (
    "The following is extracted text from a LinkedIn job posting. "
    "Extract and return only the job description content: responsibilities, "
    "qualifications, and requirements. Remove any navigation text, footer text, "
    "promotional content, or UI elements. Return clean plain text with logical "
    "line breaks.\n\n{text}"
)


class DescriptionCleaner:
    """Model-assisted noise stripping for job descriptions."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        min_length: int = 200,
        max_input_chars: int = 8000,
        max_tokens: int = 4000,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.min_length = min_length
        self.max_input_chars = max_input_chars
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._transport = transport

    async def clean(self, raw: str, job_id: Optional[object] = None) -> str:
        """
        Clean a raw description.

        Returns:
            The model output, or `raw` unchanged when the text is short, no key
            is configured, or the request fails or comes back empty
        """
        if len(raw) <= self.min_length:
            return raw

        if not self.api_key:
            logger.debug("[cleanup] Disabled: no API key")
            return raw

        try:
            cleaned = await self._call_ai(raw[:self.max_input_chars])
        except CleanupFailed as e:
            logger.warning(f"[cleanup] job {job_id}: cleanup failed, keeping raw text: {e}")
            return raw

        logger.debug(f"[cleanup] job {job_id}: {len(raw)} -> {len(cleaned)} chars")
        return cleaned

    async def _call_ai(self, text: str) -> str:
        """Call OpenRouter once; raise CleanupFailed on any problem."""
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }
        payload = {
            "model": self.model,
            "messages": [
                {"role": "user", "content": CLEANUP_PROMPT.format(text=text)}
            ],
            "temperature": 0.0,
            "max_tokens": self.max_tokens
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(OPENROUTER_URL, json=payload, headers=headers)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise CleanupFailed(f"request error: {e}") from e

        try:
            content = data['choices'][0]['message']['content']
        except (KeyError, IndexError, TypeError) as e:
            raise CleanupFailed(f"unexpected response shape: {e}") from e

        if not isinstance(content, str):
            raise CleanupFailed(f"non-text content: {type(content).__name__}")
        cleaned = content.strip()
        if not cleaned:
            raise CleanupFailed("empty output")
        return cleaned
