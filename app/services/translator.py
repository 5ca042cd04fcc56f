"""Free text → PageSpec, via an OpenAI-compatible chat completion."""

import json
import logging
from typing import Optional

from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError

from app.config import Settings
from app.errors import ConfigurationError, LLMOutputInvalid, UpstreamFetchError
from app.models.page_spec import PageSpec

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a helpful assistant that converts unstructured text into a JSON object
with the following structure exactly:

{
  "websiteNiche": string,
  "doctorDetails": {
    "name": string,
    "specialization": [array of strings],
    "achievements": [array of strings],
    "description": string
  },
  "pageLinks": [array of strings],
  "images": [array of strings],
  "testimonialImages": [array of strings],
  "faqs": [ { "question": string, "answer": string }, ... ]
}

Return ONLY valid JSON, with NO extra text or explanation.
If any field is missing from user prompt, guess or fill placeholders.
ALWAYS respond with valid JSON. No code blocks, no extra text.
"""


def build_messages(text: str) -> list[dict]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {
            "role": "user",
            "content": f"User prompt:\n{text}\n\nPlease extract into the required JSON.",
        },
    ]


def parse_page_spec(raw: str) -> PageSpec:
    """Parse a model reply strictly as a PageSpec JSON object.

    Raises:
        LLMOutputInvalid: the reply is not JSON, not an object, or misses
            required fields. The unparsed reply travels with the error.
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise LLMOutputInvalid("LLM did not return valid JSON", raw=raw, details=str(exc)) from exc

    if not isinstance(data, dict):
        raise LLMOutputInvalid("LLM did not return a JSON object", raw=raw)

    try:
        return PageSpec.model_validate(data)
    except ValidationError as exc:
        raise LLMOutputInvalid(
            "LLM JSON does not match the page shape",
            raw=raw,
            details=exc.errors(include_url=False, include_context=False, include_input=False),
        ) from exc


class PageSpecTranslator:
    def __init__(self, settings: Settings, client: Optional[AsyncOpenAI] = None) -> None:
        self.settings = settings
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.settings.openai_api_key:
                raise ConfigurationError("Missing OPENAI_API_KEY in environment.")
            self._client = AsyncOpenAI(
                api_key=self.settings.openai_api_key,
                base_url=self.settings.openai_base_url,
            )
        return self._client

    async def complete(self, text: str) -> str:
        """Return the raw model reply for *text*."""
        try:
            response = await self.client.chat.completions.create(
                model=self.settings.openai_model,
                messages=build_messages(text),
                temperature=0,
            )
        except OpenAIError as exc:
            logger.error("Language model request failed: %s", exc)
            raise UpstreamFetchError("Language model request failed", details=str(exc)) from exc

        return response.choices[0].message.content or ""

    async def translate(self, text: str) -> PageSpec:
        raw = await self.complete(text)
        try:
            return parse_page_spec(raw)
        except LLMOutputInvalid as exc:
            logger.error("Unusable model reply: %s", exc.message, extra={"raw": raw[:500]})
            raise
