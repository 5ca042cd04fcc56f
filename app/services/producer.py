"""Content producer: the three ways of obtaining the HTML to deploy."""

import logging
from typing import Optional

import httpx

from app.config import Settings
from app.models.page_spec import PageSpec
from app.services.fetcher import fetch_html
from app.services.renderer import render_landing_page
from app.services.translator import PageSpecTranslator

logger = logging.getLogger(__name__)


class ContentProducer:
    def __init__(
        self,
        settings: Settings,
        translator: PageSpecTranslator,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings
        self.translator = translator
        self.transport = transport

    async def from_url(self, url: str) -> str:
        """Fetch *url* and return its HTML verbatim."""
        return await fetch_html(url, timeout=self.settings.fetch_timeout, transport=self.transport)

    def from_spec(self, spec: PageSpec) -> str:
        return render_landing_page(spec)

    async def from_text(self, text: str) -> str:
        """Have the language model structure *text*, then render it."""
        spec = await self.translator.translate(text)
        logger.info("Model produced page spec", extra={"subject": spec.subject.name})
        return self.from_spec(spec)
