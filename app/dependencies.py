"""FastAPI dependencies that build pipeline components from the app settings."""

from fastapi import Depends, Request

from app.config import Settings
from app.errors import ConfigurationError
from app.services.netlify import NetlifyClient
from app.services.producer import ContentProducer
from app.services.translator import PageSpecTranslator


def get_settings(request: Request) -> Settings:
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        raise ConfigurationError("Service settings are not loaded.")
    return settings


def get_translator(settings: Settings = Depends(get_settings)) -> PageSpecTranslator:
    return PageSpecTranslator(settings)


def get_producer(
    settings: Settings = Depends(get_settings),
    translator: PageSpecTranslator = Depends(get_translator),
) -> ContentProducer:
    return ContentProducer(settings, translator)


def get_netlify_client(settings: Settings = Depends(get_settings)) -> NetlifyClient:
    return NetlifyClient(settings)
