"""Service configuration, read once from the process environment at startup."""

import logging
import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from app.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_NETLIFY_API_BASE = "https://api.netlify.com/api/v1"
DEFAULT_OPENAI_MODEL = "gpt-3.5-turbo"


class Settings(BaseModel):
    netlify_auth_token: str = Field(min_length=1)
    netlify_site_id: Optional[str] = None
    netlify_api_base: str = DEFAULT_NETLIFY_API_BASE
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    openai_model: str = DEFAULT_OPENAI_MODEL
    fetch_timeout: float = Field(default=10.0, gt=0)
    deploy_timeout: float = Field(default=60.0, gt=0)

    @property
    def deploys_url(self) -> str:
        """Endpoint for a new deploy of the configured site."""
        return f"{self.netlify_api_base.rstrip('/')}/sites/{self.netlify_site_id}/deploys"

    @property
    def sites_url(self) -> str:
        """Endpoint that creates a brand-new site from an archive."""
        return f"{self.netlify_api_base.rstrip('/')}/sites"


# Environment variable → Settings field
_ENV_FIELDS = {
    "NETLIFY_AUTH_TOKEN": "netlify_auth_token",
    "NETLIFY_SITE_ID": "netlify_site_id",
    "NETLIFY_API_BASE": "netlify_api_base",
    "OPENAI_API_KEY": "openai_api_key",
    "OPENAI_BASE_URL": "openai_base_url",
    "OPENAI_MODEL": "openai_model",
    "FETCH_TIMEOUT": "fetch_timeout",
    "DEPLOY_TIMEOUT": "deploy_timeout",
}


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build :class:`Settings` from *environ* (defaults to ``os.environ``).

    Empty variables are treated as unset.

    Raises:
        ConfigurationError: if ``NETLIFY_AUTH_TOKEN`` is missing or any
            value fails validation.
    """
    env = os.environ if environ is None else environ
    values = {field: env[name] for name, field in _ENV_FIELDS.items() if env.get(name)}

    if "netlify_auth_token" not in values:
        raise ConfigurationError("Missing NETLIFY_AUTH_TOKEN in environment.")

    try:
        settings = Settings(**values)
    except ValidationError as exc:
        raise ConfigurationError("Invalid configuration.", details=str(exc)) from exc

    if not settings.netlify_site_id:
        logger.warning("NETLIFY_SITE_ID not set; archive deploys will create a new site")
    return settings
