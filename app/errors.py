"""Error kinds raised along the fetch → render → deploy pipeline.

Every error carries the HTTP status it maps to and knows how to render
itself as an :class:`~app.models.responses.ErrorResponse` payload.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

logger = logging.getLogger(__name__)


class PageDeployError(Exception):
    status_code = 500

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> dict:
        payload: dict = {"error": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class InvalidInputError(PageDeployError):
    """A required request field is missing or unusable."""

    status_code = 400


class ConfigurationError(PageDeployError):
    """A required credential or setting is absent."""


class UpstreamFetchError(PageDeployError):
    """The source URL (or the language model) could not be reached."""


class NonHtmlContentError(UpstreamFetchError):
    """The source URL answered, but not with HTML."""

    status_code = 400


class LLMOutputInvalid(PageDeployError):
    """The model reply is not a JSON object of the PageSpec shape."""

    def __init__(self, message: str, raw: Optional[str], details: Any = None) -> None:
        super().__init__(message, details)
        self.raw = raw

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["raw"] = self.raw
        return payload


class DeployFailed(PageDeployError):
    """The deploy API rejected the upload or was unreachable."""


@contextmanager
def pipeline_errors(message: str) -> Iterator[None]:
    """Let known error kinds through; wrap anything else as a 500 *message*."""
    try:
        yield
    except PageDeployError:
        raise
    except Exception as exc:
        logger.exception(message)
        raise PageDeployError(message, details=str(exc) or repr(exc)) from exc
