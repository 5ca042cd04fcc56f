"""Netlify deploy API client.

Site content is submitted in one of two shapes, both modelled as a
:class:`SiteUpload`:

* :class:`ArchiveUpload` – a zip archive POSTed as ``application/zip``. With no
  site id configured the archive goes to ``/sites`` and Netlify creates a new
  site for it.
* :class:`InlineFileUpload` – a JSON ``{"files": {path: contents}}`` body
  POSTed to an existing site's ``/deploys``.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from app.config import Settings
from app.errors import ConfigurationError, DeployFailed
from app.models.deploy_result import DeployResult

logger = logging.getLogger(__name__)

# Response fields holding the published URL, most preferred first
DEPLOY_URL_FIELDS = ("deploy_ssl_url", "deploy_url", "url")


class SiteUpload:
    """One way of submitting site content to the deploy API."""

    kind = "abstract"

    def endpoint(self, settings: Settings) -> str:
        raise NotImplementedError

    def request_options(self) -> Dict[str, Any]:
        """Keyword arguments for :meth:`httpx.AsyncClient.post`."""
        raise NotImplementedError


class ArchiveUpload(SiteUpload):
    kind = "archive"

    def __init__(self, archive: bytes) -> None:
        self.archive = archive

    def endpoint(self, settings: Settings) -> str:
        return settings.deploys_url if settings.netlify_site_id else settings.sites_url

    def request_options(self) -> Dict[str, Any]:
        return {"content": self.archive, "headers": {"Content-Type": "application/zip"}}


class InlineFileUpload(SiteUpload):
    kind = "inline"

    def __init__(self, files: Dict[str, str]) -> None:
        self.files = files

    @classmethod
    def for_index(cls, html: str) -> "InlineFileUpload":
        return cls({"/index.html": html})

    def endpoint(self, settings: Settings) -> str:
        if not settings.netlify_auth_token or not settings.netlify_site_id:
            raise ConfigurationError(
                "Missing NETLIFY_AUTH_TOKEN or NETLIFY_SITE_ID in environment."
            )
        return settings.deploys_url

    def request_options(self) -> Dict[str, Any]:
        return {"json": {"files": self.files}}


def _first_present(data: dict, fields) -> Optional[str]:
    for field in fields:
        value = data.get(field)
        if value:
            return value
    return None


def extract_deploy_result(data: dict) -> DeployResult:
    """Pick the published URL out of a deploy API response.

    The first present of ``deploy_ssl_url``, ``deploy_url`` and ``url`` serves
    as both the preview and the site URL.
    """
    url = _first_present(data, DEPLOY_URL_FIELDS)
    return DeployResult(preview_url=url, site_url=url, raw=data)


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None


class NetlifyClient:
    def __init__(
        self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> None:
        self.settings = settings
        self.transport = transport

    async def deploy(self, upload: SiteUpload) -> DeployResult:
        """Submit *upload* and return the URLs Netlify reports for it.

        Raises:
            ConfigurationError: the upload shape needs a setting that is absent.
            DeployFailed: network failure, non-2xx status or a non-JSON reply.
        """
        url = upload.endpoint(self.settings)
        headers = {"Authorization": f"Bearer {self.settings.netlify_auth_token}"}
        logger.info("Deploying to Netlify", extra={"endpoint": url, "upload": upload.kind})

        async with httpx.AsyncClient(
            headers=headers, timeout=self.settings.deploy_timeout, transport=self.transport
        ) as client:
            try:
                response = await client.post(url, **upload.request_options())
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                body = _response_body(exc.response)
                logger.error(
                    "Netlify returned HTTP %s: %s", exc.response.status_code, body
                )
                raise DeployFailed("Deployment failed", details=body) from exc
            except httpx.HTTPError as exc:
                logger.error("Error reaching Netlify at %s: %s", url, exc)
                raise DeployFailed("Deployment failed", details=str(exc) or repr(exc)) from exc

        data = _response_body(response)
        if not isinstance(data, dict):
            raise DeployFailed("Unexpected deploy API response", details=data)

        result = extract_deploy_result(data)
        logger.info("Deployment succeeded", extra={"preview_url": result.preview_url})
        return result
