import asyncio
import ipaddress
import logging
import socket
from typing import Optional
from urllib.parse import urljoin, urlparse

import httpx
from bs4 import BeautifulSoup

from app.errors import InvalidInputError, NonHtmlContentError, UpstreamFetchError

logger = logging.getLogger(__name__)

MAX_CONTENT_SIZE = 10 * 1024 * 1024  # 10 MB
TIMEOUT = 10  # seconds
MAX_REDIRECTS = 10
ALLOWED_SCHEMES = {"http", "https"}
HTML_CONTENT_TYPES = {"text/html", "application/xhtml+xml"}
SNIFF_CHARS = 4096  # prefix of an untyped body inspected for markup


async def _is_private_address(hostname: str) -> bool:
    """Return True if *hostname* resolves to a private, loopback, or link-local address."""
    try:
        infos = await asyncio.get_running_loop().getaddrinfo(hostname, None)
    except socket.gaierror:
        return False

    for info in infos:
        raw_ip = info[4][0]
        # Strip IPv6 zone IDs (e.g. "::1%eth0" → "::1")
        raw_ip = raw_ip.split("%")[0]
        try:
            addr = ipaddress.ip_address(raw_ip)
        except ValueError:
            continue
        if addr.is_private or addr.is_loopback or addr.is_link_local or addr.is_reserved:
            return True
    return False


async def _validate_url(url: str) -> None:
    """Raise ValueError if *url* fails SSRF / scheme validation."""
    parsed = urlparse(url)

    if parsed.scheme not in ALLOWED_SCHEMES:
        raise ValueError(f"Scheme '{parsed.scheme}' is not allowed. Use http or https.")

    hostname = parsed.hostname
    if not hostname:
        raise ValueError("URL must have a valid hostname.")

    if await _is_private_address(hostname):
        raise ValueError("Requests to private/internal addresses are not allowed.")


def _media_type(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip().lower()


def _looks_like_html(body: str) -> bool:
    """Sniff the start of an untyped body: HTML if the parser finds an element there."""
    return BeautifulSoup(body[:SNIFF_CHARS], "html.parser").find() is not None


async def fetch_url(
    url: str,
    timeout: float = TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> tuple[str, str]:
    """Fetch *url* and return ``(body, content_type)``.

    Redirects are followed manually so that every redirect destination is
    validated against the SSRF rules before the next request is made.

    Raises:
        ValueError: if the URL fails SSRF / scheme validation.
        httpx.HTTPError: on network or HTTP errors.
        RuntimeError: if the response body exceeds MAX_CONTENT_SIZE.
    """
    await _validate_url(url)

    current_url = url
    async with httpx.AsyncClient(
        follow_redirects=False, timeout=timeout, transport=transport
    ) as client:
        for _ in range(MAX_REDIRECTS + 1):
            async with client.stream("GET", current_url) as response:
                if response.is_redirect:
                    location = response.headers.get("location", "")
                    next_url = urljoin(current_url, location)
                    await _validate_url(next_url)
                    current_url = next_url
                    continue

                response.raise_for_status()

                content_length = response.headers.get("content-length")
                if content_length and int(content_length) > MAX_CONTENT_SIZE:
                    raise RuntimeError("Response body exceeds the maximum allowed size.")

                chunks = []
                total = 0
                async for chunk in response.aiter_bytes():
                    total += len(chunk)
                    if total > MAX_CONTENT_SIZE:
                        raise RuntimeError("Response body exceeds the maximum allowed size.")
                    chunks.append(chunk)

                body = b"".join(chunks).decode(response.encoding or "utf-8", errors="replace")
                return body, response.headers.get("content-type", "")

    raise RuntimeError("Too many redirects.")


async def fetch_html(
    url: str,
    timeout: float = TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> str:
    """Fetch *url* and return its HTML verbatim.

    Library errors are translated into the service's error kinds.

    Raises:
        InvalidInputError: the URL is malformed or points at a private address.
        NonHtmlContentError: the response is not HTML.
        UpstreamFetchError: network failure, non-2xx status or oversized body.
    """
    try:
        body, content_type = await fetch_url(url, timeout=timeout, transport=transport)
    except ValueError as exc:
        logger.warning("Invalid or blocked URL: %s – %s", url, exc)
        raise InvalidInputError(str(exc)) from exc
    except httpx.TimeoutException as exc:
        logger.error("Timeout fetching URL: %s", url)
        raise UpstreamFetchError("The source URL timed out.") from exc
    except httpx.HTTPStatusError as exc:
        logger.error("HTTP error fetching URL %s: %s", url, exc)
        raise UpstreamFetchError(
            f"Source URL returned HTTP {exc.response.status_code}."
        ) from exc
    except (httpx.RequestError, RuntimeError) as exc:
        logger.error("Error fetching URL %s: %s", url, exc)
        raise UpstreamFetchError(f"Could not fetch source URL: {exc}") from exc

    media_type = _media_type(content_type)
    if media_type:
        is_html = media_type in HTML_CONTENT_TYPES
    else:
        is_html = _looks_like_html(body)

    if not is_html:
        logger.warning("Non-HTML content from %s (content-type=%r)", url, content_type)
        raise NonHtmlContentError(
            "The requested URL did not return raw HTML content.",
            details={"content_type": content_type or None},
        )
    return body
