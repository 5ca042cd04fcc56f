"""Tests for fetcher.fetch_html using an in-process mock transport."""

import asyncio
import socket
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from app.errors import InvalidInputError, NonHtmlContentError, UpstreamFetchError
from app.services.fetcher import SNIFF_CHARS, _validate_url, fetch_html
from app.services.fetcher import _is_private_address as resolves_to_private

_PAGE = "<!DOCTYPE html><html><body><h1>Hello</h1></body></html>"


@pytest.fixture(autouse=True)
def public_dns():
    """Treat every hostname as public unless a test says otherwise."""
    with patch("app.services.fetcher._is_private_address", return_value=False) as mock:
        yield mock


def _fetch(handler, url: str = "https://example.com/") -> str:
    return asyncio.run(fetch_html(url, transport=httpx.MockTransport(handler)))


class TestFetchHtml:
    def test_returns_html_verbatim(self):
        assert _fetch(lambda request: httpx.Response(200, html=_PAGE)) == _PAGE

    def test_xhtml_is_accepted(self):
        response = httpx.Response(
            200, content=_PAGE.encode(), headers={"content-type": "application/xhtml+xml"}
        )
        assert _fetch(lambda request: response) == _PAGE

    def test_json_is_rejected(self):
        with pytest.raises(NonHtmlContentError) as excinfo:
            _fetch(lambda request: httpx.Response(200, json={"hello": "world"}))
        assert excinfo.value.status_code == 400

    def test_untyped_markup_is_sniffed_as_html(self):
        assert _fetch(lambda request: httpx.Response(200, content=_PAGE.encode())) == _PAGE

    def test_untyped_plain_text_is_rejected(self):
        with pytest.raises(NonHtmlContentError):
            _fetch(lambda request: httpx.Response(200, content=b"just some words"))

    def test_untyped_markup_past_the_sniffed_prefix_is_rejected(self):
        body = "x" * SNIFF_CHARS + _PAGE
        with pytest.raises(NonHtmlContentError):
            _fetch(lambda request: httpx.Response(200, content=body.encode()))

    def test_error_status_is_an_upstream_error(self):
        with pytest.raises(UpstreamFetchError) as excinfo:
            _fetch(lambda request: httpx.Response(404, html="<p>missing</p>"))
        assert not isinstance(excinfo.value, NonHtmlContentError)
        assert excinfo.value.status_code == 500
        assert "404" in excinfo.value.message

    def test_network_failure_is_an_upstream_error(self):
        def handler(request):
            raise httpx.ConnectError("boom", request=request)

        with pytest.raises(UpstreamFetchError):
            _fetch(handler)

    def test_redirects_are_followed(self):
        def handler(request):
            if request.url.path == "/old":
                return httpx.Response(301, headers={"location": "/new"})
            return httpx.Response(200, html=_PAGE)

        assert _fetch(handler, "https://example.com/old") == _PAGE

    def test_redirect_to_private_address_is_blocked(self, public_dns):
        public_dns.side_effect = lambda host: host == "internal.local"

        def handler(request):
            return httpx.Response(302, headers={"location": "http://internal.local/admin"})

        with pytest.raises(InvalidInputError):
            _fetch(handler)

    def test_bad_scheme_is_invalid_input(self):
        with pytest.raises(InvalidInputError):
            _fetch(lambda request: httpx.Response(200, html=_PAGE), "ftp://example.com/")


class TestValidateUrl:
    def test_missing_hostname(self):
        with pytest.raises(ValueError):
            asyncio.run(_validate_url("http://"))

    def test_private_address(self, public_dns):
        public_dns.return_value = True
        with pytest.raises(ValueError):
            asyncio.run(_validate_url("http://10.0.0.1/"))

    def test_public_https(self):
        asyncio.run(_validate_url("https://example.com/page"))


def _resolving_to(*ips):
    infos = [(2, 1, 6, "", (ip, 0)) for ip in ips]
    return patch.object(asyncio.BaseEventLoop, "getaddrinfo", new=AsyncMock(return_value=infos))


class TestIsPrivateAddress:
    def test_private_ip_is_blocked(self):
        with _resolving_to("93.184.216.34", "10.0.0.5") as getaddrinfo:
            assert asyncio.run(resolves_to_private("intranet.example.com")) is True
        getaddrinfo.assert_awaited_once_with("intranet.example.com", None)

    def test_public_ip_is_allowed(self):
        with _resolving_to("93.184.216.34"):
            assert asyncio.run(resolves_to_private("example.com")) is False

    def test_loopback_with_zone_id_is_blocked(self):
        with _resolving_to("::1%lo"):
            assert asyncio.run(resolves_to_private("localhost")) is True

    def test_unresolvable_host_is_not_private(self):
        failure = AsyncMock(side_effect=socket.gaierror("no such host"))
        with patch.object(asyncio.BaseEventLoop, "getaddrinfo", new=failure):
            assert asyncio.run(resolves_to_private("nowhere.invalid")) is False
