"""Tests for the async HTTP client -- transport mocked with httpx.MockTransport."""

from __future__ import annotations

import asyncio
from unittest.mock import patch

import httpx
import pytest

from chainvet.exceptions import ImportFetchError
from chainvet.store.http_client import USER_AGENT, fetch_text

_RealAsyncClient = httpx.AsyncClient


def _patch_transport(handler):
    """Route every AsyncClient created by fetch_text through ``handler``."""
    def factory(**kwargs):
        return _RealAsyncClient(transport=httpx.MockTransport(handler), **kwargs)

    return patch("chainvet.store.http_client.httpx.AsyncClient", side_effect=factory)


class TestFetchText:
    """fetch_text success and failure mapping."""

    def test_returns_body_and_sends_user_agent(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["ua"] = request.headers["user-agent"]
            return httpx.Response(200, text="audits: {}\n")

        with _patch_transport(handler):
            body = asyncio.run(fetch_text("https://example.com/audits.yaml"))
        assert body == "audits: {}\n"
        assert seen["ua"] == USER_AGENT

    def test_http_error_status(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404)

        with _patch_transport(handler):
            with pytest.raises(ImportFetchError, match="HTTP 404"):
                asyncio.run(fetch_text("https://example.com/missing"))

    def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        with _patch_transport(handler):
            with pytest.raises(ImportFetchError, match="Timeout"):
                asyncio.run(fetch_text("https://example.com/slow"))

    def test_connection_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with _patch_transport(handler):
            with pytest.raises(ImportFetchError, match="Request error"):
                asyncio.run(fetch_text("https://example.com/down"))
