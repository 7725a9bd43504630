"""Tests for the PKCE authorization-code client.

Tests cover:
- Authorize URL parameters
- State checking and single pending attempt
- Token exchange and refresh against a mocked token endpoint
"""

from __future__ import annotations

import json
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from collection_sync.auth.oauth import OAuthClient, TokenSet
from collection_sync.auth.pkce import generate_code_challenge
from collection_sync.errors import AuthenticationFailed

TOKEN_URL = "https://auth.example.com/oauth2/token"
AUTHORIZE_URL = "https://auth.example.com/oauth2/authorize"


def _make_client(handler, **kwargs) -> tuple[OAuthClient, list[httpx.Request]]:
    requests: list[httpx.Request] = []

    def recording_handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))
    client = OAuthClient(
        client_id="client-123",
        redirect_uri="https://plugin.example.com/redirect",
        authorize_url=AUTHORIZE_URL,
        token_url=TOKEN_URL,
        http_client=http_client,
        **kwargs,
    )
    return client, requests


def _ok_tokens(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        200,
        json={"access_token": "access", "refresh_token": "refresh", "expires_in": 3600},
    )


def _form(request: httpx.Request) -> dict[str, str]:
    return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}


class TestBegin:
    def test_authorize_url(self) -> None:
        client, _ = _make_client(_ok_tokens)
        request = client.begin()

        parsed = urlparse(request.url)
        assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == AUTHORIZE_URL
        query = {k: v[0] for k, v in parse_qs(parsed.query).items()}
        assert query["client_id"] == "client-123"
        assert query["response_type"] == "code"
        assert query["code_challenge_method"] == "S256"
        assert query["code_challenge"] == generate_code_challenge(request.params.verifier)
        assert query["state"] == request.params.state
        assert "code_verifier" not in query
        assert client.has_pending_attempt

    def test_begin_replaces_pending_attempt(self) -> None:
        client, _ = _make_client(_ok_tokens)
        first = client.begin()
        second = client.begin()
        assert first.params.state != second.params.state

    def test_missing_client_id(self, monkeypatch) -> None:
        monkeypatch.setattr("collection_sync.auth.oauth.settings.client_id", "")
        with pytest.raises(ValueError, match="client_id"):
            OAuthClient(redirect_uri="https://plugin.example.com/redirect")


class TestComplete:
    @pytest.mark.asyncio
    async def test_exchange_sends_verifier(self) -> None:
        client, requests = _make_client(_ok_tokens)
        request = client.begin()

        tokens = await client.complete("auth-code", request.params.state)

        assert tokens == TokenSet(
            access_token="access", refresh_token="refresh", expires_in=3600
        )
        form = _form(requests[0])
        assert str(requests[0].url) == TOKEN_URL
        assert form["grant_type"] == "authorization_code"
        assert form["code"] == "auth-code"
        assert form["code_verifier"] == request.params.verifier
        assert not client.has_pending_attempt

    @pytest.mark.asyncio
    async def test_state_mismatch(self) -> None:
        client, requests = _make_client(_ok_tokens)
        client.begin()
        with pytest.raises(AuthenticationFailed, match="state"):
            await client.complete("auth-code", "forged-state")
        assert requests == []
        assert not client.has_pending_attempt

    @pytest.mark.asyncio
    async def test_no_pending_attempt(self) -> None:
        client, _ = _make_client(_ok_tokens)
        with pytest.raises(AuthenticationFailed, match="pending"):
            await client.complete("auth-code", "any")

    @pytest.mark.asyncio
    async def test_rejected_exchange(self) -> None:
        def reject(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error": "invalid_grant"})

        client, _ = _make_client(reject)
        request = client.begin()
        with pytest.raises(AuthenticationFailed) as exc_info:
            await client.complete("bad-code", request.params.state)
        assert exc_info.value.status_code == 400
        assert not client.has_pending_attempt

    @pytest.mark.asyncio
    async def test_any_2xx_is_accepted(self) -> None:
        def created(request: httpx.Request) -> httpx.Response:
            return httpx.Response(201, json={"access_token": "t"})

        client, _ = _make_client(created)
        request = client.begin()
        tokens = await client.complete("code", request.params.state)
        assert tokens.access_token == "t"

    @pytest.mark.asyncio
    async def test_transport_error(self) -> None:
        def boom(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        client, _ = _make_client(boom)
        request = client.begin()
        with pytest.raises(AuthenticationFailed, match="Token request failed"):
            await client.complete("code", request.params.state)

    @pytest.mark.asyncio
    async def test_malformed_response(self) -> None:
        def garbage(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"token": "missing access_token"})

        client, _ = _make_client(garbage)
        request = client.begin()
        with pytest.raises(AuthenticationFailed, match="Malformed"):
            await client.complete("code", request.params.state)


class TestRefresh:
    @pytest.mark.asyncio
    async def test_refresh_with_client_secret(self) -> None:
        client, requests = _make_client(_ok_tokens, client_secret="s3cret")
        tokens = await client.refresh("old-refresh")

        assert tokens.access_token == "access"
        form = _form(requests[0])
        assert form == {
            "grant_type": "refresh_token",
            "refresh_token": "old-refresh",
            "client_id": "client-123",
        }
        assert requests[0].headers["Authorization"].startswith("Basic ")

    @pytest.mark.asyncio
    async def test_refresh_rejected(self) -> None:
        def unauthorized(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, text=json.dumps({"error": "invalid_token"}))

        client, _ = _make_client(unauthorized)
        with pytest.raises(AuthenticationFailed):
            await client.refresh("expired")
