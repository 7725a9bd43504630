"""OAuth 2.0 authorization-code flow with PKCE against an external source.

``OAuthClient`` keeps at most one pending attempt in memory: ``begin``
creates the PKCE parameters and the authorize URL, and ``complete``
checks the returned ``state`` and exchanges the code using the stored
verifier.  The pending attempt is dropped once the exchange finishes,
whether it succeeded or not.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import urlencode

import httpx
from pydantic import BaseModel, ValidationError

from collection_sync.auth.pkce import AuthParams, generate_auth_params
from collection_sync.config import settings
from collection_sync.errors import AuthenticationFailed

logger = logging.getLogger(__name__)


class TokenSet(BaseModel):
    """Tokens returned by the token endpoint."""

    access_token: str
    refresh_token: str | None = None
    token_type: str = "Bearer"
    expires_in: int | None = None
    scope: str | None = None


@dataclass(frozen=True)
class AuthorizationRequest:
    """The URL to open in the browser, plus the parameters behind it."""

    url: str
    params: AuthParams


class OAuthClient:
    """PKCE authorization-code client.

    Parameters default to the values in ``settings``; explicit overrides
    are accepted for testing.

    Args:
        client_id: OAuth client id. Falls back to ``settings.client_id``.
        redirect_uri: Registered redirect URI. Falls back to ``settings.redirect_uri``.
        client_secret: Optional confidential-client secret, sent with
            HTTP basic auth on token requests.
        authorize_url: Authorization endpoint.
        token_url: Token endpoint.
        scope: Space-separated scopes to request.
        http_client: Optional ``httpx.AsyncClient`` to reuse. When omitted
            a short-lived client is created per request.

    Raises:
        ValueError: If client_id or redirect_uri are empty after resolving defaults.
    """

    def __init__(
        self,
        *,
        client_id: str | None = None,
        redirect_uri: str | None = None,
        client_secret: str | None = None,
        authorize_url: str | None = None,
        token_url: str | None = None,
        scope: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client_id = client_id or settings.client_id
        self._redirect_uri = redirect_uri or settings.redirect_uri
        self._client_secret = client_secret or settings.client_secret
        self._authorize_url = authorize_url or settings.authorize_url
        self._token_url = token_url or settings.token_url
        self._scope = scope or settings.scope
        self._http_client = http_client
        self._pending: AuthParams | None = None

        if not self._client_id:
            raise ValueError(
                "OAuth client_id is required. Set COLLECTION_SYNC_CLIENT_ID or pass client_id explicitly."
            )
        if not self._redirect_uri:
            raise ValueError(
                "OAuth redirect_uri is required. Set COLLECTION_SYNC_REDIRECT_URI or pass redirect_uri explicitly."
            )

    @property
    def has_pending_attempt(self) -> bool:
        return self._pending is not None

    # ------------------------------------------------------------------
    # Authorization
    # ------------------------------------------------------------------

    def begin(self) -> AuthorizationRequest:
        """Start a new attempt, replacing any attempt still pending."""
        if self._pending is not None:
            logger.info("Discarding pending authorization attempt")
        params = generate_auth_params()
        self._pending = params

        query = urlencode(
            {
                "client_id": self._client_id,
                "redirect_uri": self._redirect_uri,
                "response_type": "code",
                "scope": self._scope,
                "code_challenge": params.challenge,
                "code_challenge_method": "S256",
                "state": params.state,
            }
        )
        return AuthorizationRequest(url=f"{self._authorize_url}?{query}", params=params)

    async def complete(self, code: str, state: str) -> TokenSet:
        """Exchange the authorization ``code`` for tokens.

        Raises:
            AuthenticationFailed: If no attempt is pending, ``state`` does
                not match the pending attempt, or the token endpoint
                rejects the exchange.
        """
        pending, self._pending = self._pending, None
        if pending is None:
            raise AuthenticationFailed("No authorization attempt is pending")
        if state != pending.state:
            raise AuthenticationFailed("Authorization state does not match")

        tokens = await self._request_tokens(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self._redirect_uri,
                "client_id": self._client_id,
                "code_verifier": pending.verifier,
            }
        )
        logger.info("Completed authorization code exchange")
        return tokens

    async def refresh(self, refresh_token: str) -> TokenSet:
        """Obtain a new access token from a refresh token.

        Raises:
            AuthenticationFailed: If the token endpoint rejects the request.
        """
        return await self._request_tokens(
            {
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
                "client_id": self._client_id,
            }
        )

    # ------------------------------------------------------------------
    # Token endpoint
    # ------------------------------------------------------------------

    async def _request_tokens(self, data: dict[str, str]) -> TokenSet:
        auth = (
            httpx.BasicAuth(self._client_id, self._client_secret)
            if self._client_secret
            else None
        )
        try:
            if self._http_client is not None:
                response = await self._http_client.post(self._token_url, data=data, auth=auth)
            else:
                async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
                    response = await client.post(self._token_url, data=data, auth=auth)
        except httpx.HTTPError as exc:
            raise AuthenticationFailed(f"Token request failed: {exc}") from exc

        if not response.is_success:
            logger.warning(
                "Token endpoint rejected %s grant: %d", data["grant_type"], response.status_code
            )
            raise AuthenticationFailed(
                f"Token endpoint returned {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        try:
            return TokenSet.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise AuthenticationFailed(f"Malformed token response: {exc}") from exc
