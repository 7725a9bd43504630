from collection_sync.auth.oauth import AuthorizationRequest, OAuthClient, TokenSet
from collection_sync.auth.pkce import (
    PKCE_CHARSET,
    AuthParams,
    generate_auth_params,
    generate_code_challenge,
    generate_random_string,
)

__all__ = [
    "PKCE_CHARSET",
    "AuthParams",
    "AuthorizationRequest",
    "OAuthClient",
    "TokenSet",
    "generate_auth_params",
    "generate_code_challenge",
    "generate_random_string",
]
