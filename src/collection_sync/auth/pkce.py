"""PKCE (RFC 7636) parameters for the OAuth authorization-code flow.

A fresh ``AuthParams`` is generated for every authentication attempt and
held in memory only until the token exchange finishes.  It must never be
persisted.
"""

from __future__ import annotations

import base64
import hashlib
import secrets
import string
from dataclasses import dataclass, field

PKCE_CHARSET = string.ascii_uppercase + string.ascii_lowercase + string.digits + "-._"

VERIFIER_LENGTH = 128
STATE_LENGTH = 32


@dataclass(frozen=True)
class AuthParams:
    """Verifier, challenge and state for a single authentication attempt."""

    verifier: str = field(repr=False)
    challenge: str
    state: str


def generate_random_string(length: int) -> str:
    """Return ``length`` characters drawn from ``PKCE_CHARSET``.

    Each secure random byte is mapped onto the charset with a modulo.
    256 is not a multiple of 65, so the first few characters are very
    slightly more likely; this is acceptable for PKCE.
    """
    return "".join(
        PKCE_CHARSET[byte % len(PKCE_CHARSET)] for byte in secrets.token_bytes(length)
    )


def generate_code_challenge(verifier: str) -> str:
    """Return the S256 challenge: unpadded base64url of SHA-256(verifier)."""
    digest = hashlib.sha256(verifier.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def generate_auth_params() -> AuthParams:
    """Generate a verifier/challenge/state triple.

    The state is generated independently of the verifier and serves as
    the CSRF token that correlates the redirect with this attempt.
    """
    verifier = generate_random_string(VERIFIER_LENGTH)
    return AuthParams(
        verifier=verifier,
        challenge=generate_code_challenge(verifier),
        state=generate_random_string(STATE_LENGTH),
    )
