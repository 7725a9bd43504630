"""Tests for PKCE verifier/challenge/state generation."""

from __future__ import annotations

import base64
import hashlib

from collection_sync.auth.pkce import (
    PKCE_CHARSET,
    STATE_LENGTH,
    VERIFIER_LENGTH,
    generate_auth_params,
    generate_code_challenge,
    generate_random_string,
)


def _reference_challenge(verifier: str) -> str:
    digest = hashlib.sha256(verifier.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


class TestAuthParams:
    """Shape and correctness of generated PKCE parameters."""

    def test_challenge_matches_verifier(self) -> None:
        """challenge == base64url(SHA-256(verifier)) across 100 attempts."""
        for _ in range(100):
            params = generate_auth_params()
            assert params.challenge == _reference_challenge(params.verifier)

    def test_lengths_and_alphabet(self) -> None:
        allowed = set(PKCE_CHARSET)
        for _ in range(100):
            params = generate_auth_params()
            assert len(params.verifier) == VERIFIER_LENGTH == 128
            assert len(params.state) == STATE_LENGTH == 32
            assert set(params.verifier) <= allowed
            assert set(params.state) <= allowed

    def test_verifier_and_state_differ(self) -> None:
        for _ in range(100):
            params = generate_auth_params()
            assert params.verifier != params.state
            assert not params.verifier.startswith(params.state)

    def test_attempts_are_independent(self) -> None:
        assert generate_auth_params().verifier != generate_auth_params().verifier

    def test_verifier_hidden_from_repr(self) -> None:
        params = generate_auth_params()
        assert params.verifier not in repr(params)
        assert params.state in repr(params)


class TestHelpers:
    def test_charset(self) -> None:
        assert len(PKCE_CHARSET) == 65
        assert len(set(PKCE_CHARSET)) == 65
        assert PKCE_CHARSET.endswith("-._")

    def test_challenge_has_no_padding(self) -> None:
        challenge = generate_code_challenge("a" * 128)
        assert "=" not in challenge
        assert len(challenge) == 43

    def test_known_vector(self) -> None:
        """RFC 7636 appendix B example."""
        verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
        assert generate_code_challenge(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"

    def test_random_string_length(self) -> None:
        assert generate_random_string(0) == ""
        assert len(generate_random_string(7)) == 7
