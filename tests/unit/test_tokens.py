"""Unit tests for the guest token codec"""

import pytest

from document_service.core.tokens import (
    TOKEN_LENGTH,
    generate_token,
    hash_token,
    is_valid_token_format,
)


@pytest.mark.unit
class TestTokenCodec:
    """Token generation, hashing and format checks"""

    def test_generated_token_is_64_lowercase_hex(self):
        token = generate_token()

        assert len(token) == TOKEN_LENGTH == 64
        assert token == token.lower()
        assert is_valid_token_format(token)

    def test_generated_tokens_differ(self):
        assert len({generate_token() for _ in range(50)}) == 50

    def test_hash_is_sha256_hex_and_deterministic(self):
        token = generate_token()

        assert hash_token(token) == hash_token(token)
        assert len(hash_token(token)) == 64
        assert hash_token(token) != token

    def test_known_digest(self):
        assert hash_token("abc") == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"

    @pytest.mark.parametrize(
        "candidate",
        ["", "abc", "g" * 64, "a" * 63, "a" * 65, ("a" * 63) + " ", "../" + "a" * 61],
    )
    def test_malformed_tokens_are_rejected(self, candidate):
        assert not is_valid_token_format(candidate)

    def test_uppercase_hex_is_accepted(self):
        assert is_valid_token_format("ABCDEF0123" * 6 + "ABCD")
