# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Tests for the masked CSRF token codec."""

from __future__ import annotations

import base64

import pytest

from csrfmask.kernel.exceptions import MalformedTokenException, RandomSourceFailure
from csrfmask.security.masking import (
    RandomSource,
    SystemRandomSource,
    decode_token,
    encode_token,
    random_bytes,
    xor_bytes,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class FixedRandom:
    """Deterministic RandomSource returning pre-seeded chunks in order."""

    def __init__(self, *chunks: bytes) -> None:
        self._chunks = list(chunks)

    def token_bytes(self, n: int) -> bytes:
        return self._chunks.pop(0)


class FailingRandom:
    def token_bytes(self, n: int) -> bytes:
        raise RandomSourceFailure("entropy pool exhausted")


# ---------------------------------------------------------------------------
# xor_bytes
# ---------------------------------------------------------------------------


class TestXorBytes:
    def test_equal_lengths(self) -> None:
        assert xor_bytes(b"\x0f\xf0", b"\xff\xff") == b"\xf0\x0f"

    def test_shorter_operand_repeats_its_own_bytes(self) -> None:
        assert xor_bytes(b"\x01\x02", b"\x00\x00\x00\x00\x00") == b"\x01\x02\x01\x02\x01"

    def test_operand_order_does_not_matter(self) -> None:
        a, b = b"\x10\x20\x30", b"\x01\x02\x03\x04\x05\x06\x07"
        assert xor_bytes(a, b) == xor_bytes(b, a)

    def test_empty_operand_is_padded_with_spaces(self) -> None:
        assert xor_bytes(b"", b"\x20\x21") == b"\x00\x01"
        assert xor_bytes(b"\x20\x21", b"") == b"\x00\x01"

    def test_both_empty(self) -> None:
        assert xor_bytes(b"", b"") == b""


# ---------------------------------------------------------------------------
# encode_token / decode_token
# ---------------------------------------------------------------------------


class TestEncodeToken:
    def test_known_vector(self) -> None:
        secret = bytes(32)
        mask = bytes(range(1, 9))

        token = encode_token(secret, 8, FixedRandom(mask))

        expected = base64.b64encode(mask + mask * 4).decode().replace("+", ".")
        assert token == expected
        assert decode_token(token, 8, 32) == secret

    def test_plus_is_replaced_with_dot(self) -> None:
        # 0xfb 0xef 0xbe encodes to "++++" in standard base64.
        mask = b"\xfb\xef\xbe"
        token = encode_token(b"\x00\x00\x00", 3, FixedRandom(mask))
        assert token == "........"
        assert decode_token(token, 3, 3) == b"\x00\x00\x00"

    def test_round_trip_with_system_random(self) -> None:
        secret = SystemRandomSource().token_bytes(32)
        assert decode_token(encode_token(secret, 8), 8, 32) == secret

    def test_two_encodings_differ(self) -> None:
        secret = bytes(range(32))
        assert encode_token(secret, 8) != encode_token(secret, 8)

    def test_random_failure_propagates(self) -> None:
        with pytest.raises(RandomSourceFailure):
            encode_token(bytes(32), 8, FailingRandom())

    def test_short_mask_is_rejected(self) -> None:
        with pytest.raises(RandomSourceFailure):
            encode_token(bytes(32), 8, FixedRandom(b""))


class TestDecodeToken:
    def test_too_short(self) -> None:
        with pytest.raises(MalformedTokenException):
            decode_token("abcdefgh", 8, 32)

    def test_invalid_base64(self) -> None:
        with pytest.raises(MalformedTokenException):
            decode_token("INVALID-TOKEN", 8, 32)

    def test_decoded_too_short(self) -> None:
        with pytest.raises(MalformedTokenException):
            decode_token("INVALIDTOKEN", 8, 32)

    def test_non_ascii(self) -> None:
        with pytest.raises(MalformedTokenException):
            decode_token("é" * 60, 8, 32)

    def test_accepts_bytes(self) -> None:
        secret = bytes(range(32))
        token = encode_token(secret, 8).encode()
        assert decode_token(token, 8, 32) == secret

    def test_extra_trailing_bytes_are_ignored(self) -> None:
        secret = bytes(range(32))
        raw = base64.b64decode(encode_token(secret, 8).replace(".", "+")) + b"\xff\xff\xff"
        token = base64.b64encode(raw).decode().replace("+", ".")
        assert decode_token(token, 8, 32) == secret

    def test_longer_secret_than_issued_is_malformed(self) -> None:
        token = encode_token(bytes(16), 8)
        with pytest.raises(MalformedTokenException):
            decode_token(token, 8, 32)


# ---------------------------------------------------------------------------
# Random sources
# ---------------------------------------------------------------------------


class TestRandomSources:
    def test_system_random_conforms_to_protocol(self) -> None:
        assert isinstance(SystemRandomSource(), RandomSource)

    def test_system_random_length(self) -> None:
        assert len(SystemRandomSource().token_bytes(32)) == 32

    def test_system_random_wraps_os_errors(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def _broken(n: int) -> bytes:
            raise OSError("getrandom failed")

        monkeypatch.setattr("csrfmask.security.masking.secrets.token_bytes", _broken)
        with pytest.raises(RandomSourceFailure) as exc_info:
            SystemRandomSource().token_bytes(8)
        assert exc_info.value.code == "CSRF_ENTROPY"

    def test_random_bytes_rejects_short_read(self) -> None:
        with pytest.raises(RandomSourceFailure) as exc_info:
            random_bytes(8, FixedRandom(b"\x01\x02"))
        assert exc_info.value.context == {"requested": 8, "received": 2}
