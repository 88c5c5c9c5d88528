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
"""Masked CSRF token codec.

A per-client secret is never sent verbatim. Each presentation token is::

    base64(mask || xor(secret, mask))

with a fresh random mask per call, so the same secret yields a different
token string in every response. This defeats compression-oracle attacks
(BREACH/CRIME) that rely on a static secret repeating in response bodies.
``+`` is replaced by ``.`` so the token survives a query string without
further escaping.
"""

from __future__ import annotations

import base64
import binascii
import secrets
from typing import Protocol, runtime_checkable

from csrfmask.kernel.exceptions import MalformedTokenException, RandomSourceFailure

_PAD_BYTE = b" "


@runtime_checkable
class RandomSource(Protocol):
    """Supplier of cryptographically secure random bytes."""

    def token_bytes(self, n: int) -> bytes:
        """Return exactly *n* random bytes or raise :class:`RandomSourceFailure`."""
        ...


class SystemRandomSource:
    """:class:`RandomSource` backed by the operating system CSPRNG."""

    def token_bytes(self, n: int) -> bytes:
        if n < 0:
            raise ValueError(f"Cannot draw a negative number of random bytes: {n}")
        try:
            return secrets.token_bytes(n)
        except (OSError, NotImplementedError) as exc:
            raise RandomSourceFailure(f"Unable to read {n} random bytes: {exc}") from exc


_SYSTEM_RANDOM = SystemRandomSource()


def random_bytes(n: int, random_source: RandomSource | None = None) -> bytes:
    """Draw *n* bytes from *random_source* (the system CSPRNG by default).

    Raises:
        RandomSourceFailure: If the source fails or returns a short read.
    """
    source = random_source if random_source is not None else _SYSTEM_RANDOM
    data = source.token_bytes(n)
    if len(data) != n:
        raise RandomSourceFailure(
            f"Random source returned {len(data)} bytes, expected {n}",
            context={"requested": n, "received": len(data)},
        )
    return data


def xor_bytes(a: bytes, b: bytes) -> bytes:
    """XOR two byte strings position by position.

    When the lengths differ, the shorter operand is extended by repeating
    its own bytes from the start. An empty shorter operand is extended
    with ASCII spaces. Tokens issued by other implementations of this
    scheme depend on that rule.
    """
    if len(a) < len(b):
        a, b = b, a
    if len(b) < len(a):
        b = _cycle(b, len(a))
    return bytes(x ^ y for x, y in zip(a, b))


def _cycle(data: bytes, length: int) -> bytes:
    if not data:
        return _PAD_BYTE * length
    repeats, remainder = divmod(length, len(data))
    return data * repeats + data[:remainder]


def encode_token(secret: bytes, mask_len: int, random_source: RandomSource | None = None) -> str:
    """Mask *secret* with ``mask_len`` fresh random bytes and return the token string.

    Args:
        secret: The client's persistent secret.
        mask_len: Number of mask bytes to draw.
        random_source: Optional override of the system CSPRNG.

    Returns:
        ``base64(mask || xor(secret, mask))`` with ``+`` replaced by ``.``.

    Raises:
        RandomSourceFailure: If the mask cannot be generated.
    """
    mask = random_bytes(mask_len, random_source)
    body = xor_bytes(secret, mask)
    encoded = base64.b64encode(mask + body).decode("ascii")
    return encoded.replace("+", ".")


def decode_token(encoded: str | bytes, mask_len: int, secret_len: int) -> bytes:
    """Recover the secret candidate carried by a presentation token.

    Raises:
        MalformedTokenException: If the token is too short, is not valid
            base64, or decodes to fewer than ``mask_len + secret_len`` bytes.
    """
    if isinstance(encoded, str):
        try:
            raw = encoded.encode("ascii")
        except UnicodeEncodeError as exc:
            raise MalformedTokenException("CSRF token contains non-ASCII characters") from exc
    else:
        raw = encoded

    if len(raw) <= mask_len:
        raise MalformedTokenException(
            "CSRF token is too short",
            context={"length": len(raw), "mask_len": mask_len},
        )

    try:
        decoded = base64.b64decode(raw.replace(b".", b"+"), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedTokenException("CSRF token is not valid base64") from exc

    if len(decoded) < mask_len + secret_len:
        raise MalformedTokenException(
            "CSRF token is truncated",
            context={"decoded_length": len(decoded), "expected": mask_len + secret_len},
        )

    mask = decoded[:mask_len]
    body = decoded[mask_len : mask_len + secret_len]
    return xor_bytes(mask, body)
