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
"""CSRF token authority — masked double-submit cookie pattern.

Owns the lifecycle of the per-client secret stored in a cookie and mints
a freshly masked presentation token for every request. Validation
decodes the presented token and compares the recovered secret with the
cookie's secret in constant time.
"""

from __future__ import annotations

import base64
import binascii
import hmac
from collections.abc import Callable, Mapping
from typing import Any

import structlog

from csrfmask.config.properties.csrf import CsrfProperties
from csrfmask.kernel.exceptions import CsrfValidationException, MalformedTokenException
from csrfmask.security.masking import RandomSource, decode_token, encode_token, random_bytes

logger = structlog.get_logger("csrfmask.security.csrf")

# Signature-compatible with ``starlette.responses.Response.set_cookie``.
CookieWriter = Callable[..., Any]


class CsrfTokenAuthority:
    """Issues, masks and verifies the client's CSRF secret.

    Stateless across requests: holds only the immutable properties and
    the random source, so one instance may serve concurrent requests.

    Args:
        properties: Cookie names, lengths and options.
        random_source: Optional override of the system CSPRNG.
    """

    def __init__(
        self,
        properties: CsrfProperties | None = None,
        random_source: RandomSource | None = None,
    ) -> None:
        self._properties = properties or CsrfProperties()
        self._random_source = random_source

    @property
    def properties(self) -> CsrfProperties:
        return self._properties

    def load_or_create_secret(self, cookies: Mapping[str, str], write_cookie: CookieWriter) -> bytes:
        """Return the client's secret, issuing a new one when the cookie has none.

        A cookie value that is not valid base64, or does not decode to
        exactly ``token_len`` bytes, is replaced. Changing ``token_len``
        therefore invalidates every outstanding token.

        Raises:
            RandomSourceFailure: If a new secret is needed and cannot be generated.
        """
        token_len = self._properties.token_len
        secret = self._read_secret(cookies.get(self._properties.cookie_name))
        if secret is not None:
            return secret

        secret = random_bytes(token_len, self._random_source)
        props = self._properties
        write_cookie(
            key=props.cookie_name,
            value=base64.b64encode(secret).decode("ascii"),
            max_age=props.cookie_max_age,
            path=props.cookie_path,
            domain=props.cookie_domain,
            secure=props.cookie_secure,
            httponly=props.cookie_httponly,
            samesite=props.cookie_samesite,
        )
        logger.debug("csrf_secret_issued", cookie=props.cookie_name)
        return secret

    def _read_secret(self, value: str | None) -> bytes | None:
        if not value:
            return None
        try:
            decoded = base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError):
            return None
        if len(decoded) != self._properties.token_len:
            return None
        return decoded

    def mint_token(self, secret: bytes) -> str:
        """Return a new presentation token for *secret*; differs on every call."""
        return encode_token(secret, self._properties.mask_len, self._random_source)

    def check(self, presented: str | bytes | None, secret: bytes) -> None:
        """Verify that *presented* derives from *secret*.

        Raises:
            MalformedTokenException: Missing, too short, or undecodable token.
            CsrfValidationException: Token decodes to a different secret.
        """
        mask_len = self._properties.mask_len
        if not presented or len(presented) <= mask_len:
            raise MalformedTokenException("CSRF token is missing or too short")

        candidate = decode_token(presented, mask_len, len(secret))
        if not hmac.compare_digest(candidate, secret):
            raise CsrfValidationException()

    def validate(self, presented: str | bytes | None, secret: bytes) -> bool:
        """Return ``True`` if *presented* derives from *secret*; never raises for bad input."""
        try:
            self.check(presented, secret)
        except (MalformedTokenException, CsrfValidationException):
            return False
        return True
