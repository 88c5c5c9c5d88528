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
"""CsrfFilter — masked double-submit cookie CSRF protection.

Every request passing through the filter:

1. loads the client's secret from the CSRF cookie, or issues a new one
   (``Set-Cookie`` is added to whatever response is finally returned);
2. mints a freshly masked token and stores it on ``request.state`` under
   ``context_key`` so handlers can embed it in forms or headers;
3. bypasses validation when the skipper says so or the method is safe;
4. otherwise extracts the presented token (header first, then the form
   field from the query string or a form body) and rejects the request
   with ``400 Unable to verify your data submission.`` unless the token
   derives from the secret.

Malformed and mismatched tokens produce the same response. A failing
random source is not a client error: it propagates so the application
answers with a server error.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.responses import PlainTextResponse

from csrfmask.config.properties.csrf import CsrfProperties
from csrfmask.core.config import Config
from csrfmask.kernel.exceptions import InvalidCsrfTokenException, RandomSourceFailure
from csrfmask.security.csrf import CsrfTokenAuthority
from csrfmask.security.masking import RandomSource
from csrfmask.web.filters import CallNext, PathExcludingFilter
from csrfmask.web.skipper import Skipper, default_skipper

logger = structlog.get_logger("csrfmask.web.csrf")

REJECTION_MESSAGE = "Unable to verify your data submission."

# An unparseable form body counts as "no token presented".
_FORM_PARSE_ERRORS = (HTTPException, MultiPartException, KeyError, ValueError)

_FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

TokenExtractor = Callable[[Any], Awaitable[str | None]]
"""Async callable returning the token presented by a request, or ``None``."""


def header_or_form_extractor(header_name: str, form_field: str) -> TokenExtractor:
    """Return an extractor reading *header_name*, falling back to *form_field*.

    The field is looked up in the query string first, then in a
    urlencoded or multipart request body.
    """

    async def _extract(request: Any) -> str | None:
        token = request.headers.get(header_name)
        if token:
            return token

        token = request.query_params.get(form_field)
        if token:
            return token

        content_type = request.headers.get("content-type", "").lower()
        if not content_type.startswith(_FORM_CONTENT_TYPES):
            return None

        # Cache the raw body so the filter chain can replay it downstream.
        await request.body()
        try:
            async with request.form() as form:
                value = form.get(form_field)
        except _FORM_PARSE_ERRORS:
            return None
        return value if isinstance(value, str) else None

    return _extract


def get_csrf_token(request: Any, context_key: str = "csrf_token") -> str | None:
    """Return the token minted for *request*, or ``None`` if the filter did not run."""
    return getattr(request.state, context_key, None)


class CsrfFilter(PathExcludingFilter):
    """Masked-token CSRF filter.

    Args:
        properties: Gate configuration; defaults to :class:`CsrfProperties`.
        skipper: Predicate that bypasses validation (the token is still minted).
        extractor: Strategy for reading the presented token.
        random_source: Optional override of the system CSPRNG.
    """

    def __init__(
        self,
        properties: CsrfProperties | None = None,
        skipper: Skipper | None = None,
        extractor: TokenExtractor | None = None,
        random_source: RandomSource | None = None,
    ) -> None:
        self._properties = properties or CsrfProperties()
        super().__init__(self._properties.exclude_paths)
        self._authority = CsrfTokenAuthority(self._properties, random_source)
        self._skipper = skipper or default_skipper
        self._extractor = extractor or header_or_form_extractor(
            self._properties.header_name, self._properties.form_field
        )

    @classmethod
    def from_config(cls, config: Config, **kwargs: Any) -> CsrfFilter:
        """Build a filter from the ``csrfmask.csrf`` section of *config*."""
        return cls(config.bind(CsrfProperties), **kwargs)

    @property
    def properties(self) -> CsrfProperties:
        return self._properties

    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        pending_cookies: list[dict[str, Any]] = []

        def _defer_cookie(**cookie: Any) -> None:
            pending_cookies.append(cookie)

        try:
            secret = self._authority.load_or_create_secret(request.cookies, _defer_cookie)
            token = self._authority.mint_token(secret)
        except RandomSourceFailure as exc:
            logger.error("csrf_random_source_failure", path=request.url.path, error=str(exc))
            raise

        setattr(request.state, self._properties.context_key, token)

        if self._skipper(request) or request.method in self._properties.safe_methods:
            response = await call_next(request)
        else:
            response = await self._verify(request, secret, call_next)

        for cookie in pending_cookies:
            response.set_cookie(**cookie)
        return response

    async def _verify(self, request: Any, secret: bytes, call_next: CallNext) -> Any:
        presented = await self._extractor(request)
        try:
            self._authority.check(presented, secret)
        except InvalidCsrfTokenException as exc:
            logger.info(
                "csrf_validation_failed",
                reason=exc.code,
                method=request.method,
                path=request.url.path,
            )
            return PlainTextResponse(REJECTION_MESSAGE, status_code=400)
        return await call_next(request)
