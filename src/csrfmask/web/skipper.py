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
"""Skippers — predicates that let a request bypass CSRF validation.

A skipper runs after the token has been minted, so skipped requests
still receive a cookie and a token; only validation is bypassed.
"""

from __future__ import annotations

from typing import Any, Protocol


class Skipper(Protocol):
    """Single-method capability: return ``True`` to skip validation for *request*."""

    def __call__(self, request: Any) -> bool: ...


def default_skipper(request: Any) -> bool:
    """Never skip."""
    return False


def path_skipper(*patterns: str) -> Skipper:
    """Return a skipper matching the request path against *patterns*.

    Matching is case-insensitive. A pattern ending in ``*`` matches any
    path starting with the part before the ``*``; any other pattern must
    equal the path. Empty patterns never match.

    ==========  ============  =========
    Pattern     Path          Skipped
    ==========  ============  =========
    ``""``      ``/``         no
    ``/``       ``/``         yes
    ``/``       ``/login``    no
    ``/login``  ``/LOGIN``    yes
    ``/guest*`` ``/guest``    yes
    ``/guest*`` ``/guest/x``  yes
    ==========  ============  =========
    """
    exact = {p.casefold() for p in patterns if p and not p.endswith("*")}
    prefixes = tuple(p[:-1].casefold() for p in patterns if p.endswith("*"))

    def _skip(request: Any) -> bool:
        path = request.url.path.casefold()
        return path in exact or path.startswith(prefixes)

    return _skip


def any_skipper(*skippers: Skipper) -> Skipper:
    """Return a skipper that skips when any of *skippers* does."""

    def _skip(request: Any) -> bool:
        return any(skipper(request) for skipper in skippers)

    return _skip
