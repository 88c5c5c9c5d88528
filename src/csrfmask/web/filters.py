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
"""Filter contract used by :class:`~csrfmask.web.adapters.starlette.WebFilterChainMiddleware`.

Requests and responses are typed ``Any``; only the Starlette adapter
knows the concrete classes.
"""

from __future__ import annotations

import abc
from collections.abc import Callable, Coroutine, Sequence
from fnmatch import fnmatchcase
from typing import Any, Protocol, runtime_checkable

# Invokes the rest of the chain and returns its response.
CallNext = Callable[[Any], Coroutine[Any, Any, Any]]


@runtime_checkable
class WebFilter(Protocol):
    """Anything the chain can run: a bypass check plus the filter body."""

    def should_not_filter(self, request: Any) -> bool: ...

    async def do_filter(self, request: Any, call_next: CallNext) -> Any: ...


class PathExcludingFilter(abc.ABC):
    """Filter base that stays out of the way for excluded paths.

    ``excluded_paths`` holds shell-style globs (``/health``, ``/static/*``)
    matched case-sensitively against ``request.url.path``. An excluded
    request reaches the next filter untouched.
    """

    def __init__(self, excluded_paths: Sequence[str] = ()) -> None:
        self.excluded_paths: tuple[str, ...] = tuple(excluded_paths)

    def should_not_filter(self, request: Any) -> bool:
        path: str = request.url.path
        return any(fnmatchcase(path, pattern) for pattern in self.excluded_paths)

    @abc.abstractmethod
    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        """Handle *request*; call ``await call_next(request)`` to continue the chain."""
