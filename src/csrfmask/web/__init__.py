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
"""csrfmask Web — request gate, filter plumbing and skippers.

Framework-agnostic types are exported directly; the default adapter
(Starlette) is re-exported for convenience.
"""

from csrfmask.web.adapters.starlette import CsrfFilter, WebFilterChainMiddleware, get_csrf_token
from csrfmask.web.filters import CallNext, PathExcludingFilter, WebFilter
from csrfmask.web.skipper import Skipper, any_skipper, default_skipper, path_skipper

__all__ = [
    "CallNext",
    "CsrfFilter",
    "PathExcludingFilter",
    "Skipper",
    "WebFilter",
    "WebFilterChainMiddleware",
    "any_skipper",
    "default_skipper",
    "get_csrf_token",
    "path_skipper",
]
