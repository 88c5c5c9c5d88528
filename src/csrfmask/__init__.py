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
"""csrfmask — masked-token CSRF protection for Starlette applications."""

from csrfmask.config.properties.csrf import CsrfProperties
from csrfmask.core.config import Config
from csrfmask.kernel.exceptions import (
    CsrfValidationException,
    MalformedTokenException,
    RandomSourceFailure,
)
from csrfmask.logging.setup import configure_logging
from csrfmask.security.csrf import CsrfTokenAuthority
from csrfmask.web.adapters.starlette import CsrfFilter, WebFilterChainMiddleware, get_csrf_token

__version__ = "0.1.0"

__all__ = [
    "Config",
    "CsrfFilter",
    "CsrfProperties",
    "CsrfTokenAuthority",
    "CsrfValidationException",
    "MalformedTokenException",
    "RandomSourceFailure",
    "WebFilterChainMiddleware",
    "configure_logging",
    "get_csrf_token",
]
