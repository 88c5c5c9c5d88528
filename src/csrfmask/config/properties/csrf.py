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
"""CSRF protection configuration properties."""

from __future__ import annotations

from dataclasses import dataclass, field

from csrfmask.core.config import config_properties

DEFAULT_MASK_LEN = 8
DEFAULT_TOKEN_LEN = 32


@config_properties(prefix="csrfmask.csrf")
@dataclass(frozen=True)
class CsrfProperties:
    """Configuration for the CSRF gate (csrfmask.csrf.*).

    Immutable once built; construct it before the gate starts serving
    traffic and share the same instance across requests.
    """

    cookie_name: str = "_csrf"
    cookie_max_age: int = 3600
    cookie_path: str = "/"
    cookie_domain: str | None = None
    cookie_secure: bool = False
    cookie_httponly: bool = True
    cookie_samesite: str | None = "lax"
    header_name: str = "X-CSRF-Token"
    form_field: str = "_csrf"
    context_key: str = "csrf_token"
    safe_methods: frozenset[str] = field(default_factory=lambda: frozenset({"GET", "HEAD", "OPTIONS"}))
    mask_len: int = DEFAULT_MASK_LEN
    token_len: int = DEFAULT_TOKEN_LEN
    exclude_paths: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Non-positive lengths fall back to the defaults.
        if self.mask_len <= 0:
            object.__setattr__(self, "mask_len", DEFAULT_MASK_LEN)
        if self.token_len <= 0:
            object.__setattr__(self, "token_len", DEFAULT_TOKEN_LEN)
        object.__setattr__(self, "safe_methods", frozenset(self.safe_methods))
        object.__setattr__(self, "exclude_paths", tuple(self.exclude_paths))
