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
"""Configuration loading and dataclass binding.

Values come from three layers, highest first:

1. ``CSRFMASK_*`` environment variables (``csrfmask.csrf.token_len`` ->
   ``CSRFMASK_CSRF_TOKEN_LEN``)
2. a YAML file passed to :meth:`Config.from_file`
3. the packaged ``csrfmask-defaults.yaml``
"""

from __future__ import annotations

import dataclasses
import importlib.resources
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar, get_origin, get_type_hints

import yaml  # type: ignore[import-untyped]

T = TypeVar("T")

_PREFIX_ATTR = "__csrfmask_config_prefix__"
_ENV_PREFIX = "CSRFMASK_"
_MISSING = object()


def config_properties(prefix: str) -> Callable[[type[T]], type[T]]:
    """Attach the config section *prefix* to a dataclass so :meth:`Config.bind` can fill it."""

    def decorator(cls: type[T]) -> type[T]:
        setattr(cls, _PREFIX_ATTR, prefix)
        return cls

    return decorator


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _read_yaml(source: Any) -> dict[str, Any]:
    with open(source) as f:
        return yaml.safe_load(f) or {}


class Config:
    """Nested settings read with dotted keys, e.g. ``config.get("csrfmask.csrf.cookie_name")``."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = data or {}

    @classmethod
    def from_file(cls, path: str | Path, load_defaults: bool = True) -> Config:
        """Load *path* on top of the packaged defaults; a missing file yields the defaults alone."""
        data: dict[str, Any] = {}
        if load_defaults:
            defaults = importlib.resources.files("csrfmask.resources").joinpath("csrfmask-defaults.yaml")
            with importlib.resources.as_file(defaults) as p:
                data = _read_yaml(p)

        path = Path(path)
        if path.exists():
            data = _merge(data, _read_yaml(path))
        return cls(data)

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value at dotted *key*; an environment override wins.

        An explicit ``null`` in the data is returned as ``None``; only an
        absent key yields *default*.
        """
        env_key = _ENV_PREFIX + key.removeprefix("csrfmask.").upper().replace(".", "_").replace("-", "_")
        env_val = os.environ.get(env_key)
        if env_val is not None:
            return env_val

        current: Any = self._data
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return current

    def bind(self, config_cls: type[T]) -> T:
        """Build a @config_properties dataclass from its section.

        Absent keys keep the dataclass default. Strings (typically from
        environment variables) are coerced to ``int``, ``bool`` or a
        comma-separated collection according to the field's annotation.
        """
        prefix = getattr(config_cls, _PREFIX_ATTR, None)
        if prefix is None:
            raise ValueError(f"{config_cls.__name__} is not decorated with @config_properties")

        hints = get_type_hints(config_cls)
        kwargs: dict[str, Any] = {}
        for field in dataclasses.fields(config_cls):  # type: ignore[arg-type]
            value = self.get(f"{prefix}.{field.name}", _MISSING)
            if value is _MISSING:
                continue
            if isinstance(value, str):
                value = _coerce(value, hints.get(field.name))
            kwargs[field.name] = value
        return config_cls(**kwargs)


def _coerce(value: str, expected: Any) -> Any:
    if expected is int:
        return int(value)
    if expected is bool:
        return value.lower() in ("true", "1", "yes")
    if get_origin(expected) in (frozenset, tuple, list, set):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value
