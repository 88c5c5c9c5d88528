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
"""structlog setup for csrfmask and the application hosting it.

:func:`configure_logging` reads the ``csrfmask.logging`` section and
installs a processor chain that never lets CSRF token or secret material
reach a log line, even when a handler binds it by mistake.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog

from csrfmask.config.properties.logging import LoggingProperties
from csrfmask.core.config import Config

REDACTED = "[redacted]"

# Event keys whose values are token or secret material.
SENSITIVE_KEYS = frozenset({"token", "csrf_token", "presented", "secret", "cookie_value"})


def redact_csrf_material(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """structlog processor replacing sensitive values with :data:`REDACTED`."""
    for key in SENSITIVE_KEYS.intersection(event_dict):
        event_dict[key] = REDACTED
    return event_dict


def _level(name: Any) -> int:
    return logging.getLevelNamesMapping().get(str(name).upper(), logging.INFO)


def configure_logging(config: Config | None = None) -> LoggingProperties:
    """Configure structlog and stdlib logging from *config*.

    ``csrfmask.logging.format`` selects ``console`` or ``json`` rendering;
    ``csrfmask.logging.level`` maps logger names to levels, with ``root``
    applying to everything else. Returns the bound properties.
    """
    properties = (config or Config({})).bind(LoggingProperties)
    levels = dict(properties.level)
    root_level = _level(levels.pop("root", "INFO"))

    renderer: structlog.types.Processor
    if str(properties.format).lower() == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            redact_csrf_material,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=root_level, force=True)

    for name, level in levels.items():
        logging.getLogger(name).setLevel(_level(level))
    return properties
