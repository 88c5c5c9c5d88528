"""csrfmask Logging — structlog configuration."""

from csrfmask.logging.setup import REDACTED, configure_logging, redact_csrf_material

__all__ = ["REDACTED", "configure_logging", "redact_csrf_material"]
