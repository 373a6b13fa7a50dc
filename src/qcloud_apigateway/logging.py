"""
structlog setup for applications using the API Gateway client.

The client and transport only emit events; applications opt in to JSON
output with :func:`configure_logging`. Credential and signature fields are
masked by :class:`SecretMasker` before rendering, whatever the call site
passes in.
"""

import logging
from typing import Any

import structlog

SECRET_KEYS = frozenset({"SecretId", "SecretKey", "Signature", "secret_id", "secret_key"})
MASK = "[REDACTED]"


class SecretMasker:
    """Processor replacing credential values in the event dict."""

    def __init__(self, keys: frozenset[str] = SECRET_KEYS, mask: str = MASK):
        self.keys = keys
        self.mask = mask

    def __call__(self, logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        return self._mask(event_dict)

    def _mask(self, data: dict[str, Any]) -> dict[str, Any]:
        result = {}
        for key, value in data.items():
            if key in self.keys:
                result[key] = self.mask
            elif isinstance(value, dict):
                result[key] = self._mask(value)
            else:
                result[key] = value
        return result


def configure_logging(level: int | str = logging.INFO) -> None:
    """Route client events through stdlib logging as masked JSON lines."""

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            SecretMasker(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(level=level, format="%(message)s")


def bind_context(**kwargs: Any) -> structlog.stdlib.BoundLogger:
    """Logger carrying gateway fields such as ``region`` or ``service_id``."""

    return structlog.get_logger().bind(**kwargs)
