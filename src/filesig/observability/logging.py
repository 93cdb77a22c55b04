"""structlog setup for filesig.

Every filesig module logs through ``get_logger(__name__)`` with dotted event
names (``filesig.keys.loaded``). Records from other libraries share the same
processor chain, so private key material and share tokens are redacted no
matter who logs them.

Settings come from FILESIG_LOG_FORMAT (``console`` or ``json``),
FILESIG_LOG_LEVEL and FILESIG_SERVICE_NAME unless passed explicitly.
"""

import logging
import os
import sys
from typing import Any

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

ENV_LOG_FORMAT = "FILESIG_LOG_FORMAT"
ENV_LOG_LEVEL = "FILESIG_LOG_LEVEL"
ENV_SERVICE_NAME = "FILESIG_SERVICE_NAME"

_DEFAULTS = {
    ENV_LOG_FORMAT: "console",
    ENV_LOG_LEVEL: "INFO",
    ENV_SERVICE_NAME: "filesig",
}

REDACTED_PLACEHOLDER = "***REDACTED***"

# Matched as case-insensitive substrings of the field name.
# key_id and public_key stay visible.
_SENSITIVE_KEY_PATTERNS = frozenset({"private", "secret", "token", "password", "authorization"})

_logging_configured = False


def _env(name: str) -> str:
    return os.environ.get(name, _DEFAULTS[name])


def _is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    return any(pattern in lowered for pattern in _SENSITIVE_KEY_PATTERNS)


def _redact_value(value: Any) -> Any:
    if isinstance(value, dict):
        return sanitize_for_logging(value)
    if isinstance(value, list):
        return [_redact_value(item) for item in value]
    return value


def sanitize_for_logging(data: dict[str, Any]) -> dict[str, Any]:
    """Copy of ``data`` with sensitive fields replaced, recursing into dicts and lists."""
    return {
        key: REDACTED_PLACEHOLDER if _is_sensitive_key(key) else _redact_value(value)
        for key, value in data.items()
    }


def _redact_processor(_logger: WrappedLogger, _method: str, event_dict: EventDict) -> EventDict:
    event = event_dict.pop("event", None)
    redacted = sanitize_for_logging(event_dict)
    if event is not None:
        redacted["event"] = event
    return redacted


_SHARED_PROCESSORS: list[Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
    _redact_processor,
]


def _renderer(log_format: str) -> Processor:
    if log_format.lower() == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(exception_formatter=structlog.dev.plain_traceback)


def configure_logging(
    log_format: str | None = None,
    log_level: str | None = None,
    service_name: str | None = None,
    force: bool = False,
) -> None:
    """Route structlog and stdlib logging to stdout through one formatter.

    Explicit arguments win over the environment. An unknown level name falls
    back to INFO. Without ``force`` only the first call has an effect.
    """
    global _logging_configured

    if _logging_configured and not force:
        return

    structlog.configure(
        processors=[*_SHARED_PROCESSORS, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_SHARED_PROCESSORS,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_format or _env(ENV_LOG_FORMAT)),
            ],
        )
    )

    level_name = (log_level or _env(ENV_LOG_LEVEL)).upper()
    root = logging.getLogger()
    root.handlers[:] = [handler]
    level = getattr(logging, level_name, None)
    root.setLevel(level if isinstance(level, int) else logging.INFO)

    structlog.contextvars.bind_contextvars(service=service_name or _env(ENV_SERVICE_NAME))
    _logging_configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    if not _logging_configured:
        configure_logging()
    return structlog.stdlib.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Attach fields to every later log line in the current context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
