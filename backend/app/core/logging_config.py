"""
structlog tabanlı yapılandırılmış loglama.

- prod: JSON satırları, dev: renkli konsol
- İstek kimliği contextvars ile her log satırına eklenir
- Model API anahtarı hiçbir biçimde loga düşmez (alan adı veya URL içinde)
"""

import logging
import re
import sys
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor

SENSITIVE_KEYS = ("password", "token", "secret", "api_key", "apikey", "authorization")
CENSORED = "***CENSORED***"

# Gemini anahtarı sorgu parametresi olarak taşınır: ...:generateContent?key=AIza...
_URL_KEY_RE = re.compile(r"([?&]key=)[^&\s'\"]+")


def _app_context(app_name: str, env: str) -> Processor:
    def add_app_context(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("app", app_name)
        event_dict.setdefault("env", env)
        return event_dict

    return add_app_context


def add_severity(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict["severity"] = ("warning" if method_name == "warn" else method_name).upper()
    return event_dict


def _scrub(value: Any) -> Any:
    if isinstance(value, str):
        return _URL_KEY_RE.sub(r"\1" + CENSORED, value)
    if isinstance(value, dict):
        return {
            k: CENSORED if k != "event" and any(s in k.lower() for s in SENSITIVE_KEYS) else _scrub(v)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_scrub(v) for v in value]
    return value


def censor_sensitive_data(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Hassas alan adlarını ve URL'deki `key=` parametresini maskeler."""
    return _scrub(event_dict)


def bind_request_context(request_id: str, **extra: Any) -> None:
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id, **extra)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()


def setup_logging(
    log_level: Optional[str] = None,
    json_logs: bool = False,
    app_name: str = "Restaurant Analytics API",
    env: str = "dev",
) -> None:
    """
    Uygulama loglamasını kurar; main.py içinde her şeyden önce çağrılır.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR, CRITICAL
        json_logs: True ise JSON çıktı (prod)
    """
    level = getattr(logging, (log_level or "INFO").upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("databases").setLevel(logging.WARNING)
    # httpx istek URL'sini INFO seviyesinde basar; URL anahtarı taşır
    logging.getLogger("httpx").setLevel(logging.WARNING)

    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_severity,
        _app_context(app_name, env),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        censor_sensitive_data,
    ]

    if json_logs:
        renderers: list = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        renderers = [structlog.dev.ConsoleRenderer(colors=True, exception_formatter=structlog.dev.plain_traceback)]

    structlog.configure(
        processors=shared_processors + renderers,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
