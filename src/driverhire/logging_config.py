from __future__ import annotations

import logging

from driverhire.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
# chatty third-party loggers kept at WARNING unless explicitly enabled
_QUIET_LOGGERS = ("multipart", "python_multipart")

_LOG_CONFIGURED = False


def configure_logging() -> None:
    global _LOG_CONFIGURED
    if _LOG_CONFIGURED:
        return

    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if settings.log_sql else logging.WARNING)

    if settings.secret_key == "change-me" and settings.app_env not in {"development", "test"}:
        logging.getLogger(__name__).warning(
            "SECRET_KEY is still the default value in app_env=%s; session tokens can be forged", settings.app_env
        )
    _LOG_CONFIGURED = True
