"""uvicorn 로그 포맷을 그대로 쓰는 애플리케이션 로깅 설정.

``LOG_LEVEL``은 root와 uvicorn 로거에, ``INGESTION_LOG_LEVEL``은 수집 경로
로거(수집 오케스트레이터, Google Places 클라이언트)에 적용됩니다.
"""

from __future__ import annotations

import copy
import logging.config
import os
from typing import Any

from uvicorn.config import LOGGING_CONFIG as UVICORN_LOGGING_CONFIG

_UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")
_INGESTION_LOGGERS = ("app.services.ingestion_service", "app.services.google_places_service")


def resolve_log_level(level: str | None = None, env_var: str = "LOG_LEVEL") -> str:
    """명시된 레벨, 환경변수, INFO 순으로 로그 레벨을 고릅니다."""
    return (level or os.getenv(env_var) or "INFO").upper()


def build_logging_config(level: str | None = None) -> dict[str, Any]:
    """`logging.config.dictConfig`에 넘길 설정을 만듭니다."""
    log_level = resolve_log_level(level)
    ingestion_level = os.getenv("INGESTION_LOG_LEVEL", "").upper() or log_level

    config = copy.deepcopy(UVICORN_LOGGING_CONFIG)
    config["root"] = {"handlers": ["default"], "level": log_level}
    for name in _UVICORN_LOGGERS:
        config["loggers"][name]["level"] = log_level
    config["loggers"].update({name: {"level": ingestion_level, "propagate": True} for name in _INGESTION_LOGGERS})
    return config


def configure_logging(level: str | None = None) -> None:
    """로깅을 구성합니다. 앱 모듈 import 시 한 번 호출됩니다."""
    logging.config.dictConfig(build_logging_config(level))
