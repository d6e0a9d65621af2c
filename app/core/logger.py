"""표준화된 로거 모듈.

`configure_logging()`이 root 로거를 구성한 뒤에는 이름만 붙은 로거를 반환하고,
그 전에 호출되면(스크립트, 단독 실행 등) stdout 핸들러를 직접 붙입니다.
"""

import logging
import sys

from app.core.logging_config import resolve_log_level

_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s] %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str) -> logging.Logger:
    """표준화된 로거를 반환합니다.

    Args:
        name: 로거 이름 (일반적으로 __name__ 사용).

    Returns:
        설정된 로거 인스턴스.
    """
    logger = logging.getLogger(name)

    if logger.handlers or logging.getLogger().handlers:
        return logger

    level = resolve_log_level()
    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
    logger.addHandler(handler)

    return logger
