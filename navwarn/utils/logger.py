"""중앙 로깅 설정 모듈.

Centralized logging configuration.
All modules should use ``get_logger(__name__)`` to obtain a logger instance.
Logs go to stdout; when Axiom credentials are configured the same records
are also shipped to the Axiom dataset used by the request middleware.
"""

import logging
import sys

from axiom_py import Client as AxiomClient
from axiom_py.logging import AxiomHandler

from navwarn.config import settings

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_ROOT_LOGGER = "navwarn"
_initialized = False


def _init_logging() -> None:
    """패키지 루트 로거를 한 번만 구성합니다 — Configure the package logger once."""
    global _initialized
    if _initialized:
        return

    root = logging.getLogger(_ROOT_LOGGER)
    root.setLevel(settings.LOG_LEVEL.upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
    root.addHandler(handler)

    # Axiom 설정 시 엔진 로그도 전송 — Ship engine logs to Axiom when configured
    if settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
        client = AxiomClient(token=settings.AXIOM_API_TOKEN)
        root.addHandler(AxiomHandler(client, settings.AXIOM_DATASET))

    _initialized = True


def get_logger(name: str) -> logging.Logger:
    """이름이 지정된 로거를 반환합니다.

    Get a named logger instance under the ``navwarn`` hierarchy.

    Args:
        name: 보통 호출 모듈의 ``__name__`` (Usually ``__name__`` of the calling module)

    Returns:
        logging.Logger: 구성된 로거 (A configured logger)
    """
    _init_logging()
    return logging.getLogger(name)
