"""
Пакет cipherkat
===============

Known-answer валидация взаимозаменяемых реализаций симметричных шифров.

Этот пакет предоставляет:
    - Неизменяемые дескрипторы преобразований (AES/CTR/NoPadding и т.д.)
    - Корпус эталонных тестовых векторов (NIST SP 800-38A)
    - Реестр бэкендов с фабриками (cryptography, pycryptodome)
    - Одноразовые сессии шифрования в двух представлениях:
      курсорный буфер и массив со смещением/длиной
    - DualModeValidator, сверяющий оба представления побайтно

Пример базового использования:
    >>> from cipherkat import HarnessConfig, DualModeValidator
    >>>
    >>> config = HarnessConfig(cipher_backend="openssl")
    >>> report = DualModeValidator(config).run()
    >>> report.is_success
    True

Управление логированием:
    >>> import os
    >>> os.environ["CIPHERKAT_LOG_LEVEL"] = "DEBUG"
    >>> from cipherkat import get_logger
    >>> logger = get_logger(__name__)

Версия: 0.1.0
Лицензия: MIT
Python: 3.11+
"""

import logging
import logging.handlers
import os
import sys

# =============================================================================
# МЕТАДАННЫЕ ВЕРСИИ
# =============================================================================

__version__ = "0.1.0"
__author__ = "cipherkat Development Team"
__description__ = "Known-answer validation harness for pluggable symmetric cipher backends"
__license__ = "MIT"
__python_requires__ = ">=3.11"

VERSION_MAJOR = 0
VERSION_MINOR = 1
VERSION_PATCH = 0

# =============================================================================
# ПРОВЕРКА ВЕРСИИ PYTHON
# =============================================================================

if sys.version_info < (3, 11):
    raise RuntimeError(
        f"cipherkat требует Python 3.11 или выше. "
        f"Текущая версия: {sys.version_info.major}."
        f"{sys.version_info.minor}.{sys.version_info.micro}"
    )

# =============================================================================
# КОНФИГУРАЦИЯ ЛОГИРОВАНИЯ
# =============================================================================

LOGGER_NAMESPACE = "cipherkat"
CONSOLE_HANDLER_NAME = "cipherkat.console"
FILE_HANDLER_NAME = "cipherkat.file"


def _setup_logging() -> None:
    """
    Инициализировать общепакетную конфигурацию логирования.

    Настраивает логгер пакета с:
    - Консольным обработчиком (stderr) для WARNING и выше
    - Ротирующим файловым обработчиком, если задана переменная
      окружения CIPHERKAT_LOG_FILE

    Уровень логирования задаётся переменной окружения
    CIPHERKAT_LOG_LEVEL (DEBUG, INFO, WARNING, ERROR, CRITICAL).

    Функция идемпотентна - повторные вызовы не имеют эффекта.
    """
    log_level_str = os.environ.get("CIPHERKAT_LOG_LEVEL", "INFO").upper()

    log_level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    log_level = log_level_map.get(log_level_str, logging.INFO)

    root_logger = logging.getLogger(LOGGER_NAMESPACE)
    # Чужие обработчики (например, pytest caplog) не считаются настройкой
    own_handlers = {CONSOLE_HANDLER_NAME, FILE_HANDLER_NAME}
    if any(h.get_name() in own_handlers for h in root_logger.handlers):
        return

    root_logger.setLevel(log_level)

    formatter = logging.Formatter(
        fmt=("[%(asctime)s] %(levelname)-8s " "[%(name)s.%(funcName)s:%(lineno)d] %(message)s"),
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Консольный обработчик (stderr) - WARNING и выше
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.set_name(CONSOLE_HANDLER_NAME)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Файловый обработчик (ротирующий) - только по запросу
    log_file = os.environ.get("CIPHERKAT_LOG_FILE")
    if log_file:
        try:
            file_handler = logging.handlers.RotatingFileHandler(
                filename=log_file,
                maxBytes=10 * 1024 * 1024,  # 10 МБ
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.set_name(FILE_HANDLER_NAME)
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            root_logger.warning(
                f"Не удалось инициализировать файловое логирование: {e}. "
                f"Используется только консоль."
            )

    root_logger.propagate = False


def get_logger(module_name: str) -> logging.Logger:
    """
    Получить логгер в пространстве имён пакета.

    Логгеры именуются как 'cipherkat.<module_name>' и наследуют
    обработчики логгера пакета.

    Args:
        module_name: Имя модуля, обычно `__name__`

    Returns:
        Экземпляр logging.Logger

    Example:
        >>> logger = get_logger("my_backend")
        >>> logger.name
        'cipherkat.my_backend'
    """
    if module_name == LOGGER_NAMESPACE or module_name.startswith(LOGGER_NAMESPACE + "."):
        return logging.getLogger(module_name)

    if module_name == "__main__":
        return logging.getLogger(f"{LOGGER_NAMESPACE}.main")

    clean_name = module_name.lstrip(".")
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{clean_name}")


_setup_logging()

# =============================================================================
# ПУБЛИЧНЫЙ API
# =============================================================================

from cipherkat.config import HarnessConfig  # noqa: E402
from cipherkat.core.buffers import ByteCursor  # noqa: E402
from cipherkat.core.exceptions import (  # noqa: E402
    AssertionMismatchError,
    BufferOverflowError,
    ConfigurationError,
    CorpusNotFoundError,
    HarnessError,
    InitializationError,
    InstantiationError,
    InvalidSessionStateError,
    VectorDecodeError,
)
from cipherkat.core.registry import BackendFactory, BackendRegistry  # noqa: E402
from cipherkat.core.transformation import CipherTransformation, Direction  # noqa: E402
from cipherkat.corpus import TestVector, VectorCorpus  # noqa: E402
from cipherkat.validator import DualModeValidator, FailurePolicy, ValidationReport  # noqa: E402

__all__ = [
    "__version__",
    "get_logger",
    # Configuration
    "HarnessConfig",
    # Core
    "ByteCursor",
    "CipherTransformation",
    "Direction",
    "BackendFactory",
    "BackendRegistry",
    # Corpus
    "TestVector",
    "VectorCorpus",
    # Validation
    "DualModeValidator",
    "FailurePolicy",
    "ValidationReport",
    # Errors
    "HarnessError",
    "ConfigurationError",
    "InstantiationError",
    "CorpusNotFoundError",
    "VectorDecodeError",
    "InitializationError",
    "InvalidSessionStateError",
    "BufferOverflowError",
    "AssertionMismatchError",
]
