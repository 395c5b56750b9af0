"""
Модульные тесты для cipherkat/__init__.py
Тестирует метаданные версии, логирование и публичный API.
"""

from __future__ import annotations

import logging
import logging.handlers
import re
from pathlib import Path
from typing import Generator, List

import pytest

import cipherkat


OWN_HANDLERS = {cipherkat.CONSOLE_HANDLER_NAME, cipherkat.FILE_HANDLER_NAME}


def own_handlers(pkg_logger: logging.Logger) -> List[logging.Handler]:
    """Обработчики, установленные самим пакетом (без обработчиков pytest)."""
    return [h for h in pkg_logger.handlers if h.get_name() in OWN_HANDLERS]


@pytest.fixture
def bare_package_logger() -> Generator[logging.Logger, None, None]:
    """Снять обработчики пакета на время теста и вернуть их после."""
    pkg_logger = logging.getLogger(cipherkat.LOGGER_NAMESPACE)
    saved = own_handlers(pkg_logger)
    level = pkg_logger.level
    for handler in saved:
        pkg_logger.removeHandler(handler)

    yield pkg_logger

    for handler in own_handlers(pkg_logger):
        pkg_logger.removeHandler(handler)
        handler.close()
    for handler in saved:
        pkg_logger.addHandler(handler)
    pkg_logger.setLevel(level)


class TestVersionMetadata:
    """Тестирование метаданных версии."""

    def test_version_format(self) -> None:
        assert re.match(r"^\d+\.\d+\.\d+$", cipherkat.__version__)

    def test_version_components(self) -> None:
        expected = (
            f"{cipherkat.VERSION_MAJOR}.{cipherkat.VERSION_MINOR}.{cipherkat.VERSION_PATCH}"
        )
        assert cipherkat.__version__ == expected

    def test_metadata_attributes(self) -> None:
        for attr in ("__author__", "__description__", "__license__", "__python_requires__"):
            value = getattr(cipherkat, attr)
            assert isinstance(value, str) and value, f"{attr} должен быть непустой строкой"


class TestLogging:
    """Тестирование конфигурации логирования."""

    def test_package_logger_configured(self) -> None:
        pkg_logger = logging.getLogger("cipherkat")
        assert pkg_logger.handlers
        assert pkg_logger.propagate is False

    def test_console_handler_warning_level(self) -> None:
        pkg_logger = logging.getLogger("cipherkat")
        console = [h for h in pkg_logger.handlers if h.get_name() == cipherkat.CONSOLE_HANDLER_NAME]
        assert console
        assert console[0].level == logging.WARNING

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("backends.custom", "cipherkat.backends.custom"),
            ("cipherkat.validator", "cipherkat.validator"),
            ("cipherkat", "cipherkat"),
            ("__main__", "cipherkat.main"),
            (".relative", "cipherkat.relative"),
        ],
    )
    def test_get_logger_names(self, name: str, expected: str) -> None:
        assert cipherkat.get_logger(name).name == expected

    def test_setup_is_idempotent(self) -> None:
        pkg_logger = logging.getLogger("cipherkat")
        before = list(pkg_logger.handlers)
        cipherkat._setup_logging()
        assert pkg_logger.handlers == before

    def test_level_from_environment(
        self, bare_package_logger: logging.Logger, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CIPHERKAT_LOG_LEVEL", "debug")
        monkeypatch.delenv("CIPHERKAT_LOG_FILE", raising=False)

        cipherkat._setup_logging()

        assert bare_package_logger.level == logging.DEBUG
        assert [h.get_name() for h in own_handlers(bare_package_logger)] == [
            cipherkat.CONSOLE_HANDLER_NAME
        ]

    def test_unknown_level_defaults_to_info(
        self, bare_package_logger: logging.Logger, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CIPHERKAT_LOG_LEVEL", "LOUD")
        monkeypatch.delenv("CIPHERKAT_LOG_FILE", raising=False)

        cipherkat._setup_logging()

        assert bare_package_logger.level == logging.INFO

    def test_foreign_handlers_do_not_block_setup(
        self, bare_package_logger: logging.Logger, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Посторонний обработчик на логгере пакета не отменяет настройку."""
        monkeypatch.setenv("CIPHERKAT_LOG_LEVEL", "DEBUG")
        monkeypatch.delenv("CIPHERKAT_LOG_FILE", raising=False)
        foreign = logging.NullHandler()
        bare_package_logger.addHandler(foreign)
        try:
            cipherkat._setup_logging()

            assert bare_package_logger.level == logging.DEBUG
            assert len(own_handlers(bare_package_logger)) == 1
            assert foreign in bare_package_logger.handlers
        finally:
            bare_package_logger.removeHandler(foreign)

    def test_rotating_file_handler(
        self,
        bare_package_logger: logging.Logger,
        monkeypatch: pytest.MonkeyPatch,
        tmp_path: Path,
    ) -> None:
        log_file = tmp_path / "cipherkat.log"
        monkeypatch.setenv("CIPHERKAT_LOG_FILE", str(log_file))

        cipherkat._setup_logging()

        file_handlers = [
            h
            for h in bare_package_logger.handlers
            if isinstance(h, logging.handlers.RotatingFileHandler)
        ]
        assert len(file_handlers) == 1
        assert file_handlers[0].maxBytes == 10 * 1024 * 1024
        assert file_handlers[0].backupCount == 5

        bare_package_logger.warning("written to file")
        file_handlers[0].flush()
        assert "written to file" in log_file.read_text(encoding="utf-8")


class TestPublicAPI:
    """Тестирование экспортов публичного API."""

    def test_all_exports_exist(self) -> None:
        for name in cipherkat.__all__:
            assert hasattr(cipherkat, name), f"Имя '{name}' из __all__ не существует в модуле"

    def test_core_exports(self) -> None:
        for name in (
            "HarnessConfig",
            "ByteCursor",
            "CipherTransformation",
            "Direction",
            "BackendFactory",
            "BackendRegistry",
            "TestVector",
            "VectorCorpus",
            "DualModeValidator",
            "FailurePolicy",
            "ValidationReport",
        ):
            assert name in cipherkat.__all__

    def test_quickstart(self) -> None:
        """Пример из docstring пакета работает."""
        cipherkat.BackendRegistry.reset_instance()
        try:
            report = cipherkat.DualModeValidator(cipherkat.HarnessConfig("openssl")).run()
            assert report.is_success
        finally:
            cipherkat.BackendRegistry.reset_instance()
