"""
Одноразовые сессии шифрования в двух представлениях ввода-вывода.

- BufferCipherSession: вход и выход через ByteCursor
  (finalize_buffer, затем flip и чтение результата)
- ArrayCipherSession: вход и выход через массивы со смещением и длиной
  (finalize_array во временный массив длиной input + block_size)

Каждая сессия владеет собственным свежим бэкендом, одним направлением и
одним ключом; после run() бэкенд закрыт и сессию нельзя использовать
повторно.

Example:
    >>> session = BufferCipherSession.open(
    ...     factory, AES_CTR_NOPADDING, HarnessConfig("openssl"),
    ...     Direction.ENCRYPT, key, iv,
    ... )
    >>> session.run(plaintext).hex()
    '874d6191b620e3261bef6864990db6ce'
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from cipherkat.config import HarnessConfig
from cipherkat.core.buffers import ByteCursor, BytesLike
from cipherkat.core.exceptions import InvalidSessionStateError
from cipherkat.core.protocols import CipherBackendProtocol
from cipherkat.core.registry import BackendFactory
from cipherkat.core.transformation import CipherTransformation, Direction

logger = logging.getLogger(__name__)

__all__ = [
    "BUFFER_CAPACITY",
    "ArrayCipherSession",
    "BufferCipherSession",
    "CipherSession",
]

# Минимальная ёмкость выходного курсора
BUFFER_CAPACITY = 1000


class CipherSession(ABC):
    """
    Сессия: один бэкенд, одно направление, один вызов run().

    Attributes:
        backend: Инициализированный бэкенд
        direction: Направление сессии
    """

    representation: str = ""

    def __init__(self, backend: CipherBackendProtocol, direction: Direction) -> None:
        self._backend: Optional[CipherBackendProtocol] = backend
        self._direction = direction
        self._transformation = backend.transformation

    @classmethod
    def open(
        cls,
        factory: BackendFactory,
        transformation: CipherTransformation,
        configuration: HarnessConfig,
        direction: Direction,
        key: BytesLike,
        iv: BytesLike,
    ) -> CipherSession:
        """
        Создать свежий бэкенд и инициализировать его.

        Raises:
            ConfigurationError, InstantiationError: Бэкенд не разрешён
            InitializationError: Некорректный ключ или IV
        """
        backend = factory.create(transformation, configuration)
        try:
            backend.initialize(direction, key, iv)
        except Exception:
            backend.close()
            raise
        return cls(backend, direction)

    @property
    def direction(self) -> Direction:
        return self._direction

    @property
    def transformation(self) -> CipherTransformation:
        return self._transformation

    @property
    def is_closed(self) -> bool:
        return self._backend is None

    def run(self, data: BytesLike) -> bytes:
        """
        Преобразовать data целиком и закрыть сессию.

        Raises:
            InvalidSessionStateError: Сессия уже использована
            BufferOverflowError, TransformError: Ошибки бэкенда
        """
        backend = self._backend
        if backend is None:
            raise InvalidSessionStateError("run", "closed")

        try:
            result = self._transform(backend, bytes(data))
        finally:
            backend.close()
            self._backend = None

        logger.debug(
            f"{self.representation} {self._direction.label}: "
            f"{len(data)} -> {len(result)} bytes"
        )
        return result

    @abstractmethod
    def _transform(self, backend: CipherBackendProtocol, data: bytes) -> bytes:
        """Выполнить finalize в конкретном представлении."""


class BufferCipherSession(CipherSession):
    """Представление через курсорные буферы."""

    representation = "buffer"

    def _transform(self, backend: CipherBackendProtocol, data: bytes) -> bytes:
        source = ByteCursor.wrap(data)
        capacity = max(
            BUFFER_CAPACITY,
            self._transformation.output_size(len(data), self._direction),
        )
        sink = ByteCursor.allocate(capacity)

        backend.finalize_buffer(source, sink)
        sink.flip()
        return sink.read()


class ArrayCipherSession(CipherSession):
    """Представление через массив со смещением и длиной."""

    representation = "array"

    def _transform(self, backend: CipherBackendProtocol, data: bytes) -> bytes:
        out = bytearray(len(data) + self._transformation.block_size)
        written = backend.finalize_array(data, 0, len(data), out, 0)
        return bytes(out[:written])
