"""
Протокольный интерфейс подключаемых бэкендов шифрования.

CipherBackendProtocol - единственный контракт, который стенд требует
от внешнего мира. Любая реализация (нативная через OpenSSL или
программная) взаимозаменяема, если выполняет этот контракт.

Модуль использует typing.Protocol: structural subtyping без явного
наследования. Протоколы помечены @runtime_checkable для isinstance().

Example:
    >>> from cipherkat.backends.openssl import OpenSSLCipherBackend
    >>> backend = OpenSSLCipherBackend(HarnessConfig("openssl"), AES_CTR_NOPADDING)
    >>> isinstance(backend, CipherBackendProtocol)
    True
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Union, runtime_checkable

if TYPE_CHECKING:
    from cipherkat.config import HarnessConfig
    from cipherkat.core.buffers import ByteCursor, BytesLike
    from cipherkat.core.transformation import CipherTransformation, Direction


# ==============================================================================
# CIPHER BACKEND PROTOCOL
# ==============================================================================


@runtime_checkable
class CipherBackendProtocol(Protocol):
    """
    Протокол одноразового бэкенда симметричного шифрования.

    Жизненный цикл экземпляра:
        CREATED -> INITIALIZED(direction) -> FINALIZED

    FINALIZED терминальное: один вызов finalize_buffer() или
    finalize_array() потребляет весь вход за один шаг. Потокового
    update() нет.

    Validation Rules:
        - initialize() ровно один раз до любой операции
        - iv: длина == transformation.block_size
        - key: длина из transformation.key_sizes
        - выход: не меньше transformation.output_size(len(input), direction)

    Example:
        >>> backend = factory.create(AES_CTR_NOPADDING, config)
        >>> backend.initialize(Direction.ENCRYPT, key, iv)
        >>> n = backend.finalize_array(plaintext, 0, len(plaintext), out, 0)
    """

    @property
    def transformation(self) -> CipherTransformation:
        """Преобразование, для которого создан бэкенд."""
        ...

    @property
    def configuration(self) -> HarnessConfig:
        """Неизменяемая конфигурация, переданная фабрике."""
        ...

    def initialize(self, direction: Direction, key: BytesLike, iv: BytesLike) -> None:
        """
        Привязать бэкенд к направлению и ключевому материалу.

        Args:
            direction: Direction.ENCRYPT или Direction.DECRYPT
            key: Ключ (длина из transformation.key_sizes)
            iv: Вектор инициализации (длина == block_size)

        Raises:
            InitializationError: Недопустимая длина ключа или IV
            InvalidSessionStateError: Повторный вызов
        """
        ...

    def finalize_buffer(self, input: ByteCursor, output: ByteCursor) -> int:
        """
        Преобразовать всё от input.position до input.limit.

        Результат пишется с output.position; оба курсора сдвигаются
        на обработанный/записанный объём.

        Returns:
            Число записанных байт

        Raises:
            BufferOverflowError: output.remaining() меньше требуемого
            InvalidSessionStateError: Бэкенд не инициализирован или уже завершён
            TransformError: Ошибка выравнивания или дополнения
        """
        ...

    def finalize_array(
        self,
        input: BytesLike,
        input_offset: int,
        input_length: int,
        output: Union[bytearray, memoryview],
        output_offset: int,
    ) -> int:
        """
        То же, что finalize_buffer(), над срезами байтовых последовательностей.

        Returns:
            Число записанных в output байт (начиная с output_offset)

        Raises:
            BufferOverflowError: len(output) - output_offset меньше требуемого
            InvalidSessionStateError: Бэкенд не инициализирован или уже завершён
            TransformError: Ошибка выравнивания или дополнения
        """
        ...

    def close(self) -> None:
        """Освободить ресурсы библиотеки. Повторный вызов безопасен."""
        ...


__all__: list[str] = ["CipherBackendProtocol"]
