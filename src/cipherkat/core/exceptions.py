"""
Централизованные исключения валидационного стенда.

Иерархия типизированных исключений для фабрики бэкендов, корпуса
векторов, сессий шифрования и DualModeValidator. Разделяет ошибки
подготовки (до запуска первого вектора) и ошибки конкретного вектора.

Example:
    >>> from cipherkat.core.exceptions import HarnessError
    >>> try:
    ...     validator.run()
    ... except HarnessError as e:
    ...     logger.error(f"Validation failed: {e}")
    ...     print(f"Transformation: {e.transformation}")

Иерархия:
    HarnessError (базовое)
    ├── SetupError
    │   ├── ConfigurationError
    │   ├── InstantiationError
    │   ├── CorpusNotFoundError
    │   ├── VectorDecodeError
    │   └── RegistryError
    │       ├── DuplicateRegistrationError
    │       └── ProtocolMismatchError
    └── VectorError
        ├── InitializationError
        ├── InvalidSessionStateError
        ├── BufferOverflowError
        ├── TransformError
        │   ├── IllegalBlockSizeError
        │   └── BadPaddingError
        └── AssertionMismatchError

Note:
    Ключи, IV и данные векторов попадают в сообщения только в
    AssertionMismatchError (hex-дамп ожидаемого и фактического
    результата). Векторы публичные, это диагностика, а не утечка.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

__all__: list[str] = [
    # Base
    "HarnessError",
    # Setup errors
    "SetupError",
    "ConfigurationError",
    "InstantiationError",
    "CorpusNotFoundError",
    "VectorDecodeError",
    "RegistryError",
    "DuplicateRegistrationError",
    "ProtocolMismatchError",
    # Per-vector errors
    "VectorError",
    "InitializationError",
    "InvalidSessionStateError",
    "BufferOverflowError",
    "TransformError",
    "IllegalBlockSizeError",
    "BadPaddingError",
    "AssertionMismatchError",
]


# ==============================================================================
# BASE EXCEPTION
# ==============================================================================


class HarnessError(Exception):
    """
    Базовое исключение для всех ошибок стенда.

    Attributes:
        message: Человекочитаемое сообщение об ошибке
        transformation: Имя преобразования (например, "AES/CTR/NoPadding")
        context: Дополнительный контекст для отладки

    Example:
        >>> str(HarnessError("Run failed", transformation="AES/CTR/NoPadding"))
        'HarnessError: Run failed [transformation=AES/CTR/NoPadding]'
    """

    def __init__(
        self,
        message: str,
        *,
        transformation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.transformation = transformation
        self.context = context or {}

    def __str__(self) -> str:
        """
        Строковое представление исключения.

        Returns:
            Форматированное сообщение с контекстом

        Example:
            >>> str(error)
            'VectorDecodeError: Malformed hex [transformation=AES/CBC/NoPadding] (field=key)'
        """
        parts = [self.__class__.__name__, ": ", self.message]

        if self.transformation:
            parts.append(f" [transformation={self.transformation}]")

        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f" ({ctx_str})")

        return "".join(parts)

    def __repr__(self) -> str:
        """Представление для отладки."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"transformation={self.transformation!r}, "
            f"context={self.context!r})"
        )


# ==============================================================================
# SETUP ERRORS
# ==============================================================================


class SetupError(HarnessError):
    """
    Ошибки подготовки запуска.

    Возникают до обработки первого вектора и прерывают весь запуск:
    частичных результатов не бывает.
    """

    pass


class ConfigurationError(SetupError):
    """
    Идентификатор бэкенда не задан.

    Example:
        >>> factory.create(AES_CTR_NOPADDING, HarnessConfig())
        ConfigurationError: Cipher backend identifier is not configured
    """

    def __init__(self, message: str, *, key: Optional[str] = None) -> None:
        context: Dict[str, Any] = {}
        if key:
            context["key"] = key
        super().__init__(message, context=context)
        self.key = key


class InstantiationError(SetupError):
    """
    Идентификатор бэкенда не удаётся разрешить или сконструировать.

    Raises когда:
    - Идентификатор не зарегистрирован в реестре
    - Фабрика не принимает (configuration, transformation)
    - Фабрика выбросила исключение
    - Созданный объект не реализует CipherBackendProtocol
    - Бэкенд не поддерживает запрошенное преобразование

    Attributes:
        backend: Запрошенный идентификатор
        available: Список зарегистрированных бэкендов
    """

    def __init__(
        self,
        backend: str,
        reason: str,
        *,
        transformation: Optional[str] = None,
        available: Optional[List[str]] = None,
    ) -> None:
        message = f"Cannot instantiate cipher backend '{backend}': {reason}"
        if available:
            message += f". Available: {', '.join(available)}"

        super().__init__(
            message,
            transformation=transformation,
            context={"backend": backend},
        )
        self.backend = backend
        self.reason = reason
        self.available = available or []


class CorpusNotFoundError(SetupError):
    """Для преобразования нет тестовых векторов."""

    def __init__(self, transformation: str) -> None:
        super().__init__(
            "No known-answer vectors for transformation",
            transformation=transformation,
        )


class VectorDecodeError(SetupError):
    """
    Некорректная запись корпуса (hex, чётность длины, шаг 5).

    Attributes:
        field: Имя поля ("key", "iv", "plaintext", "ciphertext", "stride")
        vector_index: Номер вектора в корпусе (с нуля)
    """

    def __init__(
        self,
        message: str,
        *,
        transformation: Optional[str] = None,
        field: str,
        vector_index: int,
    ) -> None:
        super().__init__(
            message,
            transformation=transformation,
            context={"field": field, "vector_index": vector_index},
        )
        self.field = field
        self.vector_index = vector_index


class RegistryError(SetupError):
    """Базовая ошибка реестра бэкендов."""

    pass


class DuplicateRegistrationError(RegistryError):
    """Попытка повторной регистрации идентификатора."""

    def __init__(self, backend: str) -> None:
        super().__init__(
            f"Cipher backend '{backend}' is already registered",
            context={"backend": backend},
        )
        self.backend = backend


class ProtocolMismatchError(RegistryError):
    """
    Экземпляр бэкенда не реализует CipherBackendProtocol.

    Example:
        >>> registry.register_backend("broken", BrokenBackend, metadata)
        ProtocolMismatchError: BrokenBackend does not implement CipherBackendProtocol
    """

    pass


# ==============================================================================
# PER-VECTOR ERRORS
# ==============================================================================


class VectorError(HarnessError):
    """
    Ошибка, привязанная к конкретному вектору.

    Бэкенд не знает номер вектора, поэтому валидатор дописывает его
    через annotate() перед повторным выбросом.
    """

    def annotate(
        self,
        transformation: str,
        vector_index: int,
        label: Optional[str] = None,
    ) -> VectorError:
        """
        Привязать ошибку к преобразованию и вектору.

        Args:
            transformation: Имя преобразования
            vector_index: Номер вектора (с нуля)
            label: Метка вектора из корпуса

        Returns:
            Этот же экземпляр (для `raise err.annotate(...)`)
        """
        self.transformation = transformation
        self.context["vector_index"] = vector_index
        if label is not None:
            self.context["label"] = label
        return self

    @property
    def vector_index(self) -> Optional[int]:
        return self.context.get("vector_index")


class InitializationError(VectorError):
    """Длина ключа или IV недопустима для преобразования."""

    pass


class InvalidSessionStateError(VectorError):
    """
    Операция вызвана вне последовательности состояний.

    Допустимый порядок: CREATED -> INITIALIZED -> FINALIZED.
    Указывает на ошибку в самом стенде.
    """

    def __init__(self, operation: str, state: str) -> None:
        super().__init__(
            f"Cannot {operation} a session in state {state}",
            context={"operation": operation, "state": state},
        )
        self.operation = operation
        self.state = state


class BufferOverflowError(VectorError):
    """
    Выходной буфер меньше требуемой длины результата.

    Attributes:
        required: Требуемое число байт
        remaining: Доступное число байт
    """

    def __init__(self, required: int, remaining: int) -> None:
        super().__init__(
            f"Output buffer too small: need {required} bytes, {remaining} remaining",
            context={"required": required, "remaining": remaining},
        )
        self.required = required
        self.remaining = remaining


class TransformError(VectorError):
    """Бэкенд не смог выполнить преобразование."""

    pass


class IllegalBlockSizeError(TransformError):
    """Длина входа не кратна размеру блока."""

    pass


class BadPaddingError(TransformError):
    """Некорректное дополнение при расшифровании."""

    pass


class AssertionMismatchError(VectorError, AssertionError):
    """
    Результат не совпал с ожидаемыми байтами.

    Attributes:
        leg: Проверяемый этап (например, "buffer encryption")
        expected: Ожидаемые байты
        actual: Фактические байты

    Example:
        >>> raise AssertionMismatchError("buffer encryption", b"\\x01", b"\\x02")
        AssertionMismatchError: buffer encryption mismatch - expected 01 got 02
    """

    def __init__(self, leg: str, expected: bytes, actual: bytes) -> None:
        super().__init__(
            f"{leg} mismatch - expected {expected.hex().upper()} got {actual.hex().upper()}",
            context={"leg": leg},
        )
        self.leg = leg
        self.expected = expected
        self.actual = actual

    @property
    def expected_hex(self) -> str:
        return self.expected.hex().upper()

    @property
    def actual_hex(self) -> str:
        return self.actual.hex().upper()
