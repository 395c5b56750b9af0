"""
Дескрипторы преобразований (algorithm/mode/padding + размер блока).

Определяет:
- Direction — направление сессии (ENCRYPT / DECRYPT)
- CipherTransformation — immutable dataclass с параметрами преобразования
- Встроенные преобразования AES_CTR_NOPADDING, AES_CBC_NOPADDING,
  AES_CBC_PKCS5PADDING

Example:
    >>> from cipherkat.core.transformation import CipherTransformation
    >>> tran = CipherTransformation.from_name("AES/CTR/NoPadding")
    >>> tran.block_size
    16
    >>> tran.output_size(10, Direction.ENCRYPT)
    10
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple


# ==============================================================================
# ENUM: DIRECTION
# ==============================================================================


class Direction(str, Enum):
    """
    Направление одноразовой сессии.

    Наследует str для корректной JSON сериализации.
    """

    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"

    @property
    def label(self) -> str:
        return {
            Direction.ENCRYPT: "encryption",
            Direction.DECRYPT: "decryption",
        }[self]


# ==============================================================================
# TRANSFORMATION DESCRIPTOR
# ==============================================================================

_STREAM_MODES = frozenset({"CTR"})
_BLOCK_MODES = frozenset({"CBC"})
_PADDINGS = frozenset({"NoPadding", "PKCS5Padding"})


@dataclass(frozen=True)
class CipherTransformation:
    """
    Описание одной комбинации алгоритм/режим/дополнение.

    Attributes:
        algorithm: Идентификатор алгоритма ("AES")
        mode: Режим ("CTR", "CBC")
        padding: Дополнение ("NoPadding", "PKCS5Padding")
        block_size: Размер блока в байтах
        key_sizes: Допустимые длины ключа в байтах

    Example:
        >>> AES_CBC_PKCS5PADDING.name
        'AES/CBC/PKCS5Padding'
        >>> AES_CBC_PKCS5PADDING.output_size(16, Direction.ENCRYPT)
        32
    """

    algorithm: str
    mode: str
    padding: str
    block_size: int
    key_sizes: Tuple[int, ...] = (16, 24, 32)

    def __post_init__(self) -> None:
        """
        Валидация полей после инициализации.

        Raises:
            ValueError: Неизвестный режим/дополнение или неположительные размеры
        """
        if not self.algorithm or not self.algorithm.strip():
            raise ValueError("algorithm не может быть пустым")

        if self.mode not in _STREAM_MODES | _BLOCK_MODES:
            raise ValueError(f"Неизвестный режим: {self.mode}")

        if self.padding not in _PADDINGS:
            raise ValueError(f"Неизвестное дополнение: {self.padding}")

        if self.is_padded and self.mode in _STREAM_MODES:
            raise ValueError(f"Режим {self.mode} не использует дополнение")

        if self.block_size <= 0:
            raise ValueError(f"block_size должен быть > 0, получено {self.block_size}")

        if not self.key_sizes or any(size <= 0 for size in self.key_sizes):
            raise ValueError(f"Некорректные key_sizes: {self.key_sizes}")

    @property
    def name(self) -> str:
        return f"{self.algorithm}/{self.mode}/{self.padding}"

    @property
    def is_padded(self) -> bool:
        return self.padding != "NoPadding"

    @property
    def is_stream(self) -> bool:
        return self.mode in _STREAM_MODES

    def requires_alignment(self, direction: Direction) -> bool:
        """
        Должна ли длина входа быть кратна размеру блока.

        Блочный режим без дополнения требует выравнивания в обе стороны;
        с дополнением - только при расшифровании.
        """
        if self.is_stream:
            return False
        return not self.is_padded or direction is Direction.DECRYPT

    def output_size(self, input_length: int, direction: Direction) -> int:
        """
        Требуемая длина выходного буфера.

        Args:
            input_length: Длина входа в байтах
            direction: Направление сессии

        Returns:
            Для режимов без дополнения и для расшифрования - длина входа;
            для зашифрования с дополнением - длина, округлённая вверх до
            следующего полного блока (всегда плюс 1..block_size байт)

        Raises:
            ValueError: Отрицательная длина
        """
        if input_length < 0:
            raise ValueError(f"input_length должен быть >= 0, получено {input_length}")

        if self.is_padded and direction is Direction.ENCRYPT:
            return (input_length // self.block_size + 1) * self.block_size

        return input_length

    @classmethod
    def from_name(cls, name: str) -> CipherTransformation:
        """
        Найти встроенное преобразование по имени (без учёта регистра).

        Raises:
            ValueError: Неизвестное имя
        """
        key = name.strip().upper()
        if key not in _BY_NAME:
            raise ValueError(
                f"Unknown transformation '{name}'. "
                f"Available: {', '.join(t.name for t in TRANSFORMATIONS)}"
            )
        return _BY_NAME[key]

    def __str__(self) -> str:
        return self.name


# ==============================================================================
# BUILT-IN TRANSFORMATIONS
# ==============================================================================

AES_CTR_NOPADDING = CipherTransformation("AES", "CTR", "NoPadding", 16)
AES_CBC_NOPADDING = CipherTransformation("AES", "CBC", "NoPadding", 16)
AES_CBC_PKCS5PADDING = CipherTransformation("AES", "CBC", "PKCS5Padding", 16)

TRANSFORMATIONS: Tuple[CipherTransformation, ...] = (
    AES_CTR_NOPADDING,
    AES_CBC_NOPADDING,
    AES_CBC_PKCS5PADDING,
)

_BY_NAME: Dict[str, CipherTransformation] = {t.name.upper(): t for t in TRANSFORMATIONS}


__all__: list[str] = [
    "Direction",
    "CipherTransformation",
    "AES_CTR_NOPADDING",
    "AES_CBC_NOPADDING",
    "AES_CBC_PKCS5PADDING",
    "TRANSFORMATIONS",
]
