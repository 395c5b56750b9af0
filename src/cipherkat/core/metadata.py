"""
Метаданные бэкендов шифрования.

Определяет:
- BackendMetadata — immutable dataclass с характеристиками бэкенда
- Validation правила

Example:
    >>> from cipherkat.core.metadata import BackendMetadata
    >>> metadata = BackendMetadata(
    ...     name="openssl",
    ...     library="cryptography",
    ...     implementation_class="cipherkat.backends.openssl.OpenSSLCipherBackend",
    ...     is_native=True,
    ...     transformations=("AES/CTR/NoPadding",),
    ... )
    >>> metadata.supports(AES_CTR_NOPADDING)
    True
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from cipherkat.core.transformation import CipherTransformation


@dataclass(frozen=True)
class BackendMetadata:
    """
    Метаданные бэкенда.

    Attributes:
        name: Идентификатор бэкенда в реестре (например, "openssl")
        library: Дистрибутив Python, выполняющий преобразование (любое непустое имя)
        implementation_class: Полное имя класса бэкенда
        is_native: True если преобразование выполняет нативный код
        transformations: Имена поддерживаемых преобразований (в порядке предпочтения)
        description: Краткое описание
    """

    name: str
    library: str
    implementation_class: str
    is_native: bool
    transformations: Tuple[str, ...]
    description: str = ""

    def __post_init__(self) -> None:
        """
        Валидация метаданных после инициализации.

        Raises:
            ValueError: Некорректные значения полей
        """
        if not self.name or not self.name.strip():
            raise ValueError("name не может быть пустым")

        if not self.library or not self.library.strip():
            raise ValueError(f"library не может быть пустым (бэкенд {self.name})")

        if not self.transformations:
            raise ValueError(f"Бэкенд {self.name} не поддерживает ни одного преобразования")

        for tran_name in self.transformations:
            # Бросает ValueError для неизвестного имени
            CipherTransformation.from_name(tran_name)

    def supports(self, transformation: CipherTransformation) -> bool:
        target = transformation.name.upper()
        return any(name.upper() == target for name in self.transformations)

    @property
    def default_transformation(self) -> CipherTransformation:
        return CipherTransformation.from_name(self.transformations[0])

    def to_dict(self) -> Dict[str, Any]:
        """
        Сериализация в словарь (для JSON).

        Returns:
            Словарь с примитивными типами
        """
        return {
            "name": self.name,
            "library": self.library,
            "implementation_class": self.implementation_class,
            "is_native": self.is_native,
            "transformations": list(self.transformations),
            "description": self.description,
        }


__all__: list[str] = ["BackendMetadata"]
