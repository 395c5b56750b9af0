"""
Реестр бэкендов шифрования и фабрика экземпляров.

Thread-safe Singleton реестр, сопоставляющий идентификатор бэкенда
фабричной функции `(configuration, transformation) -> backend`.
Заменяет рефлексивную загрузку классов по имени: разрешение
идентификатора происходит по реестру, ошибка - типизированная.

Обеспечивает:
- Регистрацию бэкендов с валидацией Protocol
- BackendFactory: новый экземпляр на каждый вызов, без кэширования
- Query API (list_backends, get_metadata, is_registered)

Example:
    >>> from cipherkat.core.registry import BackendFactory
    >>> factory = BackendFactory()
    >>> backend = factory.create(AES_CTR_NOPADDING, HarnessConfig("openssl"))
    >>> backend.initialize(Direction.ENCRYPT, key, iv)

Thread Safety:
    Все публичные методы реестра thread-safe благодаря RLock.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from cipherkat.config import HarnessConfig
from cipherkat.core.exceptions import (
    ConfigurationError,
    DuplicateRegistrationError,
    InstantiationError,
    ProtocolMismatchError,
)
from cipherkat.core.metadata import BackendMetadata
from cipherkat.core.protocols import CipherBackendProtocol
from cipherkat.core.transformation import CipherTransformation

logger = logging.getLogger(__name__)

BackendFactoryFn = Callable[[HarnessConfig, CipherTransformation], Any]


# ==============================================================================
# DATACLASSES
# ==============================================================================


@dataclass(frozen=True)
class BackendEntry:
    """
    Запись в реестре бэкендов.

    Attributes:
        name: Идентификатор бэкенда
        factory: Фабрика `(configuration, transformation) -> backend`
        metadata: Метаданные бэкенда
    """

    name: str
    factory: BackendFactoryFn
    metadata: BackendMetadata


# ==============================================================================
# MAIN CLASS: BACKEND REGISTRY
# ==============================================================================


class BackendRegistry:
    """
    Thread-safe реестр бэкендов.

    Singleton: используйте get_instance(). В тестах reset_instance()
    сбрасывает реестр.

    Example:
        >>> registry = BackendRegistry.get_instance()
        >>> registry.register_backend(
        ...     "openssl",
        ...     OpenSSLCipherBackend,
        ...     OpenSSLCipherBackend.metadata,
        ... )
        >>> registry.list_backends()
        ['openssl']
    """

    _instance: Optional[BackendRegistry] = None
    _lock: threading.RLock = threading.RLock()

    def __init__(self) -> None:
        """
        Приватный конструктор (используйте get_instance()).

        Raises:
            RuntimeError: Если попытка создать второй экземпляр
        """
        if BackendRegistry._instance is not None:
            raise RuntimeError(
                "BackendRegistry is a singleton. Use BackendRegistry.get_instance()"
            )

        self._registry: Dict[str, BackendEntry] = {}

        logger.debug("BackendRegistry initialized")

    @classmethod
    def get_instance(cls) -> BackendRegistry:
        """
        Получить singleton instance реестра.

        Thread Safety:
            Thread-safe double-checked locking
        """
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """
        Сбросить singleton (только для тестов).

        WARNING:
            Используйте только в unit-тестах!
        """
        with cls._lock:
            cls._instance = None
            logger.debug("BackendRegistry instance reset")

    def register_backend(
        self,
        name: str,
        factory: BackendFactoryFn,
        metadata: BackendMetadata,
        *,
        validate: bool = True,
    ) -> None:
        """
        Зарегистрировать бэкенд.

        Args:
            name: Уникальный идентификатор (например, "openssl")
            factory: Фабрика `(configuration, transformation) -> backend`
            metadata: Метаданные бэкенда
            validate: Проверить соответствие Protocol на пробном экземпляре

        Raises:
            ValueError: Пустое имя
            TypeError: factory не callable или метаданные некорректны
            DuplicateRegistrationError: Имя уже зарегистрировано
            ProtocolMismatchError: Экземпляр не реализует CipherBackendProtocol
        """
        with self._lock:
            if not name or not name.strip():
                raise ValueError("Имя бэкенда не может быть пустым")

            if name in self._registry:
                raise DuplicateRegistrationError(name)

            if not callable(factory):
                raise TypeError(
                    f"factory должна быть callable, получено {type(factory).__name__}"
                )

            if not isinstance(metadata, BackendMetadata):
                raise TypeError(
                    f"metadata должна быть BackendMetadata, "
                    f"получено {type(metadata).__name__}"
                )

            if validate:
                self._validate_protocol(name, factory, metadata)

            self._registry[name] = BackendEntry(name=name, factory=factory, metadata=metadata)

            logger.info(
                f"Registered cipher backend: {name} "
                f"(library={metadata.library}, native={metadata.is_native})"
            )

    def _validate_protocol(
        self,
        name: str,
        factory: BackendFactoryFn,
        metadata: BackendMetadata,
    ) -> None:
        """
        Построить пробный экземпляр и проверить isinstance с Protocol.

        Raises:
            ProtocolMismatchError: Экземпляр не реализует Protocol
        """
        try:
            instance = factory(HarnessConfig(name), metadata.default_transformation)
        except Exception as e:
            raise ProtocolMismatchError(
                f"Не удалось построить пробный экземпляр {name}: {e}",
                context={"backend": name},
            ) from e

        try:
            if not isinstance(instance, CipherBackendProtocol):
                raise ProtocolMismatchError(
                    f"{type(instance).__name__} does not implement CipherBackendProtocol",
                    context={"backend": name},
                )
        finally:
            close = getattr(instance, "close", None)
            if callable(close):
                close()

        logger.debug(f"Protocol validation passed: {name}")

    def get(self, name: str) -> BackendEntry:
        """
        Получить запись по идентификатору.

        Raises:
            KeyError: Бэкенд не зарегистрирован
        """
        with self._lock:
            if name not in self._registry:
                raise KeyError(f"Бэкенд '{name}' не найден в реестре")
            return self._registry[name]

    def get_metadata(self, name: str) -> BackendMetadata:
        return self.get(name).metadata

    def list_backends(self) -> List[str]:
        """Идентификаторы зарегистрированных бэкендов (sorted)."""
        with self._lock:
            return sorted(self._registry.keys())

    def is_registered(self, name: str) -> bool:
        with self._lock:
            return name in self._registry

    def unregister(self, name: str) -> None:
        """
        Удалить бэкенд из реестра.

        Raises:
            KeyError: Бэкенд не найден
        """
        with self._lock:
            if name not in self._registry:
                raise KeyError(f"Бэкенд '{name}' не найден в реестре")

            del self._registry[name]
            logger.warning(f"Unregistered cipher backend: {name}")


# ==============================================================================
# REGISTRATION FUNCTION
# ==============================================================================


def register_builtin_backends(registry: Optional[BackendRegistry] = None) -> None:
    """
    Зарегистрировать встроенные бэкенды (openssl, pycryptodome).

    Идемпотентна: уже зарегистрированные имена пропускаются.

    Note:
        Импорты ленивые, чтобы core не зависел от backends при загрузке.
    """
    from cipherkat.backends.openssl import OpenSSLCipherBackend
    from cipherkat.backends.pycryptodome import PyCryptodomeCipherBackend

    reg = registry or BackendRegistry.get_instance()

    for backend_cls in (OpenSSLCipherBackend, PyCryptodomeCipherBackend):
        metadata = backend_cls.metadata
        if reg.is_registered(metadata.name):
            continue
        reg.register_backend(metadata.name, backend_cls, metadata)


# ==============================================================================
# BACKEND FACTORY
# ==============================================================================


class BackendFactory:
    """
    Создание свежих экземпляров бэкендов по конфигурации.

    Каждый вызов create() строит новый экземпляр: ни кэширования,
    ни разделения между сессиями.

    Example:
        >>> factory = BackendFactory()
        >>> a = factory.create(AES_CTR_NOPADDING, HarnessConfig("openssl"))
        >>> b = factory.create(AES_CTR_NOPADDING, HarnessConfig("openssl"))
        >>> a is b
        False
    """

    def __init__(self, registry: Optional[BackendRegistry] = None) -> None:
        if registry is None:
            registry = BackendRegistry.get_instance()
            register_builtin_backends(registry)
        self._registry = registry

    @property
    def registry(self) -> BackendRegistry:
        return self._registry

    def resolve(
        self,
        transformation: CipherTransformation,
        configuration: HarnessConfig,
    ) -> BackendEntry:
        """
        Разрешить идентификатор без создания экземпляра.

        Raises:
            ConfigurationError: Идентификатор не задан
            InstantiationError: Идентификатор не зарегистрирован или
                бэкенд не поддерживает преобразование
        """
        name = configuration.backend_name
        if name is None:
            raise ConfigurationError(
                "Cipher backend identifier is not configured",
                key="cipherkat.crypto.cipher.backend",
            )

        if not self._registry.is_registered(name):
            raise InstantiationError(
                name,
                "identifier is not registered",
                transformation=transformation.name,
                available=self._registry.list_backends(),
            )

        entry = self._registry.get(name)
        if not entry.metadata.supports(transformation):
            raise InstantiationError(
                name,
                f"transformation {transformation.name} is not supported",
                transformation=transformation.name,
            )

        return entry

    def create(
        self,
        transformation: CipherTransformation,
        configuration: HarnessConfig,
    ) -> CipherBackendProtocol:
        """
        Создать новый экземпляр бэкенда.

        Args:
            transformation: Дескриптор преобразования
            configuration: Неизменяемая конфигурация стенда

        Returns:
            Новый экземпляр в состоянии CREATED

        Raises:
            ConfigurationError: Идентификатор не задан
            InstantiationError: Разрешение или конструирование не удалось
        """
        entry = self.resolve(transformation, configuration)

        try:
            instance = entry.factory(configuration, transformation)
        except TypeError as e:
            raise InstantiationError(
                entry.name,
                f"factory does not accept (configuration, transformation): {e}",
                transformation=transformation.name,
            ) from e
        except Exception as e:
            logger.error(f"Failed to create backend {entry.name}: {e}", exc_info=True)
            raise InstantiationError(
                entry.name,
                f"factory raised {type(e).__name__}: {e}",
                transformation=transformation.name,
            ) from e

        if not isinstance(instance, CipherBackendProtocol):
            raise InstantiationError(
                entry.name,
                f"{type(instance).__name__} does not implement CipherBackendProtocol",
                transformation=transformation.name,
            )

        logger.debug(f"Created backend {entry.name} for {transformation.name}")
        return instance


# ==============================================================================
# MODULE EXPORTS
# ==============================================================================

__all__: list[str] = [
    "BackendEntry",
    "BackendFactory",
    "BackendFactoryFn",
    "BackendRegistry",
    "register_builtin_backends",
]
