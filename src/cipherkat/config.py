# -*- coding: utf-8 -*-
"""
RU: Конфигурация стенда: единственная опция - идентификатор бэкенда.
EN: Harness configuration. The only recognised option is the cipher backend identifier.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import Final, Mapping, Optional

logger = logging.getLogger(__name__)

# Key recognised in property mappings
CIPHER_BACKEND_KEY: Final[str] = "cipherkat.crypto.cipher.backend"

# Environment variable consulted by from_env()
CIPHER_BACKEND_ENV: Final[str] = "CIPHERKAT_CIPHER_BACKEND"


@dataclass(frozen=True)
class HarnessConfig:
    """
    Immutable harness configuration passed to every backend factory call.

    Attributes:
        cipher_backend: Registry identifier of the backend to construct
            (for example ``"openssl"``). ``None`` or blank means unset;
            the factory reports that as a ConfigurationError.

    Examples:
        >>> HarnessConfig("openssl").backend_name
        'openssl'

        >>> HarnessConfig.from_mapping({"cipherkat.crypto.cipher.backend": " pycryptodome "}).backend_name
        'pycryptodome'
    """

    cipher_backend: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate parameter types."""
        if self.cipher_backend is not None and not isinstance(self.cipher_backend, str):
            raise TypeError(
                f"cipher_backend must be str or None, got {type(self.cipher_backend).__name__}"
            )

    @property
    def backend_name(self) -> Optional[str]:
        """Stripped backend identifier, or None when unset or blank."""
        if self.cipher_backend is None:
            return None
        name = self.cipher_backend.strip()
        return name or None

    def with_backend(self, name: Optional[str]) -> "HarnessConfig":
        """Return a copy with another backend identifier."""
        return replace(self, cipher_backend=name)

    @staticmethod
    def from_mapping(props: Mapping[str, str]) -> "HarnessConfig":
        """
        Build configuration from a flat property mapping.

        Only ``cipherkat.crypto.cipher.backend`` is recognised; other keys
        are ignored with a warning.

        Args:
            props: Property mapping.

        Returns:
            HarnessConfig instance.
        """
        for key in props:
            if key != CIPHER_BACKEND_KEY:
                logger.warning(f"Ignoring unrecognised configuration key: {key}")
        return HarnessConfig(cipher_backend=props.get(CIPHER_BACKEND_KEY))

    @staticmethod
    def from_env(environ: Optional[Mapping[str, str]] = None) -> "HarnessConfig":
        """
        Build configuration from environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``.

        Returns:
            HarnessConfig instance.
        """
        env = os.environ if environ is None else environ
        return HarnessConfig(cipher_backend=env.get(CIPHER_BACKEND_ENV))


__all__ = [
    "CIPHER_BACKEND_ENV",
    "CIPHER_BACKEND_KEY",
    "HarnessConfig",
]
