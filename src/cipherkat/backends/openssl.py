"""
OpenSSL-backed cipher backend (via the ``cryptography`` package).

Supported transformations:
- AES/CTR/NoPadding - stream mode, full 16-byte counter block as IV
- AES/CBC/NoPadding - block mode, input must be block-aligned
- AES/CBC/PKCS5Padding - block mode with PKCS#7 padding (16-byte blocks)

Example:
    >>> backend = OpenSSLCipherBackend(HarnessConfig("openssl"), AES_CTR_NOPADDING)
    >>> backend.initialize(Direction.ENCRYPT, key, iv)
    >>> out = ByteCursor.allocate(64)
    >>> backend.finalize_buffer(ByteCursor.wrap(plaintext), out)
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from cipherkat.backends.base import AbstractCipherBackend
from cipherkat.config import HarnessConfig
from cipherkat.core.metadata import BackendMetadata
from cipherkat.core.transformation import CipherTransformation, Direction

logger = logging.getLogger(__name__)

__all__ = ["OpenSSLCipherBackend"]

_MODES = {
    "CTR": modes.CTR,
    "CBC": modes.CBC,
}


class OpenSSLCipherBackend(AbstractCipherBackend):
    """
    AES through OpenSSL with AES-NI acceleration where available.

    Security Properties:
        - Key: 128/192/256 bits
        - IV: 128 bits (full AES block)
        - NO TAG (none of the supported modes is AEAD)
    """

    metadata = BackendMetadata(
        name="openssl",
        library="cryptography",
        implementation_class="cipherkat.backends.openssl.OpenSSLCipherBackend",
        is_native=True,
        transformations=(
            "AES/CTR/NoPadding",
            "AES/CBC/NoPadding",
            "AES/CBC/PKCS5Padding",
        ),
        description="AES via OpenSSL (cryptography hazmat Cipher API)",
    )

    def __init__(
        self,
        configuration: HarnessConfig,
        transformation: CipherTransformation,
    ) -> None:
        super().__init__(configuration, transformation)
        self._context: Optional[Any] = None
        self._padding: Optional[Any] = None

    def _engine_init(self, direction: Direction, key: bytes, iv: bytes) -> None:
        tran = self.transformation
        cipher = Cipher(algorithms.AES(key), _MODES[tran.mode](iv))

        if direction is Direction.ENCRYPT:
            self._context = cipher.encryptor()
            if tran.is_padded:
                self._padding = padding.PKCS7(tran.block_size * 8).padder()
        else:
            self._context = cipher.decryptor()
            if tran.is_padded:
                self._padding = padding.PKCS7(tran.block_size * 8).unpadder()

    def _engine_final(self, data: bytes) -> bytes:
        assert self._context is not None

        if self._padding is not None and self.direction is Direction.ENCRYPT:
            data = self._padding.update(data) + self._padding.finalize()

        result = self._context.update(data) + self._context.finalize()

        if self._padding is not None and self.direction is Direction.DECRYPT:
            result = self._padding.update(result) + self._padding.finalize()

        return result

    def _engine_close(self) -> None:
        self._context = None
        self._padding = None
