"""
Cipher backend on top of ``pycryptodome`` (``Crypto`` package).

Independent AES implementation from OpenSSL, used to prove that the
harness treats backends as interchangeable.

Supported transformations:
- AES/CTR/NoPadding - MODE_CTR with an empty nonce and the IV as the
  full 128-bit initial counter value
- AES/CBC/NoPadding - MODE_CBC
- AES/CBC/PKCS5Padding - MODE_CBC with ``Crypto.Util.Padding`` (pkcs7)
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from Crypto.Cipher import AES
from Crypto.Util.Padding import pad, unpad

from cipherkat.backends.base import AbstractCipherBackend
from cipherkat.config import HarnessConfig
from cipherkat.core.metadata import BackendMetadata
from cipherkat.core.transformation import CipherTransformation, Direction

logger = logging.getLogger(__name__)

__all__ = ["PyCryptodomeCipherBackend"]


class PyCryptodomeCipherBackend(AbstractCipherBackend):
    """
    AES through pycryptodome.

    Example:
        >>> backend = PyCryptodomeCipherBackend(HarnessConfig("pycryptodome"), AES_CBC_NOPADDING)
        >>> backend.initialize(Direction.DECRYPT, key, iv)
        >>> out = bytearray(len(ciphertext))
        >>> backend.finalize_array(ciphertext, 0, len(ciphertext), out, 0)
    """

    metadata = BackendMetadata(
        name="pycryptodome",
        library="pycryptodome",
        implementation_class="cipherkat.backends.pycryptodome.PyCryptodomeCipherBackend",
        is_native=False,
        transformations=(
            "AES/CTR/NoPadding",
            "AES/CBC/NoPadding",
            "AES/CBC/PKCS5Padding",
        ),
        description="AES via pycryptodome (Crypto.Cipher.AES)",
    )

    def __init__(
        self,
        configuration: HarnessConfig,
        transformation: CipherTransformation,
    ) -> None:
        super().__init__(configuration, transformation)
        self._cipher: Optional[Any] = None

    def _engine_init(self, direction: Direction, key: bytes, iv: bytes) -> None:
        mode = self.transformation.mode
        if mode == "CTR":
            self._cipher = AES.new(key, AES.MODE_CTR, nonce=b"", initial_value=iv)
        elif mode == "CBC":
            self._cipher = AES.new(key, AES.MODE_CBC, iv=iv)
        else:
            raise ValueError(f"Unsupported mode: {mode}")

    def _engine_final(self, data: bytes) -> bytes:
        assert self._cipher is not None
        tran = self.transformation

        if self.direction is Direction.ENCRYPT:
            if tran.is_padded:
                data = pad(data, tran.block_size, style="pkcs7")
            return self._cipher.encrypt(data)

        result = self._cipher.decrypt(data)
        if tran.is_padded:
            result = unpad(result, tran.block_size, style="pkcs7")
        return result

    def _engine_close(self) -> None:
        self._cipher = None
