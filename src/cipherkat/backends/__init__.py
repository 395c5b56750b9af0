"""
Built-in cipher backends.

- ``openssl``: cryptography (OpenSSL, native)
- ``pycryptodome``: pycryptodome
"""

from cipherkat.backends.base import AbstractCipherBackend, SessionState
from cipherkat.backends.openssl import OpenSSLCipherBackend
from cipherkat.backends.pycryptodome import PyCryptodomeCipherBackend

__all__ = [
    "AbstractCipherBackend",
    "SessionState",
    "OpenSSLCipherBackend",
    "PyCryptodomeCipherBackend",
]
