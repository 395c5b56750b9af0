"""
Known-answer vector corpus.

Fixtures are flat string sequences in strides of five
(``label, keyHex, ivHex, plaintextHex, ciphertextHex``). They are decoded
lazily per transformation; the decoded tuple is memoised and read-only.

Example:
    >>> corpus = VectorCorpus.default()
    >>> vectors = corpus.lookup(AES_CTR_NOPADDING)
    >>> vectors[0].ciphertext.hex()
    '874d6191b620e3261bef6864990db6ce'
"""

from __future__ import annotations

import binascii
import logging
import re
import threading
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from cipherkat.core.exceptions import CorpusNotFoundError, VectorDecodeError
from cipherkat.core.transformation import CipherTransformation

logger = logging.getLogger(__name__)

__all__ = [
    "FIXTURE_STRIDE",
    "TestVector",
    "VectorCorpus",
    "decode_fixture",
    "decode_hex",
]

FIXTURE_STRIDE = 5

_FIELDS = ("key", "iv", "plaintext", "ciphertext")
_HEX_RE = re.compile(r"[0-9a-fA-F]*")


@dataclass(frozen=True)
class TestVector:
    """
    One known-answer row: key, iv, plaintext and expected ciphertext.

    Attributes:
        label: Free-form label from the fixture (diagnostics only)
        key: Raw key bytes
        iv: Raw IV bytes
        plaintext: Raw plaintext bytes
        ciphertext: Expected ciphertext bytes
    """

    # Not a pytest test class
    __test__ = False

    label: str
    key: bytes
    iv: bytes
    plaintext: bytes
    ciphertext: bytes


def decode_hex(
    value: str,
    *,
    field: str,
    vector_index: int,
    transformation: Optional[str] = None,
) -> bytes:
    """
    Decode a case-insensitive, even-length hex string.

    Raises:
        VectorDecodeError: Not a string, odd length or non-hex characters
    """
    if not isinstance(value, str):
        raise VectorDecodeError(
            f"Field '{field}' must be a hex string, got {type(value).__name__}",
            transformation=transformation,
            field=field,
            vector_index=vector_index,
        )

    if len(value) % 2:
        raise VectorDecodeError(
            f"Field '{field}' has odd hex length {len(value)}",
            transformation=transformation,
            field=field,
            vector_index=vector_index,
        )

    if not _HEX_RE.fullmatch(value):
        raise VectorDecodeError(
            f"Field '{field}' contains non-hexadecimal characters",
            transformation=transformation,
            field=field,
            vector_index=vector_index,
        )

    try:
        return binascii.unhexlify(value)
    except binascii.Error as e:
        raise VectorDecodeError(
            f"Field '{field}' is not valid hex: {e}",
            transformation=transformation,
            field=field,
            vector_index=vector_index,
        ) from e


def decode_fixture(
    fixture: Sequence[str],
    *,
    transformation: Optional[str] = None,
) -> Tuple[TestVector, ...]:
    """
    Decode a flat stride-5 fixture into TestVectors.

    Args:
        fixture: ``[label, keyHex, ivHex, plaintextHex, ciphertextHex, ...]``
        transformation: Name used in error diagnostics

    Returns:
        Vectors in fixture order

    Raises:
        VectorDecodeError: Wrong stride or malformed hex
    """
    if len(fixture) % FIXTURE_STRIDE:
        raise VectorDecodeError(
            f"Fixture length {len(fixture)} is not a multiple of {FIXTURE_STRIDE}",
            transformation=transformation,
            field="stride",
            vector_index=len(fixture) // FIXTURE_STRIDE,
        )

    vectors: List[TestVector] = []
    for index, start in enumerate(range(0, len(fixture), FIXTURE_STRIDE)):
        label = fixture[start]
        decoded = [
            decode_hex(
                fixture[start + offset],
                field=field,
                vector_index=index,
                transformation=transformation,
            )
            for offset, field in enumerate(_FIELDS, start=1)
        ]
        vectors.append(TestVector(str(label), *decoded))

    return tuple(vectors)


class VectorCorpus:
    """
    Mapping from transformation to its ordered known-answer vectors.

    Example:
        >>> corpus = VectorCorpus({AES_CTR_NOPADDING: AES_CTR_NOPADDING_TESTS})
        >>> len(corpus.lookup(AES_CTR_NOPADDING))
        4
    """

    def __init__(self, fixtures: Mapping[CipherTransformation, Sequence[str]]) -> None:
        self._fixtures: Dict[CipherTransformation, Tuple[str, ...]] = {
            tran: tuple(rows) for tran, rows in fixtures.items()
        }
        self._decoded: Dict[CipherTransformation, Tuple[TestVector, ...]] = {}
        self._lock = threading.Lock()

    @classmethod
    def default(cls) -> VectorCorpus:
        """Corpus over the bundled NIST SP 800-38A derived fixtures."""
        from cipherkat.kat_data import TEST_DATA

        return cls(TEST_DATA)

    def transformations(self) -> Tuple[CipherTransformation, ...]:
        return tuple(self._fixtures)

    def __contains__(self, transformation: object) -> bool:
        return transformation in self._fixtures

    def lookup(self, transformation: CipherTransformation) -> Tuple[TestVector, ...]:
        """
        Decoded vectors for a transformation, in fixture order.

        Raises:
            CorpusNotFoundError: No fixture for the transformation
            VectorDecodeError: The fixture is malformed
        """
        if transformation not in self._fixtures:
            raise CorpusNotFoundError(transformation.name)

        with self._lock:
            if transformation not in self._decoded:
                self._decoded[transformation] = decode_fixture(
                    self._fixtures[transformation],
                    transformation=transformation.name,
                )
                logger.debug(
                    f"Decoded {len(self._decoded[transformation])} vectors "
                    f"for {transformation.name}"
                )
            return self._decoded[transformation]
