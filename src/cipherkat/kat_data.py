"""
Known-answer fixtures.

Each fixture is a flat sequence of strings in strides of five:
``label, keyHex, ivHex, plaintextHex, ciphertextHex``.

Sources:
    - NIST SP 800-38A, F.2 (CBC) and F.5 (CTR)
    - PKCS5Padding rows are built from the F.1.1 ECB-AES128 pairs: the IV is
      chosen so that the single padded block XOR IV equals an F.1.1 input
      block, hence the ciphertext is the matching F.1.1 output block.
"""

from __future__ import annotations

from typing import Dict, Tuple

from cipherkat.core.transformation import (
    AES_CBC_NOPADDING,
    AES_CBC_PKCS5PADDING,
    AES_CTR_NOPADDING,
    CipherTransformation,
)

_KEY_128 = "2b7e151628aed2a6abf7158809cf4f3c"
_KEY_256 = "603deb1015ca71be2b73aef0857d77811f352c073b6108d72d9810a30914dff4"

_CBC_IV = "000102030405060708090a0b0c0d0e0f"
_CTR_IV = "f0f1f2f3f4f5f6f7f8f9fafbfcfdfeff"

_PLAINTEXT = (
    "6bc1bee22e409f96e93d7e117393172a"
    "ae2d8a571e03ac9c9eb76fac45af8e51"
    "30c81c46a35ce411e5fbc1191a0a52ef"
    "f69f2445df4f9b17ad2b417be66c3710"
)

AES_CTR_NOPADDING_TESTS: Tuple[str, ...] = (
    # F.5.1 CTR-AES128.Encrypt, first block
    "128",
    _KEY_128,
    _CTR_IV,
    "6bc1bee22e409f96e93d7e117393172a",
    "874d6191b620e3261bef6864990db6ce",
    # F.5.1 CTR-AES128.Encrypt, four blocks
    "128-4",
    _KEY_128,
    _CTR_IV,
    _PLAINTEXT,
    "874d6191b620e3261bef6864990db6ce"
    "9806f66b7970fdff8617187bb9fffdff"
    "5ae4df3edbd5d35e5b4f09020db03eab"
    "1e031dda2fbe03d1792170a0f3009cee",
    # F.5.1 truncated to a partial block (stream mode)
    "128-partial",
    _KEY_128,
    _CTR_IV,
    "6bc1bee22e40",
    "874d6191b620",
    # F.5.5 CTR-AES256.Encrypt, four blocks
    "256-4",
    _KEY_256,
    _CTR_IV,
    _PLAINTEXT,
    "601ec313775789a5b7a7f504bbf3d228"
    "f443e3ca4d62b59aca84e990cacaf5c5"
    "2b0930daa23de94ce87017ba2d84988d"
    "dfc9c58db67aada613c2dd08457941a6",
)

AES_CBC_NOPADDING_TESTS: Tuple[str, ...] = (
    # F.2.1 CBC-AES128.Encrypt, first block
    "128",
    _KEY_128,
    _CBC_IV,
    "6bc1bee22e409f96e93d7e117393172a",
    "7649abac8119b246cee98e9b12e9197d",
    # F.2.1 CBC-AES128.Encrypt, four blocks
    "128-4",
    _KEY_128,
    _CBC_IV,
    _PLAINTEXT,
    "7649abac8119b246cee98e9b12e9197d"
    "5086cb9b507219ee95db113a917678b2"
    "73bed6b8e3c1743b7116e69e22229516"
    "3ff1caa1681fac09120eca307586e1a7",
    # F.2.5 CBC-AES256.Encrypt, four blocks
    "256-4",
    _KEY_256,
    _CBC_IV,
    _PLAINTEXT,
    "f58c4c04d6e5f1ba779eabfb5f7bfbd6"
    "9cfc4e967edb808d679f777bc6702c7d"
    "39f23369a9d9bacfa530e26304231461"
    "b2eb05e2c39be9fcda6c19078c6a9d1b",
)

AES_CBC_PKCS5PADDING_TESTS: Tuple[str, ...] = (
    # Empty plaintext: one full padding block
    "128-empty",
    _KEY_128,
    "7bd1aef23e508f86f92d6e016383073a",
    "",
    "3ad77bb40d7a3660a89ecaf32466ef97",
    # 15 bytes + 0x01
    "128-15",
    _KEY_128,
    "0000000000000000000000000000002b",
    "6bc1bee22e409f96e93d7e11739317",
    "3ad77bb40d7a3660a89ecaf32466ef97",
    # 15 bytes + 0x01
    "128-15b",
    _KEY_128,
    "00000000000000000000000000000050",
    "ae2d8a571e03ac9c9eb76fac45af8e",
    "f5d3d58503b9699de785895a96fdbaaf",
    # 14 bytes + 0x02 0x02
    "128-14",
    _KEY_128,
    "000000000000000000000000000050ed",
    "30c81c46a35ce411e5fbc1191a0a",
    "43b1cd7f598ece23881b00e3ed030688",
)

TEST_DATA: Dict[CipherTransformation, Tuple[str, ...]] = {
    AES_CTR_NOPADDING: AES_CTR_NOPADDING_TESTS,
    AES_CBC_NOPADDING: AES_CBC_NOPADDING_TESTS,
    AES_CBC_PKCS5PADDING: AES_CBC_PKCS5PADDING_TESTS,
}

__all__ = [
    "AES_CBC_NOPADDING_TESTS",
    "AES_CBC_PKCS5PADDING_TESTS",
    "AES_CTR_NOPADDING_TESTS",
    "TEST_DATA",
]
