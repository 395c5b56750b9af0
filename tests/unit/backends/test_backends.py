"""
Unit-тесты для встроенных бэкендов (openssl, pycryptodome).

Все тесты параметризованы по обоим бэкендам: реализации
взаимозаменяемы и обязаны вести себя одинаково.

Проверяет:
- NIST SP 800-38A векторы в обоих представлениях
- Размер выходного буфера (ровно по длине и на байт меньше)
- Машину состояний CREATED -> INITIALIZED -> FINALIZED
- Проверки длины ключа, IV и выравнивания
- Ошибки дополнения
"""

from __future__ import annotations

from typing import Type

import pytest

from cipherkat.backends.base import AbstractCipherBackend, SessionState
from cipherkat.backends.openssl import OpenSSLCipherBackend
from cipherkat.backends.pycryptodome import PyCryptodomeCipherBackend
from cipherkat.config import HarnessConfig
from cipherkat.core.buffers import ByteCursor
from cipherkat.core.exceptions import (
    BadPaddingError,
    BufferOverflowError,
    IllegalBlockSizeError,
    InitializationError,
    InvalidSessionStateError,
)
from cipherkat.core.transformation import (
    AES_CBC_NOPADDING,
    AES_CBC_PKCS5PADDING,
    AES_CTR_NOPADDING,
    CipherTransformation,
    Direction,
)

KEY = bytes.fromhex("2B7E151628AED2A6ABF7158809CF4F3C")
CTR_IV = bytes.fromhex("F0F1F2F3F4F5F6F7F8F9FAFBFCFDFEFF")
CBC_IV = bytes.fromhex("000102030405060708090A0B0C0D0E0F")
PLAINTEXT = bytes.fromhex("6BC1BEE22E409F96E93D7E117393172A")
CTR_CIPHERTEXT = bytes.fromhex("874D6191B620E3261BEF6864990DB6CE")
CBC_CIPHERTEXT = bytes.fromhex("7649ABAC8119B246CEE98E9B12E9197D")

# PKCS5: пустой вход даёт один полный блок дополнения
PAD_IV = bytes.fromhex("7BD1AEF23E508F86F92D6E016383073A")
PAD_CIPHERTEXT = bytes.fromhex("3AD77BB40D7A3660A89ECAF32466EF97")


# ==============================================================================
# FIXTURES
# ==============================================================================


@pytest.fixture(params=[OpenSSLCipherBackend, PyCryptodomeCipherBackend], ids=["openssl", "pycryptodome"])
def backend_cls(request: pytest.FixtureRequest) -> Type[AbstractCipherBackend]:
    return request.param


def make(
    backend_cls: Type[AbstractCipherBackend],
    transformation: CipherTransformation,
) -> AbstractCipherBackend:
    return backend_cls(HarnessConfig(backend_cls.metadata.name), transformation)


def encrypt_array(
    backend_cls: Type[AbstractCipherBackend],
    transformation: CipherTransformation,
    key: bytes,
    iv: bytes,
    data: bytes,
    direction: Direction = Direction.ENCRYPT,
) -> bytes:
    backend = make(backend_cls, transformation)
    backend.initialize(direction, key, iv)
    out = bytearray(len(data) + transformation.block_size)
    n = backend.finalize_array(data, 0, len(data), out, 0)
    return bytes(out[:n])


# ==============================================================================
# TEST: Known answers
# ==============================================================================


class TestKnownAnswers:
    def test_ctr_array(self, backend_cls: Type[AbstractCipherBackend]) -> None:
        assert encrypt_array(backend_cls, AES_CTR_NOPADDING, KEY, CTR_IV, PLAINTEXT) == CTR_CIPHERTEXT
        assert (
            encrypt_array(
                backend_cls, AES_CTR_NOPADDING, KEY, CTR_IV, CTR_CIPHERTEXT, Direction.DECRYPT
            )
            == PLAINTEXT
        )

    def test_ctr_buffer(self, backend_cls: Type[AbstractCipherBackend]) -> None:
        backend = make(backend_cls, AES_CTR_NOPADDING)
        backend.initialize(Direction.ENCRYPT, KEY, CTR_IV)

        source = ByteCursor.wrap(PLAINTEXT)
        sink = ByteCursor.allocate(1000)
        written = backend.finalize_buffer(source, sink)

        assert written == 16
        assert not source.has_remaining()
        assert sink.position == 16
        sink.flip()
        assert sink.read() == CTR_CIPHERTEXT

    def test_ctr_partial_block(self, backend_cls: Type[AbstractCipherBackend]) -> None:
        """Потоковый режим не требует выравнивания."""
        assert (
            encrypt_array(backend_cls, AES_CTR_NOPADDING, KEY, CTR_IV, PLAINTEXT[:6])
            == CTR_CIPHERTEXT[:6]
        )

    def test_cbc_no_padding(self, backend_cls: Type[AbstractCipherBackend]) -> None:
        assert encrypt_array(backend_cls, AES_CBC_NOPADDING, KEY, CBC_IV, PLAINTEXT) == CBC_CIPHERTEXT
        assert (
            encrypt_array(
                backend_cls, AES_CBC_NOPADDING, KEY, CBC_IV, CBC_CIPHERTEXT, Direction.DECRYPT
            )
            == PLAINTEXT
        )

    def test_pkcs5_empty_plaintext(self, backend_cls: Type[AbstractCipherBackend]) -> None:
        assert encrypt_array(backend_cls, AES_CBC_PKCS5PADDING, KEY, PAD_IV, b"") == PAD_CIPHERTEXT
        assert (
            encrypt_array(
                backend_cls, AES_CBC_PKCS5PADDING, KEY, PAD_IV, PAD_CIPHERTEXT, Direction.DECRYPT
            )
            == b""
        )

    def test_pkcs5_full_block_adds_padding_block(
        self, backend_cls: Type[AbstractCipherBackend]
    ) -> None:
        ct = encrypt_array(backend_cls, AES_CBC_PKCS5PADDING, KEY, CBC_IV, PLAINTEXT)
        assert len(ct) == 32
        # Первый блок совпадает с CBC без дополнения
        assert ct[:16] == CBC_CIPHERTEXT

    @pytest.mark.parametrize("key_len", [16, 24, 32])
    def test_backends_agree(
        self, backend_cls: Type[AbstractCipherBackend], key_len: int
    ) -> None:
        """Оба бэкенда дают одинаковый шифртекст для всех длин ключа."""
        key = bytes(range(key_len))
        data = bytes(range(37))
        reference = encrypt_array(OpenSSLCipherBackend, AES_CBC_PKCS5PADDING, key, CBC_IV, data)
        assert encrypt_array(backend_cls, AES_CBC_PKCS5PADDING, key, CBC_IV, data) == reference


# ==============================================================================
# TEST: Output sizing
# ==============================================================================


class TestOutputSizing:
    def test_exact_output_no_padding(self, backend_cls: Type[AbstractCipherBackend]) -> None:
        backend = make(backend_cls, AES_CTR_NOPADDING)
        backend.initialize(Direction.ENCRYPT, KEY, CTR_IV)

        out = bytearray(len(PLAINTEXT))
        assert backend.finalize_array(PLAINTEXT, 0, 16, out, 0) == 16
        assert bytes(out) == CTR_CIPHERTEXT

    def test_exact_output_buffer(self, backend_cls: Type[AbstractCipherBackend]) -> None:
        backend = make(backend_cls, AES_CTR_NOPADDING)
        backend.initialize(Direction.ENCRYPT, KEY, CTR_IV)

        sink = ByteCursor.allocate(16)
        backend.finalize_buffer(ByteCursor.wrap(PLAINTEXT), sink)
        assert not sink.has_remaining()

    def test_padding_one_byte_short(self, backend_cls: Type[AbstractCipherBackend]) -> None:
        backend = make(backend_cls, AES_CBC_PKCS5PADDING)
        backend.initialize(Direction.ENCRYPT, KEY, CBC_IV)

        with pytest.raises(BufferOverflowError) as exc_info:
            backend.finalize_array(PLAINTEXT, 0, 16, bytearray(31), 0)

        assert (exc_info.value.required, exc_info.value.remaining) == (32, 31)

    def test_overflow_leaves_backend_usable(
        self, backend_cls: Type[AbstractCipherBackend]
    ) -> None:
        backend = make(backend_cls, AES_CBC_PKCS5PADDING)
        backend.initialize(Direction.ENCRYPT, KEY, CBC_IV)

        source = ByteCursor.wrap(PLAINTEXT)
        with pytest.raises(BufferOverflowError):
            backend.finalize_buffer(source, ByteCursor.allocate(31))

        assert backend.state is SessionState.INITIALIZED
        assert source.remaining() == 16

        sink = ByteCursor.allocate(32)
        assert backend.finalize_buffer(source, sink) == 32

    def test_output_offset_counts_against_capacity(
        self, backend_cls: Type[AbstractCipherBackend]
    ) -> None:
        backend = make(backend_cls, AES_CTR_NOPADDING)
        backend.initialize(Direction.ENCRYPT, KEY, CTR_IV)

        with pytest.raises(BufferOverflowError):
            backend.finalize_array(PLAINTEXT, 0, 16, bytearray(20), 5)

    def test_array_offsets(self, backend_cls: Type[AbstractCipherBackend]) -> None:
        backend = make(backend_cls, AES_CTR_NOPADDING)
        backend.initialize(Direction.ENCRYPT, KEY, CTR_IV)

        src = b"\xaa" * 3 + PLAINTEXT + b"\xbb" * 2
        out = bytearray(b"\xcc" * 24)
        n = backend.finalize_array(src, 3, 16, out, 4)

        assert n == 16
        assert bytes(out[4:20]) == CTR_CIPHERTEXT
        assert bytes(out[:4]) == b"\xcc" * 4
        assert bytes(out[20:]) == b"\xcc" * 4

    def test_buffer_positions(self, backend_cls: Type[AbstractCipherBackend]) -> None:
        backend = make(backend_cls, AES_CTR_NOPADDING)
        backend.initialize(Direction.ENCRYPT, KEY, CTR_IV)

        source = ByteCursor.wrap(b"\x00\x00" + PLAINTEXT)
        source.advance(2)
        sink = ByteCursor.allocate(32)
        sink.write(b"hdr")

        backend.finalize_buffer(source, sink)

        assert source.position == 18
        assert sink.position == 19
        sink.flip()
        assert sink.read() == b"hdr" + CTR_CIPHERTEXT

    @pytest.mark.parametrize("offset, length", [(-1, 4), (0, 17), (10, 10)])
    def test_invalid_input_slice(
        self, backend_cls: Type[AbstractCipherBackend], offset: int, length: int
    ) -> None:
        backend = make(backend_cls, AES_CTR_NOPADDING)
        backend.initialize(Direction.ENCRYPT, KEY, CTR_IV)

        with pytest.raises(ValueError, match="Input slice"):
            backend.finalize_array(PLAINTEXT, offset, length, bytearray(32), 0)


# ==============================================================================
# TEST: State machine
# ==============================================================================


class TestStateMachine:
    def test_initial_state(self, backend_cls: Type[AbstractCipherBackend]) -> None:
        backend = make(backend_cls, AES_CTR_NOPADDING)
        assert backend.state is SessionState.CREATED
        assert backend.direction is None

    def test_finalize_before_initialize(self, backend_cls: Type[AbstractCipherBackend]) -> None:
        backend = make(backend_cls, AES_CTR_NOPADDING)

        with pytest.raises(InvalidSessionStateError):
            backend.finalize_array(PLAINTEXT, 0, 16, bytearray(16), 0)

        with pytest.raises(InvalidSessionStateError):
            backend.finalize_buffer(ByteCursor.wrap(PLAINTEXT), ByteCursor.allocate(16))

    def test_double_initialize(self, backend_cls: Type[AbstractCipherBackend]) -> None:
        backend = make(backend_cls, AES_CTR_NOPADDING)
        backend.initialize(Direction.ENCRYPT, KEY, CTR_IV)

        with pytest.raises(InvalidSessionStateError, match="Cannot initialize"):
            backend.initialize(Direction.ENCRYPT, KEY, CTR_IV)

    def test_single_use(self, backend_cls: Type[AbstractCipherBackend]) -> None:
        backend = make(backend_cls, AES_CTR_NOPADDING)
        backend.initialize(Direction.ENCRYPT, KEY, CTR_IV)
        backend.finalize_array(PLAINTEXT, 0, 16, bytearray(16), 0)

        assert backend.state is SessionState.FINALIZED
        with pytest.raises(InvalidSessionStateError):
            backend.finalize_array(PLAINTEXT, 0, 16, bytearray(16), 0)

    def test_close_is_idempotent(self, backend_cls: Type[AbstractCipherBackend]) -> None:
        backend = make(backend_cls, AES_CTR_NOPADDING)
        backend.close()
        backend.close()
        assert backend.state is SessionState.FINALIZED

    def test_context_manager(self, backend_cls: Type[AbstractCipherBackend]) -> None:
        with make(backend_cls, AES_CTR_NOPADDING) as backend:
            backend.initialize(Direction.DECRYPT, KEY, CTR_IV)
            assert backend.direction is Direction.DECRYPT

        assert backend.state is SessionState.FINALIZED

    def test_constructor_types(self, backend_cls: Type[AbstractCipherBackend]) -> None:
        with pytest.raises(TypeError, match="configuration"):
            backend_cls({"backend": "x"}, AES_CTR_NOPADDING)  # type: ignore[arg-type]

        with pytest.raises(TypeError, match="transformation"):
            backend_cls(HarnessConfig("x"), "AES/CTR/NoPadding")  # type: ignore[arg-type]

    def test_direction_type(self, backend_cls: Type[AbstractCipherBackend]) -> None:
        with pytest.raises(TypeError):
            make(backend_cls, AES_CTR_NOPADDING).initialize("encrypt", KEY, CTR_IV)  # type: ignore[arg-type]


# ==============================================================================
# TEST: Validation
# ==============================================================================


class TestValidation:
    @pytest.mark.parametrize("key_len", [0, 15, 17, 33])
    def test_bad_key_length(self, backend_cls: Type[AbstractCipherBackend], key_len: int) -> None:
        backend = make(backend_cls, AES_CBC_NOPADDING)

        with pytest.raises(InitializationError, match="key"):
            backend.initialize(Direction.ENCRYPT, b"\x00" * key_len, CBC_IV)

        assert backend.state is SessionState.CREATED

    @pytest.mark.parametrize("iv_len", [0, 8, 12, 17])
    def test_bad_iv_length(self, backend_cls: Type[AbstractCipherBackend], iv_len: int) -> None:
        backend = make(backend_cls, AES_CTR_NOPADDING)

        with pytest.raises(InitializationError, match="IV"):
            backend.initialize(Direction.ENCRYPT, KEY, b"\x00" * iv_len)

    def test_misaligned_no_padding(self, backend_cls: Type[AbstractCipherBackend]) -> None:
        backend = make(backend_cls, AES_CBC_NOPADDING)
        backend.initialize(Direction.ENCRYPT, KEY, CBC_IV)

        with pytest.raises(IllegalBlockSizeError):
            backend.finalize_array(PLAINTEXT[:15], 0, 15, bytearray(32), 0)

        assert backend.state is SessionState.FINALIZED

    def test_misaligned_padded_decrypt(self, backend_cls: Type[AbstractCipherBackend]) -> None:
        backend = make(backend_cls, AES_CBC_PKCS5PADDING)
        backend.initialize(Direction.DECRYPT, KEY, CBC_IV)

        with pytest.raises(IllegalBlockSizeError):
            backend.finalize_array(b"\x00" * 17, 0, 17, bytearray(32), 0)

    def test_padded_encrypt_accepts_any_length(
        self, backend_cls: Type[AbstractCipherBackend]
    ) -> None:
        assert len(encrypt_array(backend_cls, AES_CBC_PKCS5PADDING, KEY, CBC_IV, b"abc")) == 16

    def test_bad_padding(self, backend_cls: Type[AbstractCipherBackend]) -> None:
        """С нулевым IV последний байт расшифровки 0x2A - недопустимое дополнение."""
        backend = make(backend_cls, AES_CBC_PKCS5PADDING)
        backend.initialize(Direction.DECRYPT, KEY, b"\x00" * 16)

        with pytest.raises(BadPaddingError) as exc_info:
            backend.finalize_array(PAD_CIPHERTEXT, 0, 16, bytearray(16), 0)

        assert isinstance(exc_info.value.__cause__, ValueError)
        assert exc_info.value.transformation == "AES/CBC/PKCS5Padding"

    def test_empty_padded_decrypt(self, backend_cls: Type[AbstractCipherBackend]) -> None:
        backend = make(backend_cls, AES_CBC_PKCS5PADDING)
        backend.initialize(Direction.DECRYPT, KEY, CBC_IV)

        with pytest.raises(BadPaddingError):
            backend.finalize_array(b"", 0, 0, bytearray(16), 0)
