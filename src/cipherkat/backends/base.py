"""
Common base for cipher backends.

AbstractCipherBackend implements the parts of CipherBackendProtocol that
do not depend on the underlying library: the session state machine, key
and IV length checks, block alignment checks, output sizing and both I/O
representations. A concrete backend only supplies two hooks:

    _engine_init(direction, key, iv)   bind library objects
    _engine_final(data) -> bytes       transform the whole input in one step

Library ValueErrors raised from the hooks are mapped to InitializationError
(during initialize) or BadPaddingError / TransformError (during finalize).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import ClassVar, Optional, Union

from cipherkat.config import HarnessConfig
from cipherkat.core.buffers import ByteCursor, BytesLike
from cipherkat.core.exceptions import (
    BadPaddingError,
    BufferOverflowError,
    IllegalBlockSizeError,
    InitializationError,
    InvalidSessionStateError,
    TransformError,
)
from cipherkat.core.metadata import BackendMetadata
from cipherkat.core.transformation import CipherTransformation, Direction

logger = logging.getLogger(__name__)

__all__ = [
    "AbstractCipherBackend",
    "SessionState",
]


class SessionState(str, Enum):
    """Lifecycle of a single-use backend instance."""

    CREATED = "created"
    INITIALIZED = "initialized"
    FINALIZED = "finalized"


class AbstractCipherBackend(ABC):
    """
    Single-use, single-direction backend bound to one transformation.

    Subclasses set ``metadata`` and implement the two engine hooks.

    Example:
        >>> backend = OpenSSLCipherBackend(HarnessConfig("openssl"), AES_CTR_NOPADDING)
        >>> backend.initialize(Direction.ENCRYPT, key, iv)
        >>> out = bytearray(16)
        >>> backend.finalize_array(plaintext, 0, 16, out, 0)
        16
    """

    metadata: ClassVar[BackendMetadata]

    def __init__(
        self,
        configuration: HarnessConfig,
        transformation: CipherTransformation,
    ) -> None:
        # === TYPE VALIDATION ===
        if not isinstance(configuration, HarnessConfig):
            raise TypeError(
                f"configuration must be HarnessConfig, got {type(configuration).__name__}"
            )

        if not isinstance(transformation, CipherTransformation):
            raise TypeError(
                f"transformation must be CipherTransformation, "
                f"got {type(transformation).__name__}"
            )

        self._configuration = configuration
        self._transformation = transformation
        self._state = SessionState.CREATED
        self._direction: Optional[Direction] = None

    # --------------------------------------------------------------------------
    # Properties
    # --------------------------------------------------------------------------

    @property
    def transformation(self) -> CipherTransformation:
        return self._transformation

    @property
    def configuration(self) -> HarnessConfig:
        return self._configuration

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def direction(self) -> Optional[Direction]:
        return self._direction

    # --------------------------------------------------------------------------
    # Lifecycle
    # --------------------------------------------------------------------------

    def initialize(self, direction: Direction, key: BytesLike, iv: BytesLike) -> None:
        """
        Bind the backend to a direction and key material.

        Raises:
            InvalidSessionStateError: Not in CREATED state
            InitializationError: Invalid key or IV length, or the library
                rejected the material
        """
        if self._state is not SessionState.CREATED:
            raise InvalidSessionStateError("initialize", self._state.value)

        if not isinstance(direction, Direction):
            raise TypeError(f"direction must be Direction, got {type(direction).__name__}")

        key = bytes(key)
        iv = bytes(iv)
        tran = self._transformation

        # === SIZE VALIDATION ===
        if len(key) not in tran.key_sizes:
            raise InitializationError(
                f"{tran.algorithm} requires a key of {list(tran.key_sizes)} bytes, got {len(key)}",
                transformation=tran.name,
            )

        if len(iv) != tran.block_size:
            raise InitializationError(
                f"{tran.mode} requires a {tran.block_size}-byte IV, got {len(iv)}",
                transformation=tran.name,
            )

        try:
            self._engine_init(direction, key, iv)
        except ValueError as e:
            raise InitializationError(
                f"{self.metadata.library} rejected key material: {e}",
                transformation=tran.name,
            ) from e

        self._direction = direction
        self._state = SessionState.INITIALIZED
        logger.debug(f"{self.metadata.name}: initialized for {direction.label} ({tran.name})")

    def finalize_buffer(self, input: ByteCursor, output: ByteCursor) -> int:
        """
        Transform ``input[position:limit]`` into ``output`` at its position.

        Both cursors advance past the consumed and written extent. On
        BufferOverflowError nothing is consumed or written and the backend
        stays INITIALIZED.
        """
        direction = self._require_initialized("finalize")

        data = input.peek()
        required = self._transformation.output_size(len(data), direction)
        if output.remaining() < required:
            raise BufferOverflowError(required, output.remaining())

        result = self._finish(data)
        input.advance(len(data))
        return output.write(result)

    def finalize_array(
        self,
        input: BytesLike,
        input_offset: int,
        input_length: int,
        output: Union[bytearray, memoryview],
        output_offset: int,
    ) -> int:
        """
        Transform ``input[input_offset:input_offset + input_length]`` into
        ``output`` starting at ``output_offset``.

        Returns:
            Number of bytes written
        """
        direction = self._require_initialized("finalize")

        if input_offset < 0 or input_length < 0 or input_offset + input_length > len(input):
            raise ValueError(
                f"Input slice [{input_offset}:{input_offset + input_length}] "
                f"outside input of {len(input)} bytes"
            )

        if output_offset < 0 or output_offset > len(output):
            raise ValueError(
                f"Output offset {output_offset} outside output of {len(output)} bytes"
            )

        required = self._transformation.output_size(input_length, direction)
        available = len(output) - output_offset
        if available < required:
            raise BufferOverflowError(required, available)

        result = self._finish(bytes(input[input_offset : input_offset + input_length]))
        output[output_offset : output_offset + len(result)] = result
        return len(result)

    def close(self) -> None:
        """Release library objects. Safe to call more than once."""
        self._engine_close()
        self._state = SessionState.FINALIZED

    def __enter__(self) -> AbstractCipherBackend:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # --------------------------------------------------------------------------
    # Internals
    # --------------------------------------------------------------------------

    def _require_initialized(self, operation: str) -> Direction:
        if self._state is not SessionState.INITIALIZED or self._direction is None:
            raise InvalidSessionStateError(operation, self._state.value)
        return self._direction

    def _finish(self, data: bytes) -> bytes:
        direction = self._require_initialized("finalize")
        tran = self._transformation

        if tran.requires_alignment(direction) and len(data) % tran.block_size:
            self._state = SessionState.FINALIZED
            raise IllegalBlockSizeError(
                f"Input length {len(data)} is not a multiple of {tran.block_size} "
                f"for {direction.label}",
                transformation=tran.name,
            )

        # Single-shot: the engine is consumed whatever happens next
        self._state = SessionState.FINALIZED
        try:
            result = self._engine_final(data)
        except ValueError as e:
            if tran.is_padded and direction is Direction.DECRYPT:
                raise BadPaddingError(
                    f"{self.metadata.library} padding check failed: {e}",
                    transformation=tran.name,
                ) from e
            raise TransformError(
                f"{self.metadata.library} {direction.label} failed: {e}",
                transformation=tran.name,
            ) from e
        finally:
            self._engine_close()

        logger.debug(f"{self.metadata.name}: {direction.label} produced {len(result)} bytes")
        return result

    @abstractmethod
    def _engine_init(self, direction: Direction, key: bytes, iv: bytes) -> None:
        """Create library objects for the direction. May raise ValueError."""

    @abstractmethod
    def _engine_final(self, data: bytes) -> bytes:
        """Transform the complete input. May raise ValueError."""

    def _engine_close(self) -> None:
        """Drop library objects."""
