"""
Known-answer validation of a cipher backend in both I/O representations.

For every transformation and every vector, in corpus order:

1. fresh encrypt session, buffer representation, plaintext -> expected ciphertext
2. fresh decrypt session, buffer representation, on the ciphertext from step 1
   -> plaintext
3. steps 1-2 again with the array representation and independent sessions
4. buffer and array outputs must agree for both directions

All backends are resolved and all corpus entries decoded before the first
vector runs, so configuration and corpus problems never leave partial
results behind.

Example:
    >>> validator = DualModeValidator(HarnessConfig("openssl"))
    >>> report = validator.run()
    >>> print(report.summary())
    [PASS] AES/CTR/NoPadding (openssl): 4/4 vectors passed
    ...
"""

from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Type

from cipherkat.config import HarnessConfig
from cipherkat.core.exceptions import (
    AssertionMismatchError,
    InvalidSessionStateError,
    VectorError,
)
from cipherkat.core.registry import BackendFactory
from cipherkat.core.transformation import CipherTransformation, Direction
from cipherkat.corpus import TestVector, VectorCorpus
from cipherkat.session import ArrayCipherSession, BufferCipherSession, CipherSession

logger = logging.getLogger(__name__)

__all__ = [
    "DualModeValidator",
    "FailurePolicy",
    "TransformationResult",
    "ValidationReport",
    "VectorFailure",
]


class FailurePolicy(str, Enum):
    """Behaviour on a per-vector error."""

    FAIL_FAST = "fail_fast"
    COLLECT_ALL = "collect_all"


# ==============================================================================
# RESULTS
# ==============================================================================


@dataclass(frozen=True)
class VectorFailure:
    """Details of a single failed vector."""

    transformation: str
    vector_index: int
    label: str
    error_type: str
    message: str
    expected_hex: Optional[str] = None
    actual_hex: Optional[str] = None

    @classmethod
    def from_error(cls, error: VectorError, label: str) -> VectorFailure:
        expected_hex = actual_hex = None
        if isinstance(error, AssertionMismatchError):
            expected_hex = error.expected_hex
            actual_hex = error.actual_hex

        return cls(
            transformation=error.transformation or "",
            vector_index=error.vector_index if error.vector_index is not None else -1,
            label=label,
            error_type=type(error).__name__,
            message=error.message,
            expected_hex=expected_hex,
            actual_hex=actual_hex,
        )


@dataclass
class TransformationResult:
    """Aggregate result for one transformation."""

    transformation: str
    backend: str
    total_vectors: int
    passed: int = 0
    failures: List[VectorFailure] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def is_success(self) -> bool:
        return not self.failures and self.passed == self.total_vectors

    def summary(self) -> str:
        status = "PASS" if self.is_success else "FAIL"
        return (
            f"[{status}] {self.transformation} ({self.backend}): "
            f"{self.passed}/{self.total_vectors} vectors passed"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transformation": self.transformation,
            "backend": self.backend,
            "total_vectors": self.total_vectors,
            "passed": self.passed,
            "failed": self.failed,
            "is_success": self.is_success,
            "elapsed_seconds": self.elapsed_seconds,
            "failures": [asdict(f) for f in self.failures],
        }


@dataclass
class ValidationReport:
    """Result of one validator run."""

    backend: str
    policy: FailurePolicy
    results: List[TransformationResult] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def is_success(self) -> bool:
        return all(r.is_success for r in self.results)

    @property
    def total_vectors(self) -> int:
        return sum(r.total_vectors for r in self.results)

    @property
    def failures(self) -> List[VectorFailure]:
        return [f for r in self.results for f in r.failures]

    def summary(self) -> str:
        lines = [r.summary() for r in self.results]
        passed = sum(r.passed for r in self.results)
        lines.append(
            f"{passed}/{self.total_vectors} vectors passed "
            f"across {len(self.results)} transformation(s) "
            f"({self.elapsed_seconds:.2f}s)"
        )
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "backend": self.backend,
            "policy": self.policy.value,
            "is_success": self.is_success,
            "total_vectors": self.total_vectors,
            "elapsed_seconds": self.elapsed_seconds,
            "results": [r.to_dict() for r in self.results],
        }


# ==============================================================================
# VALIDATOR
# ==============================================================================


class DualModeValidator:
    """
    Drives the known-answer corpus through a configured backend.

    Args:
        configuration: Harness configuration naming the backend
        factory: Backend factory (defaults to the built-in registry)
        corpus: Vector corpus (defaults to the bundled fixtures)
        policy: FAIL_FAST raises the first per-vector error,
            COLLECT_ALL records it and moves on. InvalidSessionStateError
            is raised under both policies

    Raises:
        TypeError: configuration is not a HarnessConfig
    """

    def __init__(
        self,
        configuration: HarnessConfig,
        *,
        factory: Optional[BackendFactory] = None,
        corpus: Optional[VectorCorpus] = None,
        policy: FailurePolicy = FailurePolicy.FAIL_FAST,
    ) -> None:
        if not isinstance(configuration, HarnessConfig):
            raise TypeError(
                f"configuration must be HarnessConfig, got {type(configuration).__name__}"
            )

        self._configuration = configuration
        self._factory = factory or BackendFactory()
        self._corpus = corpus or VectorCorpus.default()
        self._policy = FailurePolicy(policy)

    @property
    def configuration(self) -> HarnessConfig:
        return self._configuration

    @property
    def policy(self) -> FailurePolicy:
        return self._policy

    def run(
        self,
        transformations: Optional[Iterable[CipherTransformation]] = None,
    ) -> ValidationReport:
        """
        Validate the configured backend.

        Args:
            transformations: Transformations to check (default: every
                transformation the corpus covers)

        Returns:
            ValidationReport with one result per transformation

        Raises:
            SetupError: Backend or corpus could not be prepared (nothing ran)
            VectorError: First per-vector failure under FAIL_FAST
            InvalidSessionStateError: A backend was driven out of order (any policy)
        """
        selected = (
            tuple(transformations)
            if transformations is not None
            else self._corpus.transformations()
        )
        plan = self._prepare(selected)

        backend = self._configuration.backend_name or ""
        report = ValidationReport(backend=backend, policy=self._policy)
        logger.info(
            f"Validating backend '{backend}' over {len(plan)} transformation(s), "
            f"policy={self._policy.value}"
        )

        start = time.perf_counter()
        for transformation, vectors in plan:
            report.results.append(self._run_transformation(transformation, vectors))
        report.elapsed_seconds = time.perf_counter() - start

        log = logger.info if report.is_success else logger.warning
        log(f"Validation of '{backend}' finished: success={report.is_success}")
        return report

    def validate_vector(
        self,
        transformation: CipherTransformation,
        vector: TestVector,
    ) -> None:
        """
        Run all legs for a single vector.

        Raises:
            AssertionMismatchError: A leg produced unexpected bytes
            VectorError: The backend rejected the vector
        """
        buffer_ct = self._run_leg(
            BufferCipherSession, transformation, Direction.ENCRYPT, vector, vector.plaintext
        )
        _check("buffer encryption", vector.ciphertext, buffer_ct)

        buffer_pt = self._run_leg(
            BufferCipherSession, transformation, Direction.DECRYPT, vector, buffer_ct
        )
        _check("buffer decryption", vector.plaintext, buffer_pt)

        array_ct = self._run_leg(
            ArrayCipherSession, transformation, Direction.ENCRYPT, vector, vector.plaintext
        )
        _check("array encryption", vector.ciphertext, array_ct)

        array_pt = self._run_leg(
            ArrayCipherSession, transformation, Direction.DECRYPT, vector, array_ct
        )
        _check("array decryption", vector.plaintext, array_pt)

        _check("buffer/array encryption agreement", buffer_ct, array_ct)
        _check("buffer/array decryption agreement", buffer_pt, array_pt)

    # --------------------------------------------------------------------------
    # Internals
    # --------------------------------------------------------------------------

    def _prepare(
        self,
        transformations: Sequence[CipherTransformation],
    ) -> List[Tuple[CipherTransformation, Tuple[TestVector, ...]]]:
        plan = []
        for transformation in transformations:
            self._factory.resolve(transformation, self._configuration)
            plan.append((transformation, self._corpus.lookup(transformation)))
        return plan

    def _run_transformation(
        self,
        transformation: CipherTransformation,
        vectors: Tuple[TestVector, ...],
    ) -> TransformationResult:
        result = TransformationResult(
            transformation=transformation.name,
            backend=self._configuration.backend_name or "",
            total_vectors=len(vectors),
        )

        start = time.perf_counter()
        for index, vector in enumerate(vectors):
            try:
                self.validate_vector(transformation, vector)
            except VectorError as e:
                e.annotate(transformation.name, index, vector.label)
                logger.error(f"Vector failed: {e}")
                # Нарушение порядка состояний - ошибка стенда, а не вектора
                if self._policy is FailurePolicy.FAIL_FAST or isinstance(
                    e, InvalidSessionStateError
                ):
                    raise
                result.failures.append(VectorFailure.from_error(e, vector.label))
            else:
                result.passed += 1
        result.elapsed_seconds = time.perf_counter() - start

        logger.info(result.summary())
        return result

    def _run_leg(
        self,
        session_cls: Type[CipherSession],
        transformation: CipherTransformation,
        direction: Direction,
        vector: TestVector,
        data: bytes,
    ) -> bytes:
        session = session_cls.open(
            self._factory,
            transformation,
            self._configuration,
            direction,
            vector.key,
            vector.iv,
        )
        return session.run(data)


def _check(leg: str, expected: bytes, actual: bytes) -> None:
    if expected != actual:
        raise AssertionMismatchError(leg, expected, actual)
