"""
Benchmark session.

A session walks the three user-triggered phases in strict order, each gated
on the previous one succeeding:

    UNINITIALIZED --initialize()--> INITIALIZED --size()--> SIZED --run()--> RAN
                                                   ^                          |
                                                   +---------- size() --------+

The session owns the VectorStore and hands it to the BenchmarkDriver for the
duration of one run. Re-sizing discards the previous vectors and re-zeroes
the backend buffer.
"""

import enum
from typing import Callable, Optional

from .analysis import ErrorAnalyzer
from .backends.base import AcceleratedBackend, Capability
from .driver import BenchmarkDriver
from .errors import (
    InitializationFailure,
    InvalidIterationCount,
    SessionStateError,
    SizeMismatch,
)
from .generator import RandomInputGenerator
from .logging import setup_tagged_logger
from .reference import ReferenceUpdater
from .report import BenchmarkReport
from .store import VectorStore
from .timing import PROFILE_PHASE

logger = setup_tagged_logger(__name__)


class SessionState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    SIZED = "sized"
    RAN = "ran"


class BenchmarkSession:
    """
    One benchmark session against one accelerated backend.

    Args:
        backend: Accelerated provider (not yet initialized)
        kernel: Kernel logical name (default: the backend's default_kernel)
        reference_only_fallback: If the backend reports UNAVAILABLE, continue
            without it instead of raising InitializationFailure
        fallback_size: Vector length used in reference-only mode
            (default: the backend's configured size)
        generator: Input generator (default: unseeded)
        samples: Spot-check elements included in the report
    """

    def __init__(
        self,
        backend: AcceleratedBackend,
        kernel: Optional[str] = None,
        reference_only_fallback: bool = False,
        fallback_size: Optional[int] = None,
        generator: Optional[RandomInputGenerator] = None,
        samples: int = 10,
    ):
        self.backend = backend
        self.kernel = kernel or backend.default_kernel
        self.reference_only_fallback = reference_only_fallback
        self.fallback_size = fallback_size if fallback_size is not None else backend.size
        self.generator = generator or RandomInputGenerator()
        self.analyzer = ErrorAnalyzer(samples=samples)
        self.reference = ReferenceUpdater()

        self.state = SessionState.UNINITIALIZED
        self.capability: Optional[Capability] = None
        self.store: Optional[VectorStore] = None
        self.report: Optional[BenchmarkReport] = None
        self._active_backend: Optional[AcceleratedBackend] = None

    @property
    def reference_only(self) -> bool:
        return self.state is not SessionState.UNINITIALIZED and self._active_backend is None

    def _require(self, *states: SessionState) -> None:
        if self.state not in states:
            allowed = ", ".join(s.value for s in states)
            raise SessionStateError(f"Session is {self.state.value}; expected one of: {allowed}")

    def initialize(self) -> Capability:
        """
        Bring up the accelerated backend and build its kernel.

        Raises:
            InitializationFailure: If the backend is unavailable and
                reference-only fallback is disabled, or the kernel is missing
        """
        self._require(SessionState.UNINITIALIZED)

        with PROFILE_PHASE("initialize", f"{self.backend.name} / {self.kernel}"):
            capability = self.backend.initialize(self.kernel)
        self.capability = capability

        if capability.available:
            logger.info(f"Backend {self.backend.name} available: "
                        f"{capability.device_class.name.lower()} device {capability.device_name}")
            self._active_backend = self.backend
        elif self.reference_only_fallback:
            logger.warning(f"Backend {self.backend.name} unavailable ({capability.reason}); "
                           f"continuing reference-only")
            self._active_backend = None
        else:
            raise InitializationFailure(
                f"Accelerated backend '{self.backend.name}' unavailable: {capability.reason or 'no device'}"
            )

        self.state = SessionState.INITIALIZED
        return capability

    def size(self) -> VectorStore:
        """
        Establish the session vector size and allocate zeroed vectors.

        Raises:
            SizeMismatch: If the backend-reported size is not usable
        """
        self._require(SessionState.INITIALIZED, SessionState.SIZED, SessionState.RAN)

        # Until allocation succeeds there are no usable vectors
        self.store = None
        self.report = None
        self.state = SessionState.INITIALIZED
        if self._active_backend is not None:
            with PROFILE_PHASE("size", f"{self.backend.name} allocate"):
                size = self._active_backend.allocate()
            if size != self._active_backend.size or size <= 0:
                raise SizeMismatch(self._active_backend.size, size, what="allocated backend buffer")
        else:
            size = self.fallback_size

        self.store = VectorStore(size)
        self.state = SessionState.SIZED
        logger.info(f"Vectors sized to {size} elements")
        return self.store

    def run(self, iterations: int, should_abort: Optional[Callable[[], bool]] = None) -> BenchmarkReport:
        """
        Run the benchmark once and analyze the result.

        Raises:
            InvalidIterationCount: If iterations <= 0 (the session stays SIZED)
            BackendUpdateFailure: If an accelerated update fails
        """
        self._require(SessionState.SIZED)

        driver = BenchmarkDriver(
            self.store,
            backend=self._active_backend,
            generator=self.generator,
            reference=self.reference,
        )
        try:
            with PROFILE_PHASE("run", f"{iterations} iteration(s)"):
                timing = driver.run(iterations, should_abort=should_abort)
        except InvalidIterationCount:
            raise
        except Exception:
            # Vectors may be part-way through an iteration; force a re-size
            self.store = None
            self.state = SessionState.INITIALIZED
            raise

        error = None
        if self._active_backend is not None:
            error = self.analyzer.summarize(self.store.reference_avg, self.store.accelerated_avg)

        self.report = BenchmarkReport(
            size=self.store.size,
            timing=timing,
            backend=self.backend.name if self._active_backend is not None else None,
            capability=self.capability if self._active_backend is not None else None,
            error=error,
        )
        self.state = SessionState.RAN
        return self.report
