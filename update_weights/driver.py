"""
Benchmark driver.

Runs the running-average update for t = 1..iterations on the reference
updater and the accelerated backend, feeding both the same freshly generated
input each iteration and timing each backend separately with a monotonic
clock. The accelerated result is fetched once, after the loop.

Abort requests are only honored between iterations, so both running
averages always reflect the same number of updates.
"""

import numbers
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .backends.base import AcceleratedBackend
from .errors import BackendUpdateFailure, InvalidIterationCount, SizeMismatch, UpdateWeightsError
from .generator import RandomInputGenerator
from .logging import setup_tagged_logger
from .reference import ReferenceUpdater
from .store import VectorStore
from .timing import elapsed_ms

logger = setup_tagged_logger(__name__)


@dataclass
class RunTiming:
    """
    Outcome of one driver run.

    Attributes:
        iterations_requested: Iteration count passed to run()
        iterations_completed: Updates applied to both backends
        aborted: True if an abort request stopped the loop early
        reference_ms: Cumulative reference update time
        accelerated_ms: Cumulative accelerated update time (None if reference-only)
        fetch_ms: Time of the single accelerated result round-trip (None if reference-only)
        reference_samples_ms: Per-iteration reference times
        accelerated_samples_ms: Per-iteration accelerated times
    """

    iterations_requested: int
    iterations_completed: int = 0
    aborted: bool = False
    reference_ms: float = 0.0
    accelerated_ms: Optional[float] = None
    fetch_ms: Optional[float] = None
    reference_samples_ms: List[float] = field(default_factory=list, repr=False)
    accelerated_samples_ms: List[float] = field(default_factory=list, repr=False)


class BenchmarkDriver:
    """
    Orchestrates one benchmark run over a VectorStore.

    Args:
        store: Session vectors, sized to the backend-reported N
        backend: Initialized and allocated accelerated backend, or None for
            reference-only mode
        generator: Source of input vectors
        reference: Reference updater
    """

    def __init__(
        self,
        store: VectorStore,
        backend: Optional[AcceleratedBackend] = None,
        generator: Optional[RandomInputGenerator] = None,
        reference: Optional[ReferenceUpdater] = None,
    ):
        self.store = store
        self.backend = backend
        self.generator = generator or RandomInputGenerator()
        self.reference = reference or ReferenceUpdater()

    def run(self, iterations: int, should_abort: Optional[Callable[[], bool]] = None) -> RunTiming:
        """
        Run `iterations` updates on both backends.

        Args:
            iterations: Number of updates, > 0
            should_abort: Polled before each iteration; returning True stops
                the loop cleanly

        Raises:
            InvalidIterationCount: Before any work, if iterations <= 0
            SizeMismatch: If the store or fetched result disagree with N
            BackendUpdateFailure: If an accelerated update fails; the run stops
        """
        if isinstance(iterations, bool) or not isinstance(iterations, numbers.Integral) or iterations <= 0:
            raise InvalidIterationCount(f"Iteration count must be a positive integer, got {iterations!r}")
        iterations = int(iterations)

        store = self.store
        store.check_consistent()
        backend = self.backend
        if backend is not None and backend.size != store.size:
            raise SizeMismatch(store.size, backend.size, what="accelerated backend buffer")

        timing = RunTiming(iterations_requested=iterations)
        if backend is not None:
            timing.accelerated_ms = 0.0
        shared = store.shared_input()

        logger.info(f"Running {iterations} iteration(s) on {store.size} elements"
                    f"{'' if backend is not None else ' (reference only)'}")

        for t in range(1, iterations + 1):
            if should_abort is not None and should_abort():
                timing.aborted = True
                logger.warning(f"Run aborted before iteration {t} of {iterations}")
                break

            self.generator.fill(store.input)

            start = time.perf_counter()
            self.reference.update(store.reference_avg, shared, t)
            sample = elapsed_ms(start)
            timing.reference_samples_ms.append(sample)
            timing.reference_ms += sample

            if backend is not None:
                start = time.perf_counter()
                try:
                    status = backend.update(shared, t)
                except UpdateWeightsError:
                    raise
                except Exception as e:
                    raise BackendUpdateFailure(t, f"{type(e).__name__}: {e}") from e
                sample = elapsed_ms(start)
                if not status:
                    raise BackendUpdateFailure(t)
                timing.accelerated_samples_ms.append(sample)
                timing.accelerated_ms += sample

            timing.iterations_completed = t

        if backend is not None:
            start = time.perf_counter()
            result = backend.fetch_result()
            timing.fetch_ms = elapsed_ms(start)
            store.store_accelerated(result)

        accelerated = "n/a" if timing.accelerated_ms is None else f"{timing.accelerated_ms:.3f} ms"
        logger.info(f"Completed {timing.iterations_completed} iteration(s): "
                    f"reference {timing.reference_ms:.3f} ms, accelerated {accelerated}")
        return timing
