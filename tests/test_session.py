"""Tests for the benchmark session state machine."""

import numpy as np
import pytest

from fakes import FailingBackend, HostBackend, ScriptedGenerator, UnavailableBackend
from update_weights.analysis import UNDEFINED
from update_weights.backends.base import AcceleratedBackend, Capability, DeviceClass
from update_weights.errors import (
    BackendUpdateFailure,
    InitializationFailure,
    InvalidIterationCount,
    SessionStateError,
    SizeMismatch,
)
from update_weights.generator import RandomInputGenerator
from update_weights.session import BenchmarkSession, SessionState
from update_weights.timing import TIMING_RECORDS

UNIT_INPUTS = [[1, 0, 0, 0], [0, 1, 0, 0], [0, 0, 1, 0]]


class TestPhaseOrder:
    """Tests for strict initialize -> size -> run ordering."""

    def test_full_session(self) -> None:
        backend = HostBackend(4)
        session = BenchmarkSession(backend, generator=ScriptedGenerator(UNIT_INPUTS))

        capability = session.initialize()
        assert capability.device_class is DeviceClass.DISCRETE
        assert session.state is SessionState.INITIALIZED

        store = session.size()
        assert store.size == 4
        assert session.state is SessionState.SIZED

        report = session.run(3)
        assert session.state is SessionState.RAN
        assert report.error.relative_error == 0.0
        np.testing.assert_allclose(store.reference_avg, [1 / 3, 1 / 3, 1 / 3, 0], rtol=1e-6)
        assert backend.call_names() == ["initialize", "allocate", "update", "update", "update", "fetch_result"]

    def test_uses_backend_default_kernel(self) -> None:
        backend = HostBackend(4)
        BenchmarkSession(backend).initialize()
        assert backend.calls[0] == ("initialize", "host_kernel")

    def test_size_before_initialize_fails(self) -> None:
        session = BenchmarkSession(HostBackend(4))
        with pytest.raises(SessionStateError):
            session.size()

    def test_run_before_size_fails(self) -> None:
        session = BenchmarkSession(HostBackend(4))
        session.initialize()
        with pytest.raises(SessionStateError):
            session.run(1)

    def test_initialize_twice_fails(self) -> None:
        session = BenchmarkSession(HostBackend(4))
        session.initialize()
        with pytest.raises(SessionStateError):
            session.initialize()

    def test_second_run_requires_resize(self) -> None:
        session = BenchmarkSession(HostBackend(4), generator=RandomInputGenerator(seed=5))
        session.initialize()
        session.size()
        session.run(2)
        with pytest.raises(SessionStateError):
            session.run(2)

    def test_resize_starts_from_zero(self) -> None:
        backend = HostBackend(4)
        session = BenchmarkSession(backend, generator=ScriptedGenerator(UNIT_INPUTS))
        session.initialize()
        session.size()
        first = session.run(3)

        store = session.size()
        assert not store.reference_avg.any()
        assert session.report is None
        second = session.run(1)
        assert second.error.relative_error == 0.0
        assert first is not second

    def test_invalid_iterations_keep_session_sized(self) -> None:
        session = BenchmarkSession(HostBackend(4))
        session.initialize()
        session.size()
        with pytest.raises(InvalidIterationCount):
            session.run(0)
        assert session.state is SessionState.SIZED

    def test_phases_are_timed(self) -> None:
        session = BenchmarkSession(HostBackend(4), generator=RandomInputGenerator(seed=1))
        session.initialize()
        session.size()
        session.run(2)
        assert [rec['label'] for rec in TIMING_RECORDS()] == ["initialize", "size", "run"]


class TestUnavailableBackend:
    """Tests for a backend that reports UNAVAILABLE."""

    def test_raises_without_fallback_and_stops_calling_backend(self) -> None:
        backend = UnavailableBackend(4)
        session = BenchmarkSession(backend)
        with pytest.raises(InitializationFailure, match="no compatible device"):
            session.initialize()
        assert session.state is SessionState.UNINITIALIZED
        with pytest.raises(SessionStateError):
            session.size()
        assert backend.call_names() == ["initialize"]

    def test_fallback_runs_reference_only(self) -> None:
        backend = UnavailableBackend(4)
        session = BenchmarkSession(
            backend, reference_only_fallback=True, fallback_size=6, generator=RandomInputGenerator(seed=2)
        )
        capability = session.initialize()
        assert not capability.available
        assert session.reference_only

        store = session.size()
        report = session.run(3)

        assert store.size == 6
        assert report.reference_only
        assert report.error is None
        assert report.backend is None
        assert backend.call_names() == ["initialize"]


class TestFailures:
    """Tests for run-level failures."""

    def test_update_failure_forces_resize(self) -> None:
        session = BenchmarkSession(FailingBackend(4, fail_at=2), generator=RandomInputGenerator(seed=9))
        session.initialize()
        session.size()
        with pytest.raises(BackendUpdateFailure):
            session.run(5)
        assert session.state is SessionState.INITIALIZED
        assert session.store is None
        with pytest.raises(SessionStateError):
            session.run(1)

    def test_allocate_size_disagreement_raises(self) -> None:
        class ShrinkingBackend(HostBackend):
            def allocate(self) -> int:
                super().allocate()
                return self.size - 1

        session = BenchmarkSession(ShrinkingBackend(4))
        session.initialize()
        with pytest.raises(SizeMismatch):
            session.size()
        assert session.store is None

    def test_failed_resize_requires_new_size(self) -> None:
        class FlakyAllocateBackend(HostBackend):
            def allocate(self) -> int:
                if self.call_names().count("allocate") >= 1:
                    self.calls.append(("allocate", None))
                    raise MemoryError("out of device memory")
                return super().allocate()

        session = BenchmarkSession(FlakyAllocateBackend(4))
        session.initialize()
        session.size()
        with pytest.raises(MemoryError):
            session.size()
        assert session.state is SessionState.INITIALIZED
        assert session.store is None
        with pytest.raises(SessionStateError):
            session.run(1)

    def test_zero_inputs_give_undefined_error(self) -> None:
        session = BenchmarkSession(HostBackend(4), generator=ScriptedGenerator([[0, 0, 0, 0]]))
        session.initialize()
        session.size()
        report = session.run(2)
        assert report.error.relative_error is UNDEFINED


class TestCapability:
    """Tests for the capability descriptor."""

    def test_unavailable_helper(self) -> None:
        capability = Capability.unavailable("missing driver", kernel="k")
        assert not capability.available
        assert capability.to_dict()["device_class"] == "unavailable"

    def test_abstract_backend_cannot_be_instantiated(self) -> None:
        with pytest.raises(TypeError):
            AcceleratedBackend(4)
