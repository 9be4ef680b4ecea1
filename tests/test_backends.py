"""Tests for backend resolution and the built-in accelerated providers."""

import types

import numpy as np
import pytest

from fakes import HostBackend
from update_weights.backends import BACKENDS, list_backends, load_backend_class, resolve_backend
from update_weights.backends import cython_backend
from update_weights.backends.base import DeviceClass
from update_weights.backends.cython_backend import CythonBackend
from update_weights.backends.numba_backend import NumbaBackend
from update_weights.errors import InitializationFailure, SizeMismatch
from update_weights.generator import RandomInputGenerator
from update_weights.session import BenchmarkSession


class TestRegistry:
    """Tests for backend lookup."""

    def test_registered_backends(self) -> None:
        assert set(BACKENDS) == {"cython", "numba"}
        info = list_backends()
        assert info["cython"]["default_kernel"] == "running_average.pyx"
        assert info["numba"]["default_kernel"] == "running_average"

    def test_resolve_by_name(self) -> None:
        backend = resolve_backend("numba", size=128)
        assert isinstance(backend, NumbaBackend)
        assert backend.size == 128

    def test_resolve_by_import_path(self) -> None:
        backend = resolve_backend("fakes:HostBackend", size=8)
        assert isinstance(backend, HostBackend)

    def test_unknown_name(self) -> None:
        with pytest.raises(InitializationFailure, match="Unknown backend"):
            load_backend_class("opencl")

    def test_unimportable_module(self) -> None:
        with pytest.raises(InitializationFailure, match="Cannot import"):
            load_backend_class("no_such_module_here:Backend")

    def test_path_must_name_a_backend(self) -> None:
        with pytest.raises(InitializationFailure, match="not an AcceleratedBackend"):
            load_backend_class("fakes:ScriptedGenerator")


class TestCythonBackend:
    """Tests for the Cython OpenMP provider."""

    def test_missing_kernel_resource(self) -> None:
        with pytest.raises(InitializationFailure, match="not found"):
            CythonBackend(16).initialize("no_such_kernel.pyx")

    def test_kernel_must_be_cython_source(self) -> None:
        backend = CythonBackend(16)
        with pytest.raises(InitializationFailure, match=r"\.pyx"):
            backend.initialize("__init__.py")
        assert not backend.is_ready

    def test_kernel_module_without_kernel_functions(self, monkeypatch) -> None:
        real_import = cython_backend.importlib.import_module

        def import_module(name, package=None):
            if name.endswith(".running_average"):
                return types.ModuleType(name)
            return real_import(name, package)

        monkeypatch.setattr(cython_backend.importlib, "import_module", import_module)
        backend = CythonBackend(16)
        with pytest.raises(InitializationFailure, match="lacks max_threads, fill_zero, update_weights"):
            backend.initialize(backend.default_kernel)
        assert not backend.is_ready

    def test_allocate_requires_initialize(self) -> None:
        with pytest.raises(InitializationFailure):
            CythonBackend(16).allocate()

    def test_agrees_with_reference(self) -> None:
        pytest.importorskip("update_weights.backends._cython.running_average")
        session = BenchmarkSession(CythonBackend(10_000), generator=RandomInputGenerator(seed=4))
        capability = session.initialize()
        assert capability.device_class is DeviceClass.INTEGRATED
        assert capability.compute_units >= 1
        session.size()
        report = session.run(12)
        assert report.error.relative_error < 1e-6

    def test_rejects_wrong_input_length(self) -> None:
        pytest.importorskip("update_weights.backends._cython.running_average")
        backend = CythonBackend(8)
        backend.initialize(backend.default_kernel)
        backend.allocate()
        with pytest.raises(SizeMismatch):
            backend.update(np.zeros(4, dtype=np.float32), 1)


class TestNumbaBackend:
    """Tests for the Numba JIT provider."""

    def test_unknown_kernel(self) -> None:
        with pytest.raises(InitializationFailure, match="Unknown numba kernel"):
            NumbaBackend(16).initialize("fft")

    def test_allocate_requires_initialize(self) -> None:
        with pytest.raises(InitializationFailure):
            NumbaBackend(16).allocate()

    def test_agrees_with_reference(self) -> None:
        pytest.importorskip("numba")
        session = BenchmarkSession(NumbaBackend(10_000), generator=RandomInputGenerator(seed=4))
        capability = session.initialize()
        assert capability.available
        assert capability.device_class is DeviceClass.INTEGRATED
        session.size()
        report = session.run(12)
        assert report.error.relative_error < 1e-6

    def test_allocate_zeroes_buffer(self) -> None:
        pytest.importorskip("numba")
        backend = NumbaBackend(32)
        backend.initialize(backend.default_kernel)
        backend.allocate()
        backend.update(np.ones(32, dtype=np.float32), 1)
        backend.allocate()
        assert not backend.fetch_result().any()

    def test_unavailable_without_numba(self, monkeypatch) -> None:
        import update_weights.backends.numba_backend as numba_backend

        monkeypatch.setattr(numba_backend, "HAVE_NUMBA", False)
        capability = NumbaBackend(16).initialize("running_average")
        assert not capability.available
        assert "numba" in capability.reason
