"""
Cython accelerated backend - OpenMP-parallel compiled kernel.

Wrapper for the Cython-compiled running-average kernel. Reports the device
as unavailable if the kernel module was not compiled at install time.
"""

import importlib
from importlib import resources
from pathlib import PurePosixPath

import numpy as np

from ..errors import InitializationFailure, SizeMismatch
from ..logging import setup_tagged_logger
from .base import AcceleratedBackend, Capability, DeviceClass

logger = setup_tagged_logger(__name__)

KERNEL_PACKAGE = "update_weights.backends._cython"
KERNEL_FUNCTIONS = ("max_threads", "fill_zero", "update_weights")


class CythonBackend(AcceleratedBackend):
    """
    Running average updated by a Cython `prange` loop over typed memoryviews.

    The kernel runs on host memory, so the device is reported as INTEGRATED.
    The buffer is owned by the backend and only copied out by fetch_result().
    """

    name = "cython"
    description = "Cython OpenMP kernel (compiled at install time)"
    default_kernel = "running_average.pyx"

    def __init__(self, size: int):
        super().__init__(size)
        self._module = None

    def initialize(self, kernel_name: str) -> Capability:
        kernel_name = kernel_name or self.default_kernel
        if PurePosixPath(kernel_name).suffix != ".pyx":
            raise InitializationFailure(f"Kernel '{kernel_name}' is not a Cython source (.pyx)")
        if not resources.files(KERNEL_PACKAGE).joinpath(kernel_name).is_file():
            raise InitializationFailure(f"Kernel resource '{kernel_name}' not found in {KERNEL_PACKAGE}")

        module_name = f"{KERNEL_PACKAGE}.{PurePosixPath(kernel_name).stem}"
        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            logger.warning(f"Compiled kernel {module_name} is not importable: {e}")
            self.capability = Capability.unavailable(f"kernel not compiled: {e}", kernel=kernel_name)
            return self.capability

        missing = [fn for fn in KERNEL_FUNCTIONS if not callable(getattr(module, fn, None))]
        if missing:
            raise InitializationFailure(f"Kernel module {module_name} lacks {', '.join(missing)}")
        self._module = module

        self.capability = Capability(
            DeviceClass.INTEGRATED,
            device_name="OpenMP host (Cython)",
            compute_units=int(self._module.max_threads()),
            kernel=kernel_name,
        )
        logger.info(f"Cython kernel {kernel_name} ready on {self.capability.compute_units} thread(s)")
        return self.capability

    def allocate(self) -> int:
        if not self.is_ready:
            raise InitializationFailure("allocate() called before a successful initialize()")
        self._weights = np.empty(self.size, dtype=np.float32)
        self._module.fill_zero(self._weights)
        logger.debug(f"Allocated {self.size} float32 weights")
        return self.size

    def update(self, input: np.ndarray, t: int) -> bool:
        if input.shape[0] != self.size:
            raise SizeMismatch(self.size, input.shape[0], what="input vector")
        self._module.update_weights(self._weights, input, t)
        return True

    def fetch_result(self) -> np.ndarray:
        return self._weights.copy()
