"""
Numba accelerated backend - JIT-compiled parallel kernel.

The kernel is plain Python registered under a logical name and compiled with
`numba.njit(parallel=True)` when the backend is initialized, so the compile
cost is paid once, outside the timed loop.
"""

import numpy as np

try:
    import numba as nb
    HAVE_NUMBA = True
except ImportError:
    nb = None
    HAVE_NUMBA = False

from ..errors import InitializationFailure, SizeMismatch
from ..logging import setup_tagged_logger
from .base import AcceleratedBackend, Capability, DeviceClass

logger = setup_tagged_logger(__name__)


def running_average(w, x, t):
    t32 = np.float32(t)
    w_old = (t32 - np.float32(1.0)) / t32
    w_new = np.float32(1.0) / t32
    for i in nb.prange(w.shape[0]):
        w[i] = w_old * w[i] + w_new * x[i]


def fill_zero(w):
    for i in nb.prange(w.shape[0]):
        w[i] = np.float32(0.0)


# Kernel sources by logical name
KERNELS = {
    "running_average": running_average,
}


class NumbaBackend(AcceleratedBackend):
    """
    Running average updated by a Numba `prange` loop.

    Numba parallelizes over host threads, so the device is reported as
    INTEGRATED.
    """

    name = "numba"
    description = "Numba parallel JIT kernel (compiled at initialize)"
    default_kernel = "running_average"

    def __init__(self, size: int):
        super().__init__(size)
        self._kernel = None
        self._fill_zero = None

    def initialize(self, kernel_name: str) -> Capability:
        kernel_name = kernel_name or self.default_kernel
        if kernel_name not in KERNELS:
            raise InitializationFailure(
                f"Unknown numba kernel '{kernel_name}' (available: {', '.join(sorted(KERNELS))})"
            )

        if not HAVE_NUMBA:
            logger.warning("numba is not installed")
            self.capability = Capability.unavailable("numba not installed", kernel=kernel_name)
            return self.capability

        self._kernel = nb.njit(parallel=True)(KERNELS[kernel_name])
        self._fill_zero = nb.njit(parallel=True)(fill_zero)

        # Compile for the exact argument types the driver passes (read-only input)
        probe = np.zeros(2, dtype=np.float32)
        probe_input = np.zeros(2, dtype=np.float32)
        probe_input.flags.writeable = False
        try:
            self._fill_zero(probe)
            self._kernel(probe, probe_input, 1)
        except Exception as e:
            self.capability = Capability.unavailable(f"kernel build failed: {e}", kernel=kernel_name)
            logger.error(f"Numba kernel {kernel_name} failed to compile: {e}")
            return self.capability

        self.capability = Capability(
            DeviceClass.INTEGRATED,
            device_name=f"numba {nb.__version__} ({nb.threading_layer()} threads)",
            compute_units=int(nb.get_num_threads()),
            kernel=kernel_name,
        )
        logger.info(f"Numba kernel {kernel_name} compiled for {self.capability.compute_units} thread(s)")
        return self.capability

    def allocate(self) -> int:
        if not self.is_ready:
            raise InitializationFailure("allocate() called before a successful initialize()")
        self._weights = np.empty(self.size, dtype=np.float32)
        self._fill_zero(self._weights)
        return self.size

    def update(self, input: np.ndarray, t: int) -> bool:
        if input.shape[0] != self.size:
            raise SizeMismatch(self.size, input.shape[0], what="input vector")
        self._kernel(self._weights, input, t)
        return True

    def fetch_result(self) -> np.ndarray:
        return self._weights.copy()
