"""Fake backends and generators shared by the update_weights tests."""

from typing import List, Optional, Tuple

import numpy as np

from update_weights.backends.base import AcceleratedBackend, Capability, DeviceClass
from update_weights.reference import update_weights


class HostBackend(AcceleratedBackend):
    """In-process backend applying the recurrence with NumPy, recording every call."""

    name = "host"
    description = "In-process test backend"
    default_kernel = "host_kernel"

    def __init__(self, size: int, device_class: DeviceClass = DeviceClass.DISCRETE):
        super().__init__(size)
        self.device_class = device_class
        self.calls: List[Tuple[str, object]] = []
        self.inputs_seen: List[np.ndarray] = []

    def initialize(self, kernel_name: str) -> Capability:
        self.calls.append(("initialize", kernel_name))
        self.capability = Capability(self.device_class, device_name="host", compute_units=1, kernel=kernel_name)
        return self.capability

    def allocate(self) -> int:
        self.calls.append(("allocate", None))
        self._weights = np.zeros(self.size, dtype=np.float32)
        return self.size

    def update(self, input: np.ndarray, t: int) -> bool:
        self.calls.append(("update", t))
        self.inputs_seen.append(np.array(input, copy=True))
        w_old, w_new = update_weights(t)
        self._weights *= w_old
        self._weights += w_new * input
        return True

    def fetch_result(self) -> np.ndarray:
        self.calls.append(("fetch_result", None))
        return self._weights.copy()

    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]


class UnavailableBackend(HostBackend):
    """Backend whose device discovery always fails."""

    name = "unavailable"

    def initialize(self, kernel_name: str) -> Capability:
        self.calls.append(("initialize", kernel_name))
        self.capability = Capability.unavailable("no compatible device", kernel=kernel_name)
        return self.capability


class FailingBackend(HostBackend):
    """Backend whose update fails at a chosen iteration, by status or by raising."""

    name = "failing"

    def __init__(self, size: int, fail_at: int = 2, raise_error: Optional[Exception] = None):
        super().__init__(size)
        self.fail_at = fail_at
        self.raise_error = raise_error

    def update(self, input: np.ndarray, t: int) -> bool:
        if t == self.fail_at:
            self.calls.append(("update", t))
            if self.raise_error is not None:
                raise self.raise_error
            return False
        return super().update(input, t)


class WrongSizeBackend(HostBackend):
    """Backend whose fetched result has the wrong length."""

    name = "wrong_size"

    def fetch_result(self) -> np.ndarray:
        self.calls.append(("fetch_result", None))
        return np.zeros(self.size + 1, dtype=np.float32)


class ScriptedGenerator:
    """Generator that replays a fixed list of input vectors."""

    def __init__(self, vectors):
        self.vectors = [np.asarray(v, dtype=np.float32) for v in vectors]
        self.fills = 0

    def fill(self, buffer: np.ndarray) -> None:
        buffer[:] = self.vectors[self.fills % len(self.vectors)]
        self.fills += 1




class MutatingBackend(HostBackend):
    """Backend that tries to write into the shared input buffer."""

    name = "mutating"

    def update(self, input: np.ndarray, t: int) -> bool:
        input[0] = -1.0
        return super().update(input, t)
