"""
Base class for accelerated backends.

An accelerated backend applies the same running-average recurrence as the
reference updater, on its own exclusively owned buffer, through four
operations:

- initialize(kernel_name): bring up the device and build the kernel
- allocate(): establish the session vector size N, zero the buffer
- update(input, t): apply one iteration, return success status
- fetch_result(): copy the running average back to the host
"""

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

import numpy as np


class DeviceClass(enum.IntEnum):
    """Hardware classification reported by `initialize`."""

    UNAVAILABLE = 0
    DISCRETE = 1      # dedicated device memory
    INTEGRATED = 2    # host-unified memory


@dataclass(frozen=True)
class Capability:
    """
    Capability descriptor returned by `AcceleratedBackend.initialize`.

    Attributes:
        device_class: UNAVAILABLE, DISCRETE or INTEGRATED
        device_name: Human-readable device or runtime name
        compute_units: Parallel execution lanes available to the kernel
        kernel: Logical name of the kernel that was built
        reason: Why the device is unavailable, if it is
    """

    device_class: DeviceClass
    device_name: str = ""
    compute_units: int = 0
    kernel: str = ""
    reason: str = ""

    @property
    def available(self) -> bool:
        return self.device_class is not DeviceClass.UNAVAILABLE

    @classmethod
    def unavailable(cls, reason: str, kernel: str = "") -> "Capability":
        return cls(DeviceClass.UNAVAILABLE, kernel=kernel, reason=reason)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["device_class"] = self.device_class.name.lower()
        data["available"] = self.available
        return data


class AcceleratedBackend(ABC):
    """
    Abstract base class for accelerated running-average providers.

    Attributes:
        name: Short identifier used by the backend registry
        description: Human-readable description
        default_kernel: Kernel logical name used when none is configured
    """

    name: str = ""
    description: str = ""
    default_kernel: str = ""

    def __init__(self, size: int):
        """
        Initialize backend.

        Args:
            size: Vector length N the backend will report from allocate()
        """
        self.size = int(size)
        self.capability: Optional[Capability] = None
        self._weights: Optional[np.ndarray] = None

    @abstractmethod
    def initialize(self, kernel_name: str) -> Capability:
        """Discover the device and build `kernel_name`. Never raises for a missing device."""
        pass

    @abstractmethod
    def allocate(self) -> int:
        """Allocate and zero the running-average buffer. Returns N."""
        pass

    @abstractmethod
    def update(self, input: np.ndarray, t: int) -> bool:
        """Apply iteration `t` with the read-only `input`. Returns True on success."""
        pass

    @abstractmethod
    def fetch_result(self) -> np.ndarray:
        """Return a host copy of the running average."""
        pass

    @property
    def is_ready(self) -> bool:
        return self.capability is not None and self.capability.available
