"""
Vector storage for one benchmark session.

VectorStore owns the three same-length float32 vectors the benchmark works
on: the shared input, the reference running average and the accelerated
running average (as last fetched from the backend).
"""

from dataclasses import dataclass, field

import numpy as np

from .errors import SizeMismatch

DTYPE = np.float32


def _zeros(size: int) -> np.ndarray:
    return np.zeros(size, dtype=DTYPE)


@dataclass
class VectorStore:
    """
    Session-scoped vectors, all of length `size`.

    Attributes:
        size: Session vector length N, fixed once the backend reports it
        input: Input vector regenerated every iteration
        reference_avg: Running average maintained by the reference updater
        accelerated_avg: Running average fetched from the accelerated backend
    """

    size: int
    input: np.ndarray = field(init=False, repr=False)
    reference_avg: np.ndarray = field(init=False, repr=False)
    accelerated_avg: np.ndarray = field(init=False, repr=False)

    def __post_init__(self):
        if isinstance(self.size, bool) or not isinstance(self.size, (int, np.integer)) or self.size <= 0:
            raise ValueError(f"Vector size must be a positive integer, got {self.size!r}")
        self.size = int(self.size)
        self.reset()

    def reset(self) -> None:
        """Zero all three vectors (start of a fresh run)."""
        self.input = _zeros(self.size)
        self.reference_avg = _zeros(self.size)
        self.accelerated_avg = _zeros(self.size)

    def shared_input(self) -> np.ndarray:
        """Read-only view of the input buffer handed to both backends."""
        view = self.input.view()
        view.flags.writeable = False
        return view

    def store_accelerated(self, result) -> None:
        """Copy a fetched backend vector into `accelerated_avg`."""
        result = np.asarray(result)
        if result.ndim != 1 or result.shape[0] != self.size:
            raise SizeMismatch(self.size, int(result.size), what="fetched accelerated vector")
        self.accelerated_avg[:] = result

    def check_consistent(self) -> None:
        """Raise SizeMismatch unless every vector has length `size`."""
        for name in ("input", "reference_avg", "accelerated_avg"):
            vector = getattr(self, name)
            if vector.shape != (self.size,):
                raise SizeMismatch(self.size, int(vector.size), what=name)
