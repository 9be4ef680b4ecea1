"""
Pseudo-random input generation.

Each iteration draws a fresh input vector with elements uniform in [0, 1).
Production runs seed from OS entropy; tests pass a seed for determinism.
"""

from typing import Optional

import numpy as np


class RandomInputGenerator:
    """Fills float32 buffers in place from a numpy Generator."""

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def reseed(self, seed: Optional[int] = None) -> None:
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def fill(self, buffer: np.ndarray) -> None:
        """Overwrite every element of `buffer` with an independent draw in [0, 1)."""
        if buffer.dtype != np.float32:
            raise TypeError(f"Input buffer must be float32, got {buffer.dtype}")
        self._rng.random(out=buffer, dtype=np.float32)
