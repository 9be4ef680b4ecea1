"""
Reference running-average update.

The in-process, single-threaded ground truth for the accelerated backends.
After `t` updates starting from zeros, `avg` holds the element-wise mean of
the `t` inputs seen so far:

    avg[i] = ((t - 1) / t) * avg[i] + (1 / t) * input[i]

Both weights are computed in float32, as the compiled kernels do, so the two
paths are compared at the same precision.
"""

import numbers

import numpy as np

from .errors import InvalidIterationCount, SizeMismatch


def update_weights(t: int):
    """Return the float32 (old, new) weights for iteration `t`."""
    if isinstance(t, bool) or not isinstance(t, numbers.Integral) or t <= 0:
        raise InvalidIterationCount(f"Iteration index must be a positive integer, got {t!r}")
    t32 = np.float32(t)
    return (t32 - np.float32(1.0)) / t32, np.float32(1.0) / t32


class ReferenceUpdater:
    """Sequential NumPy implementation of the incremental-mean recurrence."""

    name = "reference"

    def update(self, avg: np.ndarray, input: np.ndarray, t: int) -> None:
        """
        Apply one update to `avg` in place.

        Args:
            avg: Running average, float32, mutated in place
            input: Input vector of the same length, read only
            t: Iteration index, starting at 1

        Raises:
            InvalidIterationCount: If t is not a positive integer
            SizeMismatch: If the vectors differ in length
        """
        w_old, w_new = update_weights(t)
        input = np.asarray(input, dtype=np.float32)
        if avg.shape != input.shape:
            raise SizeMismatch(avg.size, input.size, what="input vector")
        if avg.dtype != np.float32:
            raise TypeError(f"Running average must be float32, got {avg.dtype}")

        np.multiply(avg, w_old, out=avg)
        avg += w_new * input
