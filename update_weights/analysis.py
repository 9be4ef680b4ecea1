"""
analysis.py
===========

Backend agreement metrics.

The sole correctness gate between the reference and accelerated running
averages is the relative error

    ||reference - candidate||_2 / ||reference||_2

accumulated in float64. No threshold is enforced here; callers judge the
number. A zero-norm reference yields the UNDEFINED sentinel instead of a
division by zero.

Classes:
--------
- ErrorMetric: Sentinel enum (UNDEFINED).
- ErrorSummary: Relative error plus per-element difference statistics.
- ErrorAnalyzer: Computes summaries with a fixed number of spot-check samples.

Functions:
----------
- relative_error: Relative L2 error of `candidate` against `reference`.
- format_error_percent: Render a relative error as a percentage string.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple, Union

import numpy as np

from .errors import SizeMismatch


class ErrorMetric(enum.Enum):
    """Distinguished non-numeric error results."""

    UNDEFINED = "undefined"


UNDEFINED = ErrorMetric.UNDEFINED

RelativeError = Union[float, ErrorMetric]


def _as_float64(reference, candidate) -> Tuple[np.ndarray, np.ndarray]:
    ref = np.asarray(reference, dtype=np.float64).ravel()
    cand = np.asarray(candidate, dtype=np.float64).ravel()
    if ref.shape != cand.shape:
        raise SizeMismatch(ref.size, cand.size, what="candidate vector")
    return ref, cand


def relative_error(reference, candidate) -> RelativeError:
    """
    Relative L2 error of `candidate` against `reference`.

    Returns:
        float >= 0, or UNDEFINED when ||reference||_2 == 0

    Raises:
        SizeMismatch: If the vectors differ in length
    """
    ref, cand = _as_float64(reference, candidate)
    ref_norm = np.linalg.norm(ref)
    if ref_norm == 0.0:
        return UNDEFINED
    return float(np.linalg.norm(ref - cand) / ref_norm)


def format_error_percent(error: RelativeError, precision: int = 6) -> str:
    if error is UNDEFINED:
        return "undefined (zero-norm reference)"
    return f"{error * 100:.{precision}f}%"


@dataclass
class ErrorSummary:
    """
    Agreement statistics between two running-average vectors.

    Attributes:
        relative_error: Relative L2 error, or UNDEFINED
        max_abs_diff: Largest element-wise absolute difference
        mean_abs_diff: Mean element-wise absolute difference
        samples: (index, reference, candidate) for the first few elements
    """

    relative_error: RelativeError
    max_abs_diff: float
    mean_abs_diff: float
    samples: List[Tuple[int, float, float]] = field(default_factory=list)

    @property
    def is_defined(self) -> bool:
        return self.relative_error is not UNDEFINED

    @property
    def relative_error_percent(self) -> str:
        return format_error_percent(self.relative_error)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'relative_error': self.relative_error if self.is_defined else self.relative_error.value,
            'max_abs_diff': self.max_abs_diff,
            'mean_abs_diff': self.mean_abs_diff,
            'samples': [list(s) for s in self.samples],
        }


class ErrorAnalyzer:
    """Compares a candidate vector against the reference after a run."""

    def __init__(self, samples: int = 10):
        if samples < 0:
            raise ValueError(f"samples must be non-negative, got {samples}")
        self.samples = samples

    def relative_error(self, reference, candidate) -> RelativeError:
        return relative_error(reference, candidate)

    def summarize(self, reference, candidate) -> ErrorSummary:
        ref, cand = _as_float64(reference, candidate)
        if ref.size:
            diff = np.abs(ref - cand)
            max_abs, mean_abs = float(diff.max()), float(diff.mean())
        else:
            max_abs = mean_abs = 0.0

        count = min(self.samples, ref.size)
        return ErrorSummary(
            relative_error=relative_error(ref, cand),
            max_abs_diff=max_abs,
            mean_abs_diff=mean_abs,
            samples=[(i, float(ref[i]), float(cand[i])) for i in range(count)],
        )
