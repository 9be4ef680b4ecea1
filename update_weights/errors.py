"""
errors.py
=========

Exception taxonomy for the update-weights benchmark.

Every failure surfaces to the orchestrating layer (session, CLI); nothing in
the core prints and continues.

Classes:
--------
- UpdateWeightsError: Base class for all benchmark errors.
- InitializationFailure: Accelerated backend unavailable or kernel resource missing.
- SizeMismatch: Vector dimensions disagree with the backend-reported size.
- InvalidIterationCount: Non-positive iteration count.
- BackendUpdateFailure: A single accelerated update failed.
- SessionStateError: Session phase invoked out of order.
"""


class UpdateWeightsError(Exception):
    """Base class for all update-weights errors."""


class InitializationFailure(UpdateWeightsError):
    """The accelerated backend could not be brought up."""


class SizeMismatch(UpdateWeightsError):
    """A vector length disagrees with the session size N."""

    def __init__(self, expected: int, actual: int, what: str = "vector"):
        super().__init__(f"{what} has length {actual}, expected {expected}")
        self.expected = expected
        self.actual = actual
        self.what = what


class InvalidIterationCount(UpdateWeightsError, ValueError):
    """Iteration count or index is not a positive integer."""


class BackendUpdateFailure(UpdateWeightsError):
    """The accelerated backend failed to apply the update for iteration `t`."""

    def __init__(self, t: int, reason: str = "backend reported failure"):
        super().__init__(f"accelerated update failed at iteration {t}: {reason}")
        self.t = t


class SessionStateError(UpdateWeightsError):
    """A session phase was requested from the wrong state."""
