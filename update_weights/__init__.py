"""
update_weights
==============

A micro-benchmark that maintains a running average of random float32 input
vectors on a sequential reference path and a parallel accelerated backend,
times both and reports how closely they agree.

Modules:
--------
- session: Initialize / size / run state machine.
- driver: The timed update loop.
- reference: The reference incremental-mean update.
- backends: Accelerated backend contract and the Cython and Numba providers.
- analysis: Relative error between the two running averages.
- report: Rich rendering and JSON export of results.
"""

from .analysis import UNDEFINED, ErrorAnalyzer, ErrorSummary, relative_error
from .backends import AcceleratedBackend, Capability, DeviceClass, resolve_backend
from .config import BenchConfig, load_config
from .driver import BenchmarkDriver, RunTiming
from .errors import (
    BackendUpdateFailure,
    InitializationFailure,
    InvalidIterationCount,
    SessionStateError,
    SizeMismatch,
    UpdateWeightsError,
)
from .generator import RandomInputGenerator
from .logging import setup_tagged_logger, configure_global_logging
from .reference import ReferenceUpdater
from .report import BenchmarkReport, render_report, save_report
from .session import BenchmarkSession, SessionState
from .store import VectorStore

__version__ = "0.1.0"
