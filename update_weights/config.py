"""
config.py
=========

Benchmark configuration.

Sources, lowest to highest precedence: BenchConfig defaults, environment
variables (UPDATE_WEIGHTS_*), then explicit overrides (CLI flags). The
accelerated backend is named here, by registry name or import path, rather
than bound to a library location.

Functions:
----------
- resolve_size: Turn a size preset or integer into a vector length.
- load_config: Build a BenchConfig from the environment plus overrides.
"""

import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional, Union

ENV_PREFIX = "UPDATE_WEIGHTS_"

# Vector length presets
SIZE_PRESETS: Dict[str, int] = {
    "small": 2 ** 16,     # 256 KB per vector
    "medium": 2 ** 20,    # 4 MB per vector
    "large": 2 ** 22,     # 16 MB per vector
}


def resolve_size(size: Union[str, int]) -> int:
    """
    Vector length for a preset name ("small", "medium", "large") or integer.

    Raises:
        ValueError: If the size is unknown or not positive
    """
    if isinstance(size, str):
        key = size.strip().lower()
        if key in SIZE_PRESETS:
            return SIZE_PRESETS[key]
        try:
            size = int(key)
        except ValueError:
            raise ValueError(
                f"Unknown size '{size}' (use {', '.join(SIZE_PRESETS)} or a positive integer)"
            ) from None
    if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
        raise ValueError(f"Vector size must be a positive integer, got {size!r}")
    return size


@dataclass(frozen=True)
class BenchConfig:
    """
    Settings for one benchmark session.

    Attributes:
        backend: Registered backend name or 'package.module:ClassName'
        kernel: Kernel logical name (None: backend default)
        size: Size preset or vector length
        iterations: Number of updates per run
        seed: Input generator seed (None: OS entropy)
        reference_only_fallback: Continue reference-only when the backend is unavailable
        samples: Spot-check elements in the report
        log_level: Logging level name
    """

    backend: str = "cython"
    kernel: Optional[str] = None
    size: Union[str, int] = "medium"
    iterations: int = 10
    seed: Optional[int] = None
    reference_only_fallback: bool = True
    samples: int = 10
    log_level: str = "WARNING"

    @property
    def vector_size(self) -> int:
        return resolve_size(self.size)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Expected a boolean, got '{value}'")


_ENV_PARSERS = {
    "backend": str,
    "kernel": str,
    "size": str,
    "iterations": int,
    "seed": int,
    "reference_only_fallback": _parse_bool,
    "samples": int,
    "log_level": str,
}


def load_config(environ: Optional[Mapping[str, str]] = None, **overrides) -> BenchConfig:
    """
    Build a BenchConfig from environment variables and explicit overrides.

    Overrides whose value is None are ignored, so unset CLI flags fall
    through to the environment and defaults.

    Raises:
        ValueError: If an environment variable cannot be parsed or an
            override names an unknown setting
    """
    environ = os.environ if environ is None else environ
    values: Dict[str, Any] = {}

    for name, parse in _ENV_PARSERS.items():
        raw = environ.get(ENV_PREFIX + name.upper())
        if raw is None or raw == "":
            continue
        try:
            values[name] = parse(raw)
        except ValueError as e:
            raise ValueError(f"Invalid {ENV_PREFIX}{name.upper()}={raw!r}: {e}") from e

    unknown = set(overrides) - set(_ENV_PARSERS)
    if unknown:
        raise ValueError(f"Unknown setting(s): {', '.join(sorted(unknown))}")
    values.update({k: v for k, v in overrides.items() if v is not None})

    config = replace(BenchConfig(), **values)
    resolve_size(config.size)
    if isinstance(config.samples, bool) or not isinstance(config.samples, int) or config.samples < 0:
        raise ValueError(f"samples must be a non-negative integer, got {config.samples!r}")
    return config
