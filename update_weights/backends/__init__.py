"""
Accelerated backends.

Provides the AcceleratedBackend contract and two providers of the parallel
running-average update:

1. cython - OpenMP `prange` kernel compiled by setup.py (optional build)
2. numba - `prange` kernel JIT-compiled at initialize (optional dependency)

Usage:
    from update_weights.backends import resolve_backend

    # Registered name
    backend = resolve_backend('cython', size=2**20)

    # Any importable provider, no hard-coded library path
    backend = resolve_backend('my_package.gpu:OpenCLBackend', size=2**20)
"""

import importlib
from typing import Dict

from ..errors import InitializationFailure
from .base import AcceleratedBackend, Capability, DeviceClass
from .cython_backend import CythonBackend
from .numba_backend import NumbaBackend


# Registry of built-in providers
BACKENDS: Dict[str, type] = {
    'cython': CythonBackend,
    'numba': NumbaBackend,
}


def list_backends() -> Dict[str, Dict[str, str]]:
    """
    Get metadata for all registered backends.

    Returns:
        Dict mapping backend name to metadata dict with keys:
        - name: Short identifier
        - description: Human-readable description
        - default_kernel: Kernel logical name used when none is configured
    """
    return {
        name: {
            'name': cls.name,
            'description': cls.description,
            'default_kernel': cls.default_kernel,
        }
        for name, cls in BACKENDS.items()
    }


def load_backend_class(target: str) -> type:
    """
    Find a backend class by registered name or `package.module:ClassName` path.

    Raises:
        InitializationFailure: If the name is unknown or the path does not
            name an AcceleratedBackend subclass
    """
    if target in BACKENDS:
        return BACKENDS[target]

    if ':' not in target:
        raise InitializationFailure(
            f"Unknown backend '{target}' (registered: {', '.join(BACKENDS)}; "
            f"or use 'package.module:ClassName')"
        )

    module_name, _, class_name = target.partition(':')
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise InitializationFailure(f"Cannot import backend module '{module_name}': {e}") from e

    cls = getattr(module, class_name, None)
    if not (isinstance(cls, type) and issubclass(cls, AcceleratedBackend)):
        raise InitializationFailure(f"'{target}' is not an AcceleratedBackend subclass")
    return cls


def resolve_backend(target: str, size: int) -> AcceleratedBackend:
    """Instantiate the backend named by `target` for vectors of length `size`."""
    return load_backend_class(target)(size=size)


__all__ = [
    'AcceleratedBackend',
    'BACKENDS',
    'Capability',
    'CythonBackend',
    'DeviceClass',
    'NumbaBackend',
    'list_backends',
    'load_backend_class',
    'resolve_backend',
]
