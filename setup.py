from setuptools import setup, find_packages, Extension
import os
import sys

# Check for Cython availability
try:
    from Cython.Build import cythonize
    import numpy as np
    CYTHON_AVAILABLE = True
except ImportError:
    CYTHON_AVAILABLE = False
    cythonize = None
    np = None


def get_openmp_args():
    """Compiler and linker flags enabling OpenMP for the prange kernels."""
    if sys.platform == "win32":
        return ["/openmp"], []
    if sys.platform == "darwin":
        # Apple clang needs libomp from Homebrew
        return ["-Xpreprocessor", "-fopenmp"], ["-lomp"]
    return ["-fopenmp"], ["-fopenmp"]


def get_extensions():
    """
    Get Cython kernel extension modules if Cython is available.

    Returns empty list if Cython or NumPy is not installed,
    allowing pure-Python installation to proceed. The cython backend
    then reports its device as unavailable.
    """
    if not CYTHON_AVAILABLE:
        return []

    # Kernel sources: compiled module name, .pyx path
    pyx_files = [
        ("update_weights.backends._cython.running_average", "update_weights/backends/_cython/running_average.pyx"),
    ]

    existing_pyx = [
        (name, path) for name, path in pyx_files
        if os.path.exists(path)
    ]

    if not existing_pyx:
        return []

    compile_args, link_args = get_openmp_args()
    extensions = [
        Extension(
            name,
            [path],
            include_dirs=[np.get_include()],
            extra_compile_args=compile_args,
            extra_link_args=link_args,
        )
        for name, path in existing_pyx
    ]

    return cythonize(
        extensions,
        compiler_directives={'language_level': "3"},
        quiet=True
    )


setup(
    name="update-weights-bench",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*", "examples"]),
    package_data={
        "update_weights.backends._cython": ["*.pyx"],
    },
    ext_modules=get_extensions(),
    install_requires=[
        "IPython>=7.0",
        "nest_asyncio>=1.5",
        "matplotlib>=3.0",
        "numpy>=1.20",
        "rich>=10.0",
    ],
    extras_require={
        "cython": ["Cython>=0.29", "numpy>=1.20"],
        "numba": ["numba>=0.56"],
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "update-weights=update_weights.cli.main:main",
        ],
    },
    python_requires=">=3.9",
    description="Running-average update benchmark: reference vs. accelerated backends",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Cython",
    ],
)
