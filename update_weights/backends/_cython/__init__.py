"""
Cython-compiled running-average kernels.

The .pyx sources here are package data: setup.py compiles each into an
extension module of the same stem, and CythonBackend loads the module named
after the kernel it is asked to initialize.

Modules:
- running_average: OpenMP-parallel incremental-mean update
"""

# Kernels are imported dynamically by CythonBackend.initialize
# to handle cases where Cython is not compiled
