"""
Panel Method Analysis
=====================
Vortex kernels, solution fields and lifting bodies.

Note: This package is pure NumPy and does not import any plotting or file
format library.
"""
