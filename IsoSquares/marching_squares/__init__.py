"""
Marching Squares - 2D Isocontour Extraction
===========================================

This module implements marching squares for extracting the positive region
of a scalar field sampled on a regular rectangular grid as a triangle mesh.

Zero crossings are computed once per grid edge and shared by the adjacent
cells. The module uses a precomputed lookup table to triangulate all 16
possible cell configurations.
"""

from IsoSquares.marching_squares.marching_squares import Grid, MarchingSquares

__all__ = ["Grid", "MarchingSquares"]
