"""
IsoSquares - Triangle Meshes from 2D Scalar Fields
==================================================

IsoSquares converts a scalar field sampled on a regular rectangular
grid into a triangle mesh that fills the region where the field is
positive. Zero crossings on grid edges are shared between neighbouring
cells, so the resulting mesh is connected along cell borders.

Key Components
--------------

Contour Extraction
    - ``IsoSquares.marching_squares``: Grid definition and the marching
      squares extractor

Scalar Fields
    - ``IsoSquares.SDF``: Abstract base class and composition of 2D
      signed distance functions
    - ``IsoSquares.sdf_primitives``: Geometric primitives (circles, boxes, etc.)

Mesh Operations
    - ``IsoSquares.mesh``: Mesh wrapper, boundary extraction and export

Utilities
    - ``IsoSquares.plotting``: Visualization tools
    - ``IsoSquares.utils``: General utility functions

Examples
--------
Fill the inside of a circle given as a plain function::

    from IsoSquares.marching_squares import Grid, MarchingSquares

    grid = Grid(20, 20, xscale=1.0, yscale=1.0, xoffset=-10.0, yoffset=-10.0)
    extractor = MarchingSquares()
    vertices, indices = extractor(grid, lambda x, y: 24 - (x * x + y * y))

Mesh a signed distance function::

    from IsoSquares.sdf_primitives import CircleSDF
    from IsoSquares.mesh import create_2D_mesh

    circle = CircleSDF(center=[0, 0], radius=0.5)
    mesh = create_2D_mesh(circle, resolution=64)
"""

import IsoSquares.utils

IsoSquares.utils.configure_logging()

__version__ = "0.1.0"
__author__ = "Michael Kofler"
