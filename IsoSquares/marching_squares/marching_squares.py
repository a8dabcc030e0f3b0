"""
Marching Squares Implementation
===============================

This module contains the core implementation of the marching squares
algorithm, which converts a scalar field sampled on a regular rectangular
grid into a triangle mesh of the region where the field is positive.

The extraction runs in four stages:

1. The grid sampler evaluates the scalar field once per grid vertex.
2. The edge interpolator computes the zero crossing of every grid edge whose
   end points have different signs. Each grid vertex owns the crossings on
   its rightward and upward edge, so a crossing shared by two cells is
   computed once and referenced by both.
3. The cell classifier builds the 4-bit case code of every cell.
4. The mesh assembler looks up the triangles of each case and resolves the
   local vertex roles to global vertex indices.

All stages are vectorized with torch except the sampler, which calls the
scalar field per grid vertex unless a batched field is supplied.
"""

import numbers
import logging

import torch

import IsoSquares
from IsoSquares.marching_squares.tables import (
    triangle_table,
    num_tri_table,
    max_tri_per_cell,
    role_table,
)

logger = logging.getLogger(IsoSquares.__name__)

__all__ = ["Grid", "MarchingSquares"]


class Grid:
    """Regular rectangular grid of ``xdim x ydim`` cells.

    Grid vertex ``(i, j)`` with ``0 <= i <= xdim`` and ``0 <= j <= ydim`` is
    located at ``(i * xscale + xoffset, j * yscale + yoffset)``.

    Parameters
    ----------
    xdim, ydim : int
        Number of cells along x and y. Must be at least 1.
    xscale, yscale : float, default 1.0
        Cell size along x and y. Must be non-zero.
    xoffset, yoffset : float, default 0.0
        World coordinates of grid vertex ``(0, 0)``.

    Raises
    ------
    ValueError
        If a dimension is not a positive integer or a scale is zero.
    """

    def __init__(
        self,
        xdim: int,
        ydim: int,
        xscale: float = 1.0,
        yscale: float = 1.0,
        xoffset: float = 0.0,
        yoffset: float = 0.0,
    ):
        for name, dim in (("xdim", xdim), ("ydim", ydim)):
            if isinstance(dim, bool) or not isinstance(dim, numbers.Integral):
                raise ValueError(f"{name} must be an integer, got {dim!r}")
            if dim < 1:
                raise ValueError(f"{name} must be at least 1, got {dim}")
        for name, scale in (("xscale", xscale), ("yscale", yscale)):
            if scale == 0:
                raise ValueError(f"{name} must be non-zero")

        self.xdim = int(xdim)
        self.ydim = int(ydim)
        self.xscale = float(xscale)
        self.yscale = float(yscale)
        self.xoffset = float(xoffset)
        self.yoffset = float(yoffset)

    @classmethod
    def from_bounds(cls, bounds, resolution) -> "Grid":
        """Creates a grid covering a bounding box.

        Args:
            bounds: 2x2 array-like ``[[xmin, ymin], [xmax, ymax]]``.
            resolution (int or tuple[int, int]): Number of cells along each
                axis. An integer is used for both axes.
        """
        bounds = torch.as_tensor(bounds, dtype=torch.float64)
        if bounds.shape != (2, 2):
            raise ValueError(f"bounds must have shape [2, 2], got {list(bounds.shape)}")
        if not torch.all(bounds[1] > bounds[0]):
            raise ValueError(f"bounds must satisfy min < max, got {bounds.tolist()}")
        if isinstance(resolution, numbers.Number):
            resolution = (resolution, resolution)
        if not isinstance(resolution, (tuple, list)) or len(resolution) != 2:
            raise ValueError("resolution must be an integer or a pair of integers")
        xdim, ydim = resolution
        # dimensions are checked before they are used as divisors
        grid = cls(
            xdim, ydim, xoffset=bounds[0, 0].item(), yoffset=bounds[0, 1].item()
        )
        extent = bounds[1] - bounds[0]
        grid.xscale = extent[0].item() / grid.xdim
        grid.yscale = extent[1].item() / grid.ydim
        return grid

    @property
    def shape(self) -> tuple[int, int]:
        """Shape ``(ydim + 1, xdim + 1)`` of per-grid-vertex arrays."""
        return (self.ydim + 1, self.xdim + 1)

    @property
    def n_grid_vertices(self) -> int:
        return (self.xdim + 1) * (self.ydim + 1)

    @property
    def n_cells(self) -> int:
        return self.xdim * self.ydim

    def xs(self) -> list[float]:
        return [i * self.xscale + self.xoffset for i in range(self.xdim + 1)]

    def ys(self) -> list[float]:
        return [j * self.yscale + self.yoffset for j in range(self.ydim + 1)]

    def __repr__(self):
        return (
            f"Grid(xdim={self.xdim}, ydim={self.ydim}, xscale={self.xscale}, "
            f"yscale={self.yscale}, xoffset={self.xoffset}, yoffset={self.yoffset})"
        )


class MarchingSquares:
    """
    Extracts the positive region of a 2D scalar field as a triangle mesh.

    Every grid vertex ``(i, j)`` owns three consecutive output vertices at
    ``3k``, ``3k + 1`` and ``3k + 2`` with ``k = i + (xdim + 1) * j``:

    - slot 0: the grid vertex position,
    - slot 1: the zero crossing on the edge towards ``(i + 1, j)``,
    - slot 2: the zero crossing on the edge towards ``(i, j + 1)``.

    Crossing slots are only filled if the edge changes sign, otherwise they
    hold the origin and are never referenced by a triangle. A grid vertex is
    inside if its value is strictly positive.

    Attributes:
        device (str): Computational device, e.g. "cpu" or "cuda".
        dtype (torch.dtype): Floating point type of positions and values.
        triangle_table (torch.Tensor): (16, 3, 3) local vertex roles of the
            triangles of each case, padded with -1.
        num_tri_table (torch.Tensor): Number of triangles of each case.
        role_table (torch.Tensor): (8, 3) grid vertex offset and slot of each
            local vertex role.
        corner_idx (torch.Tensor): Bit weight of each cell corner in the case code.
    """

    def __init__(self, device="cpu", dtype=torch.float64):
        self.device = device
        self.dtype = dtype

        padded = [
            triangles + [[-1, -1, -1]] * (max_tri_per_cell - len(triangles))
            for triangles in triangle_table
        ]
        self.triangle_table = torch.tensor(
            padded, dtype=torch.long, device=device, requires_grad=False
        )
        self.num_tri_table = torch.tensor(
            num_tri_table, dtype=torch.long, device=device, requires_grad=False
        )
        self.role_table = torch.tensor(
            role_table, dtype=torch.long, device=device, requires_grad=False
        )
        # Each corner corresponds to a binary bit (for the 2^4 possible inside/outside cases):
        self.corner_idx = torch.pow(2, torch.arange(4, device=device))

    def construct_grid(self, grid: Grid) -> torch.Tensor:
        """
        Returns the (N x 2) positions of all grid vertices in row-major order,
        i.e. vertex ``(i, j)`` is row ``i + (xdim + 1) * j``.
        """
        positions = self._grid_positions(grid)
        return positions[..., :2].reshape(-1, 2)

    def __call__(self, grid: Grid, func, batched=False):
        """
        Runs the whole extraction pipeline.

        Args:
            grid (Grid): Grid parameters.
            func (callable): Scalar field. Called as ``func(x, y)`` with two
                floats once per grid vertex, or, if ``batched`` is True, once
                as ``func(points)`` with the (N x 2) grid vertex positions.
            batched (bool, optional): Selects the calling convention of ``func``.

        Returns:
            (torch.Tensor, torch.LongTensor): Tuple of:
                - Vertices (3 * (xdim + 1) * (ydim + 1) x 3): Slots of all grid vertices.
                - Indices (3T,): Flat triangle list into the vertices.
        """
        logger.debug(f"Extracting contour on {grid}")
        positions, values = self.sample(grid, func, batched=batched)
        return self.triangulate(grid, positions, values)

    def triangulate(self, grid: Grid, positions, values):
        """
        Runs edge interpolation, cell classification and mesh assembly on
        already sampled grid vertices and returns ``(vertices, indices)``.
        """
        right, up, _, _ = self.interpolate_edges(positions, values)
        codes = self.classify_cells(values)
        indices = self.assemble(grid, codes)

        vertices = torch.stack([positions, right, up], dim=2).reshape(-1, 3)
        logger.debug(f"Emitted {indices.shape[0] // 3} triangles")
        return vertices, indices

    def sample(self, grid: Grid, func, batched=False):
        """
        Evaluates the scalar field at every grid vertex.

        Returns:
            (torch.Tensor, torch.Tensor): Positions ((ydim + 1) x (xdim + 1) x 3)
            and values ((ydim + 1) x (xdim + 1)), both indexed ``[j, i]``.
        """
        positions = self._grid_positions(grid)
        if batched:
            points = positions[..., :2].reshape(-1, 2)
            values = torch.as_tensor(func(points), device=self.device)
            if values.numel() != grid.n_grid_vertices:
                raise ValueError(
                    f"Scalar field returned {values.numel()} values for "
                    f"{grid.n_grid_vertices} grid vertices"
                )
            return positions, values.to(self.dtype).reshape(grid.shape)

        values = torch.empty(grid.shape, dtype=self.dtype, device=self.device)
        xs, ys = grid.xs(), grid.ys()
        for j, y0 in enumerate(ys):
            for i, x0 in enumerate(xs):
                values[j, i] = func(x0, y0)
        return positions, values

    def interpolate_edges(self, positions, values):
        """
        Computes the zero crossings on the rightward and upward edge of every
        grid vertex. Edges whose end points have the same sign are skipped.

        Returns:
            (torch.Tensor, torch.Tensor, torch.Tensor, torch.Tensor): Rightward
            crossings, upward crossings (both shaped like ``positions``, zero
            where unused) and the boolean masks of interpolated edges.
        """
        inside = values > 0

        right = torch.zeros_like(positions)
        right_mask = torch.zeros_like(inside)
        right_mask[:, :-1] = inside[:, :-1] != inside[:, 1:]
        edge_mask = right_mask[:, :-1]
        right[right_mask] = self._linear_interp(
            positions[:, :-1][edge_mask],
            positions[:, 1:][edge_mask],
            values[:, :-1][edge_mask],
            values[:, 1:][edge_mask],
        )

        up = torch.zeros_like(positions)
        up_mask = torch.zeros_like(inside)
        up_mask[:-1, :] = inside[:-1, :] != inside[1:, :]
        edge_mask = up_mask[:-1, :]
        up[up_mask] = self._linear_interp(
            positions[:-1, :][edge_mask],
            positions[1:, :][edge_mask],
            values[:-1, :][edge_mask],
            values[1:, :][edge_mask],
        )
        return right, up, right_mask, up_mask

    def classify_cells(self, values) -> torch.Tensor:
        """
        Returns the (ydim x xdim) case codes of all cells, built from the
        corners bottom-left (bit 0), top-left (bit 1), top-right (bit 2) and
        bottom-right (bit 3).
        """
        inside = (values > 0).long()
        occ_fx4 = torch.stack(
            [inside[:-1, :-1], inside[1:, :-1], inside[1:, 1:], inside[:-1, 1:]],
            dim=-1,
        )
        return (occ_fx4 * self.corner_idx).sum(-1)

    def assemble(self, grid: Grid, codes) -> torch.Tensor:
        """
        Emits the triangles of all cells in row-major cell order as a flat
        index tensor into the slot vertices.
        """
        row = grid.xdim + 1
        # global index offset of each role relative to slot 0 of the bottom-left corner
        role_offsets = (
            3 * (self.role_table[:, 0] + self.role_table[:, 1] * row)
            + self.role_table[:, 2]
        )
        cell_i = torch.arange(grid.xdim, device=self.device)
        cell_j = torch.arange(grid.ydim, device=self.device)
        base = 3 * (cell_i.unsqueeze(0) + cell_j.unsqueeze(1) * row).reshape(-1)

        case_ids = codes.reshape(-1)
        tris = self.triangle_table[case_ids]
        valid = torch.arange(max_tri_per_cell, device=self.device).unsqueeze(
            0
        ) < self.num_tri_table[case_ids].unsqueeze(1)

        faces = base[:, None, None] + role_offsets[tris.clamp(min=0)]
        return faces[valid].reshape(-1)

    def _grid_positions(self, grid: Grid) -> torch.Tensor:
        xs = torch.tensor(grid.xs(), dtype=self.dtype, device=self.device)
        ys = torch.tensor(grid.ys(), dtype=self.dtype, device=self.device)
        yy, xx = torch.meshgrid(ys, xs, indexing="ij")
        return torch.stack([xx, yy, torch.zeros_like(xx)], dim=-1)

    def _linear_interp(self, p0, p1, v0, v1):
        """
        Computes the zero crossing between 'p0' and 'p1' by linear interpolation
        of the values 'v0' and 'v1', which have opposite signs.
        """
        t = (v0 / (v0 - v1)).unsqueeze(-1)
        return p0 + t * (p1 - p0)
