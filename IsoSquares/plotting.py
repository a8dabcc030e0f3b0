"""
Visualization and Plotting Utilities
=====================================

This module provides utilities for visualizing scalar fields and the
triangle meshes extracted from them.

Functions
---------
plot_field
    Create a contour plot of a 2D scalar field or SDF.
plot_mesh
    Draw the triangles of an extracted mesh.
generate_grid_points
    Generate a regular grid of points in a rectangle.
"""

import matplotlib.pyplot as plt
from matplotlib.collections import PolyCollection
import numpy as np
import torch

from IsoSquares.utils import _TUWIEN_COLOR_SCHEME, rgb_to_unit


def plot_field(
    fun,
    res=(100, 100),
    ax=None,
    xlim=(-1, 1),
    ylim=(-1, 1),
    clim=(-1, 1),
    cmap="seismic",
    show_zero_level=True,
):
    """Plot a 2D scalar field as a filled contour plot.

    Parameters
    ----------
    fun : callable
        The field to visualize. Should accept a torch.Tensor of shape
        (N, 2) and return N values, e.g. an SDF or a batched scalar field.
    res : tuple of int, default (100, 100)
        Resolution of the plot grid (num_points_x, num_points_y).
    ax : matplotlib.axes.Axes, optional
        Axes to plot on. If None, creates a new figure.
    xlim : tuple of float, default (-1, 1)
        Range along x.
    ylim : tuple of float, default (-1, 1)
        Range along y.
    clim : tuple of float, default (-1, 1)
        Color map limits for field values.
    cmap : str, default 'seismic'
        Matplotlib colormap name.
    show_zero_level : bool, default True
        If True, draws a black contour line at value 0.

    Returns
    -------
    fig, ax : matplotlib.figure.Figure, matplotlib.axes.Axes
        Only returned if ax was None (i.e., a new figure was created).

    Examples
    --------
    >>> from IsoSquares.sdf_primitives import CircleSDF
    >>> from IsoSquares.plotting import plot_field
    >>>
    >>> circle = CircleSDF(center=[0, 0], radius=0.5)
    >>> fig, ax = plot_field(circle, res=(200, 200))
    """
    plt_show = False
    if ax is None:
        fig, ax = plt.subplots()
        plt_show = True

    points, X, Y = generate_grid_points(res, xlim, ylim)

    points = torch.from_numpy(points).to(torch.float32)
    values = fun(points)
    if isinstance(values, torch.Tensor):
        values = values.detach().cpu().numpy()
    values = np.asarray(values).reshape(X.shape)

    cbar = ax.contourf(X, Y, values, cmap=cmap, levels=10)
    if show_zero_level:
        ax.contour(X, Y, values, levels=[0], colors="black", linewidths=0.5)
    cbar.set_clim(clim[0], clim[1])
    ax.set_xticks([])
    ax.set_yticks([])
    ax.set_aspect(1)
    if plt_show:
        plt.show()
        return fig, ax


def plot_mesh(
    mesh,
    ax=None,
    facecolor=_TUWIEN_COLOR_SCHEME["blue_2"],
    edgecolor=_TUWIEN_COLOR_SCHEME["blue"],
    linewidth=0.3,
    show_boundary=True,
):
    """Draw the triangles of a mesh extracted by marching squares.

    Parameters
    ----------
    mesh : IsoSquares.mesh.torchSurfMesh
        The mesh to draw. Only the x and y coordinates are used.
    ax : matplotlib.axes.Axes, optional
        Axes to plot on. If None, creates a new figure.
    facecolor, edgecolor : tuple of int
        RGB colors (0-255) of the triangle fill and the triangle edges.
    linewidth : float, default 0.3
        Line width of the triangle edges.
    show_boundary : bool, default True
        If True, draws the mesh boundary (the extracted contour) in black.

    Returns
    -------
    fig, ax : matplotlib.figure.Figure, matplotlib.axes.Axes
        Only returned if ax was None.
    """
    plt_show = False
    if ax is None:
        fig, ax = plt.subplots()
        plt_show = True

    vertices = mesh.vertices.detach().cpu().numpy()[:, :2]
    faces = mesh.faces.detach().cpu().numpy()
    collection = PolyCollection(
        vertices[faces],
        facecolors=rgb_to_unit(facecolor),
        edgecolors=rgb_to_unit(edgecolor),
        linewidths=linewidth,
    )
    ax.add_collection(collection)

    if show_boundary:
        boundary = mesh.boundary_edges().detach().cpu().numpy()
        for edge in vertices[boundary]:
            ax.plot(edge[:, 0], edge[:, 1], color="black", lw=2 * linewidth)

    if faces.shape[0] > 0:
        used = vertices[np.unique(faces)]
        ax.set_xlim(used[:, 0].min(), used[:, 0].max())
        ax.set_ylim(used[:, 1].min(), used[:, 1].max())
    ax.set_aspect(1)
    if plt_show:
        plt.show()
        return fig, ax


def generate_grid_points(res, xlim, ylim):
    """Generate evenly spaced points in a rectangle.

    Parameters
    ----------
    res : tuple of int
        Grid resolution (num_points_x, num_points_y).
    xlim : tuple of float
        Range along x (xmin, xmax).
    ylim : tuple of float
        Range along y (ymin, ymax).

    Returns
    -------
    points : np.ndarray of shape (num_points_x * num_points_y, 2)
        Coordinates of the grid points.
    X, Y : np.ndarray of shape (num_points_y, num_points_x)
        Coordinate arrays in the layout expected by ``contourf``.
    """
    x = np.linspace(xlim[0], xlim[1], res[0])
    y = np.linspace(ylim[0], ylim[1], res[1])
    X, Y = np.meshgrid(x, y)
    points = np.hstack([X.reshape(-1, 1), Y.reshape(-1, 1)])
    return points, X, Y
