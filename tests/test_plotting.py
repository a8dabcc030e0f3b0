import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np

from IsoSquares.plotting import plot_field, plot_mesh, generate_grid_points
from IsoSquares.sdf_primitives import CircleSDF
from IsoSquares.mesh import create_2D_mesh


def test_generate_grid_points():
    points, X, Y = generate_grid_points((4, 3), (-1, 1), (0, 1))
    assert points.shape == (12, 2)
    assert X.shape == (3, 4)
    np.testing.assert_allclose(points[:4, 0], np.linspace(-1, 1, 4))
    np.testing.assert_allclose(points[::4, 1], np.linspace(0, 1, 3))


def test_plot_field():
    circle = CircleSDF(center=[0.0, 0.0], radius=0.5)
    fig, ax = plt.subplots()
    circle.plot(res=(50, 40), ax=ax)
    # filled contours plus the zero level
    assert len(ax.collections) >= 1
    plt.close(fig)


def test_plot_field_plain_function():
    fig, ax = plt.subplots()
    plot_field(
        lambda points: 0.25 - (points**2).sum(dim=1),
        ax=ax,
        show_zero_level=False,
    )
    plt.close(fig)


def test_plot_mesh():
    circle = CircleSDF(center=[0.0, 0.0], radius=0.5)
    mesh = create_2D_mesh(circle, 16, bounds=[[-1.0, -1.0], [1.0, 1.0]])
    fig, ax = plt.subplots()
    plot_mesh(mesh, ax=ax)
    n_boundary = mesh.boundary_edges().shape[0]
    assert len(ax.lines) == n_boundary
    xmin, xmax = ax.get_xlim()
    assert xmin > -0.6 and xmax < 0.6
    plt.close(fig)


def test_plot_empty_mesh():
    circle = CircleSDF(center=[5.0, 5.0], radius=0.1)
    mesh = create_2D_mesh(circle, 4, bounds=[[-1.0, -1.0], [1.0, 1.0]])
    fig, ax = plt.subplots()
    plot_mesh(mesh, ax=ax)
    assert len(ax.lines) == 0
    plt.close(fig)


if __name__ == "__main__":
    test_plot_field()
    test_plot_mesh()
