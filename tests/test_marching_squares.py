from IsoSquares.marching_squares import Grid, MarchingSquares
import pytest
import torch
import math


def corner_field(values):
    """Scalar field that returns fixed values at the grid vertices of a unit grid."""

    def func(x, y):
        return values[(round(x), round(y))]

    return func


def circle_field(x, y):
    return 24 - (x * x + y * y)


@pytest.fixture
def extractor():
    return MarchingSquares(device="cpu")


def test_single_cell_one_corner(extractor):
    # bottom-left inside, all others outside
    func = corner_field({(0, 0): 1.0, (0, 1): -3.0, (1, 1): -1.0, (1, 0): -1.0})
    vertices, indices = extractor(Grid(1, 1), func)

    assert vertices.shape == (12, 3), f"Expected 12 vertices, got {vertices.shape[0]}"
    # bottom-left corner, its upward crossing and its rightward crossing
    assert indices.tolist() == [0, 2, 1]
    torch.testing.assert_close(
        vertices[2], torch.tensor([0.0, 0.25, 0.0], dtype=torch.float64)
    )
    torch.testing.assert_close(
        vertices[1], torch.tensor([0.5, 0.0, 0.0], dtype=torch.float64)
    )


def test_saddle_cell_gives_two_islands(extractor):
    func = corner_field({(0, 0): 1.0, (0, 1): -1.0, (1, 1): 1.0, (1, 0): -1.0})
    vertices, indices = extractor(Grid(1, 1), func)

    triangles = indices.reshape(-1, 3).tolist()
    assert triangles == [[0, 2, 1], [7, 9, 5]]
    assert not set(triangles[0]) & set(triangles[1]), "Saddle triangles share a vertex"
    torch.testing.assert_close(
        vertices[7], torch.tensor([0.5, 1.0, 0.0], dtype=torch.float64)
    )
    torch.testing.assert_close(
        vertices[5], torch.tensor([1.0, 0.5, 0.0], dtype=torch.float64)
    )


def test_top_row_and_last_column_edges_are_interpolated(extractor):
    # only the top-right corner is inside, its crossings live on the
    # top row (rightward edge) and the last column (upward edge)
    func = corner_field({(0, 0): -1.0, (0, 1): -1.0, (1, 1): 2.0, (1, 0): -1.0})
    vertices, indices = extractor(Grid(1, 1), func)

    assert indices.tolist() == [7, 9, 5]
    torch.testing.assert_close(
        vertices[7], torch.tensor([1 / 3, 1.0, 0.0], dtype=torch.float64)
    )
    torch.testing.assert_close(
        vertices[5], torch.tensor([1.0, 1 / 3, 0.0], dtype=torch.float64)
    )


def test_shared_edge_is_computed_once():
    extractor = MarchingSquares()
    vertices, indices = extractor(Grid(2, 1), lambda x, y: 0.5 - y)

    triangles = indices.reshape(-1, 3)
    assert triangles.shape[0] == 4, f"Expected 4 triangles, got {triangles.shape[0]}"
    # row-major cell order, table order inside each cell
    assert indices.tolist() == [0, 2, 3, 2, 5, 3, 3, 5, 6, 5, 8, 6]
    left_cell, right_cell = triangles[:2], triangles[2:]
    # upward crossing of grid vertex (1, 0) is vertex 3 * 1 + 2
    assert (left_cell == 5).any() and (right_cell == 5).any()
    torch.testing.assert_close(
        vertices[5], torch.tensor([1.0, 0.5, 0.0], dtype=torch.float64)
    )


def test_func_called_once_per_grid_vertex_in_row_major_order(extractor):
    calls = []

    def func(x, y):
        calls.append((x, y))
        return x - 0.7

    grid = Grid(3, 2, xscale=0.5, yscale=2.0, xoffset=-1.0, yoffset=1.0)
    extractor(grid, func)

    expected = [
        (i * 0.5 - 1.0, j * 2.0 + 1.0) for j in range(grid.ydim + 1) for i in range(grid.xdim + 1)
    ]
    assert calls == expected
    assert len(calls) == grid.n_grid_vertices


def test_constant_fields(extractor):
    grid = Grid(4, 3)
    vertices, indices = extractor(grid, lambda x, y: -1.0)
    assert indices.numel() == 0, "Negative field must not produce triangles"

    vertices, indices = extractor(grid, lambda x, y: 0.0)
    assert indices.numel() == 0, "Zero counts as outside"

    vertices, indices = extractor(grid, lambda x, y: 1.0)
    assert indices.numel() == 3 * 2 * grid.n_cells, "Full cells are split into two triangles"
    # no crossings anywhere, only grid vertex positions are used
    assert (indices % 3 == 0).all()


def test_full_cell_split_along_diagonal(extractor):
    vertices, indices = extractor(Grid(1, 1), lambda x, y: 1.0)
    # (bottom-left, top-left, top-right), (bottom-left, top-right, bottom-right)
    assert indices.tolist() == [0, 6, 9, 0, 9, 3]


# expected index buffer of a single cell on Grid(1, 1) for every case code,
# slots: bottom-left 0, 2 (up), 1 (right); bottom-right 3, 5 (up);
# top-left 6, 7 (right); top-right 9
single_cell_indices = {
    0: [],
    1: [0, 2, 1],
    2: [2, 6, 7],
    3: [0, 6, 7, 0, 7, 1],
    4: [7, 9, 5],
    5: [0, 2, 1, 7, 9, 5],
    6: [6, 9, 5, 6, 5, 2],
    7: [6, 9, 5, 6, 5, 1, 6, 1, 0],
    8: [5, 3, 1],
    9: [0, 2, 3, 2, 5, 3],
    10: [2, 6, 7, 5, 3, 1],
    11: [0, 6, 7, 0, 7, 5, 0, 5, 3],
    12: [1, 7, 9, 1, 9, 3],
    13: [3, 0, 2, 3, 2, 7, 3, 7, 9],
    14: [9, 3, 1, 9, 1, 2, 2, 6, 9],
    15: [0, 6, 9, 0, 9, 3],
}


@pytest.mark.parametrize("code", range(16))
def test_single_cell_cases(extractor, code):
    # bits of the case code: bottom-left, top-left, top-right, bottom-right
    corners = [(0, 0), (0, 1), (1, 1), (1, 0)]
    func = corner_field(
        {corner: 1.0 if code & (1 << bit) else -1.0 for bit, corner in enumerate(corners)}
    )
    _, indices = extractor(Grid(1, 1), func)
    assert indices.tolist() == single_cell_indices[code], f"Wrong triangles for case {code}"


def test_buffer_invariants_random_field(extractor):
    torch.manual_seed(42)
    grid = Grid(17, 11, xscale=0.3, yscale=0.7, xoffset=2.0, yoffset=-3.0)

    def func(points):
        return torch.randn(points.shape[0], dtype=torch.float64)

    positions, values = extractor.sample(grid, func, batched=True)
    vertices, indices = extractor.triangulate(grid, positions, values)
    _, _, right_mask, up_mask = extractor.interpolate_edges(positions, values)

    assert vertices.shape[0] == 3 * (grid.xdim + 1) * (grid.ydim + 1)
    assert indices.numel() % 3 == 0
    assert indices.min() >= 0 and indices.max() < vertices.shape[0]

    # crossing slots are only referenced where the edge was interpolated
    slot = indices % 3
    owner = indices // 3
    assert right_mask.reshape(-1)[owner[slot == 1]].all()
    assert up_mask.reshape(-1)[owner[slot == 2]].all()

    # slot 0 always holds the grid vertex position
    torch.testing.assert_close(vertices[0::3], positions.reshape(-1, 3))

    # all triangles are emitted with clockwise winding
    tri = vertices[indices.reshape(-1, 3)]
    a = tri[:, 1, :2] - tri[:, 0, :2]
    b = tri[:, 2, :2] - tri[:, 0, :2]
    signed_area = a[:, 0] * b[:, 1] - a[:, 1] * b[:, 0]
    assert (signed_area <= 1e-12).all(), "Inconsistent triangle winding"


def test_batched_and_scalar_sampling_agree(extractor):
    grid = Grid(20, 20, xscale=1.0, yscale=1.0, xoffset=-10.0, yoffset=-10.0)

    def batched(points):
        return 24 - (points[:, 0] ** 2 + points[:, 1] ** 2)

    vertices, indices = extractor(grid, circle_field)
    vertices_b, indices_b = extractor(grid, batched, batched=True)
    torch.testing.assert_close(vertices, vertices_b)
    assert torch.equal(indices, indices_b)


def test_deterministic(extractor):
    grid = Grid(12, 9, xscale=0.8, yscale=1.1, xoffset=-4.0, yoffset=-5.0)
    first = extractor(grid, circle_field)
    second = extractor(grid, circle_field)
    assert torch.equal(first[0], second[0])
    assert torch.equal(first[1], second[1])


def test_circle_is_closed(extractor):
    grid = Grid(20, 20, xscale=1.0, yscale=1.0, xoffset=-10.0, yoffset=-10.0)
    positions, values = extractor.sample(grid, circle_field)
    vertices, indices = extractor.triangulate(grid, positions, values)
    _, _, right_mask, up_mask = extractor.interpolate_edges(positions, values)

    faces = indices.reshape(-1, 3)
    edges = torch.cat([faces[:, [0, 1]], faces[:, [1, 2]], faces[:, [2, 0]]], dim=0)
    edges, _ = edges.sort(dim=1)
    unique_edges, counts = torch.unique(edges, dim=0, return_counts=True)
    assert counts.max() <= 2, "An edge is shared by more than two triangles"

    boundary = unique_edges[counts == 1]
    # the boundary only runs through interpolated crossings
    assert (boundary % 3 != 0).all(), "Boundary touches a grid vertex"
    boundary_nodes, node_counts = torch.unique(boundary, return_counts=True)
    assert (node_counts == 2).all(), "Boundary is not a closed curve"
    n_crossings = right_mask.sum() + up_mask.sum()
    assert boundary_nodes.numel() == n_crossings
    assert boundary.shape[0] == n_crossings

    radius = torch.linalg.norm(vertices[boundary_nodes, :2], dim=1)
    assert (radius - math.sqrt(24)).abs().max() < 0.1

    tri = vertices[faces]
    a = tri[:, 1, :2] - tri[:, 0, :2]
    b = tri[:, 2, :2] - tri[:, 0, :2]
    area = 0.5 * (a[:, 0] * b[:, 1] - a[:, 1] * b[:, 0]).abs().sum()
    assert abs(area.item() - math.pi * 24) < 0.03 * math.pi * 24


def test_classify_cells(extractor):
    values = torch.tensor([[1.0, -1.0, 2.0], [-1.0, 3.0, 0.0]], dtype=torch.float64)
    codes = extractor.classify_cells(values)
    # cell (0, 0): bottom-left inside, top-right inside -> 1 + 4
    # cell (1, 0): top-left inside, bottom-right inside -> 2 + 8
    assert codes.tolist() == [[5, 10]]


def test_construct_grid(extractor):
    grid = Grid(2, 1, xscale=0.5, yscale=2.0, xoffset=1.0, yoffset=-1.0)
    points = extractor.construct_grid(grid)
    expected = torch.tensor(
        [[1.0, -1.0], [1.5, -1.0], [2.0, -1.0], [1.0, 1.0], [1.5, 1.0], [2.0, 1.0]],
        dtype=torch.float64,
    )
    torch.testing.assert_close(points, expected)


def test_grid_from_bounds():
    grid = Grid.from_bounds([[-1.0, 0.0], [1.0, 4.0]], (4, 8))
    assert (grid.xdim, grid.ydim) == (4, 8)
    assert grid.xscale == pytest.approx(0.5)
    assert grid.yscale == pytest.approx(0.5)
    assert (grid.xoffset, grid.yoffset) == (-1.0, 0.0)
    assert grid.shape == (9, 5)
    assert Grid.from_bounds(torch.tensor([[0, 0], [1, 1]]), 3).n_cells == 9


@pytest.mark.parametrize(
    "args, kwargs",
    [
        ((0, 1), {}),
        ((1, -2), {}),
        ((1.5, 1), {}),
        ((True, 1), {}),
        ((1, 1), {"xscale": 0.0}),
        ((1, 1), {"yscale": 0}),
    ],
)
def test_grid_rejects_invalid_parameters(args, kwargs):
    with pytest.raises(ValueError):
        Grid(*args, **kwargs)


def test_grid_from_bounds_rejects_invalid_bounds():
    with pytest.raises(ValueError):
        Grid.from_bounds([[0.0, 0.0, 0.0], [1.0, 1.0, 1.0]], 4)
    with pytest.raises(ValueError):
        Grid.from_bounds([[1.0, 0.0], [0.0, 1.0]], 4)
    with pytest.raises(ValueError):
        Grid.from_bounds([[0.0, 0.0], [1.0, 1.0]], (1, 2, 3))


@pytest.mark.parametrize("resolution", [0, (0, 4), (4, 0), -2, 2.5, (2, 2.5), "4"])
def test_grid_from_bounds_rejects_invalid_resolution(resolution):
    with pytest.raises(ValueError):
        Grid.from_bounds([[0.0, 0.0], [1.0, 1.0]], resolution)


def test_batched_field_with_wrong_size(extractor):
    with pytest.raises(ValueError):
        extractor(Grid(2, 2), lambda points: torch.zeros(3), batched=True)


if __name__ == "__main__":
    ms = MarchingSquares()
    test_single_cell_one_corner(ms)
    test_saddle_cell_gives_two_islands(ms)
    test_shared_edge_is_computed_once()
    test_circle_is_closed(ms)
