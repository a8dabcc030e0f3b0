from IsoSquares.marching_squares import Grid, MarchingSquares
from IsoSquares.mesh import torchSurfMesh, create_2D_mesh, export_surface_mesh
from IsoSquares.sdf_primitives import CircleSDF, BoxSDF
from IsoSquares.plotting import plot_mesh


def func(x, y):
    return 24 - (x * x + y * y)


# plain scalar field, positive inside
grid = Grid(20, 20, xscale=1.0, yscale=1.0, xoffset=-10.0, yoffset=-10.0)
vertices, indices = MarchingSquares()(grid, func)
disk = torchSurfMesh.from_buffers(vertices, indices)
plot_mesh(disk)

# signed distance function, negative inside
shape = CircleSDF(center=[-0.3, 0.0], radius=0.4) + BoxSDF(
    center=[0.3, 0.0], half_size=[0.3, 0.2]
)
shape.plot()
mesh = create_2D_mesh(shape, 80, bounds=[[-1.0, -1.0], [1.0, 1.0]])
plot_mesh(mesh)

mesh.clear_unreferenced_nodes()
export_surface_mesh("shape.vtk", mesh)
