import logging
import torch as _torch
import numpy as np
import gustaf as gus
import pathlib
import os
import vtk

from IsoSquares.marching_squares import Grid, MarchingSquares
from IsoSquares.SDF import SDFBase, as_scalar_field
import IsoSquares

logger = logging.getLogger(IsoSquares.__name__)


class torchSurfMesh:
    """
    Triangle mesh as produced by marching squares.

    ``vertices`` (V x 3) may contain slots that no face references;
    ``faces`` (T x 3) index into ``vertices``.
    """

    def __init__(self, vertices: _torch.Tensor, faces: _torch.Tensor):
        self.vertices = vertices
        self.faces = faces

    @classmethod
    def from_buffers(cls, vertices: _torch.Tensor, indices: _torch.Tensor):
        """Builds a mesh from the vertex buffer and the flat index buffer."""
        return cls(vertices, indices.reshape(-1, 3))

    def to_gus(self):
        return gus.Faces(
            self.vertices.detach().cpu().numpy(), self.faces.detach().cpu().numpy()
        )

    def boundary_edges(self) -> _torch.Tensor:
        """
        Returns the (E x 2) edges that belong to exactly one triangle,
        oriented as in their triangle.
        """
        if self.faces.shape[0] == 0:
            return self.faces.new_zeros((0, 2))
        edges = _torch.cat(
            [self.faces[:, [0, 1]], self.faces[:, [1, 2]], self.faces[:, [2, 0]]],
            dim=0,
        )
        sorted_edges, _ = edges.sort(dim=1)
        _, inverse, counts = _torch.unique(
            sorted_edges, dim=0, return_inverse=True, return_counts=True
        )
        return edges[counts[inverse] == 1]

    def area(self, signed=False) -> _torch.Tensor:
        """
        Total triangle area. Signed areas are positive for counter-clockwise
        triangles; marching squares emits clockwise triangles.
        """
        tri = self.vertices[self.faces]
        a = tri[:, 1, :2] - tri[:, 0, :2]
        b = tri[:, 2, :2] - tri[:, 0, :2]
        cross = 0.5 * (a[:, 0] * b[:, 1] - a[:, 1] * b[:, 0])
        if signed:
            return cross.sum()
        return cross.abs().sum()

    def clear_unreferenced_nodes(self):
        used_nodes, inverse = _torch.unique(self.faces, return_inverse=True)
        remapped_faces = inverse.view(self.faces.shape)
        self.vertices = self.vertices[used_nodes]
        self.faces = remapped_faces


def create_2D_mesh(
    sdf: SDFBase, resolution, bounds=None, device="cpu", dtype=_torch.float64
) -> torchSurfMesh:
    """
    Meshes the interior of a signed distance function with marching squares.

    Args:
        sdf (SDFBase): Signed distance function, negative inside.
        resolution (int or tuple[int, int]): Number of cells along each axis.
        bounds (array-like, optional): 2x2 box ``[[xmin, ymin], [xmax, ymax]]``.
            Defaults to the domain bounds of the SDF.
        device (str, optional): Device of the extractor.
        dtype (torch.dtype, optional): Floating point type of the output.

    Raises:
        ValueError: If the grid parameters are invalid or the SDF is not
            finite on the grid.
    """
    if bounds is None:
        bounds = sdf._get_domain_bounds()
    grid = Grid.from_bounds(bounds, resolution)

    extractor = MarchingSquares(device=device, dtype=dtype)
    field = as_scalar_field(sdf)
    positions, values = extractor.sample(grid, field, batched=True)
    if not _torch.isfinite(values).all():
        n_bad = (~_torch.isfinite(values)).sum().item()
        raise ValueError(f"Scalar field is not finite at {n_bad} grid vertices")

    vertices, indices = extractor.triangulate(grid, positions, values)

    if indices.numel() == 0:
        logger.warning(f"No triangles extracted on {grid}")
    return torchSurfMesh.from_buffers(vertices, indices)


def _export_surface_mesh_vtk(verts, faces, filename):
    """
    verts: (N, 3) array
    faces: (M, 3) array
    """
    vtk_points = vtk.vtkPoints()
    for v in verts:
        vtk_points.InsertNextPoint(v.tolist())

    vtk_cells = vtk.vtkCellArray()
    for f in faces:
        triangle = vtk.vtkTriangle()
        triangle.GetPointIds().SetId(0, int(f[0]))
        triangle.GetPointIds().SetId(1, int(f[1]))
        triangle.GetPointIds().SetId(2, int(f[2]))
        vtk_cells.InsertNextCell(triangle)

    polydata = vtk.vtkPolyData()
    polydata.SetPoints(vtk_points)
    polydata.SetPolys(vtk_cells)

    writer = vtk.vtkPolyDataWriter()
    writer.SetFileName(str(filename))
    writer.SetInputData(polydata)
    writer.Write()


def export_surface_mesh(
    filename: str | bytes | os.PathLike[str] | os.PathLike[bytes],
    mesh: gus.Faces | torchSurfMesh,
):
    """
    Exports a triangle mesh. ``.vtk`` files are written with vtk, all other
    formats with gustaf's meshio interface.
    """
    export_filename = pathlib.Path(filename)
    if not os.path.isdir(export_filename.parent):
        os.makedirs(export_filename.parent)
    ext = export_filename.suffix.lower()
    if isinstance(mesh, torchSurfMesh):
        mesh = mesh.to_gus()
    logger.debug(
        f"Exporting mesh with {len(mesh.faces)} triangles, {len(mesh.vertices)} vertices to {export_filename}"
    )
    match ext:
        case ".vtk":
            _export_surface_mesh_vtk(
                np.asarray(mesh.vertices), np.asarray(mesh.faces), export_filename
            )
        case _:
            gus.io.meshio.export(str(export_filename), mesh)
