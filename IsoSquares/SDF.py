from abc import ABC, abstractmethod
import torch

from IsoSquares.plotting import plot_field
import IsoSquares

import logging

logger = logging.getLogger(IsoSquares.__name__)


class SDFBase(ABC):
    """Abstract base class for 2D Signed Distance Functions.

    SDFs represent geometry as an implicit function that returns the signed
    distance from any query point to the nearest boundary. Negative values
    indicate points inside the geometry, positive values indicate points
    outside, and zero indicates points on the boundary.

    Marching squares fills the region where the scalar field is positive, so
    an SDF is handed to the extractor through :func:`as_scalar_field`, which
    flips the sign.

    The class supports composition via operator overloading: ``a + b`` is the
    union and ``-a`` the complement of ``a``.

    Notes
    -----
    Subclasses must implement:
    - ``_compute(queries)``: Calculate SDF values for query points
    - ``_get_domain_bounds()``: Return the bounding box of the geometry

    Examples
    --------
    >>> from IsoSquares.sdf_primitives import CircleSDF
    >>> import torch
    >>>
    >>> circle = CircleSDF(center=[0, 0], radius=1.0)
    >>> points = torch.tensor([[0.0, 0.0], [2.0, 0.0]])
    >>> distances = circle(points)
    >>> print(distances)  # [-1.0, 1.0] (inside, outside)
    """

    def __call__(self, queries: torch.Tensor) -> torch.Tensor:
        """Evaluate the SDF at given query points.

        Parameters
        ----------
        queries : torch.Tensor
            Query points of shape (N, 2).

        Returns
        -------
        torch.Tensor
            Signed distance values of shape (N, 1).

        Raises
        ------
        ValueError
            If queries have invalid shape.
        RuntimeError
            If SDF computation returns invalid output.
        """
        self._validate_input(queries)
        sdf_values = self._compute(queries)
        if sdf_values is None:
            raise RuntimeError("Invalid SDF output")
        return sdf_values

    def _validate_input(self, queries: torch.Tensor):
        if queries.ndim != 2 or queries.shape[1] != 2:
            raise ValueError(f"Expected input of shape (N, 2), got {tuple(queries.shape)}")

    @abstractmethod
    def _compute(self, queries: torch.Tensor) -> torch.Tensor:
        """Compute SDF values for query points.

        Parameters
        ----------
        queries : torch.Tensor
            Query points of shape (N, 2).

        Returns
        -------
        torch.Tensor
            Signed distance values of shape (N, 1).
        """
        pass

    @abstractmethod
    def _get_domain_bounds(self) -> torch.Tensor:
        """Return the bounding box of the SDF's domain.

        Returns
        -------
        torch.Tensor
            Array of shape (2, 2) where the first row contains minimum
            coordinates and the second row contains maximum coordinates.
        """
        pass

    def plot(self, *args, **kwargs):
        return plot_field(self, *args, **kwargs)

    def __add__(self, other):
        return SummedSDF(self, other)

    def __neg__(self):
        return NegatedSDF(self)


class SummedSDF(SDFBase):
    def __init__(self, obj1: SDFBase, obj2: SDFBase):
        super().__init__()
        self.obj1 = obj1
        self.obj2 = obj2

    def _compute(self, queries):
        result1 = self.obj1._compute(queries)
        result2 = self.obj2._compute(queries)
        return torch.minimum(result1, result2)

    def _get_domain_bounds(self):
        bounds1 = torch.as_tensor(self.obj1._get_domain_bounds())
        bounds2 = torch.as_tensor(self.obj2._get_domain_bounds())

        lower = torch.minimum(bounds1[0], bounds2[0])
        upper = torch.maximum(bounds1[1], bounds2[1])

        return torch.stack([lower, upper], dim=0)


class NegatedSDF(SDFBase):
    def __init__(self, obj: SDFBase):
        super().__init__()
        self.obj = obj

    def _compute(self, queries):
        return -self.obj._compute(queries)

    def _get_domain_bounds(self):
        raise NotImplementedError(
            "The complement of a shape is unbounded, pass bounds explicitly."
        )


class TransformedSDF(SDFBase):
    """
    Generic SDF wrapper that applies a transformation to the input queries.
    Transformation can be rotation, translation, or scaling.

    The rotation is a 2x2 matrix, the translation a vector of length 2 and
    the scale a uniform factor.
    """

    def __init__(self, sdf: SDFBase, rotation=None, translation=None, scale=None):
        super().__init__()
        self.sdf = sdf
        self.rotation = rotation
        self.translation = translation
        self.scale = scale

    def _compute(self, queries: torch.Tensor) -> torch.Tensor:
        xy = queries

        if self.translation is not None:
            xy = xy - torch.as_tensor(self.translation, dtype=xy.dtype, device=xy.device)

        if self.rotation is not None:
            rotation = torch.as_tensor(self.rotation, dtype=xy.dtype, device=xy.device)
            # inverse rotation
            xy = xy @ rotation

        if self.scale is not None:
            xy = xy / self.scale

        sdf_vals = self.sdf._compute(xy)

        # rescale distances if scaled
        if self.scale is not None:
            sdf_vals = sdf_vals * self.scale
        return sdf_vals

    def _get_domain_bounds(self) -> torch.Tensor:
        bounds = torch.as_tensor(self.sdf._get_domain_bounds(), dtype=torch.float64)
        corners = torch.stack(
            [
                bounds[0],
                torch.stack([bounds[0, 0], bounds[1, 1]]),
                bounds[1],
                torch.stack([bounds[1, 0], bounds[0, 1]]),
            ]
        )
        if self.scale is not None:
            corners = corners * self.scale
        if self.rotation is not None:
            corners = corners @ torch.as_tensor(self.rotation, dtype=corners.dtype).T
        if self.translation is not None:
            corners = corners + torch.as_tensor(self.translation, dtype=corners.dtype)
        return torch.stack([corners.min(dim=0).values, corners.max(dim=0).values])


def as_scalar_field(sdf: SDFBase):
    """
    Wraps an SDF as a batched scalar field for marching squares.

    The returned callable maps (N, 2) points to N values that are positive
    inside the geometry, so the extracted mesh fills the interior of the SDF.
    """

    def scalar_field(points: torch.Tensor) -> torch.Tensor:
        return -sdf(points).reshape(-1)

    return scalar_field

