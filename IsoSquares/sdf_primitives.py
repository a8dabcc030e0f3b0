from IsoSquares.SDF import SDFBase
import torch


class CircleSDF(SDFBase):
    def __init__(self, center, radius):
        super().__init__()
        self.center = torch.tensor(center, dtype=torch.float32)
        self.r = radius

    def _compute(self, queries: torch.Tensor) -> torch.Tensor:
        center = self.center.to(dtype=queries.dtype, device=queries.device)
        return (torch.linalg.norm(queries - center, dim=1) - self.r).reshape(-1, 1)

    def _get_domain_bounds(self) -> torch.Tensor:
        margin = 1.1 * self.r
        return torch.stack([self.center - margin, self.center + margin])


class BoxSDF(SDFBase):
    def __init__(self, center, half_size):
        super().__init__()
        self.center = torch.tensor(center, dtype=torch.float32)
        self.half_size = torch.as_tensor(half_size, dtype=torch.float32).expand(2)

    def _compute(self, queries: torch.Tensor) -> torch.Tensor:
        center = self.center.to(dtype=queries.dtype, device=queries.device)
        half_size = self.half_size.to(dtype=queries.dtype, device=queries.device)
        q = (queries - center).abs() - half_size
        outside = torch.linalg.norm(torch.clamp(q, min=0), dim=1)
        inside = torch.clamp(q.max(dim=1).values, max=0)
        return (outside + inside).reshape(-1, 1)

    def _get_domain_bounds(self) -> torch.Tensor:
        margin = 1.1 * self.half_size
        return torch.stack([self.center - margin, self.center + margin])


class RingSDF(SDFBase):
    """Annulus with mid radius ``R`` and half width ``r``."""

    def __init__(self, center, R, r):
        super().__init__()
        self.center = torch.tensor(center, dtype=torch.float32)
        self.R = R
        self.r = r

    def _compute(self, queries: torch.Tensor) -> torch.Tensor:
        center = self.center.to(dtype=queries.dtype, device=queries.device)
        dist = torch.linalg.norm(queries - center, dim=1)
        return ((dist - self.R).abs() - self.r).reshape(-1, 1)

    def _get_domain_bounds(self) -> torch.Tensor:
        margin = 1.1 * (self.R + self.r)
        return torch.stack([self.center - margin, self.center + margin])


class HalfPlaneSDF(SDFBase):
    def __init__(self, point, normal):
        super().__init__()
        self.point = torch.tensor(point, dtype=torch.float32)
        self.normal = torch.tensor(normal, dtype=torch.float32)
        self.normal = self.normal / torch.linalg.norm(self.normal)

    def _compute(self, queries: torch.Tensor) -> torch.Tensor:
        point = self.point.to(dtype=queries.dtype, device=queries.device)
        normal = self.normal.to(dtype=queries.dtype, device=queries.device)
        return torch.matmul(queries - point, normal).reshape(-1, 1)

    def _get_domain_bounds(self) -> torch.Tensor:
        return torch.tensor([[-1, -1], [1, 1]], dtype=torch.float32)
