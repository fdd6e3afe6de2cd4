import torch

import skcpd


def create_point_cloud(n_points: int, f: callable):
    """Create a point cloud from a function f: R^2 -> R."""
    x = torch.linspace(-1, 1, n_points, dtype=skcpd.float_dtype)
    y = torch.linspace(-1, 1, n_points, dtype=skcpd.float_dtype)

    x, y = torch.meshgrid(x, y, indexing="ij")
    x = x.reshape(-1)
    y = y.reshape(-1)
    z = f(x, y)

    N = len(x)
    assert N == n_points**2

    return torch.stack([x, y, z], dim=1).view(N, 3)


def triangle():
    """Unit right triangle in the plane."""
    return torch.tensor(
        [[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]], dtype=skcpd.float_dtype
    )


def random_points(n_points: int, dim: int, seed: int = 0):
    generator = torch.Generator().manual_seed(seed)
    return torch.rand(
        n_points, dim, generator=generator, dtype=skcpd.float_dtype
    )
