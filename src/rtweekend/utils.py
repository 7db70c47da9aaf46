import math

import torch as t
from jaxtyping import Float, jaxtyped
from typeguard import typechecked as typechecker

from rtweekend.config import MAX_REJECTION_ROUNDS, MIN_SAMPLE_LENGTH_SQUARED, device, dtype


def degrees_to_radians(degrees: float) -> float:
    return degrees * math.pi / 180.0


def _uniform(shape: tuple[int, ...], low: float, high: float, generator: t.Generator | None) -> t.Tensor:
    return low + (high - low) * t.rand(shape, generator=generator, dtype=dtype, device=device)


def _rejection_sample(
    shape: tuple[int, ...], dims: int, generator: t.Generator | None, min_length_squared: float
) -> t.Tensor:
    """Draws points uniformly inside the unit ball of `dims` dimensions.

    Rejected candidates are redrawn in rounds; after MAX_REJECTION_ROUNDS the
    random source is considered broken.
    """
    points = _uniform((*shape, dims), -1.0, 1.0, generator)
    for _ in range(MAX_REJECTION_ROUNDS):
        len_sq = (points * points).sum(dim=-1)
        rejected = (len_sq <= min_length_squared) | (len_sq > 1.0)
        if not rejected.any():
            return points
        points[rejected] = _uniform((int(rejected.sum()), dims), -1.0, 1.0, generator)
    raise RuntimeError(f"Rejection sampling did not converge after {MAX_REJECTION_ROUNDS} rounds")


@jaxtyped(typechecker=typechecker)
def random_unit_vector(shape: tuple[int, ...], generator: t.Generator | None = None) -> Float[t.Tensor, "... 3"]:
    """Returns directions uniformly distributed on the unit sphere.

    Points are sampled inside the unit ball and then normalized; normalizing
    points of the enclosing cube directly would favour its corners.
    """
    points = _rejection_sample(shape, 3, generator, MIN_SAMPLE_LENGTH_SQUARED)
    return points / points.norm(dim=-1, keepdim=True)


@jaxtyped(typechecker=typechecker)
def random_in_unit_disk(shape: tuple[int, ...], generator: t.Generator | None = None) -> Float[t.Tensor, "... 3"]:
    """Returns points uniformly inside the unit disk of the xy plane (z = 0)."""
    xy = _rejection_sample(shape, 2, generator, 0.0)
    return t.cat([xy, t.zeros((*shape, 1), dtype=dtype, device=device)], dim=-1)


@jaxtyped(typechecker=typechecker)
def sample_square(shape: tuple[int, ...], generator: t.Generator | None = None) -> Float[t.Tensor, "... 2"]:
    """Returns offsets uniformly inside the [-0.5, 0.5) square around a pixel center."""
    return _uniform((*shape, 2), -0.5, 0.5, generator)
