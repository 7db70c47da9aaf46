"""Vector algebra on tensors whose last dimension holds (x, y, z).

Points, directions and RGB colors all share this representation. Batches of
vectors carry any number of leading dimensions.
"""

import torch as t
from jaxtyping import Bool, Float, jaxtyped
from typeguard import typechecked as typechecker

from rtweekend.config import NEAR_ZERO_TOLERANCE, device, dtype


def vec3(x: float, y: float, z: float) -> Float[t.Tensor, "3"]:
    return t.tensor([x, y, z], dtype=dtype, device=device)


# Colors are plain vectors holding (r, g, b).
color = vec3


@jaxtyped(typechecker=typechecker)
def dot(u: Float[t.Tensor, "*batch 3"], v: Float[t.Tensor, "*batch 3"]) -> Float[t.Tensor, "*batch"]:
    return (u * v).sum(dim=-1)


@jaxtyped(typechecker=typechecker)
def cross(u: Float[t.Tensor, "*batch 3"], v: Float[t.Tensor, "*batch 3"]) -> Float[t.Tensor, "*batch 3"]:
    return t.linalg.cross(u, v, dim=-1)


@jaxtyped(typechecker=typechecker)
def length_squared(v: Float[t.Tensor, "*batch 3"]) -> Float[t.Tensor, "*batch"]:
    return (v * v).sum(dim=-1)


@jaxtyped(typechecker=typechecker)
def length(v: Float[t.Tensor, "*batch 3"]) -> Float[t.Tensor, "*batch"]:
    return length_squared(v).sqrt()


def divide(v: t.Tensor, divisor: float | t.Tensor) -> t.Tensor:
    """Divides vectors by scalars, one scalar per vector when `divisor` is a tensor.

    An exact zero divisor is a caller bug and raises instead of producing inf.
    """
    if isinstance(divisor, t.Tensor):
        if bool((divisor == 0).any()):
            raise ZeroDivisionError("Dividing vector by zero")
        return v / divisor.unsqueeze(-1)
    if divisor == 0:
        raise ZeroDivisionError("Dividing vector by zero")
    return v / divisor


@jaxtyped(typechecker=typechecker)
def unit_vector(v: Float[t.Tensor, "*batch 3"]) -> Float[t.Tensor, "*batch 3"]:
    return divide(v, length(v))


@jaxtyped(typechecker=typechecker)
def near_zero(v: Float[t.Tensor, "*batch 3"]) -> Bool[t.Tensor, "*batch"]:
    return (v.abs() < NEAR_ZERO_TOLERANCE).all(dim=-1)


@jaxtyped(typechecker=typechecker)
def reflect(v: Float[t.Tensor, "*batch 3"], n: Float[t.Tensor, "*batch 3"]) -> Float[t.Tensor, "*batch 3"]:
    # Reflects vector v around unit normal n
    return v - 2 * dot(v, n).unsqueeze(-1) * n


@jaxtyped(typechecker=typechecker)
def refract(
    uv: Float[t.Tensor, "*batch 3"],
    n: Float[t.Tensor, "*batch 3"],
    etai_over_etat: Float[t.Tensor, "*batch"],
) -> Float[t.Tensor, "*batch 3"]:
    """Bends unit direction `uv` through a surface with unit normal `n` (Snell's law).

    The result is split into the part perpendicular to the normal, scaled by the
    ratio of refractive indices, and the part parallel to it, which restores unit
    length. Callers only pass rays that can refract.
    """
    cos_theta = t.clamp(dot(-uv, n), max=1.0).unsqueeze(-1)
    r_out_perp = etai_over_etat.unsqueeze(-1) * (uv + cos_theta * n)
    r_out_parallel = -t.sqrt(t.abs(1.0 - length_squared(r_out_perp))).unsqueeze(-1) * n
    return r_out_perp + r_out_parallel
