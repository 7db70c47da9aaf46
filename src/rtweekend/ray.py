import torch as t
from jaxtyping import Float, jaxtyped
from typeguard import typechecked as typechecker


class Ray:
    """A batch of rays; each has an origin and a (not necessarily unit) direction."""

    @jaxtyped(typechecker=typechecker)
    def __init__(self, origin: Float[t.Tensor, "*batch 3"], direction: Float[t.Tensor, "*batch 3"]):
        self.origin = origin
        self.direction = direction

    @jaxtyped(typechecker=typechecker)
    def at(self, t_values: Float[t.Tensor, "*batch"]) -> Float[t.Tensor, "*batch 3"]:
        return self.origin + t_values.unsqueeze(-1) * self.direction

    def __len__(self) -> int:
        return self.origin.shape[0]

    def __getitem__(self, index) -> "Ray":
        return Ray(self.origin[index], self.direction[index])

    def __repr__(self) -> str:
        return f"Ray(origin={self.origin.tolist()}, direction={self.direction.tolist()})"
