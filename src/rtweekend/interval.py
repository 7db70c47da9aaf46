import math
from dataclasses import dataclass

import torch as t


@dataclass(frozen=True)
class Interval:
    """A numeric range [min, max].

    `max` may be a per-ray tensor; the scene aggregate narrows it ray by ray
    while searching for the closest hit.
    """

    min: float = math.inf
    max: float | t.Tensor = -math.inf

    def surrounds(self, x):
        return (self.min < x) & (x < self.max)

    def clamp(self, x):
        if isinstance(x, t.Tensor):
            low = t.as_tensor(self.min, dtype=x.dtype, device=x.device)
            high = t.as_tensor(self.max, dtype=x.dtype, device=x.device)
            return t.minimum(t.maximum(x, low), high)
        return min(max(x, self.min), self.max)


UNIVERSE = Interval(-math.inf, math.inf)
