import os

import torch as t

device = t.device(os.environ.get("RTWEEKEND_DEVICE") or ("cuda" if t.cuda.is_available() else "cpu"))
dtype = t.float32

# Minimum ray parameter accepted by the integrator; keeps bounced rays off their own surface.
SHADOW_ACNE_EPSILON = 0.001

NEAR_ZERO_TOLERANCE = 1e-8

# Rejection samplers discard candidates this close to the origin before normalizing.
MIN_SAMPLE_LENGTH_SQUARED = 1e-30
MAX_REJECTION_ROUNDS = 64

PROGRESS_INTERVAL = 10


def make_generator(seed: int | None = None) -> t.Generator:
    """Returns the random stream consumed by every sampling call of a render."""
    generator = t.Generator(device=device)
    if seed is None:
        generator.seed()
    else:
        generator.manual_seed(seed)
    return generator
