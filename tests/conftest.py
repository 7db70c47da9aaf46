"""Pytest configuration for rtweekend tests.

Provides a deterministic random stream and small builders for ray and hit
record batches.
"""

import pytest
import torch as t

from rtweekend.config import device, dtype, make_generator
from rtweekend.hittable import HitRecord
from rtweekend.ray import Ray


@pytest.fixture
def generator():
    """A seeded random stream so sampling tests are reproducible."""
    return make_generator(1234)


@pytest.fixture
def make_rays():
    """Builds a Ray batch from lists of origins and directions."""

    def _make(origins, directions):
        return Ray(
            t.tensor(origins, dtype=dtype, device=device),
            t.tensor(directions, dtype=dtype, device=device),
        )

    return _make


@pytest.fixture
def make_record():
    """Builds a HitRecord in which every row is a hit with the given geometry."""

    def _make(points, normals, front_face):
        n = len(points)
        return HitRecord(
            hit=t.ones(n, dtype=t.bool, device=device),
            point=t.tensor(points, dtype=dtype, device=device),
            normal=t.tensor(normals, dtype=dtype, device=device),
            t_values=t.ones(n, dtype=dtype, device=device),
            front_face=t.tensor(front_face, dtype=t.bool, device=device),
            material_index=t.zeros(n, dtype=t.long, device=device),
        )

    return _make
