"""Unit tests for material scattering.

Tests cover:
- Lambertian attenuation and the degenerate-direction fallback
- Metal mirror reflection, fuzz clamping and absorption
- Dielectric refraction and total internal reflection
"""

import math

import pytest
import torch as t

from rtweekend import materials
from rtweekend.config import device, dtype
from rtweekend.materials import Dielectric, Lambertian, Metal
from rtweekend.vec3 import dot, length, vec3

S = math.sqrt(0.5)


def single_hit(make_rays, make_record, direction, normal=(0.0, 1.0, 0.0), front_face=True):
    rays = make_rays([[0.0, 1.0, 0.0]], [list(direction)])
    record = make_record([[0.0, 0.0, 0.0]], [list(normal)], [front_face])
    return rays, record


class TestLambertian:
    """Tests for diffuse scattering."""

    def test_always_scatters_with_albedo(self, make_rays, make_record, generator):
        albedo = vec3(0.2, 0.4, 0.6)
        rays = make_rays([[0.0, 1.0, 0.0]] * 64, [[0.0, -1.0, 0.0]] * 64)
        record = make_record([[0.0, 0.0, 0.0]] * 64, [[0.0, 1.0, 0.0]] * 64, [True] * 64)

        scatter_mask, attenuation, scattered = Lambertian(albedo).scatter(rays, record, generator)

        assert scatter_mask.all()
        assert t.equal(attenuation, albedo.expand(64, 3))
        assert t.equal(scattered.origin, record.point)
        # normal + unit vector stays in the closed upper hemisphere
        assert (dot(scattered.direction, record.normal) >= -1e-6).all()

    def test_degenerate_direction_falls_back_to_normal(self, make_rays, make_record, monkeypatch):
        monkeypatch.setattr(
            materials,
            "random_unit_vector",
            lambda shape, generator=None: t.tensor([[0.0, -1.0, 0.0]], dtype=dtype, device=device),
        )
        rays, record = single_hit(make_rays, make_record, (0.0, -1.0, 0.0))

        _, _, scattered = Lambertian(vec3(0.5, 0.5, 0.5)).scatter(rays, record)

        assert scattered.direction.tolist() == [[0.0, 1.0, 0.0]]
        assert not t.isnan(scattered.direction).any()


class TestMetal:
    """Tests for specular reflection."""

    def test_mirror_reflection(self, make_rays, make_record):
        rays, record = single_hit(make_rays, make_record, (1.0, -1.0, 0.0))

        scatter_mask, attenuation, scattered = Metal(vec3(0.8, 0.6, 0.2)).scatter(rays, record)

        assert scatter_mask.tolist() == [True]
        assert attenuation[0].tolist() == pytest.approx([0.8, 0.6, 0.2])
        assert scattered.direction[0].tolist() == pytest.approx([S, S, 0.0])

    def test_reflection_is_normalized_before_fuzz(self, make_rays, make_record):
        rays, record = single_hit(make_rays, make_record, (0.0, -5.0, 0.0))
        _, _, scattered = Metal(vec3(0.5, 0.5, 0.5)).scatter(rays, record)
        assert float(length(scattered.direction[0])) == pytest.approx(1.0)

    @pytest.mark.parametrize("fuzz, expected", [(-0.5, 0.0), (0.3, 0.3), (7.0, 1.0)])
    def test_fuzz_is_clamped(self, fuzz, expected):
        assert Metal(vec3(0.5, 0.5, 0.5), fuzz).fuzz == expected

    def test_fuzz_below_surface_is_absorbed(self, make_rays, make_record, monkeypatch):
        monkeypatch.setattr(
            materials,
            "random_unit_vector",
            lambda shape, generator=None: t.tensor([[0.0, -1.0, 0.0]], dtype=dtype, device=device),
        )
        rays, record = single_hit(make_rays, make_record, (1.0, -1.0, 0.0))

        scatter_mask, _, _ = Metal(vec3(0.5, 0.5, 0.5), fuzz=1.0).scatter(rays, record)

        assert scatter_mask.tolist() == [False]

    def test_grazing_reflection_is_absorbed(self, make_rays, make_record):
        rays, record = single_hit(make_rays, make_record, (1.0, 0.0, 0.0))
        scatter_mask, _, _ = Metal(vec3(0.5, 0.5, 0.5)).scatter(rays, record)
        assert scatter_mask.tolist() == [False]

    def test_fuzzy_reflections_stay_within_fuzz_ball(self, make_rays, make_record, generator):
        n = 200
        rays = make_rays([[0.0, 1.0, 0.0]] * n, [[S, -S, 0.0]] * n)
        record = make_record([[0.0, 0.0, 0.0]] * n, [[0.0, 1.0, 0.0]] * n, [True] * n)

        _, _, scattered = Metal(vec3(0.5, 0.5, 0.5), fuzz=0.3).scatter(rays, record, generator)

        mirror = t.tensor([S, S, 0.0], dtype=dtype, device=device)
        offsets = length(scattered.direction - mirror)
        t.testing.assert_close(offsets, t.full((n,), 0.3, dtype=dtype, device=device), atol=1e-5, rtol=0)


class TestDielectric:
    """Tests for refraction and total internal reflection."""

    def test_normal_incidence_passes_straight_through(self, make_rays, make_record):
        rays, record = single_hit(make_rays, make_record, (0.0, -1.0, 0.0))

        scatter_mask, attenuation, scattered = Dielectric(1.5).scatter(rays, record)

        assert scatter_mask.tolist() == [True]
        assert attenuation.tolist() == [[1.0, 1.0, 1.0]]
        assert scattered.direction[0].tolist() == pytest.approx([0.0, -1.0, 0.0], abs=1e-6)

    def test_entering_glass_bends_towards_normal(self, make_rays, make_record):
        rays, record = single_hit(make_rays, make_record, (1.0, -1.0, 0.0))

        _, _, scattered = Dielectric(1.5).scatter(rays, record)

        direction = scattered.direction[0]
        assert float(direction[0]) == pytest.approx(S / 1.5, abs=1e-5)
        assert float(direction[1]) < 0
        assert float(length(direction)) == pytest.approx(1.0, abs=1e-5)

    def test_total_internal_reflection_when_leaving_glass(self, make_rays, make_record):
        # From inside at 45 degrees: 1.5 * sin(45) > 1
        rays, record = single_hit(make_rays, make_record, (1.0, -1.0, 0.0), front_face=False)

        scatter_mask, _, scattered = Dielectric(1.5).scatter(rays, record)

        assert scatter_mask.tolist() == [True]
        assert not t.isnan(scattered.direction).any()
        assert scattered.direction[0].tolist() == pytest.approx([S, S, 0.0], abs=1e-6)

    def test_boundary_case_reflects(self, make_rays, make_record, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("refract must not be called at the critical angle")

        monkeypatch.setattr(materials, "refract", fail)
        rays, record = single_hit(make_rays, make_record, (1.0, 0.0, 0.0))

        _, _, scattered = Dielectric(1.0).scatter(rays, record)

        assert scattered.direction[0].tolist() == pytest.approx([1.0, 0.0, 0.0])

    def test_mixed_batch_refracts_and_reflects(self, make_rays, make_record):
        rays = make_rays([[0.0, 1.0, 0.0], [0.0, 1.0, 0.0]], [[0.0, -1.0, 0.0], [S, -S, 0.0]])
        record = make_record([[0.0, 0.0, 0.0]] * 2, [[0.0, 1.0, 0.0]] * 2, [False, False])

        _, _, scattered = Dielectric(1.5).scatter(rays, record)

        assert scattered.direction[0].tolist() == pytest.approx([0.0, -1.0, 0.0], abs=1e-6)
        assert scattered.direction[1].tolist() == pytest.approx([S, S, 0.0], abs=1e-6)

    @pytest.mark.parametrize("index", [0.0, -1.5])
    def test_non_positive_index_defaults_to_vacuum(self, index):
        assert Dielectric(index).refraction_index == 1.0


class TestEnergy:
    """No material amplifies light."""

    @pytest.mark.parametrize(
        "material",
        [Lambertian(vec3(0.9, 0.5, 0.1)), Metal(vec3(1.0, 0.7, 0.3), 0.5), Dielectric(1.5)],
        ids=["lambertian", "metal", "dielectric"],
    )
    def test_attenuation_within_unit_range(self, material, make_rays, make_record, generator):
        n = 32
        rays = make_rays([[0.0, 1.0, 0.0]] * n, [[S, -S, 0.0]] * n)
        record = make_record([[0.0, 0.0, 0.0]] * n, [[0.0, 1.0, 0.0]] * n, [True, False] * (n // 2))

        _, attenuation, _ = material.scatter(rays, record, generator)

        assert (attenuation >= 0).all()
        assert (attenuation <= 1).all()
