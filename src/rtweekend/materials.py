from abc import ABC, abstractmethod

import torch as t
from jaxtyping import Bool, Float, jaxtyped
from typeguard import typechecked as typechecker

from rtweekend.config import device, dtype
from rtweekend.hittable import HitRecord
from rtweekend.ray import Ray
from rtweekend.utils import random_unit_vector
from rtweekend.vec3 import dot, near_zero, reflect, refract, unit_vector


class Material(ABC):
    """How light leaving a surface relates to light arriving at it.

    Materials have no position and may be shared by any number of surfaces.
    """

    @abstractmethod
    def scatter(
        self,
        r_in: Ray,
        hit_record: HitRecord,
        generator: t.Generator | None = None,
    ) -> tuple[Bool[t.Tensor, "N"], Float[t.Tensor, "N 3"], Ray]:
        """Returns (scatter_mask, attenuation, scattered) for rays hitting this material.

        Rows where `scatter_mask` is False were absorbed; their attenuation and
        scattered ray are meaningless.
        """


class Lambertian(Material):
    def __init__(self, albedo: Float[t.Tensor, "3"]):
        self.albedo = albedo.to(device=device, dtype=dtype)

    @jaxtyped(typechecker=typechecker)
    def scatter(
        self,
        r_in: Ray,
        hit_record: HitRecord,
        generator: t.Generator | None = None,
    ) -> tuple[Bool[t.Tensor, "N"], Float[t.Tensor, "N 3"], Ray]:
        n = len(r_in)
        normals = hit_record.normal

        scatter_direction = normals + random_unit_vector((n,), generator)

        # Catch degenerate scatter direction
        degenerate = near_zero(scatter_direction).unsqueeze(-1)
        scatter_direction = t.where(degenerate, normals, scatter_direction)

        attenuation = self.albedo.expand(n, 3)
        scatter_mask = t.ones(n, dtype=t.bool, device=device)
        return scatter_mask, attenuation, Ray(hit_record.point, scatter_direction)


class Metal(Material):
    def __init__(self, albedo: Float[t.Tensor, "3"], fuzz: float = 0.0):
        self.albedo = albedo.to(device=device, dtype=dtype)
        self.fuzz = max(0.0, min(fuzz, 1.0))

    @jaxtyped(typechecker=typechecker)
    def scatter(
        self,
        r_in: Ray,
        hit_record: HitRecord,
        generator: t.Generator | None = None,
    ) -> tuple[Bool[t.Tensor, "N"], Float[t.Tensor, "N 3"], Ray]:
        n = len(r_in)
        normals = hit_record.normal

        reflected = unit_vector(reflect(r_in.direction, normals))
        if self.fuzz > 0:
            reflected = reflected + self.fuzz * random_unit_vector((n,), generator)

        # Fuzz may push the reflection below the surface, which absorbs it
        scatter_mask = dot(reflected, normals) > 0

        attenuation = self.albedo.expand(n, 3)
        return scatter_mask, attenuation, Ray(hit_record.point, reflected)


class Dielectric(Material):
    def __init__(self, refraction_index: float):
        # Refractive index in vacuum or air, or the ratio of the material's
        # index over the index of the enclosing medium
        self.refraction_index = refraction_index if refraction_index > 0 else 1.0

    @jaxtyped(typechecker=typechecker)
    def scatter(
        self,
        r_in: Ray,
        hit_record: HitRecord,
        generator: t.Generator | None = None,
    ) -> tuple[Bool[t.Tensor, "N"], Float[t.Tensor, "N 3"], Ray]:
        n = len(r_in)
        normals = hit_record.normal
        unit_direction = unit_vector(r_in.direction)

        refraction_ratio = t.where(
            hit_record.front_face,
            t.full((n,), 1.0 / self.refraction_index, dtype=dtype, device=device),
            t.full((n,), self.refraction_index, dtype=dtype, device=device),
        )

        cos_theta = t.clamp(dot(-unit_direction, normals), max=1.0)
        sin_theta = t.sqrt((1.0 - cos_theta * cos_theta).clamp(min=0.0))

        # Total internal reflection, the boundary included
        cannot_refract = refraction_ratio * sin_theta >= 1.0

        direction = reflect(unit_direction, normals)
        can_refract = ~cannot_refract
        if can_refract.any():
            direction[can_refract] = refract(
                unit_direction[can_refract], normals[can_refract], refraction_ratio[can_refract]
            )

        attenuation = t.ones((n, 3), dtype=dtype, device=device)
        scatter_mask = t.ones(n, dtype=t.bool, device=device)
        return scatter_mask, attenuation, Ray(hit_record.point, direction)
