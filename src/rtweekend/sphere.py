import torch as t
from jaxtyping import Float

from rtweekend.config import device, dtype
from rtweekend.hittable import HitRecord, Hittable
from rtweekend.interval import UNIVERSE, Interval
from rtweekend.materials import Material
from rtweekend.ray import Ray
from rtweekend.vec3 import divide, dot, length_squared


class Sphere(Hittable):
    def __init__(self, center: Float[t.Tensor, "3"], radius: float, material: Material):
        self.center: Float[t.Tensor, "3"] = center.to(device=device, dtype=dtype)
        self.radius: float = max(radius, 0.0)
        self.material: Material = material

    def hit(self, rays: Ray, ray_t: Interval = UNIVERSE) -> HitRecord:
        record = HitRecord.empty(len(rays))
        if self.radius == 0.0:
            return record

        # Solve |O + tD - C|^2 = r^2 with h = D.(C - O) standing in for -b/2
        oc = self.center - rays.origin
        a = length_squared(rays.direction)
        h = dot(rays.direction, oc)
        c = length_squared(oc) - self.radius**2

        discriminant = h * h - a * c
        sphere_hit = discriminant >= 0
        sqrtd = t.sqrt(discriminant.clamp(min=0.0))

        # Nearest root first, the far one only when the near one is out of range
        near_root = (h - sqrtd) / a
        far_root = (h + sqrtd) / a
        near_valid = sphere_hit & ray_t.surrounds(near_root)
        far_valid = sphere_hit & ~near_valid & ray_t.surrounds(far_root)
        sphere_hit = near_valid | far_valid
        if not sphere_hit.any():
            return record

        root = t.where(near_valid, near_root, far_root)
        root = t.where(sphere_hit, root, t.full_like(root, float("inf")))
        hit_points = rays.at(t.where(sphere_hit, root, t.zeros_like(root)))
        outward_normal = divide(hit_points - self.center, self.radius)

        record.hit = sphere_hit
        record.t = root
        record.point = hit_points
        record.set_face_normal(rays.direction, outward_normal)
        record.material_index = t.where(sphere_hit, 0, -1).to(t.long)
        record.materials = [self.material]
        return record
