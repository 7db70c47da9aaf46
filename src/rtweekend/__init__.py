"""Monte-Carlo ray tracer for scenes of spheres, batched with torch."""

from rtweekend.camera import Camera
from rtweekend.hittable import HitRecord, Hittable, HittableList
from rtweekend.interval import Interval
from rtweekend.materials import Dielectric, Lambertian, Material, Metal
from rtweekend.ray import Ray
from rtweekend.sphere import Sphere
from rtweekend.vec3 import color, vec3

__version__ = "0.1.0"

__all__ = [
    "Camera",
    "Dielectric",
    "HitRecord",
    "Hittable",
    "HittableList",
    "Interval",
    "Lambertian",
    "Material",
    "Metal",
    "Ray",
    "Sphere",
    "color",
    "vec3",
]
