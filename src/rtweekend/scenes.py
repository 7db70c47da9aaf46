"""Ready-made worlds, each paired with the camera settings that frame it."""

import random
from typing import Any, Callable, NamedTuple

from rtweekend.hittable import HittableList
from rtweekend.materials import Dielectric, Lambertian, Metal
from rtweekend.sphere import Sphere
from rtweekend.vec3 import color, length, vec3


class Scene(NamedTuple):
    world: HittableList
    camera: dict[str, Any]


def two_spheres(seed: int | None = None) -> Scene:
    world = HittableList()
    material_ground = Lambertian(color(0.8, 0.8, 0.0))
    material_center = Lambertian(color(0.1, 0.2, 0.5))
    world.add(Sphere(vec3(0.0, 0.0, -1.0), 0.5, material_center))
    world.add(Sphere(vec3(0.0, -100.5, -1.0), 100.0, material_ground))

    camera = dict(
        aspect_ratio=16.0 / 9.0,
        image_width=400,
        samples_per_pixel=10,
        max_depth=10,
        vfov=90.0,
        look_from=vec3(0.0, 0.0, 0.0),
        look_at=vec3(0.0, 0.0, -1.0),
        vup=vec3(0.0, 1.0, 0.0),
        defocus_angle=0.0,
        focus_dist=1.0,
    )
    return Scene(world, camera)


def material_showcase(seed: int | None = None) -> Scene:
    world = HittableList()
    material_ground = Lambertian(color(0.8, 0.8, 0.0))
    material_center = Lambertian(color(0.1, 0.2, 0.5))
    material_left = Dielectric(1.50)
    material_bubble = Dielectric(1.00 / 1.50)
    material_right = Metal(color(0.8, 0.6, 0.2), 1.0)

    world.add(Sphere(vec3(0.0, -100.5, -1.0), 100.0, material_ground))
    world.add(Sphere(vec3(0.0, 0.0, -1.2), 0.5, material_center))
    world.add(Sphere(vec3(-1.0, 0.0, -1.0), 0.5, material_left))
    world.add(Sphere(vec3(-1.0, 0.0, -1.0), 0.4, material_bubble))
    world.add(Sphere(vec3(1.0, 0.0, -1.0), 0.5, material_right))

    camera = dict(
        aspect_ratio=16.0 / 9.0,
        image_width=400,
        samples_per_pixel=100,
        max_depth=50,
        vfov=20.0,
        look_from=vec3(-2.0, 2.0, 1.0),
        look_at=vec3(0.0, 0.0, -1.0),
        vup=vec3(0.0, 1.0, 0.0),
        defocus_angle=10.0,
        focus_dist=3.4,
    )
    return Scene(world, camera)


def final(seed: int | None = None) -> Scene:
    """The book cover: a field of small random spheres around three large ones."""
    rng = random.Random(seed)

    def random_double(min_val=0.0, max_val=1.0):
        return min_val + (max_val - min_val) * rng.random()

    def random_color(min_val=0.0, max_val=1.0):
        return color(random_double(min_val, max_val), random_double(min_val, max_val), random_double(min_val, max_val))

    world = HittableList()
    world.add(Sphere(vec3(0.0, -1000.0, 0.0), 1000.0, Lambertian(color(0.5, 0.5, 0.5))))

    glass = Dielectric(1.5)
    for a in range(-11, 11):
        for b in range(-11, 11):
            choose_mat = random_double()
            center = vec3(a + 0.9 * random_double(), 0.2, b + 0.9 * random_double())
            if float(length(center - vec3(4.0, 0.2, 0.0))) <= 0.9:
                continue

            if choose_mat < 0.8:
                # Diffuse
                material = Lambertian(random_color() * random_color())
            elif choose_mat < 0.95:
                # Metal
                material = Metal(random_color(0.5, 1.0), random_double(0.0, 0.5))
            else:
                # Glass
                material = glass
            world.add(Sphere(center, 0.2, material))

    world.add(Sphere(vec3(0.0, 1.0, 0.0), 1.0, glass))
    world.add(Sphere(vec3(-4.0, 1.0, 0.0), 1.0, Lambertian(color(0.4, 0.2, 0.1))))
    world.add(Sphere(vec3(4.0, 1.0, 0.0), 1.0, Metal(color(0.7, 0.6, 0.5), 0.0)))

    camera = dict(
        aspect_ratio=16.0 / 9.0,
        image_width=1200,
        samples_per_pixel=500,
        max_depth=50,
        vfov=20.0,
        look_from=vec3(13.0, 2.0, 3.0),
        look_at=vec3(0.0, 0.0, 0.0),
        vup=vec3(0.0, 1.0, 0.0),
        defocus_angle=0.6,
        focus_dist=10.0,
    )
    return Scene(world, camera)


SCENES: dict[str, Callable[[int | None], Scene]] = {
    "two-spheres": two_spheres,
    "materials": material_showcase,
    "final": final,
}
