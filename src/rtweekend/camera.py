import logging
import math

import torch as t
from jaxtyping import Float, Int, UInt8, jaxtyped
from tqdm import tqdm
from typeguard import typechecked as typechecker

from rtweekend.config import PROGRESS_INTERVAL, SHADOW_ACNE_EPSILON, device, dtype, make_generator
from rtweekend.hittable import Hittable
from rtweekend.image_io import quantize
from rtweekend.interval import Interval
from rtweekend.ray import Ray
from rtweekend.utils import degrees_to_radians, random_in_unit_disk, sample_square
from rtweekend.vec3 import cross, unit_vector, vec3

logger = logging.getLogger(__name__)


@jaxtyped(typechecker=typechecker)
def background_color(directions: Float[t.Tensor, "N 3"]) -> Float[t.Tensor, "N 3"]:
    """Sky gradient: white at the horizon below, light blue towards the zenith."""
    white = t.tensor([1.0, 1.0, 1.0], dtype=dtype, device=device)
    light_blue = t.tensor([0.5, 0.7, 1.0], dtype=dtype, device=device)
    a = 0.5 * (unit_vector(directions)[:, 1:2] + 1.0)
    return (1.0 - a) * white + a * light_blue


class Camera:
    def __init__(
        self,
        aspect_ratio: float = 16.0 / 9.0,
        image_width: int = 400,
        samples_per_pixel: int = 10,
        max_depth: int = 10,
        vfov: float = 90.0,  # vertical field of view angle, degrees
        look_from: Float[t.Tensor, "3"] | None = None,
        look_at: Float[t.Tensor, "3"] | None = None,
        vup: Float[t.Tensor, "3"] | None = None,
        defocus_angle: float = 0.0,  # aperture cone angle at the focus plane, degrees
        focus_dist: float = 1.0,
        seed: int | None = None,
    ):
        self.look_from = (look_from if look_from is not None else vec3(0.0, 0.0, 0.0)).to(device=device, dtype=dtype)
        self.look_at = (look_at if look_at is not None else vec3(0.0, 0.0, -1.0)).to(device=device, dtype=dtype)
        self.vup = (vup if vup is not None else vec3(0.0, 1.0, 0.0)).to(device=device, dtype=dtype)

        self.samples_per_pixel: int = samples_per_pixel
        self.max_depth: int = max_depth
        self.defocus_angle: float = defocus_angle
        self.focus_dist: float = focus_dist
        self.seed = seed

        self.aspect_ratio: float = aspect_ratio
        self.image_width: int = image_width
        self.image_height: int = max(1, int(image_width / aspect_ratio))

        self.center = self.look_from

        # Viewport sits on the focus plane
        theta = degrees_to_radians(vfov)
        self.viewport_height: float = 2.0 * math.tan(theta / 2) * focus_dist
        self.viewport_width: float = self.viewport_height * (self.image_width / self.image_height)

        # Camera basis vectors
        self.w = unit_vector(self.look_from - self.look_at)
        self.u = unit_vector(cross(self.vup, self.w))
        self.v = cross(self.w, self.u)

        # Vectors across the horizontal and down the vertical viewport edges
        viewport_u = self.viewport_width * self.u
        viewport_v = self.viewport_height * -self.v

        self.pixel_delta_u = viewport_u / self.image_width
        self.pixel_delta_v = viewport_v / self.image_height

        viewport_upper_left = self.center - focus_dist * self.w - viewport_u / 2 - viewport_v / 2
        self.pixel00_loc = viewport_upper_left + 0.5 * (self.pixel_delta_u + self.pixel_delta_v)

        defocus_radius = focus_dist * math.tan(degrees_to_radians(defocus_angle / 2))
        self.defocus_disk_u = self.u * defocus_radius
        self.defocus_disk_v = self.v * defocus_radius

    @jaxtyped(typechecker=typechecker)
    def defocus_disk_sample(self, n: int, generator: t.Generator | None = None) -> Float[t.Tensor, "N 3"]:
        p = random_in_unit_disk((n,), generator)
        return self.center + p[:, 0:1] * self.defocus_disk_u + p[:, 1:2] * self.defocus_disk_v

    @jaxtyped(typechecker=typechecker)
    def get_rays(
        self,
        rows: Int[t.Tensor, "N"],
        cols: Int[t.Tensor, "N"],
        generator: t.Generator | None = None,
    ) -> Ray:
        """Builds one jittered camera ray per (row, col) pair.

        Rays start at the lens center, or at a random point on the defocus disk
        when the aperture is open, and pass through a random point of the pixel
        square.
        """
        n = rows.shape[0]
        offset = sample_square((n,), generator)
        pixel_sample = (
            self.pixel00_loc
            + (cols.to(dtype) + offset[:, 0]).unsqueeze(-1) * self.pixel_delta_u
            + (rows.to(dtype) + offset[:, 1]).unsqueeze(-1) * self.pixel_delta_v
        )

        if self.defocus_angle <= 0:
            ray_origin = self.center.expand(n, 3)
        else:
            ray_origin = self.defocus_disk_sample(n, generator)

        return Ray(ray_origin, pixel_sample - ray_origin)

    def get_ray(self, row: int, col: int, generator: t.Generator | None = None) -> Ray:
        rows = t.tensor([row], dtype=t.long, device=device)
        cols = t.tensor([col], dtype=t.long, device=device)
        return self.get_rays(rows, cols, generator)

    @jaxtyped(typechecker=typechecker)
    def ray_color(
        self,
        pixel_rays: Ray,
        world: Hittable,
        depth: int = 0,
        generator: t.Generator | None = None,
    ) -> Float[t.Tensor, "N 3"]:
        """Estimates the radiance arriving along each ray.

        Every bounce multiplies the running attenuation by the material's
        response; a miss picks up the sky, absorption or running out of bounces
        leaves the ray black.
        """
        n = len(pixel_rays)
        colors = t.zeros((n, 3), dtype=dtype, device=device)
        attenuation = t.ones((n, 3), dtype=dtype, device=device)
        origins = pixel_rays.origin.clone()
        directions = pixel_rays.direction.clone()
        active_mask = t.ones(n, dtype=t.bool, device=device)

        for _ in range(depth, self.max_depth):
            if not active_mask.any():
                break

            active = active_mask.nonzero(as_tuple=False).squeeze(-1)
            rays = Ray(origins[active], directions[active])
            hit_record = world.hit(rays, Interval(SHADOW_ACNE_EPSILON, math.inf))

            # Rays that escaped the scene
            missed = ~hit_record.hit
            if missed.any():
                miss_indices = active[missed]
                colors[miss_indices] = attenuation[miss_indices] * background_color(rays.direction[missed])
                active_mask[miss_indices] = False

            for material_index, material in enumerate(hit_record.materials):
                local = (hit_record.hit & (hit_record.material_index == material_index)).nonzero(as_tuple=False)
                local = local.squeeze(-1)
                if local.numel() == 0:
                    continue

                scatter_mask, mat_attenuation, scattered = material.scatter(
                    rays[local], hit_record.select(local), generator
                )
                indices = active[local]
                attenuation[indices] = attenuation[indices] * mat_attenuation
                origins[indices] = scattered.origin
                directions[indices] = scattered.direction

                # Absorbed rays contribute black
                active_mask[indices[~scatter_mask]] = False

        # Rays still bouncing when the depth limit is reached contribute black
        return colors

    def render(
        self,
        world: Hittable,
        generator: t.Generator | None = None,
        progress: bool = False,
    ) -> UInt8[t.Tensor, "h w 3"]:
        """Renders `world` top to bottom and returns gamma encoded 8-bit pixels.

        All samples of one scanline are traced as a single batch.
        """
        if generator is None:
            generator = make_generator(self.seed)

        h, w, spp = self.image_height, self.image_width, self.samples_per_pixel
        image = t.zeros((h, w, 3), dtype=t.uint8, device=device)

        # Each pixel's samples are contiguous so they can be averaged with a view
        cols = t.arange(w, device=device).repeat_interleave(spp)

        for row in tqdm(range(h), total=h, desc="Scanlines", disable=not progress):
            scanlines_remaining = h - row
            if scanlines_remaining % PROGRESS_INTERVAL == 0:
                logger.info("Scanlines remaining: %d", scanlines_remaining)

            rows = t.full_like(cols, row)
            colors = self.ray_color(self.get_rays(rows, cols, generator), world, 0, generator)
            pixel_colors = colors.view(w, spp, 3).mean(dim=1)
            image[row] = quantize(pixel_colors)

        logger.info("Done.")
        return image
