from abc import ABC, abstractmethod

import torch as t
from jaxtyping import Bool, Float, Int, jaxtyped
from typeguard import typechecked as typechecker

from rtweekend.config import device, dtype
from rtweekend.interval import UNIVERSE, Interval
from rtweekend.ray import Ray


class HitRecord:
    """Class to register ray-object intersections for a batch of rays.

    Rows whose `hit` flag is False carry no meaningful geometry. Materials are
    stored once per record in `materials`; `material_index` points every hit row
    into that table and holds -1 elsewhere.
    """

    @jaxtyped(typechecker=typechecker)
    def __init__(
        self,
        hit: Bool[t.Tensor, "..."],
        point: Float[t.Tensor, "... 3"],
        normal: Float[t.Tensor, "... 3"],
        t_values: Float[t.Tensor, "..."],
        front_face: Bool[t.Tensor, "..."],
        material_index: Int[t.Tensor, "..."],
        materials: list | None = None,
    ):
        self.hit = hit
        self.point = point
        self.normal = normal
        self.t = t_values
        self.front_face = front_face
        self.material_index = material_index
        self.materials = materials if materials is not None else []

    @jaxtyped(typechecker=typechecker)
    def set_face_normal(
        self,
        ray_direction: Float[t.Tensor, "N 3"],
        outward_normal: Float[t.Tensor, "N 3"],
    ) -> None:
        """Orients the normal against the incoming ray.

        `outward_normal` is assumed to have unit length. `front_face` records
        whether the ray arrived from outside the surface.
        """
        self.front_face = (ray_direction * outward_normal).sum(dim=-1) < 0
        self.normal = t.where(self.front_face.unsqueeze(-1), outward_normal, -outward_normal)

    def add_material(self, material) -> int:
        """Returns the slot of `material` in this record's table, appending it if new."""
        for index, known in enumerate(self.materials):
            if known is material:
                return index
        self.materials.append(material)
        return len(self.materials) - 1

    def select(self, index) -> "HitRecord":
        return HitRecord(
            hit=self.hit[index],
            point=self.point[index],
            normal=self.normal[index],
            t_values=self.t[index],
            front_face=self.front_face[index],
            material_index=self.material_index[index],
            materials=self.materials,
        )

    @staticmethod
    def empty(n: int) -> "HitRecord":
        """Creates a record in which no ray hit anything."""
        return HitRecord(
            hit=t.zeros(n, dtype=t.bool, device=device),
            point=t.zeros((n, 3), dtype=dtype, device=device),
            normal=t.zeros((n, 3), dtype=dtype, device=device),
            t_values=t.full((n,), float("inf"), dtype=dtype, device=device),
            front_face=t.zeros(n, dtype=t.bool, device=device),
            material_index=t.full((n,), -1, dtype=t.long, device=device),
        )


class Hittable(ABC):
    """Abstract class for hittable objects."""

    @abstractmethod
    def hit(self, rays: Ray, ray_t: Interval = UNIVERSE) -> HitRecord:
        """Intersects `rays` with the object, accepting only parameters strictly inside `ray_t`."""


class HittableList(Hittable):
    """List of hittable objects; reports the closest hit along each ray."""

    def __init__(self, objects: list[Hittable] | None = None):
        self.objects: list[Hittable] = list(objects) if objects is not None else []

    def add(self, obj: Hittable) -> None:
        self.objects.append(obj)

    def clear(self) -> None:
        self.objects.clear()

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self):
        return iter(self.objects)

    def hit(self, rays: Ray, ray_t: Interval = UNIVERSE) -> HitRecord:
        n = len(rays)
        record = HitRecord.empty(n)
        if isinstance(ray_t.max, t.Tensor):
            closest_so_far = ray_t.max.clone()
        else:
            closest_so_far = t.full((n,), ray_t.max, dtype=dtype, device=device)

        for obj in self.objects:
            # Each object only has to beat the best hit found so far.
            obj_record = obj.hit(rays, Interval(ray_t.min, closest_so_far))
            closer = obj_record.hit
            if not closer.any():
                continue
            closest_so_far = t.where(closer, obj_record.t, closest_so_far)
            _merge_closer(record, obj_record, closer)

        return record


@jaxtyped(typechecker=typechecker)
def _merge_closer(record: HitRecord, obj_record: HitRecord, closer: Bool[t.Tensor, "N"]) -> None:
    remap = t.tensor(
        [record.add_material(material) for material in obj_record.materials], dtype=t.long, device=device
    )
    mask = closer.unsqueeze(-1)
    record.hit = record.hit | closer
    record.point = t.where(mask, obj_record.point, record.point)
    record.normal = t.where(mask, obj_record.normal, record.normal)
    record.t = t.where(closer, obj_record.t, record.t)
    record.front_face = t.where(closer, obj_record.front_face, record.front_face)
    record.material_index = t.where(closer, remap[obj_record.material_index.clamp(min=0)], record.material_index)
