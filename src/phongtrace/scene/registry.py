"""Material ids.

Spheres refer to materials by one id, whatever the material's kind. The
parameters themselves live in per-kind tables under ``phongtrace.materials``;
the entry kept here for every id says which table (``kind``), which row of
it (``slot``), and the occlusion that shadow rays see. Occlusion 0.0 is an
opaque surface. Any other value lets shadow rays through, as for glass.
"""

from enum import IntEnum

import taichi as ti


class MaterialType(IntEnum):
    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2
    PHONG = 3


@ti.dataclass
class MaterialEntry:
    kind: ti.i32
    slot: ti.i32
    occlusion: ti.f32


MAX_MATERIALS = 1024

material_entries = MaterialEntry.field(shape=MAX_MATERIALS)
material_count = ti.field(dtype=ti.i32, shape=())


def clear_material_registry() -> None:
    material_count[None] = 0


def register_material(material_type: MaterialType, type_index: int, occlusion: float) -> int:
    """Hand out the next material id for row ``type_index`` of ``material_type``'s table.

    Raises:
        RuntimeError: When every id is taken.
    """
    material_id = material_count[None]
    if material_id >= MAX_MATERIALS:
        raise RuntimeError(f"Material id space is full ({MAX_MATERIALS} ids)")

    material_entries.kind[material_id] = int(material_type)
    material_entries.slot[material_id] = type_index
    material_entries.occlusion[material_id] = occlusion
    material_count[None] = material_id + 1
    return material_id


def get_material_count() -> int:
    return int(material_count[None])


def is_valid_material_id(material_id: int) -> bool:
    return 0 <= material_id < material_count[None]


@ti.func
def _known(material_id: ti.i32) -> ti.i32:
    known = 0
    if material_id >= 0 and material_id < material_count[None]:
        known = 1
    return known


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """MaterialType value of ``material_id``; -1 for an unknown id."""
    kind = -1
    if _known(material_id) == 1:
        kind = material_entries[material_id].kind
    return kind


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Row of ``material_id`` in its kind's table; -1 for an unknown id."""
    slot = -1
    if _known(material_id) == 1:
        slot = material_entries[material_id].slot
    return slot


@ti.func
def get_material_occlusion(material_id: ti.i32) -> ti.f32:
    """Occlusion seen by shadow rays. Unknown ids are opaque (0.0)."""
    occlusion = 0.0
    if _known(material_id) == 1:
        occlusion = material_entries[material_id].occlusion
    return occlusion
