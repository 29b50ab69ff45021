"""Scene building on top of the sphere store and the material tables.

Each material kind keeps its own parameter table (see
``materials.lambertian`` and ``materials.metal``). Spheres, however, refer
to materials through a single id. This module owns that id space: every
id maps to a ``MaterialType`` and to a slot in the table of that type,
and both lookups are available inside kernels.

A scene can also be written to and read from plain dictionaries, which is
how the command line loads ``--scene-file`` JSON documents::

    {
        "materials": [{"type": "lambertian", "albedo": [0.8, 0.8, 0.0]},
                      {"type": "metal", "albedo": [0.8, 0.6, 0.2], "fuzz": 0.0}],
        "spheres": [{"center": [0, -100.5, -1], "radius": 100, "material_id": 0}]
    }

Scenes are read by the renderer without locking, so nothing here may be
called while a render is in progress.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

import taichi as ti

from src.pathtrace.materials.lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
)
from src.pathtrace.materials.metal import (
    add_metal_material,
    clear_metal_materials,
)
from src.pathtrace.scene.intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
)


class MaterialType(IntEnum):
    """Kinds of surface a material id can refer to.

    DIELECTRIC is reserved. It cannot be constructed, and the integrator
    absorbs any ray that reaches it.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


# Room for every Lambertian and every metal slot
MAX_MATERIALS = 512

_kind_of = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
_slot_of = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
_material_count = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    _material_count[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Return the MaterialType value of a material id, or -1 if unregistered."""
    kind = -1
    if material_id >= 0 and material_id < _material_count[None]:
        kind = _kind_of[material_id]
    return kind


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Return the slot of a material id within its type's table, or -1."""
    slot = -1
    if material_id >= 0 and material_id < _material_count[None]:
        slot = _slot_of[material_id]
    return slot


@dataclass
class MaterialInfo:
    """Host-side record of one registered material."""

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Host-side record of one sphere.

    ``radius`` is the value actually stored, so negative inputs read back
    as 0.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """Plain-data form of a scene: material dicts and sphere dicts."""

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


def _triple(values: Any, default: tuple[float, float, float]) -> tuple[float, float, float]:
    if values is None:
        return default
    if len(values) != 3:
        raise ValueError(f"Expected 3 components, got {len(values)}: {values!r}")
    return (float(values[0]), float(values[1]), float(values[2]))


class SceneManager:
    """Builds a scene and keeps a host-side mirror of what was added.

    Constructing a manager empties the global scene, so only one manager
    should be live at a time.

    Example:
        >>> scene = SceneManager()
        >>> ground = scene.add_lambertian_material(albedo=(0.8, 0.8, 0.0))
        >>> scene.add_sphere((0.0, -100.5, -1.0), 100.0, ground)
        >>> scene.add_metal_sphere((1.0, 0.0, -1.0), 0.5, albedo=(0.8, 0.6, 0.2))
    """

    def __init__(self) -> None:
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self.clear()

    def clear(self) -> None:
        """Remove every sphere and material."""
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        _clear_material_tracking()
        self.materials.clear()
        self.spheres.clear()

    # Materials

    def _register(self, kind: MaterialType, slot: int, params: dict[str, Any]) -> int:
        material_id = int(_material_count[None])
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        _kind_of[material_id] = int(kind)
        _slot_of[material_id] = slot
        _material_count[None] = material_id + 1
        self.materials.append(MaterialInfo(material_id, kind, slot, params))
        return material_id

    def add_lambertian_material(self, albedo: tuple[float, float, float]) -> int:
        """Register a diffuse material and return its material id.

        Raises:
            ValueError: If an albedo component is outside [0, 1].
            RuntimeError: If a material table is full.
        """
        slot = add_lambertian_material(albedo)
        return self._register(MaterialType.LAMBERTIAN, slot, {"albedo": tuple(albedo)})

    def add_metal_material(
        self,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> int:
        """Register a mirror material and return its material id.

        ``fuzz`` is kept with the material but reflections stay perfect.

        Raises:
            ValueError: If an albedo component or fuzz is outside [0, 1].
            RuntimeError: If a material table is full.
        """
        slot = add_metal_material(albedo, fuzz)
        return self._register(
            MaterialType.METAL, slot, {"albedo": tuple(albedo), "fuzz": fuzz}
        )

    def get_material_count(self) -> int:
        return int(_material_count[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def get_material_type_python(self, material_id: int) -> MaterialType | None:
        """Host-side counterpart of the get_material_type() kernel function."""
        info = self.get_material_info(material_id)
        return None if info is None else info.material_type

    # Spheres

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere that uses an already registered material.

        Returns:
            The sphere's index in the scene.

        Raises:
            ValueError: If material_id was not returned by this manager.
            RuntimeError: If the scene already holds the maximum number of spheres.
        """
        if not 0 <= material_id < self.get_material_count():
            raise ValueError(f"Invalid material_id: {material_id}")

        sphere_index = add_sphere(center, radius, material_id)
        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=_triple(center, (0.0, 0.0, 0.0)),
                radius=max(float(radius), 0.0),
                material_id=material_id,
            )
        )
        return sphere_index

    def add_lambertian_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
    ) -> tuple[int, int]:
        """Add a sphere with a fresh diffuse material.

        Returns:
            (sphere_index, material_id)
        """
        material_id = self.add_lambertian_material(albedo)
        return self.add_sphere(center, radius, material_id), material_id

    def add_metal_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> tuple[int, int]:
        """Add a sphere with a fresh mirror material.

        Returns:
            (sphere_index, material_id)
        """
        material_id = self.add_metal_material(albedo, fuzz)
        return self.add_sphere(center, radius, material_id), material_id

    def get_sphere_count(self) -> int:
        return get_sphere_count()

    # Serialization

    def to_config(self) -> SceneConfig:
        """Describe the current scene as a SceneConfig."""
        materials = []
        for info in self.materials:
            entry: dict[str, Any] = {"type": info.material_type.name.lower()}
            for key, value in info.params.items():
                entry[key] = list(value) if isinstance(value, tuple) else value
            materials.append(entry)

        spheres = [
            {
                "center": list(info.center),
                "radius": info.radius,
                "material_id": info.material_id,
            }
            for info in self.spheres
        ]
        return SceneConfig(materials=materials, spheres=spheres)

    def from_config(self, config: SceneConfig) -> None:
        """Replace the current scene with the one described by ``config``.

        Materials are registered in order, so the n-th material entry gets
        material id n. If any entry is rejected, the scene that was loaded
        before the call is put back.

        Raises:
            ValueError: On an unknown or reserved material type (including
                "dielectric"), a malformed vector or a bad material id.
        """
        previous = self.to_config()
        try:
            self._load(config)
        except (ValueError, TypeError, RuntimeError):
            self.clear()
            self._load(previous)
            raise

    def _load(self, config: SceneConfig) -> None:
        self.clear()

        for entry in config.materials:
            kind = str(entry.get("type", "")).lower()
            if kind == "lambertian":
                self.add_lambertian_material(
                    _triple(entry.get("albedo"), (0.5, 0.5, 0.5))
                )
            elif kind == "metal":
                self.add_metal_material(
                    _triple(entry.get("albedo"), (0.8, 0.8, 0.8)),
                    float(entry.get("fuzz", 0.0)),
                )
            else:
                raise ValueError(f"Unknown material type: {kind!r}")

        for entry in config.spheres:
            self.add_sphere(
                _triple(entry.get("center"), (0.0, 0.0, 0.0)),
                float(entry.get("radius", 1.0)),
                int(entry.get("material_id", 0)),
            )

    def to_dict(self) -> dict[str, Any]:
        """Describe the current scene as a JSON-compatible dict."""
        config = self.to_config()
        return {"materials": config.materials, "spheres": config.spheres}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Replace the current scene with one read from a dict.

        Missing "materials" or "spheres" keys are treated as empty lists.
        """
        self.from_config(
            SceneConfig(
                materials=list(data.get("materials", [])),
                spheres=list(data.get("spheres", [])),
            )
        )

    @staticmethod
    def get_max_spheres() -> int:
        return MAX_SPHERES

    @staticmethod
    def get_max_materials() -> int:
        return MAX_MATERIALS
