"""Scene module for scene storage and ray-scene queries.

Components:
    intersection: Sphere storage and closest-hit search
    manager: Scene manager coordinating spheres and materials
    presets: Ready-made scenes

Scene data lives in module-level Taichi fields and is
read-only while a render is running.
"""

from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    get_sphere,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
)
from .presets import (
    SCENES,
    create_default_scene,
    create_scene,
    create_single_sphere_scene,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_sphere",
    "clear_scene",
    "get_sphere",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    # Presets
    "SCENES",
    "create_default_scene",
    "create_single_sphere_scene",
    "create_scene",
]
