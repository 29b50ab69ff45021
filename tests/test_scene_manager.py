"""Unit tests for the scene manager.

Tests cover:
- Unified material IDs across material types
- Sphere creation with materials
- Kernel-side material type lookup
- Serialization to and from dictionaries
"""

import pytest
import taichi as ti


class TestMaterials:
    """Tests for material registration."""

    def test_material_ids_are_unified(self):
        from src.pathtrace.scene.manager import MaterialType, SceneManager

        scene = SceneManager()
        a = scene.add_lambertian_material((0.8, 0.8, 0.0))
        b = scene.add_metal_material((0.8, 0.6, 0.2))
        c = scene.add_lambertian_material((0.1, 0.2, 0.5))

        assert (a, b, c) == (0, 1, 2)
        assert scene.get_material_count() == 3
        assert scene.get_material_type_python(b) == MaterialType.METAL
        assert scene.get_material_info(c).type_index == 1
        assert scene.get_material_info(99) is None

    def test_kernel_side_lookup(self):
        from src.pathtrace.scene.manager import (
            MaterialType,
            SceneManager,
            get_material_type,
            get_material_type_index,
        )

        scene = SceneManager()
        scene.add_lambertian_material((0.5, 0.5, 0.5))
        scene.add_metal_material((0.5, 0.5, 0.5))

        types = ti.field(dtype=ti.i32, shape=3)
        indices = ti.field(dtype=ti.i32, shape=3)

        @ti.kernel
        def test_kernel():
            for k in range(3):
                types[k] = get_material_type(k)
                indices[k] = get_material_type_index(k)

        test_kernel()
        assert types[0] == int(MaterialType.LAMBERTIAN)
        assert types[1] == int(MaterialType.METAL)
        assert types[2] == -1
        assert indices[0] == 0
        assert indices[1] == 0
        assert indices[2] == -1


class TestSpheres:
    """Tests for adding spheres."""

    def test_add_sphere_with_material(self):
        from src.pathtrace.scene.intersection import get_sphere
        from src.pathtrace.scene.manager import SceneManager

        scene = SceneManager()
        sphere_idx, mat_id = scene.add_metal_sphere((1.0, 0.0, -1.0), 0.5, (0.8, 0.6, 0.2))
        assert scene.get_sphere_count() == 1
        assert get_sphere(sphere_idx)["material_id"] == mat_id
        assert scene.spheres[0].radius == pytest.approx(0.5)

    def test_invalid_material_id_raises(self):
        from src.pathtrace.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError, match="Invalid material_id"):
            scene.add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)

    def test_negative_radius_recorded_as_zero(self):
        from src.pathtrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, -1.0), -1.0, (0.5, 0.5, 0.5))
        assert scene.spheres[0].radius == 0.0

    def test_clear(self):
        from src.pathtrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.5, 0.5, 0.5))
        scene.clear()
        assert scene.get_sphere_count() == 0
        assert scene.get_material_count() == 0
        assert scene.materials == []

    def test_limits(self):
        from src.pathtrace.scene.intersection import MAX_SPHERES
        from src.pathtrace.scene.manager import MAX_MATERIALS, SceneManager

        assert SceneManager.get_max_spheres() == MAX_SPHERES
        assert SceneManager.get_max_materials() == MAX_MATERIALS


class TestSerialization:
    """Tests for to_dict / from_dict."""

    def test_round_trip(self):
        from src.pathtrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, -100.5, -1.0), 100.0, (0.8, 0.8, 0.0))
        scene.add_metal_sphere((1.0, 0.0, -1.0), 0.5, (0.8, 0.6, 0.2), fuzz=0.25)
        data = scene.to_dict()

        assert data["materials"][0] == {"type": "lambertian", "albedo": [0.8, 0.8, 0.0]}
        assert data["materials"][1]["fuzz"] == 0.25
        assert data["spheres"][1]["material_id"] == 1

        restored = SceneManager()
        restored.from_dict(data)
        assert restored.to_dict() == data

    def test_dielectric_is_rejected(self):
        """Dielectric materials have no constructor."""
        from src.pathtrace.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError, match="Unknown material type"):
            scene.from_dict({"materials": [{"type": "dielectric"}], "spheres": []})

    def test_rejected_load_keeps_previous_scene(self):
        """A bad entry after valid ones leaves the earlier scene in place."""
        from src.pathtrace.scene.intersection import get_sphere
        from src.pathtrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, -100.5, -1.0), 100.0, (0.8, 0.8, 0.0))
        scene.add_metal_sphere((1.0, 0.0, -1.0), 0.5, (0.8, 0.6, 0.2))
        before = scene.to_dict()

        bad = {
            "materials": [{"type": "lambertian", "albedo": [0.1, 0.2, 0.3]}],
            "spheres": [
                {"center": [0, 0, -2], "radius": 0.5, "material_id": 0},
                {"center": [0, 0, -3], "radius": 0.5, "material_id": 7},
            ],
        }
        with pytest.raises(ValueError, match="Invalid material_id"):
            scene.from_dict(bad)

        assert scene.to_dict() == before
        assert scene.get_sphere_count() == 2
        assert scene.get_material_count() == 2
        assert get_sphere(1)["material_id"] == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
