"""Unit tests for the metal material.

Tests cover:
- Mirror reflection law
- Unnormalized incident directions
- Fuzz storage and validation
"""

import pytest
import taichi as ti


class TestMetalScatter:
    """Tests for scatter_metal."""

    def test_mirror_reflection(self):
        """Angle of incidence equals angle of reflection."""
        from src.pathtrace.materials.metal import scatter_metal, vec3

        direction = ti.field(dtype=ti.math.vec3, shape=())
        attenuation = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            d, att = scatter_metal(
                vec3(0.8, 0.6, 0.2), vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0)
            )
            direction[None] = d
            attenuation[None] = att

        test_kernel()
        d = direction[None]
        assert abs(d[0] - 1.0) < 1e-6
        assert abs(d[1] - 1.0) < 1e-6
        assert abs(d[2]) < 1e-6
        a = attenuation[None]
        assert abs(a[0] - 0.8) < 1e-6
        assert abs(a[1] - 0.6) < 1e-6
        assert abs(a[2] - 0.2) < 1e-6

    def test_head_on_reflection_reverses(self):
        """A ray along -normal comes straight back with the same length."""
        from src.pathtrace.materials.metal import scatter_metal, vec3

        direction = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            d, _ = scatter_metal(
                vec3(1.0, 1.0, 1.0), vec3(0.0, 0.0, -3.0), vec3(0.0, 0.0, 1.0)
            )
            direction[None] = d

        test_kernel()
        d = direction[None]
        assert abs(d[2] - 3.0) < 1e-6


class TestMetalRegistry:
    """Tests for the metal material registry."""

    def test_add_stores_fuzz(self):
        from src.pathtrace.materials.metal import (
            add_metal_material,
            get_metal_fuzz,
            get_metal_material_count,
        )

        idx = add_metal_material((0.8, 0.8, 0.8), fuzz=0.3)
        assert get_metal_material_count() == 1
        assert get_metal_fuzz(idx) == pytest.approx(0.3)

    def test_fuzz_does_not_change_reflection(self):
        """Fuzz is stored but every metal reflects as a perfect mirror."""
        from src.pathtrace.materials.metal import add_metal_material, scatter_metal_by_id, vec3

        idx = add_metal_material((0.8, 0.8, 0.8), fuzz=1.0)
        direction = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel(material_idx: ti.i32):
            d, _ = scatter_metal_by_id(
                material_idx, vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0)
            )
            direction[None] = d

        test_kernel(idx)
        d = direction[None]
        assert abs(d[0] - 1.0) < 1e-6
        assert abs(d[1] - 1.0) < 1e-6

    def test_invalid_fuzz_raises(self):
        from src.pathtrace.materials.metal import add_metal_material

        with pytest.raises(ValueError, match="Fuzz"):
            add_metal_material((0.5, 0.5, 0.5), fuzz=1.5)
        with pytest.raises(ValueError, match="Fuzz"):
            add_metal_material((0.5, 0.5, 0.5), fuzz=-0.1)

    def test_invalid_albedo_raises(self):
        from src.pathtrace.materials.metal import add_metal_material

        with pytest.raises(ValueError, match="Albedo"):
            add_metal_material((0.5, 2.0, 0.5))

    def test_wrong_albedo_length_raises(self):
        from src.pathtrace.materials.metal import (
            add_metal_material,
            get_metal_material_count,
        )

        with pytest.raises(ValueError, match="3 components"):
            add_metal_material((0.5, 0.5))
        assert get_metal_material_count() == 0

    def test_add_and_lookup(self):
        from src.pathtrace.materials.metal import add_metal_material, get_metal_albedo

        add_metal_material((0.1, 0.1, 0.1))
        idx = add_metal_material((0.8, 0.6, 0.2), fuzz=0.5)
        assert idx == 1

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel(material_idx: ti.i32):
            result[None] = get_metal_albedo(material_idx)

        test_kernel(idx)
        a = result[None]
        assert abs(a[0] - 0.8) < 1e-6
        assert abs(a[1] - 0.6) < 1e-6
        assert abs(a[2] - 0.2) < 1e-6


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
