"""Unit tests for dielectric (glass) material.

Tests cover:
- Refraction ratio selection by face
- Total internal reflection
- Straight-through refraction at normal incidence
- White attenuation, always scatters
- Fresnel reflectance probability
- Material registry validation
"""

import numpy as np
import pytest
import taichi as ti


class TestRefractionRatio:
    def test_ratio_by_face(self):
        from phongtrace.materials.dielectric import refraction_ratio_for

        result = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            result[0] = refraction_ratio_for(1.5, 1)
            result[1] = refraction_ratio_for(1.5, 0)

        test_kernel()
        assert abs(result[0] - 1.0 / 1.5) < 1e-6
        assert abs(result[1] - 1.5) < 1e-6


class TestDielectricScatter:
    def test_always_scatters_with_white_attenuation(self):
        from phongtrace.materials.dielectric import scatter_dielectric, vec3

        n = 500
        did = ti.field(dtype=ti.i32, shape=n)
        attenuation = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                _, att, s = scatter_dielectric(
                    1.5, vec3(0.3, -1.0, 0.1), vec3(0.0, 1.0, 0.0), 1
                )
                did[i] = s
                attenuation[i] = att

        test_kernel()
        assert (did.to_numpy() == 1).all()
        np.testing.assert_allclose(attenuation.to_numpy(), np.ones((n, 3)), atol=1e-6)

    def test_total_internal_reflection(self):
        """Leaving glass at a steep angle always reflects."""
        from phongtrace.materials.dielectric import scatter_dielectric, will_reflect, vec3

        n = 200
        directions = ti.Vector.field(3, dtype=ti.f32, shape=n)
        tir = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            # 60 degrees from the normal; sin = 0.866 > 1 / 1.5
            incident = vec3(0.8660254, -0.5, 0.0)
            normal = vec3(0.0, 1.0, 0.0)
            tir[None] = will_reflect(1.5, incident, normal, 0)
            for i in range(n):
                d, _, _ = scatter_dielectric(1.5, incident, normal, 0)
                directions[i] = d

        test_kernel()
        assert tir[None] == 1
        dirs = directions.to_numpy()
        np.testing.assert_allclose(dirs, [[0.8660254, 0.5, 0.0]] * n, atol=1e-5)

    def test_normal_incidence_mostly_refracts(self):
        """At normal incidence the reflect probability is r0 = 0.04."""
        from phongtrace.materials.dielectric import scatter_dielectric, vec3

        n = 5000
        directions = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                d, _, _ = scatter_dielectric(
                    1.5, vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0), 1
                )
                directions[i] = d

        test_kernel()
        dirs = directions.to_numpy()
        refracted = dirs[:, 1] < 0.0
        # Refracted rays continue straight down
        np.testing.assert_allclose(dirs[refracted], [[0.0, -1.0, 0.0]] * refracted.sum(), atol=1e-5)
        reflect_fraction = 1.0 - refracted.mean()
        assert 0.02 < reflect_fraction < 0.06

    def test_fresnel_reflectance_grows_at_grazing_angles(self):
        from phongtrace.materials.dielectric import fresnel_reflectance, vec3

        result = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 1.0, 0.0)
            result[0] = fresnel_reflectance(1.5, vec3(0.0, -1.0, 0.0), normal, 1)
            result[1] = fresnel_reflectance(1.5, vec3(1.0, -0.05, 0.0), normal, 1)

        test_kernel()
        assert abs(result[0] - 0.04) < 1e-5
        assert result[1] > result[0]


class TestDielectricRegistry:
    def test_add_dielectric_material(self):
        from phongtrace.materials.dielectric import (
            add_dielectric_material,
            get_dielectric_material_count,
        )

        assert add_dielectric_material(1.33) == 0
        assert add_dielectric_material() == 1
        assert get_dielectric_material_count() == 2

    @pytest.mark.parametrize("ior", [0.0, -1.5])
    def test_non_positive_ior_rejected(self, ior):
        from phongtrace.materials.dielectric import add_dielectric_material

        with pytest.raises(ValueError):
            add_dielectric_material(ior)
