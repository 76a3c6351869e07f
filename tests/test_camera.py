"""Unit tests for the thin-lens camera.

Tests cover:
- Orthonormal basis and image-plane geometry
- Pinhole rays through the image center and corners
- Lens sampling stays within the aperture
- Jittered sampling including single-pixel images
"""

import math

import numpy as np
import taichi as ti


def _camera(**overrides):
    from phongtrace.camera.thin_lens import ThinLensCamera

    params = {
        "lookfrom": (0.0, 0.0, 0.0),
        "lookat": (0.0, 0.0, -1.0),
        "vup": (0.0, 1.0, 0.0),
        "vfov": 90.0,
        "aspect_ratio": 2.0,
        "aperture": 0.0,
        "focus_dist": 1.0,
    }
    params.update(overrides)
    return ThinLensCamera(**params)


class TestCameraSetup:
    def test_basis_is_orthonormal(self):
        from phongtrace.camera.thin_lens import get_camera_info, setup_camera

        setup_camera(_camera(lookfrom=(13.0, 2.0, 3.0), lookat=(0.0, 0.0, 0.0), vfov=20.0))
        info = get_camera_info()
        u, v, w = (np.array(info[k]) for k in ("u", "v", "w"))

        for a, b in ((u, v), (u, w), (v, w)):
            assert abs(np.dot(a, b)) < 1e-6
        for axis in (u, v, w):
            assert abs(np.linalg.norm(axis) - 1.0) < 1e-6

        # w points back toward the camera
        expected_w = np.array([13.0, 2.0, 3.0]) / math.sqrt(13.0**2 + 2.0**2 + 3.0**2)
        np.testing.assert_allclose(w, expected_w, atol=1e-6)

    def test_viewport_geometry(self):
        """90 degree vfov gives a viewport of height 2 at unit focus distance."""
        from phongtrace.camera.thin_lens import get_camera_info, setup_camera

        setup_camera(_camera())
        info = get_camera_info()

        np.testing.assert_allclose(info["horizontal"], [4.0, 0.0, 0.0], atol=1e-6)
        np.testing.assert_allclose(info["vertical"], [0.0, 2.0, 0.0], atol=1e-6)
        np.testing.assert_allclose(info["lower_left"], [-2.0, -1.0, -1.0], atol=1e-6)
        assert info["lens_radius"] == 0.0

    def test_focus_distance_scales_image_plane(self):
        from phongtrace.camera.thin_lens import get_camera_info, setup_camera

        setup_camera(_camera(aperture=0.5, focus_dist=3.0))
        info = get_camera_info()

        np.testing.assert_allclose(info["horizontal"], [12.0, 0.0, 0.0], atol=1e-5)
        np.testing.assert_allclose(info["lower_left"], [-6.0, -3.0, -3.0], atol=1e-5)
        assert abs(info["lens_radius"] - 0.25) < 1e-6


class TestRayGeneration:
    def test_center_ray_hits_lookat(self):
        from phongtrace.camera.thin_lens import get_ray, setup_camera

        setup_camera(_camera())

        origin = ti.Vector.field(3, dtype=ti.f32, shape=())
        direction = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            ray = get_ray(0.5, 0.5)
            origin[None] = ray.origin
            direction[None] = ray.direction

        test_kernel()
        np.testing.assert_allclose(origin[None].to_numpy(), [0.0, 0.0, 0.0], atol=1e-6)
        # Directions are left unnormalized: they end on the focus plane
        np.testing.assert_allclose(direction[None].to_numpy(), [0.0, 0.0, -1.0], atol=1e-6)

    def test_corner_rays(self):
        from phongtrace.camera.thin_lens import get_ray, setup_camera

        setup_camera(_camera())

        directions = ti.Vector.field(3, dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            directions[0] = get_ray(0.0, 0.0).direction
            directions[1] = get_ray(1.0, 1.0).direction

        test_kernel()
        np.testing.assert_allclose(directions[0].to_numpy(), [-2.0, -1.0, -1.0], atol=1e-6)
        np.testing.assert_allclose(directions[1].to_numpy(), [2.0, 1.0, -1.0], atol=1e-6)

    def test_lens_origins_within_aperture(self):
        """Origins lie on the lens disk and every ray still meets the focus point."""
        from phongtrace.camera.thin_lens import get_ray, setup_camera

        setup_camera(_camera(aperture=1.0, focus_dist=2.0))

        n = 500
        origins = ti.Vector.field(3, dtype=ti.f32, shape=n)
        targets = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                ray = get_ray(0.5, 0.5)
                origins[i] = ray.origin
                targets[i] = ray.origin + ray.direction

        test_kernel()
        o = origins.to_numpy()
        assert (np.linalg.norm(o, axis=1) <= 0.5 + 1e-5).all()
        assert np.abs(o[:, 2]).max() < 1e-6
        assert np.linalg.norm(o, axis=1).max() > 0.0
        np.testing.assert_allclose(targets.to_numpy(), [[0.0, 0.0, -2.0]] * n, atol=1e-5)

    def test_jittered_rays_stay_in_pixel(self):
        from phongtrace.camera.thin_lens import get_ray_jittered, setup_camera

        setup_camera(_camera(aspect_ratio=1.0))

        n = 500
        directions = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                directions[i] = get_ray_jittered(2, 1, 5, 5).direction

        test_kernel()
        d = directions.to_numpy()
        # s in [2/4, 3/4], t in [1/4, 2/4] on a 2x2 image plane centred at the origin
        assert (d[:, 0] >= 0.0 - 1e-6).all() and (d[:, 0] <= 0.5 + 1e-6).all()
        assert (d[:, 1] >= -0.5 - 1e-6).all() and (d[:, 1] <= 0.0 + 1e-6).all()

    def test_single_pixel_image(self):
        """A 1x1 image must not divide by zero."""
        from phongtrace.camera.thin_lens import get_ray_jittered, setup_camera

        setup_camera(_camera(aspect_ratio=1.0))

        direction = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            direction[None] = get_ray_jittered(0, 0, 1, 1).direction

        test_kernel()
        d = direction[None].to_numpy()
        assert np.isfinite(d).all()
        assert -1.0 - 1e-6 <= d[0] <= 1.0 + 1e-6
