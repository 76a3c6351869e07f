"""Tests for the color integrator and render target.

Tests cover:
- Sky gradient for escaping rays
- Depth budget and unlit hits terminate in black
- Deterministic mirror bounce through a lit metal surface
- Render target setup, accumulation and readback
"""

import numpy as np
import pytest


def _lit_metal_floor(albedo=(0.8, 0.6, 0.2), light_position=(0.0, 5.0, 0.0)):
    """A large mirror floor with its top at y = -0.5 and a light above it."""
    from phongtrace.scene.manager import SceneManager

    scene = SceneManager()
    scene.add_metal_sphere((0.0, -100.5, 0.0), 100.0, albedo, fuzz=0.0)
    scene.add_light((1.0, 1.0, 1.0), (1.0, 1.0, 1.0), light_position)
    return scene


class TestBackground:
    @pytest.mark.parametrize(
        "direction, expected",
        [
            ((0.0, 1.0, 0.0), (0.5, 0.7, 1.0)),
            ((0.0, -3.0, 0.0), (1.0, 1.0, 1.0)),
            ((0.0, 0.0, -1.0), (0.75, 0.85, 1.0)),
        ],
    )
    def test_sky_gradient(self, direction, expected):
        from phongtrace.core.integrator import trace_ray

        color = trace_ray((0.0, 0.0, 0.0), direction, max_depth=5)
        np.testing.assert_allclose(color, expected, atol=1e-5)


class TestRayColor:
    def test_zero_depth_is_black(self):
        from phongtrace.core.integrator import trace_ray

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), max_depth=0)
        assert color == (0.0, 0.0, 0.0)

    def test_unlit_hit_is_black(self):
        """Without a visible light the material is never consulted."""
        from phongtrace.core.integrator import trace_ray
        from phongtrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, -2.0), 0.5, (0.9, 0.9, 0.9))

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert color == (0.0, 0.0, 0.0)

    def test_shadowed_hit_is_black(self):
        from phongtrace.core.integrator import trace_ray

        scene = _lit_metal_floor()
        scene.add_lambertian_sphere((0.0, 2.0, 0.0), 0.5, (0.5, 0.5, 0.5))

        color = trace_ray((0.0, 0.0, 0.0), (0.0, -1.0, 0.0))
        assert color == (0.0, 0.0, 0.0)

    def test_mirror_bounce_tints_sky(self):
        """Straight down onto a mirror reflects straight up into the sky."""
        from phongtrace.core.integrator import trace_ray

        _lit_metal_floor(albedo=(0.8, 0.6, 0.2))

        color = trace_ray((0.0, 0.0, 0.0), (0.0, -1.0, 0.0))
        np.testing.assert_allclose(color, (0.8 * 0.5, 0.6 * 0.7, 0.2 * 1.0), atol=1e-5)

    def test_depth_one_stops_after_first_bounce(self):
        from phongtrace.core.integrator import trace_ray

        _lit_metal_floor()

        color = trace_ray((0.0, 0.0, 0.0), (0.0, -1.0, 0.0), max_depth=1)
        assert color == (0.0, 0.0, 0.0)

    @pytest.mark.parametrize(
        "occlusion, expected",
        [
            (1.0, (0.5, 0.7, 1.0)),  # glass lets the light through
            (0.0, (0.0, 0.0, 0.0)),
        ],
    )
    def test_dielectric_occlusion(self, occlusion, expected):
        """A sphere sits on the shadow ray to the light but off the mirror path."""
        from phongtrace.core.integrator import trace_ray

        scene = _lit_metal_floor(albedo=(1.0, 1.0, 1.0), light_position=(2.2, 5.0, 0.0))
        scene.add_dielectric_sphere((1.0, 2.0, 0.0), 0.5, ior=1.5, occlusion=occlusion)

        color = trace_ray((0.0, 0.0, 0.0), (0.0, -1.0, 0.0))
        np.testing.assert_allclose(color, expected, atol=1e-5)


class TestRenderTarget:
    def test_requires_setup(self):
        from phongtrace.core.integrator import render_scanline, reset_render_target

        reset_render_target()
        with pytest.raises(RuntimeError, match="setup_render_target"):
            render_scanline(0, 1)

    @pytest.mark.parametrize("width, height", [(0, 10), (10, 0), (4096, 10), (10, 4096)])
    def test_dimensions_validated(self, width, height):
        from phongtrace.core.integrator import setup_render_target

        with pytest.raises(ValueError):
            setup_render_target(width, height)

    def test_scanline_arguments_validated(self):
        from phongtrace.core.integrator import render_scanline, setup_render_target

        setup_render_target(4, 3)
        with pytest.raises(ValueError):
            render_scanline(3, 1)
        with pytest.raises(ValueError):
            render_scanline(0, 0)
        with pytest.raises(ValueError):
            render_scanline(0, 1, max_depth=-1)

    def test_samples_accumulate(self):
        from phongtrace.camera.thin_lens import ThinLensCamera, setup_camera
        from phongtrace.core.integrator import (
            get_image_dimensions,
            get_total_samples,
            render_image,
            setup_render_target,
        )

        setup_camera(ThinLensCamera((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 1.0, 0.0), 90.0, 2.0))
        setup_render_target(8, 4)
        assert get_image_dimensions() == (8, 4)

        render_image(num_samples=2)
        assert get_total_samples() == 2
        render_image(num_samples=3)
        assert get_total_samples() == 5

    def test_render_image_reports_remaining_rows(self):
        from phongtrace.camera.thin_lens import ThinLensCamera, setup_camera
        from phongtrace.core.integrator import render_image, setup_render_target

        setup_camera(ThinLensCamera((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 1.0, 0.0), 90.0, 1.0))
        setup_render_target(3, 3)

        remaining = []
        render_image(num_samples=1, on_scanline=remaining.append)
        assert remaining == [3, 2, 1]

    def test_empty_scene_image_is_sky(self):
        """Top rows are bluer than bottom rows and every pixel is finite."""
        from phongtrace.camera.thin_lens import ThinLensCamera, setup_camera
        from phongtrace.core.integrator import (
            get_averaged_image_numpy,
            render_image,
            setup_render_target,
        )

        setup_camera(ThinLensCamera((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 1.0, 0.0), 90.0, 2.0))
        setup_render_target(8, 4)
        render_image(num_samples=4)

        image = get_averaged_image_numpy()
        assert image.shape == (4, 8, 3)
        assert image.dtype == np.float32
        assert np.isfinite(image).all()
        # Red falls off toward the zenith
        assert image[0, :, 0].mean() < image[-1, :, 0].mean()
        np.testing.assert_allclose(image[:, :, 2], 1.0, atol=1e-5)

    def test_unsampled_pixels_are_black(self):
        from phongtrace.core.integrator import get_averaged_image_numpy, setup_render_target

        setup_render_target(5, 2)
        image = get_averaged_image_numpy()
        assert image.shape == (2, 5, 3)
        assert (image == 0.0).all()


class TestConvergence:
    def test_batch_means_vary_less_than_samples(self):
        """Averaging samples of a diffuse pixel reduces the spread of the estimate."""
        from phongtrace.camera.thin_lens import ThinLensCamera, setup_camera
        from phongtrace.core.integrator import render_sample, setup_render_target
        from phongtrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, -1000.0, 0.0), 1000.0, (0.8, 0.8, 0.8))
        scene.add_light((1.0, 1.0, 1.0), (1.0, 1.0, 1.0), (0.0, 10.0, 0.0))
        setup_camera(ThinLensCamera((0.0, 1.0, 0.0), (0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 20.0, 1.0))
        setup_render_target(4, 4)

        samples = np.array([render_sample(2, 2, max_depth=5)[0] for _ in range(256)])
        batch_means = samples.reshape(16, 16).mean(axis=1)

        assert samples.var() > 0.0
        assert batch_means.var() < samples.var()
