"""Tests for the command-line interface.

main() calls ti.init, which would drop the session's fields, so these tests
drive parse_args, build_config, build_scene and render directly.
"""

import io
import json

import pytest


class TestArguments:
    def test_defaults(self):
        from phongtrace.cli import build_config, parse_args

        args = parse_args([])
        assert args.output == "-"
        assert not args.quiet and not args.verbose

        config = build_config(args)
        assert config.scene == "hollow"
        assert config.image_width == 256

    def test_overrides(self):
        from phongtrace.cli import build_config, parse_args

        args = parse_args(
            ["--scene", "random", "--width", "120", "--aspect-ratio", "1.5", "--samples", "3",
             "--max-depth", "7", "--seed", "11", "--arch", "cpu"]
        )
        config = build_config(args)

        assert config.scene == "random"
        assert (config.image_width, config.image_height) == (120, 80)
        assert config.samples_per_pixel == 3
        assert config.max_depth == 7
        assert config.seed == 11

    def test_quiet_and_verbose_are_exclusive(self):
        from phongtrace.cli import parse_args

        with pytest.raises(SystemExit):
            parse_args(["--quiet", "--verbose"])

    def test_unknown_scene_rejected(self):
        from phongtrace.cli import parse_args

        with pytest.raises(SystemExit):
            parse_args(["--scene", "cornell"])

    def test_invalid_override_rejected(self):
        from phongtrace.cli import build_config, parse_args

        with pytest.raises(ValueError):
            build_config(parse_args(["--samples", "0"]))

    def test_config_file_with_overrides(self, tmp_path):
        from phongtrace.cli import build_config, parse_args

        path = tmp_path / "render.json"
        path.write_text(
            json.dumps(
                {
                    "image_width": 64,
                    "samples_per_pixel": 9,
                    "scene_data": {"materials": [{"type": "lambertian"}]},
                }
            )
        )

        config = build_config(parse_args(["--config", str(path), "--samples", "2"]))
        assert config.image_width == 64
        assert config.samples_per_pixel == 2
        assert config.scene_data is not None

        # A preset named on the command line replaces the inline scene
        config = build_config(parse_args(["--config", str(path), "--scene", "hollow"]))
        assert config.scene_data is None


class TestBuildScene:
    def test_preset_camera(self):
        from phongtrace.cli import build_scene
        from phongtrace.config import RenderConfig

        scene, camera = build_scene(RenderConfig(aspect_ratio=2.0))
        assert scene.get_sphere_count() > 0
        assert camera.vfov == 90.0
        assert camera.aspect_ratio == 2.0

    def test_random_preset_uses_seed(self):
        from phongtrace.cli import build_scene
        from phongtrace.config import RenderConfig
        from phongtrace.scene.presets import create_random_scene

        expected = create_random_scene(seed=5).to_dict()
        scene, camera = build_scene(RenderConfig(scene="random", seed=5, aspect_ratio=1.5))

        assert scene.to_dict() == expected
        assert camera.lookfrom == (13.0, 2.0, 3.0)

    def test_camera_override(self):
        from phongtrace.cli import build_scene
        from phongtrace.config import CameraConfig, RenderConfig

        config = RenderConfig(camera=CameraConfig(lookfrom=(0.0, 0.0, 4.0), lookat=(0.0, 0.0, 0.0), vfov=30.0))
        _, camera = build_scene(config)

        assert camera.lookfrom == (0.0, 0.0, 4.0)
        assert camera.vfov == 30.0
        assert camera.focus_dist == 4.0

    def test_inline_scene(self):
        from phongtrace.cli import build_scene
        from phongtrace.config import RenderConfig

        scene_data = {
            "materials": [{"type": "lambertian", "albedo": [0.5, 0.5, 0.5]}],
            "spheres": [{"center": [0, 0, -1], "radius": 0.5, "material_id": 0}],
            "lights": [{"diffuse": [1, 1, 1], "specular": [1, 1, 1], "position": [0, 2, 0]}],
        }
        scene, camera = build_scene(RenderConfig(scene_data=scene_data))

        assert scene.get_sphere_count() == 1
        assert scene.get_light_count() == 1
        # No preset camera, so the default camera is used
        assert camera.lookat == (0.0, 0.0, -1.0)


class TestRender:
    def test_render_ppm_to_stream(self):
        from phongtrace.cli import render
        from phongtrace.config import RenderConfig

        config = RenderConfig(image_width=4, aspect_ratio=2.0, samples_per_pixel=1, max_depth=3)
        stream = io.StringIO()
        render(config, "-", stream)

        lines = stream.getvalue().splitlines()
        assert lines[:3] == ["P3", "4 2", "255"]
        assert len(lines) == 3 + 4 * 2
        for line in lines[3:]:
            values = [int(v) for v in line.split()]
            assert len(values) == 3
            assert all(0 <= v <= 255 for v in values)

    def test_render_png_file(self, tmp_path):
        from PIL import Image

        from phongtrace.cli import render
        from phongtrace.config import RenderConfig

        config = RenderConfig(image_width=6, aspect_ratio=1.5, samples_per_pixel=1, max_depth=3)
        path = tmp_path / "out.png"
        render(config, str(path))

        with Image.open(path) as img:
            assert img.size == (6, 4)
