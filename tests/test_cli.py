"""Tests for the command-line entry point.

Taichi is already initialized by the test session, so these tests drive
render_scene() directly and only call main() on paths that fail before
Taichi would be re-initialized.
"""

import json

import numpy as np
import pytest


class TestParseArgs:
    """Tests for argument parsing."""

    def test_defaults(self):
        from src.pathtrace.cli import parse_args

        args = parse_args([])
        assert args.width == 1920
        assert args.height == 1080
        assert args.samples == 100
        assert args.max_depth == 10
        assert args.scene == "default"
        assert args.scene_file is None
        assert args.mode == "material"
        assert args.seed == 0
        assert args.threads is None
        assert args.rows_per_batch == 1
        assert args.output == "res/scene.png"
        assert not args.quiet
        assert not args.verbose

    def test_overrides(self):
        from src.pathtrace.cli import parse_args

        args = parse_args(
            ["--width", "64", "--height", "36", "--samples", "2", "--mode", "normals"]
        )
        assert (args.width, args.height, args.samples) == (64, 36, 2)
        assert args.mode == "normals"

    def test_invalid_mode_exits(self):
        from src.pathtrace.cli import parse_args

        with pytest.raises(SystemExit):
            parse_args(["--mode", "wireframe"])


class TestMain:
    """Tests for main() failure handling."""

    def test_invalid_thread_count_returns_error(self, capsys):
        from src.pathtrace.cli import main

        assert main(["--threads", "0"]) == 1
        assert "Error: Thread count must be at least 1" in capsys.readouterr().err


class TestRenderScene:
    """Tests for render_scene with an initialized Taichi runtime."""

    def test_renders_and_saves(self, tmp_path, capsys):
        from src.pathtrace.cli import parse_args, render_scene
        from src.pathtrace.preview.export import load_png

        output = tmp_path / "res" / "scene.png"
        args = parse_args(
            [
                "--width", "12",
                "--height", "8",
                "--samples", "2",
                "--max-depth", "3",
                "--output", str(output),
            ]
        )
        path = render_scene(args)

        assert path == output
        assert load_png(path).shape == (8, 12, 3)
        out = capsys.readouterr().out
        assert "Render finished in" in out
        assert "Scanlines remaining" in out

    def test_quiet_prints_nothing(self, tmp_path, capsys):
        from src.pathtrace.cli import parse_args, render_scene

        args = parse_args(
            [
                "--width", "4",
                "--height", "3",
                "--samples", "1",
                "--quiet",
                "--output", str(tmp_path / "q.png"),
            ]
        )
        render_scene(args)
        assert capsys.readouterr().out == ""

    def test_scene_file(self, tmp_path):
        from src.pathtrace.cli import parse_args, render_scene
        from src.pathtrace.preview.export import load_png

        scene_file = tmp_path / "scene.json"
        scene_file.write_text(
            json.dumps(
                {
                    "materials": [{"type": "lambertian", "albedo": [0.0, 0.0, 0.0]}],
                    "spheres": [{"center": [0, 0, -1], "radius": 100.0, "material_id": 0}],
                }
            )
        )
        output = tmp_path / "black.png"
        args = parse_args(
            [
                "--width", "4",
                "--height", "3",
                "--samples", "1",
                "--quiet",
                "--scene-file", str(scene_file),
                "--output", str(output),
            ]
        )
        render_scene(args)

        # The camera sits inside a black sphere
        assert np.all(load_png(output) == 0)

    def test_unknown_scene_raises(self, tmp_path):
        from src.pathtrace.cli import parse_args, render_scene

        args = parse_args(["--scene", "nope", "--output", str(tmp_path / "x.png")])
        with pytest.raises(ValueError, match="Unknown scene"):
            render_scene(args)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
