"""Tests for CLI end-to-end functionality."""

import subprocess
import sys
from pathlib import Path

import numpy as np
import pytest

ROOT = Path(__file__).parent.parent


def run_cli(*args, timeout=300):
    return subprocess.run(
        [sys.executable, "lyapunov_cli.py", *map(str, args)],
        capture_output=True,
        text=True,
        cwd=ROOT,
        timeout=timeout,
    )


@pytest.fixture
def small_par(tmp_path):
    path = tmp_path / "start.par"
    result = run_cli("new", path, "--map", "sine_squared", "--b", "2.5", "--size", "8", "8")
    assert result.returncode == 0, result.stderr
    return path


class TestCLIBasic:
    """Test basic CLI invocations."""

    def test_cli_help(self):
        result = run_cli("--help")
        assert result.returncode == 0
        assert "usage" in result.stdout.lower()
        assert "render" in result.stdout

    def test_cli_maps(self):
        result = run_cli("maps")
        assert result.returncode == 0
        assert "logistic" in result.stdout
        assert "piecewise" in result.stdout
        rows = [line.split() for line in result.stdout.splitlines() if line.strip()]
        lines = {row[1]: row for row in rows}
        assert lines["logistic"][2] == "exact"
        assert lines["detached_logistic"][2] == "detached"

    def test_cli_new(self, small_par):
        text = small_par.read_text()
        assert text.startswith("FUNCTION\nID\n2\n")
        assert "WIDTH\n8\n" in text
        assert "B\n2.5\n" in text

    def test_cli_describe(self, small_par):
        result = run_cli("describe", small_par)
        assert result.returncode == 0
        assert "2.5*sin^2(x+r)" in result.stdout
        assert "lower left" in result.stdout

    def test_cli_missing_record(self, tmp_path):
        result = run_cli("describe", tmp_path / "nope.par")
        assert result.returncode != 0
        assert "error" in result.stderr

    def test_cli_bad_record(self, tmp_path):
        path = tmp_path / "bad.par"
        path.write_text("FUNCTION\nID\n99\n")
        result = run_cli("describe", path)
        assert result.returncode != 0
        assert "unknown function id 99" in result.stderr


class TestCLIRender:

    def test_render(self, small_par, tmp_path):
        result = run_cli(
            "render", small_par,
            "--iter", "21", "41",
            "--seq", "A2B2",
            "--out", tmp_path / "pic",
        )
        assert result.returncode == 0, result.stderr
        assert "field time:" in result.stdout
        for suffix in (".par", ".bmp", ".ljd"):
            assert (tmp_path / f"pic{suffix}").exists()
        text = (tmp_path / "pic.par").read_text()
        assert "SETTLING\n20\n" in text
        assert "MEASURING\n40\n" in text
        assert "SEQUENCE\nAABB\n" in text

    def test_render_crop(self, small_par, tmp_path):
        result = run_cli(
            "render", small_par, "--iter", "10", "20",
            "--crop", "0", "8", "4", "4", "--quiet",
            "--out", tmp_path / "zoom",
        )
        assert result.returncode == 0, result.stderr
        import config
        field = config.load_params(tmp_path / "zoom.par")
        assert field.lowerleft == pytest.approx((2.0, 2.0))
        assert field.lowerright == pytest.approx((3.0, 2.0))
        assert field.upperleft == pytest.approx((2.0, 3.0))

    def test_render_bad_sequence(self, small_par, tmp_path):
        result = run_cli("render", small_par, "--seq", "AXB", "--out", tmp_path / "x")
        assert result.returncode != 0
        assert "error" in result.stderr

    def test_reuse_grid(self, small_par, tmp_path):
        import gridfile
        result = run_cli("render", small_par, "--iter", "10", "20", "--quiet")
        assert result.returncode == 0, result.stderr
        ljd = small_par.with_suffix(".ljd")
        grid = gridfile.load_grid(ljd)
        assert np.any(grid != 0.0)

        result = run_cli("render", small_par, "--reuse-grid", "--out", tmp_path / "again")
        assert result.returncode == 0, result.stderr
        assert "loaded from" in result.stdout
        assert "field time:" not in result.stdout
        assert np.array_equal(gridfile.load_grid(tmp_path / "again.ljd"), grid)

    def test_reuse_grid_missing(self, small_par, tmp_path):
        result = run_cli("render", small_par, "--reuse-grid")
        assert result.returncode != 0
        assert "not found" in result.stderr
        assert not small_par.with_suffix(".ljd").exists()
        assert not small_par.with_suffix(".bmp").exists()

    @pytest.mark.parametrize("option", [
        ["--size", "12", "12"],
        ["--crop", "0", "8", "4", "4"],
        ["--rotate", "30"],
        ["--stretch", "2"],
        ["--center", "2", "2"],
        ["--position", "1", "1", "2", "1", "1", "2"],
    ])
    def test_reuse_grid_rejects_window_options(self, small_par, option):
        import gridfile
        ljd = small_par.with_suffix(".ljd")
        gridfile.save_grid(ljd, np.full((8, 8), 0.5))
        before = ljd.read_bytes()

        result = run_cli("render", small_par, "--reuse-grid", *option)
        assert result.returncode != 0
        assert "cannot be combined" in result.stderr
        assert ljd.read_bytes() == before
        assert gridfile.read_grid_size(ljd) == (8, 8)

    def test_recolor(self, small_par, tmp_path):
        result = run_cli("render", small_par, "--iter", "10", "20", "--quiet", "--out", tmp_path / "pic")
        assert result.returncode == 0, result.stderr
        import config
        from field_color import IntervalColorMap
        cmap = IntervalColorMap()
        cmap.add(-10.0, 10.0, (0, 0, 255), (255, 0, 0))
        config.save_colors(cmap, tmp_path / "blue.par")

        result = run_cli("recolor", tmp_path / "pic.par", tmp_path / "blue.par", "--out", tmp_path / "blue_pic")
        assert result.returncode == 0, result.stderr
        assert (tmp_path / "blue_pic.bmp").exists()
        recolored = config.load_params(tmp_path / "blue_pic.par")
        assert recolored.colors.to_lines() == cmap.to_lines()

    def test_recolor_needs_grid(self, small_par, tmp_path):
        result = run_cli("recolor", small_par, small_par, "--out", tmp_path / "x")
        assert result.returncode != 0
        assert "not found" in result.stderr


class TestCLIWalks:

    def test_walk_b(self, small_par, tmp_path):
        out = tmp_path / "frames"
        result = run_cli("walk-b", small_par, "2.0", "3.0", "2", "--out-dir", out)
        assert result.returncode == 0, result.stderr
        assert "2 pictures" in result.stdout
        assert len(list(out.glob("walkb_*.bmp"))) == 2

    def test_walk_tile(self, small_par, tmp_path):
        out = tmp_path / "tiles"
        result = run_cli("walk-tile", small_par, "2", "1", "--out-dir", out)
        assert result.returncode == 0, result.stderr
        assert sorted(p.name for p in out.glob("*.bmp")) == [
            "walktile_0001_000001.bmp",
            "walktile_0001_000002.bmp",
        ]

    def test_walk_rgb(self, small_par, tmp_path):
        out = tmp_path / "rgb"
        result = run_cli("walk-rgb", small_par, "--count", "2", "--seed", "5", "--out-dir", out)
        assert result.returncode == 0, result.stderr
        assert len(list(out.glob("walkrgb_*.par"))) == 2
