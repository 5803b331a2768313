"""Tests for batch walks."""

import pytest


def small_field(**kwargs):
    import config
    kwargs.setdefault("width", 8)
    kwargs.setdefault("height", 8)
    kwargs.setdefault("settling", 10)
    kwargs.setdefault("measuring", 20)
    return config.default_field(**kwargs)


class TestWalkB:

    def test_no_parameter(self, tmp_path, capsys):
        import walks
        assert walks.walk_b(small_field(), 1.0, 2.0, 3, tmp_path) == []
        assert "no parameter" in capsys.readouterr().out
        assert not list(tmp_path.iterdir())

    def test_sweep(self, tmp_path):
        import config
        import walks
        from maps import PlainFunction
        field = small_field(function=PlainFunction("sine_squared"))
        stems = walks.walk_b(field, 2.0, 3.0, 3, tmp_path)
        assert [s.name for s in stems] == [
            "walkb_0001_b_+2.0000000000",
            "walkb_0002_b_+2.5000000000",
            "walkb_0003_b_+3.0000000000",
        ]
        for stem in stems:
            for suffix in (".par", ".bmp", ".ljd"):
                assert stem.with_name(stem.name + suffix).exists()
        middle = config.load_params(stems[1].with_name(stems[1].name + ".par"))
        assert middle.function.b == pytest.approx(2.5)
        assert field.function.sweep is None


class TestWalkSequences:

    def test_random_sequences(self, tmp_path):
        import walks
        field = small_field()
        stems = walks.walk_sequences(field, 3, 4, seed=7, out_dir=tmp_path)
        assert len(stems) == 3
        for stem in stems:
            seq = stem.name.split("_")[-1]
            assert len(seq) == 4
            assert set(seq) <= {"A", "B"}
        assert field.sequence == "AB"

    def test_seeded(self, tmp_path):
        import walks
        a = walks.walk_sequences(small_field(), 2, 6, seed=3, out_dir=tmp_path / "a")
        b = walks.walk_sequences(small_field(), 2, 6, seed=3, out_dir=tmp_path / "b")
        assert [s.name for s in a] == [s.name for s in b]

    def test_length_capped(self):
        import numpy as np
        import walks
        rng = np.random.default_rng(0)
        assert len(walks.random_sequence(rng, walks.MAX_WALK_SEQ_LEN)) == 64


class TestWalkComposed:

    def test_all_roles(self, tmp_path):
        import walks
        field = small_field()
        original = field.function
        stems = walks.walk_composed(field, "sine_squared", ["logistic"], 1.0, 2.0, 2, tmp_path)
        # four role pairs, two b values each
        assert len(stems) == 8
        names = {s.name for s in stems}
        assert "walkdet_sine_squared_logistic_11_0001_b_+1.0000000000" in names
        assert "walkdet_sine_squared_logistic_22_0002_b_+2.0000000000" in names
        assert field.function is original

    def test_skips_tree_kinds(self, tmp_path):
        import walks
        stems = walks.walk_composed(small_field(), "sine_squared", ["piecewise"], 1.0, 2.0, 2, tmp_path)
        assert stems == []


class TestWalkSections:

    def test_band_grid(self):
        import walks
        bands = list(walks.section_bands(-1.0, 1.0, 0.5))
        assert len(bands) == 6 * 6
        assert bands[0] == (-1.0, -0.5, -1.0, -0.5)
        for vmin, vmax, dmin, dmax in bands:
            assert -1.0 <= vmin < vmax < 1.0
            assert -1.0 <= dmin < dmax < 1.0

    def test_not_piecewise(self, tmp_path):
        import walks
        assert walks.walk_sections(small_field(), out_dir=tmp_path) == []

    def test_piecewise(self, tmp_path):
        import walks
        from maps import PiecewiseFunction, PlainFunction
        fn = PiecewiseFunction(PlainFunction("logistic"), PlainFunction("sine_squared"), (0.0, 0.5), (0.0, 0.5))
        field = small_field(function=fn)
        stems = walks.walk_sections(field, -1.0, 1.0, 1.0, out_dir=tmp_path)
        assert [s.name for s in stems] == ["walksection_0001"]
        assert (fn.value_min, fn.value_max, fn.deriv_min, fn.deriv_max) == (0.0, 0.5, 0.0, 0.5)


class TestWalkTiles:

    def test_tiles(self, tmp_path):
        import walks
        field = small_field()
        stems = walks.walk_tiles(field, 2, 2, "0007", tmp_path)
        assert [s.name for s in stems] == [f"walktile_0007_{k:06d}" for k in range(1, 5)]
        assert field.lowerleft == (2.0, 2.0)


class TestWalkColors:

    def test_color_directory(self, tmp_path):
        import config
        import walks
        from field_color import IntervalColorMap
        colors = tmp_path / "colors"
        colors.mkdir()
        for k in range(2):
            cmap = IntervalColorMap()
            cmap.add(-5.0, 5.0, (k, k, k), (255, 255, 255))
            config.save_colors(cmap, colors / f"c{k}.par")
        (colors / "broken.par").write_text("COLORING\nID\n9\n")
        field = small_field()
        field.compute()
        saved = field.colors
        stems = walks.walk_colors(field, colors, tmp_path / "out")
        assert len(stems) == 2
        assert field.colors is saved

    def test_rgb(self, tmp_path):
        import walks
        field = small_field()
        field.compute()
        stems = walks.walk_rgb(field, 3, seed=1, out_dir=tmp_path)
        assert [s.name for s in stems] == ["walkrgb_0001", "walkrgb_0002", "walkrgb_0003"]

    def test_rgb_without_intervals(self, tmp_path):
        import walks
        from field_color import IntervalColorMap
        field = small_field(colors=IntervalColorMap())
        assert walks.walk_rgb(field, 3, out_dir=tmp_path) == []
