"""Tests for parameter records, grid files and image output."""

import struct

import pytest
import numpy as np


def small_field(**kwargs):
    import config
    kwargs.setdefault("width", 8)
    kwargs.setdefault("height", 8)
    kwargs.setdefault("settling", 10)
    kwargs.setdefault("measuring", 20)
    return config.default_field(**kwargs)


class TestParameterRecords:

    def test_round_trip(self):
        import config
        from maps import PlainFunction
        field = small_field(function=PlainFunction("sine_cosine", b=1.125), sequence="AABB", x0=0.25)
        field.rotate(30.0)
        text = config.field_to_text(field)
        back = config.params_from_text(text)
        assert config.field_to_text(back) == text
        assert back.function.b == 1.125
        assert back.sequence == "AABB"
        assert back.x0 == 0.25
        assert back.lowerleft == field.lowerleft

    def test_key_order(self):
        import config
        text = config.field_to_text(small_field())
        lines = [ln for ln in text.splitlines() if ln and ln[0].isalpha() and ln.isupper()]
        assert lines[0] == "FUNCTION"
        for key in config.PARAM_KEYS:
            assert key in lines

    def test_keys_any_order_with_comments(self):
        import config
        text = "\n".join([
            "# lyapunov parameters",
            "sequence", "ab",
            "width", "601",
            "height", "603",
            "settling", "51",
            "measuring", "101",
            "x0", "0.5",
            ". window",
            "upperleft", "2.0", "4.0",
            "lowerleft", "2.0", "2.0",
            "lowerright", "4.0", "2.0",
            "function", "ID", "1",
            "coloring", "ID", "2",
            "BELOW", "0", "0", "0",
            "ABOVE", "0", "0", "0",
            "COUNT", "1",
            "LO", "-1.0", "HI", "1.0",
            "LEFT", "0", "0", "0", "RIGHT", "255", "255", "255",
        ])
        field = config.params_from_text(text)
        assert (field.width, field.height) == (600, 600)
        assert (field.settling, field.measuring) == (50, 100)
        assert field.sequence == "AB"
        assert field.function.kind == "logistic"
        assert len(field.colors) == 1

    def drop_key(self, text, key):
        import config
        lines = text.splitlines()
        i = lines.index(key)
        j = i + 1
        while j < len(lines) and lines[j] not in config.PARAM_KEYS:
            j += 1
        return "\n".join(lines[:i] + lines[j:])

    def test_missing_key(self):
        import config
        from maps import RecordError
        text = config.field_to_text(small_field())
        with pytest.raises(RecordError):
            config.params_from_text(self.drop_key(text, "X0"))

    def test_duplicate_key(self):
        import config
        from maps import RecordError
        text = config.field_to_text(small_field())
        text = self.drop_key(text, "X0") + "\nWIDTH\n8\n"
        with pytest.raises(RecordError):
            config.params_from_text(text)

    def test_unknown_key(self):
        import config
        from maps import RecordError
        text = config.field_to_text(small_field()).replace("X0", "X1")
        with pytest.raises(RecordError):
            config.params_from_text(text)

    def test_trailing_key(self):
        import config
        from maps import RecordError
        text = config.field_to_text(small_field()) + "WIDTH\n8\n"
        with pytest.raises(RecordError):
            config.params_from_text(text)

    def test_bad_values(self):
        import config
        from maps import RecordError
        text = config.field_to_text(small_field())
        with pytest.raises(RecordError):
            config.params_from_text(text.replace("SEQUENCE\nAB", "SEQUENCE\nAXB"))
        with pytest.raises(RecordError):
            config.params_from_text(text.replace("WIDTH\n8", "WIDTH\n2"))

    def test_save_load(self, tmp_path):
        import config
        field = small_field()
        path = tmp_path / "a.par"
        config.save_params(field, path)
        assert config.load_params(path).sequence == field.sequence


class TestColorFiles:

    def test_color_only_record(self, tmp_path):
        import config
        from field_color import IntervalColorMap
        cmap = IntervalColorMap((1, 2, 3), (4, 5, 6))
        cmap.add(0.0, 1.0, (0, 0, 0), (9, 9, 9))
        path = tmp_path / "c.par"
        config.save_colors(cmap, path)
        back = config.load_colors(path)
        assert back.to_lines() == cmap.to_lines()

    def test_colors_from_full_record(self, tmp_path):
        import config
        field = small_field()
        path = tmp_path / "full.par"
        config.save_params(field, path)
        assert config.load_colors(path).to_lines() == field.colors.to_lines()

    def test_iter_color_files(self, tmp_path):
        import config
        for name in ("b.par", "a.par", "c.txt"):
            (tmp_path / name).write_text("x\n")
        names = [p.name for p in config.iter_color_files(tmp_path)]
        assert names == ["a.par", "b.par"]


class TestGridFile:

    def test_round_trip(self, tmp_path):
        import gridfile
        grid = np.arange(32, dtype=np.float64).reshape(4, 8) / 7.0
        path = tmp_path / "g.ljd"
        gridfile.save_grid(path, grid)
        raw = path.read_bytes()
        assert struct.unpack("<ii", raw[:8]) == (8, 4)
        assert len(raw) == 8 + 32 * 8
        assert gridfile.read_grid_size(path) == (8, 4)
        assert np.array_equal(gridfile.load_grid(path), grid)

    def test_mismatch(self, tmp_path):
        import gridfile
        from maps import GridShapeError
        path = tmp_path / "g.ljd"
        gridfile.save_grid(path, np.zeros((4, 8)))
        with pytest.raises(GridShapeError):
            gridfile.load_grid(path, expected=(4, 8))
        field = small_field()
        field.grid[...] = 5.0
        with pytest.raises(GridShapeError):
            gridfile.load_grid_into(field, path)
        assert np.all(field.grid == 5.0)

    def test_truncated(self, tmp_path):
        import gridfile
        from maps import GridShapeError
        path = tmp_path / "g.ljd"
        gridfile.save_grid(path, np.zeros((4, 8)))
        path.write_bytes(path.read_bytes()[:-8])
        with pytest.raises(GridShapeError):
            gridfile.load_grid(path)

    def test_missing_file(self, tmp_path):
        import gridfile
        assert gridfile.load_grid_into(small_field(), tmp_path / "nope.ljd") is False


class TestBitmap:

    def test_header(self):
        import raster
        rgb = np.zeros((3, 2, 3), dtype=np.uint8)
        data = raster.bmp_bytes(rgb)
        assert data[:2] == b"BM"
        # 2 px * 3 bytes = 6, padded to 8
        assert struct.unpack("<I", data[2:6])[0] == 54 + 3 * 8
        assert struct.unpack("<I", data[10:14])[0] == 54
        width, height = struct.unpack("<ii", data[18:26])
        assert (width, height) == (2, 3)
        assert struct.unpack("<H", data[28:30])[0] == 24
        assert len(data) == 54 + 3 * 8

    def test_bgr_bottom_up(self):
        import raster
        rgb = np.zeros((2, 1, 3), dtype=np.uint8)
        rgb[0, 0] = (10, 20, 30)    # lower edge
        rgb[1, 0] = (40, 50, 60)
        data = raster.bmp_bytes(rgb)
        assert list(data[54:58]) == [30, 20, 10, 0]
        assert list(data[58:62]) == [60, 50, 40, 0]

    def test_rejects_bands(self):
        import raster
        with pytest.raises(ValueError):
            raster.bmp_bytes(np.zeros((2, 2, 4), dtype=np.uint8))

    def test_save_image_bmp(self, tmp_path):
        import raster
        path = tmp_path / "x.bmp"
        raster.save_image(path, np.zeros((4, 4, 3), dtype=np.uint8))
        assert path.read_bytes()[:2] == b"BM"


class TestOutputs:

    def test_save_and_load(self, tmp_path):
        import config
        field = small_field()
        field.compute()
        stem = config.save_outputs(field, tmp_path / "out" / "pic", descr=True)
        for suffix in (".par", ".bmp", ".ljd", ".descr"):
            assert stem.with_name("pic" + suffix).exists()
        back, loaded = config.load_outputs(stem)
        assert loaded
        assert np.array_equal(back.grid, field.grid)

    def test_load_without_grid(self, tmp_path):
        import config
        field = small_field()
        stem = config.save_outputs(field, tmp_path / "pic", grid=False, image=False)
        back, loaded = config.load_outputs(stem)
        assert not loaded
        assert np.all(back.grid == 0.0)
