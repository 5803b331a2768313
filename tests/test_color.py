"""Tests for interval color maps."""

import pytest
import numpy as np


class TestColorInterval:

    def test_endpoints(self):
        from field_color import ColorInterval
        iv = ColorInterval(0.0, 1.0, (0, 0, 0), (255, 255, 255))
        assert iv.interpolate(0.0) == (0, 0, 0)
        assert iv.interpolate(1.0) == (255, 255, 255)
        assert iv.color_at(0.0) == (0, 0, 0)
        assert iv.color_at(1.0) is None  # half-open

    def test_truncates_toward_zero(self):
        from field_color import ColorInterval
        up = ColorInterval(0.0, 1.0, (0, 0, 0), (10, 10, 10))
        assert up.color_at(0.99) == (9, 9, 9)
        down = ColorInterval(0.0, 1.0, (200, 200, 200), (100, 100, 100))
        assert down.color_at(0.255) == (175, 175, 175)
        assert down.color_at(0.5) == (150, 150, 150)

    def test_rejects_empty_interval(self):
        from field_color import ColorInterval
        with pytest.raises(ValueError):
            ColorInterval(1.0, 1.0, (0, 0, 0), (0, 0, 0))
        with pytest.raises(ValueError):
            ColorInterval(2.0, 1.0, (0, 0, 0), (0, 0, 0))

    def test_rejects_bad_channel(self):
        from field_color import ColorInterval
        with pytest.raises(ValueError):
            ColorInterval(0.0, 1.0, (0, 0, 256), (0, 0, 0))
        iv = ColorInterval(0.0, 1.0, (0, 0, 0), (0, 0, 0))
        with pytest.raises(ValueError):
            iv.set_right((-1, 0, 0))


class TestIntervalColorMap:

    def test_below_above(self):
        from field_color import default_color_map
        cmap = default_color_map()
        assert cmap.min_value == -2.0
        assert cmap.max_value == 2.0
        assert cmap.color_at(-5.0) == (255, 255, 0)
        assert cmap.color_at(5.0) == (0, 0, 0)

    def test_first_match_wins(self):
        from field_color import IntervalColorMap
        cmap = IntervalColorMap()
        cmap.add(0.0, 2.0, (10, 10, 10), (10, 10, 10))
        cmap.add(1.0, 3.0, (20, 20, 20), (20, 20, 20))
        assert cmap.color_at(1.5) == (10, 10, 10)
        assert cmap.color_at(2.5) == (20, 20, 20)

    def test_gap(self):
        from field_color import IntervalColorMap
        cmap = IntervalColorMap()
        cmap.add(0.0, 1.0, (10, 10, 10), (10, 10, 10))
        cmap.add(2.0, 3.0, (20, 20, 20), (20, 20, 20))
        assert cmap.color_at(1.5) is None
        rgb = cmap.colorize(np.array([[1.5, 0.5]]), gap=(1, 2, 3))
        assert rgb[0, 0].tolist() == [1, 2, 3]
        assert rgb[0, 1].tolist() == [10, 10, 10]

    def test_empty_map(self):
        from field_color import IntervalColorMap
        cmap = IntervalColorMap((1, 1, 1), (2, 2, 2))
        assert cmap.color_at(0.0) is None
        with pytest.raises(ValueError):
            cmap.colorize(np.zeros((4, 4)))

    def test_capacity(self):
        from maps import CapacityError, MAX_INTERVALS
        from field_color import IntervalColorMap
        cmap = IntervalColorMap()
        for k in range(MAX_INTERVALS):
            cmap.add(k, k + 1, (0, 0, 0), (0, 0, 0))
        assert len(cmap) == MAX_INTERVALS
        with pytest.raises(CapacityError):
            cmap.add(100, 101, (0, 0, 0), (0, 0, 0))
        assert len(cmap) == MAX_INTERVALS

    def test_colorize_matches_color_at(self):
        from field_color import default_color_map
        cmap = default_color_map()
        values = np.linspace(-3.0, 3.0, 37).reshape(37, 1)
        rgb = cmap.colorize(values)
        assert rgb.shape == (37, 1, 3)
        assert rgb.dtype == np.uint8
        for k, v in enumerate(values[:, 0]):
            expected = cmap.color_at(float(v))
            if expected is None:
                expected = (0, 0, 0)
            assert tuple(rgb[k, 0].tolist()) == expected

    def test_nan_is_gap(self):
        from field_color import default_color_map
        rgb = default_color_map().colorize(np.array([[np.nan]]), gap=(7, 7, 7))
        assert rgb[0, 0].tolist() == [7, 7, 7]

    def test_copy_is_independent(self):
        from field_color import default_color_map
        cmap = default_color_map()
        other = cmap.copy()
        other.intervals[0].set_left((1, 2, 3))
        assert cmap.intervals[0].left == (255, 255, 0)


class TestColorRecords:

    def test_round_trip(self):
        from maps import RecordReader
        from field_color import IntervalColorMap, default_color_map
        cmap = default_color_map()
        text = "\n".join(cmap.to_lines())
        back = IntervalColorMap.read(RecordReader.from_text(text))
        assert back.to_lines() == cmap.to_lines()
        assert back.below == (255, 255, 0)

    def test_bad_id(self):
        from maps import RecordError, RecordReader
        from field_color import IntervalColorMap
        with pytest.raises(RecordError):
            IntervalColorMap.read(RecordReader.from_text("ID\n5\n"))

    def test_bad_count(self):
        from maps import RecordError, RecordReader
        from field_color import IntervalColorMap
        text = "ID\n2\nBELOW\n0\n0\n0\nABOVE\n0\n0\n0\nCOUNT\n33\n"
        with pytest.raises(RecordError):
            IntervalColorMap.read(RecordReader.from_text(text))

    def test_bad_interval(self):
        from maps import RecordError, RecordReader
        from field_color import IntervalColorMap
        text = "\n".join([
            "ID", "2", "COUNT", "1", "ABOVE", "0", "0", "0", "BELOW", "0", "0", "0",
            "HI", "0.0", "LO", "1.0", "LEFT", "0", "0", "0", "RIGHT", "0", "0", "0",
        ])
        with pytest.raises(RecordError):
            IntervalColorMap.read(RecordReader.from_text(text))

    def test_describe(self):
        from field_color import default_color_map
        lines = default_color_map().describe()
        assert len(lines) == 2 + 3 + 1
