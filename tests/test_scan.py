import math

import numpy as np
import pytest

from conftest import RANGE_MAX, make_scan
from wall_follower.perception import (
    LaserScan,
    ScanFormatError,
    Sector,
    SectorReading,
    reduce_scan,
    window_indices,
)


def test_all_max_range_gives_max_everywhere():
    reading = reduce_scan(make_scan())
    assert reading.distances == (RANGE_MAX,) * 12


def test_front_window_wraps_both_sides():
    assert list(window_indices(0, 10)) == list(range(350, 360)) + list(range(10))


def test_inner_window_is_contiguous():
    assert list(window_indices(30, 10)) == list(range(20, 40))
    assert list(window_indices(330, 10)) == list(range(320, 340))


def test_window_scales_with_resolution():
    indices = window_indices(0, 10, samples_per_degree=2)
    assert list(indices) == list(range(700, 720)) + list(range(20))


def test_front_sees_minimum_left_of_zero():
    reading = reduce_scan(make_scan({355: 0.5}))
    assert reading[Sector.FRONT] == 0.5


def test_front_sees_minimum_right_of_zero():
    reading = reduce_scan(make_scan({5: 0.4, 355: 0.5}))
    assert reading[Sector.FRONT] == 0.4


def test_window_is_half_open():
    reading = reduce_scan(make_scan({10: 0.3, 349: 0.3}))
    assert reading[Sector.FRONT] == RANGE_MAX
    assert reading[Sector.FRONT_LEFT] == 0.3
    assert reading[Sector.FRONT_RIGHT] == 0.3


@pytest.mark.parametrize("sector", list(Sector))
def test_each_sector_centre(sector):
    reading = reduce_scan(make_scan({sector.angle: 1.25}))
    assert reading[sector] == 1.25
    others = [reading[s] for s in Sector if s != sector]
    assert others == [RANGE_MAX] * 11


def test_left_is_ninety_degrees_counter_clockwise():
    assert Sector.LEFT.angle == 90
    assert Sector.RIGHT.angle == 270
    assert Sector.BACK.angle == 180


def test_sector_never_exceeds_window_minimum():
    rng = np.random.default_rng(3431)
    for _ in range(50):
        ranges = rng.uniform(0.0, RANGE_MAX * 1.5, 360)
        reading = reduce_scan(LaserScan(ranges=ranges, range_max=RANGE_MAX))
        for sector in Sector:
            window_min = ranges[window_indices(sector.angle, 10)].min()
            assert reading[sector] <= window_min or reading[sector] == RANGE_MAX
            assert reading[sector] == pytest.approx(min(window_min, RANGE_MAX))
            assert 0.0 <= reading[sector] <= RANGE_MAX


def test_invalid_samples_are_no_return():
    reading = reduce_scan(make_scan({0: math.nan, 1: math.inf, 2: -1.0, 3: 0.8}))
    assert reading[Sector.FRONT] == 0.8


def test_zero_range_is_kept():
    reading = reduce_scan(make_scan({90: 0.0}))
    assert reading[Sector.LEFT] == 0.0


def test_beyond_max_range_clamped():
    reading = reduce_scan(make_scan({180: RANGE_MAX + 4}))
    assert reading[Sector.BACK] == RANGE_MAX


def test_double_resolution_matches_single():
    rng = np.random.default_rng(7)
    ranges = rng.uniform(0.1, RANGE_MAX, 360)
    single = reduce_scan(LaserScan(ranges=ranges, range_max=RANGE_MAX))
    double = reduce_scan(LaserScan(ranges=np.repeat(ranges, 2), range_max=RANGE_MAX))
    assert double == single


def test_half_width_parameter():
    scan = make_scan({15: 0.5})
    assert reduce_scan(scan, half_width=10)[Sector.FRONT] == RANGE_MAX
    assert reduce_scan(scan, half_width=20)[Sector.FRONT] == 0.5


@pytest.mark.parametrize("size", [0, 359, 361, 540])
def test_bad_length_rejected(size):
    with pytest.raises(ScanFormatError):
        reduce_scan(LaserScan(ranges=np.ones(size), range_max=RANGE_MAX))


@pytest.mark.parametrize("range_max", [0.0, -1.0, math.inf, math.nan])
def test_bad_range_max_rejected(range_max):
    with pytest.raises(ScanFormatError):
        reduce_scan(LaserScan(ranges=np.ones(360), range_max=range_max))


def test_bad_half_width_rejected():
    with pytest.raises(ScanFormatError):
        reduce_scan(make_scan(), half_width=0)


def test_scan_format_error_is_value_error():
    assert issubclass(ScanFormatError, ValueError)


def test_sector_reading_requires_twelve_values():
    with pytest.raises(ValueError):
        SectorReading((1.0,) * 11)


def test_sector_reading_from_mapping():
    reading = SectorReading.from_mapping({Sector.FRONT: 0.5}, default=2.0)
    assert reading[Sector.FRONT] == 0.5
    assert reading[Sector.BACK] == 2.0
    assert reading.to_dict()["FRONT"] == 0.5
    assert list(reading.to_dict()) == [s.name for s in Sector]


def test_accepts_plain_lists():
    reading = reduce_scan(LaserScan(ranges=[RANGE_MAX] * 359 + [1.0], range_max=RANGE_MAX))
    assert reading[Sector.FRONT] == 1.0
