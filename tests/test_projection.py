import pytest

from bw_locations.geo import BOTSWANA_BOUNDS, Bounds, parse_bounds, project_to_box


def test_corners_map_to_box_corners():
    b = BOTSWANA_BOUNDS
    top_left = project_to_box(b.north, b.west)
    bottom_right = project_to_box(b.south, b.east)
    assert (top_left.x, top_left.y) == (0, 0)
    assert (bottom_right.x, bottom_right.y) == pytest.approx((100, 100))


def test_inside_point_is_proportional():
    point = project_to_box(-22.325, 24.71)
    assert point.x == pytest.approx(50.0)
    assert point.y == pytest.approx(50.0)


@pytest.mark.parametrize(
    "lat,lng,expected",
    [
        (-10.0, 25.0, (None, 0.0)),
        (-30.0, 25.0, (None, 100.0)),
        (-22.0, 10.0, (0.0, None)),
        (-22.0, 35.0, (100.0, None)),
        (-40.0, 40.0, (100.0, 100.0)),
    ],
)
def test_outside_points_clamp_to_edges(lat, lng, expected):
    point = project_to_box(lat, lng)
    assert 0 <= point.x <= 100 and 0 <= point.y <= 100
    want_x, want_y = expected
    if want_x is not None:
        assert point.x == want_x
    if want_y is not None:
        assert point.y == want_y


def test_contains():
    assert BOTSWANA_BOUNDS.contains(-24.6282, 25.9231)
    assert not BOTSWANA_BOUNDS.contains(-33.92, 18.42)


def test_parse_bounds():
    bounds = parse_bounds("25.0, -25.0, 26.0, -24.0")
    assert bounds == Bounds(north=-24.0, south=-25.0, east=26.0, west=25.0)
    assert project_to_box(-24.5, 25.5, bounds).to_dict() == {"x": 50.0, "y": 50.0}


@pytest.mark.parametrize("raw", ["", "1,2,3", "a,b,c,d", "26,-24,25,-25"])
def test_parse_bounds_rejects_bad_input(raw):
    with pytest.raises(ValueError):
        parse_bounds(raw)
