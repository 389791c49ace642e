import pytest

from grid_morph.core.point import Point, format_coordinate


def test_point_arithmetic():
    p = Point(1.5, 2.0)
    q = Point(0.5, -1.0)
    assert p + q == Point(2.0, 1.0)
    assert p - q == Point(1.0, 3.0)
    assert p * 2 == Point(3.0, 4.0)
    assert 2 * p == Point(3.0, 4.0)
    assert p / 2 == Point(0.75, 1.0)
    assert p.add(q) == p + q


def test_approx_equal_is_per_axis():
    p = Point(10.0, 10.0)
    assert p.approx_equal(Point(10.04, 9.96), 0.05)
    assert not p.approx_equal(Point(10.0, 10.06), 0.05)
    assert p.approx_equal(p, 0.0)


def test_approx_equal_rejects_negative_tolerance():
    with pytest.raises(ValueError):
        Point(0, 0).approx_equal(Point(0, 0), -1.0)


def test_to_image_point_truncates_toward_zero():
    assert Point(3.9, 2.1).to_image_point() == (3, 2)
    assert Point(-1.7, 0.5).to_image_point() == (-1, 0)


def test_string_forms():
    assert str(Point(33.0, 24.75)) == "[33, 24.75]"
    assert format(Point(1.5, 2.0), '.2f') == "[1.50, 2.00]"
    assert format_coordinate(5.0) == "5"
    assert format_coordinate(-0.25) == "-0.25"
