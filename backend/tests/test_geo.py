import pytest

from kltransit.geo import haversine


def test_coincident_points_are_zero():
    assert haversine(3.1347, 101.6869, 3.1347, 101.6869) == 0.0
    assert haversine(0.0, 0.0, 0.0, 0.0) == 0.0


def test_symmetric():
    a = (3.1347, 101.6869)
    b = (3.1425, 101.6952)
    assert haversine(*a, *b) == pytest.approx(haversine(*b, *a))


def test_kl_sentral_to_pasar_seni():
    # 0.0078 deg north, 0.0083 deg east near the equator
    assert haversine(3.1347, 101.6869, 3.1425, 101.6952) == pytest.approx(1.266, abs=0.01)


def test_one_degree_of_latitude():
    assert haversine(0.0, 0.0, 1.0, 0.0) == pytest.approx(111.19, abs=0.01)


def test_antipodal_points():
    assert haversine(0.0, 0.0, 0.0, 180.0) == pytest.approx(20015.09, abs=0.1)
