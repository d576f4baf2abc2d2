import math

import pytest

from luminaria.common.constants import MAX_DISTANCE
from luminaria.common.models import AssetRecord, haversine_meters


def _reference_haversine(lat1, lon1, lat2, lon2):
    r = 6371.0
    p1, p2 = math.radians(lat1), math.radians(lat2)
    dp = math.radians(lat2 - lat1)
    dl = math.radians(lon2 - lon1)
    a = math.sin(dp / 2) ** 2 + math.cos(p1) * math.cos(p2) * math.sin(dl / 2) ** 2
    return r * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a)) * 1000


def test_identical_points_are_zero_meters_apart():
    record = AssetRecord(lat=10.745, lon=-74.758)

    assert record.distance_to(10.745, -74.758) == 0.0


def test_half_circumference_distance():
    record = AssetRecord(lat=0.0, lon=0.0)

    assert record.distance_to(0.0, 180.0) == pytest.approx(20_015_086.796, abs=1.0)


def test_quarter_circumference_distance():
    assert haversine_meters(0.0, 0.0, 0.0, 90.0) == pytest.approx(10_007_543.398, abs=1.0)


@pytest.mark.parametrize(
    ("lat1", "lon1", "lat2", "lon2"),
    [
        (10.745, -74.758, 10.7451666667, -74.7576666667),
        (4.60971, -74.08175, 6.2442, -75.5812),
        (-33.9, 18.4, 51.5, -0.12),
    ],
)
def test_distance_matches_reference_formula(lat1, lon1, lat2, lon2):
    assert haversine_meters(lat1, lon1, lat2, lon2) == pytest.approx(
        _reference_haversine(lat1, lon1, lat2, lon2), rel=1e-12
    )


def test_record_without_coordinates_is_infinitely_far():
    assert AssetRecord(barrio="Centro").distance_to(10.0, -74.0) == MAX_DISTANCE
    assert AssetRecord(lat=10.0).distance_to(10.0, -74.0) == MAX_DISTANCE


def test_record_is_immutable():
    record = AssetRecord(lat=1.0, lon=2.0)

    with pytest.raises(AttributeError):
        record.lat = 3.0


def test_near_antipodal_points_give_half_circumference():
    distance = haversine_meters(11.056008330198168, 89.75039120735127, -11.056008330198168, -90.24960879264873)

    assert distance == pytest.approx(math.pi * 6_371_000.0, rel=1e-9)
