from luminaria.common.constants import MAX_DISTANCE
from luminaria.common.models import AssetRecord
from luminaria.inventory.nearest import find_nearest


def test_find_nearest_returns_closest_record():
    far = AssetRecord(codigo_luminaria="far", lat=11.0, lon=-74.0)
    near = AssetRecord(codigo_luminaria="near", lat=10.7451, lon=-74.7581)

    match = find_nearest([far, near], 10.745, -74.758)

    assert match.record is near
    assert match.distance_meters < 20


def test_find_nearest_empty_inventory():
    match = find_nearest([], 10.745, -74.758)

    assert match.record is None
    assert match.found is False
    assert match.distance_meters == MAX_DISTANCE


def test_find_nearest_ties_keep_first_record():
    first = AssetRecord(codigo_luminaria="first", lat=10.0, lon=-74.0)
    second = AssetRecord(codigo_luminaria="second", lat=10.0, lon=-74.0)

    assert find_nearest([first, second], 10.0, -74.0).record is first


def test_find_nearest_skips_records_without_coordinates():
    missing = AssetRecord(codigo_luminaria="missing")
    located = AssetRecord(codigo_luminaria="located", lat=-30.0, lon=100.0)

    assert find_nearest([missing, located], 10.0, -74.0).record is located
    assert find_nearest([missing], 10.0, -74.0).record is None


def test_find_nearest_handles_near_antipodal_query():
    record = AssetRecord(codigo_luminaria="antipode", lat=11.056008330198168, lon=89.75039120735127)

    match = find_nearest([record], -11.056008330198168, -90.24960879264873)

    assert match.record is record
    assert match.distance_meters < MAX_DISTANCE
