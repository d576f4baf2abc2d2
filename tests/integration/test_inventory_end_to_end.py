from __future__ import annotations

import csv
import math
from pathlib import Path

import pytest
from openpyxl import Workbook

from luminaria.inventory.loader import InventoryCache
from luminaria.inventory.transform import to_projected

QUERY = (10.745, -74.758)
HEADER = ["Barrio", "Dirección", "Código", "Tecnología", "Potencia (W)", "Lat", "Lon", "Coordenadas", "Easting", "Northing"]


def _haversine(lat1, lon1, lat2, lon2):
    radius_m = 6_371_000.0
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lon2 - lon1)
    h = math.sin(dphi / 2) ** 2 + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(dlmb / 2) ** 2
    return 2 * radius_m * math.asin(math.sqrt(h))


def _rows():
    easting, northing = to_projected(10.7440, -74.7570)
    return [
        ["El Prado", "Cra 54 # 70-10", "L-001", "LED", 70, 10.7460, -74.7590, None, None, None],
        ["Centro", "Calle 30 # 44-02", "L-002", "Sodio", 150, None, None, "N 10°44.710', W 074°45.460'", None, None],
        ["Boston", "Calle 53 # 41-20", "L-003", "LED", 100, None, None, None, easting, northing],
        ["Sin datos", "Calle 1", "L-004", "LED", 70, None, None, "coordenada pendiente", None, None],
    ]


def _write_xlsx(path: Path) -> Path:
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(HEADER)
    for row in _rows():
        sheet.append(row)
    workbook.save(path)
    return path


def _write_csv(path: Path) -> Path:
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(HEADER)
        for row in _rows():
            writer.writerow(["" if value is None else value for value in row])
    return path


@pytest.mark.integration
@pytest.mark.parametrize("writer", [_write_xlsx, _write_csv], ids=["xlsx", "csv"])
def test_mixed_encodings_normalise_and_resolve_nearest(tmp_path: Path, writer):
    suffix = ".xlsx" if writer is _write_xlsx else ".csv"
    cache = InventoryCache(writer(tmp_path / f"inventario{suffix}"))

    records = cache.ensure_loaded()
    assert [record.codigo_luminaria for record in records] == ["L-001", "L-002", "L-003"]

    grid_record = records[2]
    assert grid_record.lat == pytest.approx(10.7440, abs=1e-7)
    assert grid_record.lon == pytest.approx(-74.7570, abs=1e-7)

    distances = {record.codigo_luminaria: _haversine(record.lat, record.lon, *QUERY) for record in records}
    expected_code = min(distances, key=distances.get)

    match = cache.find_nearest(*QUERY)

    assert expected_code == "L-002"
    assert match.record.codigo_luminaria == expected_code
    assert match.record.barrio == "Centro"
    assert match.record.potencia == "150"
    assert match.distance_meters == pytest.approx(distances[expected_code], abs=1.0)


@pytest.mark.integration
def test_unsupported_inventory_format_degrades_to_empty(tmp_path: Path):
    path = tmp_path / "inventario.txt"
    path.write_text("Lat,Lon\n10,-74\n", encoding="utf-8")

    cache = InventoryCache(path)

    assert cache.ensure_loaded() == ()
    assert cache.find_nearest(*QUERY).record is None
