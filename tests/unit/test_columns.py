from luminaria.inventory.columns import ColumnMap, discover_columns, match_field


def test_discover_columns_maps_standard_header():
    columns = discover_columns(["Barrio", "Dirección", "Código", "Tecnología", "Potencia (W)", "Lat", "Lon"])

    assert dict(columns.items()) == {
        "Barrio": 1,
        "DireccionFinal": 2,
        "CodigoLuminaria": 3,
        "Tecnologia": 4,
        "Potencia": 5,
        "Lat": 6,
        "Lon": 7,
    }


def test_first_latitude_header_wins_lat_field():
    columns = discover_columns(["lat", "latitud", "lon", "longitud"])

    assert columns["Lat"] == 1
    assert columns["Latitud"] == 2
    assert columns["Lon"] == 3
    assert columns["Longitud"] == 4


def test_assigned_field_is_never_reassigned():
    columns = discover_columns(["Barrio", "Barrio anterior"])

    assert columns["Barrio"] == 1
    assert list(columns) == ["Barrio"]


def test_keys_are_case_insensitive():
    columns = discover_columns(["LATITUDE", "LONGITUDE"])

    assert columns["lat"] == columns["LAT"] == 1
    assert "lon" in columns
    assert "northing" not in columns


def test_coordenadas_requires_exact_header():
    assert "Coordenadas" in discover_columns(["  COORDENADAS "])
    assert "Coordenadas" not in discover_columns(["Coordenadas GPS"])


def test_grid_headers_by_name_and_axis_letter():
    assert dict(discover_columns(["Easting", "Northing"]).items()) == {"Easting": 1, "Northing": 2}
    assert dict(discover_columns(["X", "Y"]).items()) == {"Easting": 1, "Northing": 2}


def test_blank_and_missing_headers_are_skipped():
    columns = discover_columns([None, "", "   ", "Lat", "Lon"])

    assert dict(columns.items()) == {"Lat": 4, "Lon": 5}


def test_substring_rules_follow_priority_order():
    # "tipo de luminaria" satisfies both the code and technology keyword sets.
    assert match_field("tipo de luminaria") == "CodigoLuminaria"
    assert match_field("tipo de luminaria", assigned=["CodigoLuminaria"]) == "Tecnologia"
    assert match_field("observaciones") is None


def test_column_map_summary_and_len():
    columns = ColumnMap({"Lat": 2, "Lon": 3})

    assert len(columns) == 2
    assert columns.summary() == "Lat=2, Lon=3"
