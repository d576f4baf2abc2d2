"""Header inference: map spreadsheet columns to logical inventory fields."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any, Callable, Iterable

BARRIO = "Barrio"
DIRECCION = "DireccionFinal"
CODIGO = "CodigoLuminaria"
TECNOLOGIA = "Tecnologia"
POTENCIA = "Potencia"
COORDENADAS = "Coordenadas"
LAT = "Lat"
LON = "Lon"
EASTING = "Easting"
NORTHING = "Northing"
LATITUD = "Latitud"
LONGITUD = "Longitud"

HeaderPredicate = Callable[[str], bool]


def _contains(*keywords: str) -> HeaderPredicate:
    return lambda header: any(keyword in header for keyword in keywords)


def _starts_with(*prefixes: str) -> HeaderPredicate:
    return lambda header: header.startswith(prefixes)


def _equals(*names: str) -> HeaderPredicate:
    return lambda header: header in names


def _either(*predicates: HeaderPredicate) -> HeaderPredicate:
    return lambda header: any(predicate(header) for predicate in predicates)


# Evaluated top to bottom for every header cell; the first unassigned field
# whose predicate matches takes the column.
FIELD_RULES: tuple[tuple[str, HeaderPredicate], ...] = (
    (BARRIO, _contains("barrio", "neighborhood", "neighbourhood")),
    (DIRECCION, _contains("dirección", "direccion", "address", "dir")),
    (CODIGO, _contains("código", "codigo", "luminaria", "id")),
    (TECNOLOGIA, _contains("tecnología", "tecnologia", "technology", "tipo")),
    (POTENCIA, _contains("potencia", "power", "watt", "w")),
    # Exact match only: a combined coordinate column is never inferred by substring.
    (COORDENADAS, _equals("coordenadas")),
    (LAT, _starts_with("lat")),
    (LON, _starts_with("lon", "long")),
    (EASTING, _either(_contains("easting"), _equals("x"))),
    (NORTHING, _either(_contains("northing"), _equals("y"))),
    (LATITUD, _contains("latitud")),
    (LONGITUD, _contains("longitud")),
)


class ColumnMap(Mapping):
    """Logical field name -> 1-based column position, case-insensitive keys."""

    def __init__(self, columns: Mapping[str, int] | None = None) -> None:
        self._names: dict[str, str] = {}
        self._columns: dict[str, int] = {}
        for name, column in (columns or {}).items():
            self._names[name.casefold()] = name
            self._columns[name.casefold()] = column

    def __getitem__(self, key: str) -> int:
        return self._columns[key.casefold()]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.casefold() in self._columns

    def __iter__(self) -> Iterator[str]:
        return iter(self._names.values())

    def __len__(self) -> int:
        return len(self._columns)

    def __repr__(self) -> str:
        return f"ColumnMap({dict(self.items())!r})"

    def summary(self) -> str:
        return ", ".join(f"{name}={column}" for name, column in self.items())


def _normalise_header(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip().lower()


def match_field(header: str, assigned: Iterable[str] = ()) -> str | None:
    """Return the logical field a normalised header claims, if any."""
    taken = {name.casefold() for name in assigned}
    for field, predicate in FIELD_RULES:
        if field.casefold() in taken:
            continue
        if predicate(header):
            return field
    return None


def discover_columns(header_row: Iterable[Any]) -> ColumnMap:
    """Scan headers left to right; a field keeps the first column it is given."""
    columns: dict[str, int] = {}
    for position, value in enumerate(header_row, start=1):
        header = _normalise_header(value)
        if not header:
            continue
        field = match_field(header, columns)
        if field is not None:
            columns[field] = position
    return ColumnMap(columns)
