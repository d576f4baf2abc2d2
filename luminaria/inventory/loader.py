"""Inventory loading: schema discovery, per-row coordinate resolution, caching."""

from __future__ import annotations

import logging
import math
import threading
import time
from collections import Counter
from pathlib import Path
from typing import Callable

from luminaria.common.logging import get_logger, log_event
from luminaria.common.models import AssetRecord, NearestMatch
from luminaria.common.values import cell_text, parse_number
from luminaria.inventory import columns as cols
from luminaria.inventory.columns import ColumnMap, discover_columns
from luminaria.inventory.dms import parse_coordinate_pair
from luminaria.inventory.nearest import find_nearest
from luminaria.inventory.sources import TableSource, open_table_source
from luminaria.inventory.transform import CoordinateTransformer, default_transformer

Coordinate = tuple[float, float]
CoordinateStrategy = Callable[[TableSource, int, ColumnMap, CoordinateTransformer], Coordinate | None]


def _numeric_pair(source: TableSource, row: int, columns: ColumnMap, first: str, second: str) -> Coordinate | None:
    if first not in columns or second not in columns:
        return None
    a = parse_number(source.cell(row, columns[first]))
    b = parse_number(source.cell(row, columns[second]))
    if a is None or b is None:
        return None
    return a, b


def _from_lat_lon(source, row, columns, _transformer) -> Coordinate | None:
    return _numeric_pair(source, row, columns, cols.LAT, cols.LON)


def _from_latitud_longitud(source, row, columns, _transformer) -> Coordinate | None:
    return _numeric_pair(source, row, columns, cols.LATITUD, cols.LONGITUD)


def _from_coordenadas(source, row, columns, _transformer) -> Coordinate | None:
    if cols.COORDENADAS not in columns:
        return None
    return parse_coordinate_pair(cell_text(source.cell(row, columns[cols.COORDENADAS])))


def _from_grid(source, row, columns, transformer) -> Coordinate | None:
    grid = _numeric_pair(source, row, columns, cols.EASTING, cols.NORTHING)
    if grid is None:
        return None
    lat, lon = transformer.to_geographic(*grid)
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return None
    return lat, lon


COORDINATE_STRATEGIES: tuple[tuple[str, CoordinateStrategy], ...] = (
    ("lat_lon", _from_lat_lon),
    ("latitud_longitud", _from_latitud_longitud),
    ("coordenadas", _from_coordenadas),
    ("easting_northing", _from_grid),
)


def resolve_coordinates(
    source: TableSource,
    row: int,
    columns: ColumnMap,
    transformer: CoordinateTransformer,
) -> tuple[str, Coordinate] | None:
    for name, strategy in COORDINATE_STRATEGIES:
        coordinate = strategy(source, row, columns, transformer)
        if coordinate is not None:
            return name, coordinate
    return None


def _text_field(source: TableSource, row: int, columns: ColumnMap, field: str) -> str | None:
    if field not in columns:
        return None
    return cell_text(source.cell(row, columns[field]))


def parse_row(
    source: TableSource,
    row: int,
    columns: ColumnMap,
    transformer: CoordinateTransformer,
) -> tuple[str, AssetRecord] | None:
    """Build the record for ``row`` together with the coordinate strategy that located it."""
    resolved = resolve_coordinates(source, row, columns, transformer)
    if resolved is None:
        return None
    method, (lat, lon) = resolved
    return method, AssetRecord(
        barrio=_text_field(source, row, columns, cols.BARRIO),
        direccion_final=_text_field(source, row, columns, cols.DIRECCION),
        codigo_luminaria=_text_field(source, row, columns, cols.CODIGO),
        tecnologia=_text_field(source, row, columns, cols.TECNOLOGIA),
        potencia=_text_field(source, row, columns, cols.POTENCIA),
        lat=lat,
        lon=lon,
    )


def build_records(
    source: TableSource,
    transformer: CoordinateTransformer,
    logger: logging.Logger,
) -> tuple[ColumnMap, list[AssetRecord], Counter[str]]:
    columns = discover_columns(source.header())
    log_event(logger, f"columns detected: {columns.summary()}", event="INVENTORY_COLUMNS", source=source.name)

    records: list[AssetRecord] = []
    methods: Counter[str] = Counter()
    for row in range(2, source.max_row + 1):
        try:
            parsed = parse_row(source, row, columns, transformer)
        except Exception:
            logger.warning(
                "row %s could not be parsed",
                row,
                exc_info=True,
                extra={"event": "INVENTORY_ROW_FAILED", "status": "dropped", "row": row},
            )
            continue
        if parsed is None:
            log_event(
                logger,
                f"row {row} has no usable coordinates",
                level=logging.DEBUG,
                event="INVENTORY_ROW_DROPPED",
                status="dropped",
                row=row,
            )
            continue
        method, record = parsed
        methods[method] += 1
        records.append(record)
    return columns, records, methods


class InventoryCache:
    """Process-wide, lazily built, read-only collection of asset records.

    The first caller of :meth:`ensure_loaded` builds the inventory under a
    lock; concurrent callers wait for it and then share the result. Once
    loaded the cache is never rebuilt, and a missing or unreadable source
    leaves it loaded and empty.
    """

    def __init__(
        self,
        path: Path | None,
        *,
        sheet_index: int = 0,
        transformer: CoordinateTransformer | None = None,
        open_source: Callable[[Path, int], TableSource] = open_table_source,
        logger: logging.Logger | None = None,
    ) -> None:
        self.path = path
        self.sheet_index = sheet_index
        self.transformer = transformer or default_transformer()
        self._open_source = open_source
        self.logger = logger or get_logger("inventory")
        self._lock = threading.Lock()
        self._loaded = False
        self._records: tuple[AssetRecord, ...] = ()
        self.columns = ColumnMap()
        self.methods: dict[str, int] = {}

    @property
    def loaded(self) -> bool:
        return self._loaded

    def ensure_loaded(self) -> tuple[AssetRecord, ...]:
        if self._loaded:
            return self._records
        with self._lock:
            if not self._loaded:
                self._records = self._build()
                self._loaded = True
        return self._records

    @property
    def records(self) -> tuple[AssetRecord, ...]:
        return self.ensure_loaded()

    def find_nearest(self, lat: float, lon: float) -> NearestMatch:
        return find_nearest(self.ensure_loaded(), lat, lon)

    def _build(self) -> tuple[AssetRecord, ...]:
        if self.path is None or not self.path.exists():
            log_event(
                self.logger,
                f"inventory source not found: {self.path}",
                level=logging.WARNING,
                event="INVENTORY_SOURCE_MISSING",
                status="degraded",
                source=str(self.path),
            )
            return ()

        started = time.monotonic()
        try:
            source = self._open_source(self.path, self.sheet_index)
            if source.is_empty:
                log_event(
                    self.logger,
                    "inventory worksheet has no data",
                    level=logging.WARNING,
                    event="INVENTORY_LOADED",
                    status="empty",
                    source=source.name,
                    rows_in=0,
                    rows_out=0,
                )
                return ()
            columns, records, methods = build_records(source, self.transformer, self.logger)
        except Exception:
            self.logger.error(
                "failed to load inventory from %s",
                self.path,
                exc_info=True,
                extra={"event": "INVENTORY_LOAD_FAILED", "status": "degraded", "source": str(self.path)},
            )
            return ()

        self.columns = columns
        self.methods = dict(methods)
        by_method = ", ".join(f"{name}={count}" for name, count in sorted(methods.items()))
        log_event(
            self.logger,
            f"inventory loaded: {len(records)} valid records of {source.max_row - 1} rows ({by_method})",
            event="INVENTORY_LOADED",
            status="ok",
            source=source.name,
            rows_in=source.max_row - 1,
            rows_out=len(records),
            duration_ms=int((time.monotonic() - started) * 1000),
        )
        return tuple(records)
