"""CLI entrypoint for the street-light inventory locator."""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any

from luminaria.common.config_loader import Settings, load_settings
from luminaria.common.constants import (
    EXIT_BAD_INPUT,
    EXIT_HARD_FAIL,
    EXIT_NOT_FOUND,
    EXIT_SUCCESS,
    SOURCE_EPSG,
    TARGET_EPSG,
)
from luminaria.common.errors import CoordinateRangeError, InputError, LocatorError, NotFoundError
from luminaria.common.http import HttpClient, RetryConfig, TimeoutConfig
from luminaria.common.ids import generate_run_id
from luminaria.common.logging import build_logger, get_logger, log_event
from luminaria.inventory.loader import InventoryCache
from luminaria.inventory.transform import to_geographic, to_projected
from luminaria.pipeline.locate import locate
from luminaria.services.geocoding import NominatimClient
from luminaria.services.imagery import ImageClient


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--inventory", default=None, help="Override the configured inventory file")
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--log-dir", default=None)
    parser.add_argument("--log-level", default=None, choices=["DEBUG", "INFO", "WARN", "ERROR"])

    commands = parser.add_subparsers(dest="command", required=True)

    nearest = commands.add_parser("nearest", help="Nearest fixture to a WGS84 point")
    nearest.add_argument("--lat", type=float, required=True)
    nearest.add_argument("--lon", type=float, required=True)

    project = commands.add_parser("project", help="WGS84 lat/lon to national grid")
    project.add_argument("--lat", type=float, required=True)
    project.add_argument("--lon", type=float, required=True)

    unproject = commands.add_parser("unproject", help="National grid to WGS84 lat/lon")
    unproject.add_argument("--easting", type=float, required=True)
    unproject.add_argument("--northing", type=float, required=True)

    commands.add_parser("inventory", help="Load the inventory and summarise it")

    locate_cmd = commands.add_parser("locate", help="Geocode an address and find the nearest fixture")
    locate_cmd.add_argument("--country", required=True)
    locate_cmd.add_argument("--city", required=True)
    locate_cmd.add_argument("--address", required=True)

    return parser.parse_args(argv)


def build_inventory(args: argparse.Namespace, settings: Settings) -> InventoryCache:
    path = Path(args.inventory) if args.inventory else settings.inventory_path
    return InventoryCache(path, sheet_index=settings.sheet_index)


def build_geocoder(settings: Settings) -> NominatimClient:
    cfg = settings.geocoding
    http = HttpClient(
        timeout=TimeoutConfig(connect=float(cfg["timeout_seconds"]), read=float(cfg["timeout_seconds"])),
        retry=RetryConfig(max_attempts=int(cfg["max_attempts"])),
        user_agent=cfg["user_agent"],
        rate_limits={"nominatim": float(cfg["rate_limit_per_sec"])},
    )
    return NominatimClient(http, base_url=cfg["base_url"])


def build_imagery(settings: Settings) -> ImageClient:
    cfg = settings.imagery
    # OPENAI_ENABLED=false switches the remote call off regardless of settings.yml.
    env_enabled = os.getenv("OPENAI_ENABLED", "").strip().lower() != "false"
    timeout = TimeoutConfig(connect=10.0, read=float(cfg["timeout_seconds"]))
    return ImageClient(
        HttpClient(timeout=timeout, retry=RetryConfig(max_attempts=1)),
        api_key=os.getenv("OPENAI_API_KEY", "").strip() or None,
        enabled=bool(cfg["enabled"]) and env_enabled,
        base_url=cfg["base_url"],
        model=cfg["model"],
        size=cfg["size"],
    )


def _nearest_payload(inventory: InventoryCache, lat: float, lon: float) -> dict[str, Any]:
    match = inventory.find_nearest(lat, lon)
    return {
        "lat": lat,
        "lon": lon,
        "found": match.found,
        "record": match.record.to_dict() if match.record is not None else None,
        "distance_meters": match.distance_meters if match.found else None,
    }


def execute_command(args: argparse.Namespace, settings: Settings) -> tuple[int, dict[str, Any]]:
    if args.command == "project":
        easting, northing = to_projected(args.lat, args.lon)
        return EXIT_SUCCESS, {"easting": easting, "northing": northing, "target_epsg": TARGET_EPSG}

    if args.command == "unproject":
        lat, lon = to_geographic(args.easting, args.northing)
        return EXIT_SUCCESS, {"lat": lat, "lon": lon, "source_epsg": SOURCE_EPSG}

    if args.command == "nearest":
        payload = _nearest_payload(build_inventory(args, settings), args.lat, args.lon)
        return (EXIT_SUCCESS if payload["found"] else EXIT_NOT_FOUND), payload

    if args.command == "inventory":
        inventory = build_inventory(args, settings)
        records = inventory.ensure_loaded()
        return EXIT_SUCCESS, {
            "path": str(inventory.path) if inventory.path is not None else None,
            "records": len(records),
            "columns": dict(inventory.columns.items()),
            "methods": inventory.methods,
        }

    if args.command == "locate":
        geocoder = build_geocoder(settings)
        imagery = build_imagery(settings)
        try:
            result = locate(
                args.country,
                args.city,
                args.address,
                geocoder=geocoder,
                inventory=build_inventory(args, settings),
                imagery=imagery,
            )
        finally:
            geocoder.http.close()
            imagery.http.close()
        return EXIT_SUCCESS, result.to_dict()

    raise ValueError(f"Unknown command: {args.command}")


def run_command(args: argparse.Namespace) -> int:
    run_id = args.run_id or generate_run_id()
    settings = load_settings(
        Path(args.config_dir),
        overlay_config_dir=Path(args.overlay_config_dir) if args.overlay_config_dir else None,
    )
    logger = build_logger(
        run_id,
        log_dir=Path(args.log_dir) if args.log_dir else None,
        level=args.log_level or settings.log_level,
    )

    log_event(logger, "command start", stage=args.command, event="COMMAND_START", status="ok")
    try:
        exit_code, payload = execute_command(args, settings)
    except (InputError, CoordinateRangeError) as exc:
        log_event(logger, str(exc), stage=args.command, event="COMMAND_FAIL", status="error", error_code=exc.error_code)
        payload = {"error": str(exc), "error_code": exc.error_code}
        exit_code = EXIT_BAD_INPUT
    except NotFoundError as exc:
        log_event(logger, str(exc), stage=args.command, event="COMMAND_FAIL", status="error", error_code=exc.error_code)
        payload = {"error": str(exc), "error_code": exc.error_code}
        exit_code = EXIT_NOT_FOUND

    print(json.dumps(payload, ensure_ascii=False, indent=2))
    log_event(logger, "command end", stage=args.command, event="COMMAND_END", status="ok")
    return exit_code


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        return run_command(args)
    except LocatorError as exc:
        print(json.dumps({"error": str(exc), "error_code": exc.error_code}), file=sys.stderr)
        return EXIT_HARD_FAIL
    except Exception:
        get_logger("cli").exception("unexpected failure", extra={"event": "COMMAND_FAIL", "error_code": "UNEXPECTED_ERROR"})
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
