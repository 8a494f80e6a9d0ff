import argparse
import json
import random
from pathlib import Path

from pinboundary.settings import load_settings


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", default="config/default.yaml", help="Path to config YAML")

    parser = argparse.ArgumentParser(prog="pinboundary", description="Postal-code boundary approximation", parents=[common])

    sub = parser.add_subparsers(dest="command", required=True)
    generate = sub.add_parser("generate", parents=[common], help="Generate the approximate boundary of a pincode")
    generate.add_argument("pincode", help="6-digit postal code")
    generate.add_argument("--output", default=None, help="Write the polygon as GeoJSON to this file")
    generate.add_argument("--seed", type=int, default=None, help="Seed the radial jitter for reproducible output")
    contains = sub.add_parser("contains", parents=[common], help="Check whether a point lies inside a pincode boundary")
    contains.add_argument("pincode", help="6-digit postal code")
    contains.add_argument("lat", type=float)
    contains.add_argument("lng", type=float)
    neighbourhoods = sub.add_parser("neighbourhoods", parents=[common], help="List named places around a pincode centroid")
    neighbourhoods.add_argument("pincode", help="6-digit postal code")
    neighbourhoods.add_argument("--radius-m", type=int, default=2000, help="Search radius in meters")
    sub.add_parser("api-info", parents=[common], help="Print API run instructions")
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    settings = load_settings(Path(args.config))

    if args.command == "api-info":
        host = settings["api"]["host"]
        port = settings["api"]["port"]
        print(f"Run: uvicorn pinboundary.api.main:app --reload --host {host} --port {port}")
        return

    from pinboundary.boundary.generator import BoundaryGenerator
    from pinboundary.boundary.service import validate_pincode
    from pinboundary.errors import BoundaryError

    try:
        pincode = validate_pincode(args.pincode)
    except BoundaryError as e:
        raise SystemExit(str(e))

    generator = BoundaryGenerator.from_settings(settings)
    seed = getattr(args, "seed", None)
    if seed is not None:
        generator.rng = random.Random(seed)

    if args.command == "neighbourhoods":
        from pinboundary.providers.geocode import resolve_pincode
        from pinboundary.providers.places import nearby_localities

        try:
            geo = resolve_pincode(generator.client, pincode, country=generator.config.country)
        except BoundaryError as e:
            raise SystemExit(str(e))
        print(json.dumps(nearby_localities(generator.client, geo.centroid, radius_m=args.radius_m), indent=2, ensure_ascii=False))
        return

    try:
        record = generator.generate(pincode)
    except BoundaryError as e:
        raise SystemExit(str(e))

    if args.command == "generate":
        output = getattr(args, "output", None)
        if output:
            Path(output).write_text(json.dumps(record.polygon.to_geojson(), ensure_ascii=False), encoding="utf-8")
        summary = record.to_dict()
        # The full point list is long; the GeoJSON output carries it.
        summary.pop("boundary")
        summary.pop("polygon")
        print(json.dumps(summary, indent=2, ensure_ascii=False))
        return

    if args.command == "contains":
        from pinboundary.models import GeoPoint
        from pinboundary.spatial.classify import contains as point_in_boundary

        inside = point_in_boundary(GeoPoint(lat=args.lat, lng=args.lng), record.polygon)
        print(json.dumps({"pincode": pincode, "inside": inside}))
        return

    raise SystemExit(f"Unknown command: {args.command}")
