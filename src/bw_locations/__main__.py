import argparse
import json
import logging
import sys
from pathlib import Path

from .geo import find_nearby
from .resolver import ExactMatchResolver
from .search import SearchIndex
from .store import get_store, load_store


def _configure_logging(level):
    logging.basicConfig(
        level=getattr(logging, str(level or "WARNING").upper(), logging.WARNING),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _emit(payload, items, log_json):
    if not log_json:
        print(json.dumps(payload))
        return
    for item in items:
        print(json.dumps(item))
    print(json.dumps({"summary": {k: v for k, v in payload.items() if not isinstance(v, (list, dict))}}))


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Botswana location hierarchy lookup and search",
    )

    parser.add_argument(
        "--list-districts",
        action="store_true",
        help="List all districts ordered by code",
    )
    parser.add_argument(
        "--district",
        type=int,
        default=None,
        help="District id: list its settlements",
    )
    parser.add_argument(
        "--settlement",
        type=int,
        default=None,
        help="Settlement id: list its wards",
    )
    parser.add_argument(
        "--ward",
        type=int,
        default=None,
        help="Ward id: list its plots",
    )
    parser.add_argument(
        "--search",
        default=None,
        help="Search text (at least 2 characters)",
    )
    parser.add_argument(
        "--type",
        default="all",
        choices=["all", "district", "settlement", "ward", "plot"],
        help="Entity type to search",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=20,
        help="Maximum results per type",
    )
    parser.add_argument(
        "--resolve",
        default=None,
        help="Exact name to resolve (with --level)",
    )
    parser.add_argument(
        "--level",
        default="settlement",
        choices=["district", "settlement", "ward"],
        help="Level for --resolve",
    )
    parser.add_argument(
        "--parent",
        type=int,
        default=None,
        help="Parent scope id for --resolve",
    )
    parser.add_argument(
        "--lat",
        type=float,
        default=None,
        help="Latitude for a radius query (with --lng)",
    )
    parser.add_argument(
        "--lng",
        type=float,
        default=None,
        help="Longitude for a radius query (with --lat)",
    )
    parser.add_argument(
        "--radius-km",
        type=float,
        default=25.0,
        help="Radius for --lat/--lng in kilometres",
    )
    parser.add_argument(
        "--data",
        default=None,
        help="Path to a location dataset JSON (defaults to BWLOC_DATA_PATH or the bundled file)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (DEBUG, INFO, etc.)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit one JSON line per result followed by a summary line",
    )

    args = parser.parse_args(argv)
    _configure_logging(args.log_level)

    modes = [
        args.list_districts,
        args.district is not None,
        args.settlement is not None,
        args.ward is not None,
        args.search is not None,
        args.resolve is not None,
        args.lat is not None or args.lng is not None,
    ]
    if sum(1 for m in modes if m) != 1:
        parser.error(
            "choose exactly one of --list-districts, --district, --settlement, "
            "--ward, --search, --resolve, --lat/--lng"
        )
    if (args.lat is None) != (args.lng is None):
        parser.error("--lat and --lng must be given together")

    store = load_store(Path(args.data)) if args.data else get_store()

    if args.list_districts:
        districts = [d.to_dict() for d in store.get_districts()]
        _emit({"districts": districts, "count": len(districts)}, districts, args.log_json)
    elif args.district is not None:
        result = store.get_settlements(args.district)
        payload = {**result.to_dict(), "count": len(result.settlements)}
        _emit(payload, payload["settlements"], args.log_json)
    elif args.settlement is not None:
        result = store.get_wards(args.settlement)
        payload = {**result.to_dict(), "count": len(result.wards)}
        _emit(payload, payload["wards"], args.log_json)
    elif args.ward is not None:
        result = store.get_plots(args.ward)
        payload = {**result.to_dict(), "count": len(result.plots)}
        _emit(payload, payload["plots"], args.log_json)
    elif args.search is not None:
        result = SearchIndex(store).search(args.search, args.type, args.limit)
        data = result.to_dict()
        payload = {
            "data": data,
            "query": args.search,
            "type": result.type.value,
            "totalResults": result.total_results,
            "limit": args.limit,
        }
        items = [
            {"group": group, **item} for group, rows in data.items() for item in rows
        ]
        _emit(payload, items, args.log_json)
    elif args.resolve is not None:
        match = ExactMatchResolver(store).resolve(args.level, args.resolve, args.parent)
        payload = {
            "level": args.level,
            "text": args.resolve,
            "match": match.to_dict() if match is not None else None,
        }
        _emit(payload, [payload["match"]] if match is not None else [], args.log_json)
    else:
        hits = [h.to_dict() for h in find_nearby(store, args.lat, args.lng, args.radius_km)]
        _emit(
            {"lat": args.lat, "lng": args.lng, "radius_km": args.radius_km, "results": hits, "count": len(hits)},
            hits,
            args.log_json,
        )


def _safe_main():
    try:
        main()
    except SystemExit:
        raise
    except Exception as exc:
        print(json.dumps({"error": str(exc)}))
        raise SystemExit(1)


if __name__ == "__main__":
    _safe_main()
