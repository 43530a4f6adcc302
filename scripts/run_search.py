from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from hotel_search.engine import HotelSearchEngine  # noqa: E402
from hotel_search.providers.base import OfferProvider  # noqa: E402
from hotel_search.providers.remote import RemoteOfferProvider  # noqa: E402
from hotel_search.providers.static import StaticOfferProvider  # noqa: E402
from hotel_search.service import HotelSearchService  # noqa: E402


def build_provider(prices_path: str | None) -> OfferProvider:
    if prices_path:
        return StaticOfferProvider.from_json_file(prices_path)
    return RemoteOfferProvider()


def run_search(
    city_name: str,
    check_in: str | None,
    check_out: str | None,
    data_dir: str | Path,
    prices_path: str | None = None,
) -> dict[str, Any]:
    engine = HotelSearchEngine()
    engine.initialize(data_dir)
    service = HotelSearchService(engine=engine, provider=build_provider(prices_path))
    return service.search_hotels(city_name, check_in=check_in, check_out=check_out)


def main() -> int:
    load_dotenv()
    parser = argparse.ArgumentParser(description="Search hotel offers for a city and stay")
    parser.add_argument("city", help="City name, matched exactly")
    parser.add_argument("--check-in", help="Arrival date, e.g. 2026-11-01")
    parser.add_argument("--check-out", help="Departure date, e.g. 2026-11-03")
    parser.add_argument(
        "--data-dir",
        default=os.getenv("HOTEL_SEARCH_DATA_DIR", str(ROOT / "data")),
        help="Directory holding hotels.csv, advertisers.csv, hotel_advertiser.csv and cities.csv",
    )
    parser.add_argument(
        "--prices",
        help="JSON file of static advertiser prices; the upstream offer provider is used when omitted",
    )
    parser.add_argument("--log-level", default=os.getenv("LOG_LEVEL", "WARNING"))
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    result = run_search(args.city, args.check_in, args.check_out, args.data_dir, args.prices)
    print(json.dumps(result, indent=2))
    return 1 if result.get("ok") is False else 0


if __name__ == "__main__":
    raise SystemExit(main())
