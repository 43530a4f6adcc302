from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import AbstractSet

from hotel_search.models import Advertiser, DateRange, Offer


class StaticOfferProvider:
    """Serves fixed ``(price_in_euro, cpc)`` pairs keyed by advertiser id, then hotel id.

    Prices do not depend on the date range. Every call is recorded in ``calls``.
    """

    provider_name = "static"

    def __init__(self, prices: Mapping[int, Mapping[int, tuple[int, int]]]):
        self.prices = {advertiser_id: dict(by_hotel) for advertiser_id, by_hotel in prices.items()}
        for advertiser_id, by_hotel in self.prices.items():
            for hotel_id, (price, cpc) in by_hotel.items():
                if price < 0 or cpc < 0:
                    raise ValueError(
                        f"Negative price or cpc for advertiser {advertiser_id}, hotel {hotel_id}: {(price, cpc)}"
                    )
        self.calls: list[tuple[int, frozenset[int], DateRange]] = []

    @classmethod
    def from_json_file(cls, path: str | Path) -> "StaticOfferProvider":
        """Read ``{"<advertiser_id>": {"<hotel_id>": [price_in_euro, cpc]}}``."""
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        prices = {
            int(advertiser_id): {int(hotel_id): (int(pair[0]), int(pair[1])) for hotel_id, pair in by_hotel.items()}
            for advertiser_id, by_hotel in raw.items()
        }
        return cls(prices)

    def get_offers(
        self,
        advertiser: Advertiser,
        hotel_ids: AbstractSet[int],
        date_range: DateRange,
    ) -> dict[int, Offer]:
        self.calls.append((advertiser.id, frozenset(hotel_ids), date_range))
        by_hotel = self.prices.get(advertiser.id, {})
        return {
            hotel_id: Offer(advertiser=advertiser, price_in_euro=price, cpc=cpc)
            for hotel_id, (price, cpc) in sorted(by_hotel.items())
            if hotel_id in hotel_ids
        }
