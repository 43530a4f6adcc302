from __future__ import annotations

import logging
from collections.abc import Iterable

from hotel_search.models import Advertiser
from hotel_search.reference_data import ReferenceDataStore

logger = logging.getLogger(__name__)


class AvailabilityResolver:
    """Resolves which hotels lie in a city and which advertisers can offer on them."""

    def __init__(self, store: ReferenceDataStore):
        self.store = store

    def resolve_city_id(self, city_name: str) -> int | None:
        """Return the id of the city named exactly ``city_name``, or ``None``."""
        for city_id, name in self.store.cities.items():
            if name == city_name:
                return city_id
        return None

    def hotels_in_city(self, city_id: int | None) -> frozenset[int]:
        if city_id is None:
            return frozenset()
        return frozenset(hotel.id for hotel in self.store.hotels if hotel.city_id == city_id)

    def advertisers_for_hotels(self, hotel_ids: Iterable[int]) -> list[Advertiser]:
        """Advertisers available for at least one of ``hotel_ids``, by ascending id."""
        wanted = frozenset(hotel_ids)
        if not wanted:
            return []

        eligible: list[Advertiser] = []
        for advertiser_id in sorted(self.store.availability):
            if not self.store.availability[advertiser_id] & wanted:
                continue
            advertiser = self.store.advertiser_by_id(advertiser_id)
            if advertiser is None:
                logger.warning("availability_unknown_advertiser", extra={"advertiser_id": advertiser_id})
                continue
            eligible.append(advertiser)
        return eligible
