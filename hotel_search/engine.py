from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from hotel_search.availability import AvailabilityResolver
from hotel_search.errors import DataLoadError, NotInitializedError
from hotel_search.merge import merge_offers
from hotel_search.models import DateRange, HotelWithOffers
from hotel_search.providers.base import OfferProvider
from hotel_search.reference_data import ReferenceDataStore, load_reference_data

DATA_DIR = os.getenv("HOTEL_SEARCH_DATA_DIR", "data")

logger = logging.getLogger(__name__)


@dataclass
class SearchOutcome:
    city_id: int | None
    results: list[HotelWithOffers] = field(default_factory=list)


class HotelSearchEngine:
    """Answers city + date range queries against the loaded reference data.

    The engine is created empty and must be populated through ``initialize``
    (or built with ``from_store``) before ``search`` is called.
    """

    def __init__(self) -> None:
        self._store: ReferenceDataStore | None = None
        self._resolver: AvailabilityResolver | None = None

    @classmethod
    def from_store(cls, store: ReferenceDataStore) -> "HotelSearchEngine":
        engine = cls()
        engine._use_store(store)
        return engine

    @property
    def is_initialized(self) -> bool:
        return self._store is not None

    @property
    def store(self) -> ReferenceDataStore:
        if self._store is None:
            raise NotInitializedError()
        return self._store

    def initialize(self, data_dir: str | Path | None = None) -> bool:
        source = Path(data_dir or DATA_DIR)
        try:
            store = load_reference_data(source)
        except DataLoadError as exc:
            self._store = None
            self._resolver = None
            logger.error(
                "engine_initialization_failed",
                extra={"data_dir": str(source), "source": exc.source, "error": exc.reason},
            )
            return False

        self._use_store(store)
        return True

    def search(
        self,
        city_name: str,
        date_range: DateRange,
        offer_provider: OfferProvider,
    ) -> list[HotelWithOffers]:
        return self.run_search(city_name, date_range, offer_provider).results

    def run_search(
        self,
        city_name: str,
        date_range: DateRange,
        offer_provider: OfferProvider,
    ) -> SearchOutcome:
        """Collect offers from every advertiser available in ``city_name``.

        Unknown cities yield an empty list without calling the provider. The
        provider is asked once per eligible advertiser, by ascending advertiser
        id; any exception it raises aborts the search and propagates.
        The outcome carries the resolved city id, ``None`` when unknown.
        """
        if self._store is None or self._resolver is None:
            raise NotInitializedError()
        store = self._store
        resolver = self._resolver

        city_id = resolver.resolve_city_id(city_name)
        hotel_ids = resolver.hotels_in_city(city_id)
        advertisers = resolver.advertisers_for_hotels(hotel_ids)
        logger.debug(
            "search_resolved",
            extra={
                "city_name": city_name,
                "city_id": city_id,
                "hotels": len(hotel_ids),
                "advertisers": len(advertisers),
            },
        )

        results: list[HotelWithOffers] = []
        for advertiser in advertisers:
            logger.debug("offer_provider_called", extra={"advertiser_id": advertiser.id})
            hotel_offers = offer_provider.get_offers(advertiser, hotel_ids, date_range)

            in_city = {hotel_id: offer for hotel_id, offer in hotel_offers.items() if hotel_id in hotel_ids}
            if len(in_city) != len(hotel_offers):
                logger.warning(
                    "offers_outside_city_dropped",
                    extra={
                        "advertiser_id": advertiser.id,
                        "dropped": sorted(set(hotel_offers) - hotel_ids),
                    },
                )
            merge_offers(results, in_city, store)

        logger.info(
            "search_completed",
            extra={"city_name": city_name, "hotels_with_offers": len(results)},
        )
        return SearchOutcome(city_id=city_id, results=results)

    def _use_store(self, store: ReferenceDataStore) -> None:
        resolver = AvailabilityResolver(store)
        self._store = store
        self._resolver = resolver
