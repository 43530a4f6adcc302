from __future__ import annotations

from collections.abc import Mapping

from hotel_search.errors import UnknownHotelError
from hotel_search.models import HotelWithOffers, Offer
from hotel_search.reference_data import ReferenceDataStore


def merge_offers(
    results: list[HotelWithOffers],
    hotel_offers: Mapping[int, Offer],
    store: ReferenceDataStore,
) -> list[HotelWithOffers]:
    """Fold one advertiser's ``{hotel_id: offer}`` map into ``results`` in place.

    An offer for a hotel already present is appended to that entry; otherwise a
    new entry is created from the reference hotel. ``results`` never gains a
    second entry for the same hotel. Returns ``results``.
    """
    for hotel_id, offer in hotel_offers.items():
        existing = _find_entry(results, hotel_id)
        if existing is not None:
            existing.offers.append(offer)
            continue

        hotel = store.hotel_by_id(hotel_id)
        if hotel is None:
            raise UnknownHotelError(hotel_id)
        results.append(HotelWithOffers(hotel=hotel, offers=[offer]))
    return results


def _find_entry(results: list[HotelWithOffers], hotel_id: int) -> HotelWithOffers | None:
    # result lists hold at most one city's hotels, a scan is enough
    for entry in results:
        if entry.hotel.id == hotel_id:
            return entry
    return None
