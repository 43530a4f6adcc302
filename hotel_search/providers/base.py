from __future__ import annotations

from collections.abc import Mapping
from typing import AbstractSet, Protocol

from hotel_search.models import Advertiser, DateRange, Offer


class OfferProvider(Protocol):
    def get_offers(
        self,
        advertiser: Advertiser,
        hotel_ids: AbstractSet[int],
        date_range: DateRange,
    ) -> Mapping[int, Offer]:
        ...
