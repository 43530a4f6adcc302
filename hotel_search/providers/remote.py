from __future__ import annotations

import logging
from typing import AbstractSet, Any

import httpx

from hotel_search import client
from hotel_search.errors import OfferProviderError, UpstreamCallError
from hotel_search.models import Advertiser, DateRange, Offer

logger = logging.getLogger(__name__)


class RemoteOfferProvider:
    """Fetches advertiser offers from an upstream ``get_offers`` JSON-RPC tool."""

    provider_name = "remote"
    tool_name = "get_offers"

    def __init__(
        self,
        url: str = client.UPSTREAM_URL,
        api_key: str | None = client.API_KEY,
        timeout: float = client.REQUEST_TIMEOUT_SECONDS,
        retry_attempts: int = client.RETRY_ATTEMPTS,
        transport: httpx.BaseTransport | None = None,
    ):
        self.url = url
        self.api_key = api_key
        self.timeout = timeout
        self.retry_attempts = retry_attempts
        self.transport = transport

    def get_offers(
        self,
        advertiser: Advertiser,
        hotel_ids: AbstractSet[int],
        date_range: DateRange,
    ) -> dict[int, Offer]:
        try:
            data = client.call_upstream(
                self.tool_name,
                {
                    "advertiserId": advertiser.id,
                    "advertiserName": advertiser.name,
                    "hotelIds": sorted(hotel_ids),
                    "arrivalDate": date_range.start.isoformat(),
                    "departureDate": date_range.end.isoformat(),
                },
                url=self.url,
                api_key=self.api_key,
                timeout=self.timeout,
                retry_attempts=self.retry_attempts,
                transport=self.transport,
            )
        except UpstreamCallError as exc:
            raise OfferProviderError(advertiser.id, str(exc)) from exc

        raw_offers = data.get("offers", [])
        if not isinstance(raw_offers, list):
            raise OfferProviderError(advertiser.id, "'offers' is not a list")
        return self._map_offers(advertiser, raw_offers, hotel_ids)

    def _map_offers(
        self,
        advertiser: Advertiser,
        raw_offers: list[Any],
        hotel_ids: AbstractSet[int],
    ) -> dict[int, Offer]:
        offers: dict[int, Offer] = {}
        for item in raw_offers:
            parsed = _parse_offer_item(item)
            if parsed is None:
                logger.warning("upstream_offer_skipped", extra={"advertiser_id": advertiser.id, "item": item})
                continue

            hotel_id, price, cpc = parsed
            if hotel_id not in hotel_ids:
                continue
            current = offers.get(hotel_id)
            # one offer per hotel: keep the cheapest the advertiser quoted
            if current is None or price < current.price_in_euro:
                offers[hotel_id] = Offer(advertiser=advertiser, price_in_euro=price, cpc=cpc)
        return offers


def _parse_offer_item(item: Any) -> tuple[int, int, int] | None:
    if not isinstance(item, dict):
        return None
    try:
        hotel_id = int(item["hotelId"])
        price = int(item["priceInEuro"])
        cpc = int(item["cpc"])
    except (KeyError, TypeError, ValueError):
        return None
    if price < 0 or cpc < 0:
        return None
    return hotel_id, price, cpc
