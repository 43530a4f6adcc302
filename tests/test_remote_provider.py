import datetime as dt
import json
import unittest

import httpx

from hotel_search.errors import OfferProviderError
from hotel_search.models import Advertiser, DateRange, Offer
from hotel_search.providers.remote import RemoteOfferProvider

EXPEDIA = Advertiser(100, "Expedia")
STAY = DateRange(dt.date(2026, 11, 1), dt.date(2026, 11, 3))


def provider_returning(offers, seen=None):
    def handler(request):
        if seen is not None:
            seen.append(json.loads(request.content))
        return httpx.Response(200, json={"jsonrpc": "2.0", "result": {"structuredContent": {"offers": offers}}})

    return RemoteOfferProvider(
        url="https://offers.example/mcp",
        api_key=None,
        retry_attempts=0,
        transport=httpx.MockTransport(handler),
    )


class RemoteOfferProviderTests(unittest.TestCase):
    def test_sends_advertiser_hotels_and_dates(self):
        seen = []
        provider = provider_returning([], seen)
        provider.get_offers(EXPEDIA, {12, 10}, STAY)

        arguments = seen[0]["params"]["arguments"]
        self.assertEqual(seen[0]["params"]["name"], "get_offers")
        self.assertEqual(arguments["advertiserId"], 100)
        self.assertEqual(arguments["hotelIds"], [10, 12])
        self.assertEqual(arguments["arrivalDate"], "2026-11-01")
        self.assertEqual(arguments["departureDate"], "2026-11-03")

    def test_maps_offers_by_hotel(self):
        provider = provider_returning(
            [
                {"hotelId": 10, "priceInEuro": 80, "cpc": 2},
                {"hotelId": "12", "priceInEuro": "129", "cpc": "3"},
            ]
        )
        offers = provider.get_offers(EXPEDIA, {10, 12}, STAY)
        self.assertEqual(offers, {10: Offer(EXPEDIA, 80, 2), 12: Offer(EXPEDIA, 129, 3)})

    def test_keeps_cheapest_offer_per_hotel(self):
        provider = provider_returning(
            [
                {"hotelId": 10, "priceInEuro": 95, "cpc": 2},
                {"hotelId": 10, "priceInEuro": 80, "cpc": 4},
            ]
        )
        self.assertEqual(provider.get_offers(EXPEDIA, {10}, STAY), {10: Offer(EXPEDIA, 80, 4)})

    def test_skips_malformed_and_unrequested_offers(self):
        provider = provider_returning(
            [
                {"hotelId": 10},
                {"hotelId": 10, "priceInEuro": -5, "cpc": 1},
                {"hotelId": 99, "priceInEuro": 50, "cpc": 1},
                "garbage",
                {"hotelId": 10, "priceInEuro": 70, "cpc": 1},
            ]
        )
        with self.assertLogs("hotel_search.providers.remote", level="WARNING"):
            offers = provider.get_offers(EXPEDIA, {10}, STAY)
        self.assertEqual(offers, {10: Offer(EXPEDIA, 70, 1)})

    def test_upstream_failure_raises_offer_provider_error(self):
        def handler(request):
            return httpx.Response(500)

        provider = RemoteOfferProvider(
            url="https://offers.example/mcp",
            retry_attempts=0,
            transport=httpx.MockTransport(handler),
        )
        with self.assertLogs("hotel_search.client", level="WARNING"):
            with self.assertRaises(OfferProviderError) as ctx:
                provider.get_offers(EXPEDIA, {10}, STAY)
        self.assertEqual(ctx.exception.advertiser_id, 100)


if __name__ == "__main__":
    unittest.main()
