import datetime as dt
import json
import tempfile
import unittest
from pathlib import Path

from hotel_search.models import Advertiser, DateRange, Offer
from hotel_search.providers.static import StaticOfferProvider

EXPEDIA = Advertiser(100, "Expedia")
STAY = DateRange(dt.date(2026, 11, 1), dt.date(2026, 11, 3))


class StaticOfferProviderTests(unittest.TestCase):
    def test_returns_only_requested_hotels(self):
        provider = StaticOfferProvider({100: {10: (80, 2), 20: (120, 3)}})
        self.assertEqual(provider.get_offers(EXPEDIA, {10}, STAY), {10: Offer(EXPEDIA, 80, 2)})

    def test_unknown_advertiser_has_no_offers(self):
        provider = StaticOfferProvider({100: {10: (80, 2)}})
        self.assertEqual(provider.get_offers(Advertiser(200, "Booking.com"), {10}, STAY), {})
        self.assertEqual(len(provider.calls), 1)

    def test_from_json_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "offers.json"
            path.write_text(json.dumps({"100": {"10": [80, 2]}}), encoding="utf-8")
            provider = StaticOfferProvider.from_json_file(path)

        self.assertEqual(provider.prices, {100: {10: (80, 2)}})

    def test_negative_prices_are_rejected(self):
        with self.assertRaises(ValueError):
            StaticOfferProvider({100: {10: (-80, 2)}})
        with self.assertRaises(ValueError):
            StaticOfferProvider({100: {10: (80, -2)}})

    def test_negative_prices_in_json_file_are_rejected(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "offers.json"
            path.write_text(json.dumps({"100": {"10": [-80, -2]}}), encoding="utf-8")
            with self.assertRaises(ValueError):
                StaticOfferProvider.from_json_file(path)


if __name__ == "__main__":
    unittest.main()
