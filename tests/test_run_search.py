import tempfile
import unittest
from pathlib import Path

from hotel_search.providers.remote import RemoteOfferProvider
from hotel_search.providers.static import StaticOfferProvider
from scripts.run_search import build_provider, run_search

ROOT = Path(__file__).resolve().parents[1]


class RunSearchScriptTests(unittest.TestCase):
    def test_build_provider_prefers_static_prices(self):
        self.assertIsInstance(build_provider(str(ROOT / "data" / "offers.json")), StaticOfferProvider)
        self.assertIsInstance(build_provider(None), RemoteOfferProvider)

    def test_searches_bundled_data(self):
        result = run_search(
            "Hamburg",
            "2026-11-01",
            "2026-11-03",
            data_dir=ROOT / "data",
            prices_path=str(ROOT / "data" / "offers.json"),
        )

        hotels = {hotel["hotel"]["hotel_id"]: hotel for hotel in result["hotels"]}
        self.assertEqual(set(hotels), {10, 11, 12})
        self.assertEqual(result["provider"], "static")
        self.assertEqual(
            sorted(offer["advertiser_id"] for offer in hotels[10]["offers"]),
            [100, 200],
        )

    def test_missing_data_reports_not_initialized(self):
        with tempfile.TemporaryDirectory() as empty_dir:
            with self.assertLogs("hotel_search.engine", level="ERROR"):
                result = run_search("Hamburg", None, None, data_dir=empty_dir, prices_path=None)

        self.assertEqual(result["error"]["code"], "ENGINE_NOT_INITIALIZED")


if __name__ == "__main__":
    unittest.main()
