from __future__ import annotations

import unittest

from app.domain.nadlan import ScrapeRequest
from app.scraping.normalization.deal_normalizer import DealNormalizer, build_dedupe_key, lookup

SOURCE_URL = "https://www.nadlan.gov.il/?view=address&id=123&page=deals"


class TestDealNormalizer(unittest.TestCase):
    def setUp(self) -> None:
        self.normalizer = DealNormalizer()
        self.request = ScrapeRequest(city_name="תל אביב", street="דיזנגוף", house_number="100")

    def _normalize(self, row: dict, serial_fallback: int = 1):
        return self.normalizer.normalize_row(
            row,
            request=self.request,
            serial_fallback=serial_fallback,
            source_url=SOURCE_URL,
        )

    def test_price_text_becomes_number(self) -> None:
        deal = self._normalize({"מחיר העסקה": "1,250,000 ₪"})

        self.assertEqual(deal.price_nis, 1250000)
        self.assertEqual(deal.city_name, "תל אביב")
        self.assertEqual(deal.address, "דיזנגוף 100")
        self.assertEqual(deal.serial_no, 1)
        self.assertEqual(deal.source_url, SOURCE_URL)

    def test_header_keyed_row_maps_every_field(self) -> None:
        deal = self._normalize(
            {
                "מספר סידורי": "7",
                "כתובת": "דיזנגוף 100",
                'שטח במ"ר': "85",
                "תאריך העסקה": "3/7/2022",
                "מחיר העסקה": "2,450,000",
                "גוש/חלקה/תת-חלקה": "6906-12-4",
                "סוג נכס": "דירה בבית קומות",
                "חדרים": "3.5",
                "קומה": "ד'",
                "מגמת שינוי": "10%+",
            },
            serial_fallback=99,
        )

        self.assertEqual(deal.serial_no, 7)
        self.assertEqual(deal.area_m2, 85.0)
        self.assertEqual(deal.deal_date, "2022-07-03")
        self.assertEqual(deal.price_nis, 2450000.0)
        self.assertEqual(deal.block_parcel_subparcel, "6906-12-4")
        self.assertEqual(deal.property_type, "דירה בבית קומות")
        self.assertEqual(deal.rooms, 3.5)
        self.assertEqual(deal.floor, "ד'")
        self.assertEqual(deal.trend, "10%+")

    def test_api_item_keys_are_recognized(self) -> None:
        deal = self._normalize(
            {
                "dealAmount": 1980000,
                "dealDate": "14.02.2024",
                "assetArea": "72",
                "roomNum": 3,
                "floor": "2",
                "dealNature": "דירה",
            }
        )

        self.assertEqual(deal.price_nis, 1980000.0)
        self.assertEqual(deal.deal_date, "2024-02-14")
        self.assertEqual(deal.area_m2, 72.0)
        self.assertEqual(deal.rooms, 3.0)
        self.assertEqual(deal.property_type, "דירה")

    def test_unknown_area_is_absent(self) -> None:
        deal = self._normalize({'שטח במ"ר': "לא ידוע", "מחיר העסקה": "900,000"})
        self.assertIsNone(deal.area_m2)

    def test_invalid_values_are_absent_not_errors(self) -> None:
        deal = self._normalize({"תאריך העסקה": "31/02/2023", "מחיר העסקה": "—", "חדרים": ""})

        self.assertIsNone(deal.deal_date)
        self.assertIsNone(deal.price_nis)
        self.assertIsNone(deal.rooms)

    def test_serial_fallback_follows_row_order(self) -> None:
        deals = self.normalizer.normalize_rows(
            [{"מחיר העסקה": "1"}, {"מחיר העסקה": "2"}, {"מספר סידורי": "40", "מחיר העסקה": "3"}],
            request=self.request,
            source_url=SOURCE_URL,
        )
        self.assertEqual([deal.serial_no for deal in deals], [1, 2, 40])

    def test_dedupe_key_is_stable_and_ignores_serial(self) -> None:
        row = {"מחיר העסקה": "1,250,000", "תאריך העסקה": "01/01/2023"}
        first = self._normalize(row, serial_fallback=1)
        second = self._normalize(dict(row), serial_fallback=5)
        other = self._normalize({"מחיר העסקה": "1,250,001", "תאריך העסקה": "01/01/2023"})

        self.assertEqual(first.dedupe_key, second.dedupe_key)
        self.assertNotEqual(first.dedupe_key, other.dedupe_key)
        self.assertEqual(len(first.dedupe_key), 64)

    def test_positional_rows_keep_distinct_keys(self) -> None:
        first = self._normalize({"raw": ["a", "b"]})
        second = self._normalize({"raw": ["c", "d"]})

        self.assertNotEqual(first.dedupe_key, second.dedupe_key)
        self.assertEqual(first.raw, {"raw": ["a", "b"]})

    def test_lookup_skips_blank_aliases(self) -> None:
        self.assertEqual(lookup({"מחיר העסקה": " ", "dealAmount": 5}, "price_nis"), 5)
        self.assertIsNone(lookup({}, "price_nis"))

    def test_build_dedupe_key_is_order_independent(self) -> None:
        self.assertEqual(build_dedupe_key({"a": 1, "b": 2}), build_dedupe_key({"b": 2, "a": 1}))


if __name__ == "__main__":
    unittest.main()
