from __future__ import annotations

import unittest

from app.parsers.column_resolver import ColumnMap, ColumnResolver


class TestColumnResolver(unittest.TestCase):
    def setUp(self) -> None:
        self.resolver = ColumnResolver(
            {
                "sku": ["sku", "seller sku"],
                "asin": ["asin"],
                "campaign_id": ["campaign id"],
                "campaign_name": ["campaign name", "campaign"],
            }
        )

    def test_matches_case_insensitive_substrings(self) -> None:
        columns = self.resolver.resolve(["  Seller SKU ", "ASIN", "Campaign ID"])

        self.assertEqual(columns.index_of("sku"), 0)
        self.assertEqual(columns.index_of("asin"), 1)
        self.assertEqual(columns.index_of("campaign_id"), 2)

    def test_first_matching_column_wins(self) -> None:
        columns = self.resolver.resolve(["SKU", "Parent SKU"])

        self.assertEqual(columns.index_of("sku"), 0)

    def test_one_header_may_bind_several_keys(self) -> None:
        # "campaign id" also contains the broader "campaign" variant.
        columns = self.resolver.resolve(["Campaign ID"])

        self.assertEqual(columns.index_of("campaign_id"), 0)
        self.assertEqual(columns.index_of("campaign_name"), 0)

    def test_excluded_headers_are_skipped_for_that_key(self) -> None:
        resolver = ColumnResolver(
            {"campaign_id": ["campaign id"], "campaign_name": ["campaign"]},
            {"campaign_name": ["campaign id"]},
        )

        columns = resolver.resolve(["Campaign ID", "Campaign"])

        self.assertEqual(columns.index_of("campaign_id"), 0)
        self.assertEqual(columns.index_of("campaign_name"), 1)

    def test_unbound_keys_are_reported(self) -> None:
        columns = self.resolver.resolve(["SKU"])

        self.assertFalse(columns.is_bound("asin"))
        self.assertEqual(columns.unbound_keys(self.resolver.keys), ["asin", "campaign_id", "campaign_name"])

    def test_get_returns_cleaned_value_or_empty(self) -> None:
        columns = self.resolver.resolve(["SKU", "ASIN"])

        self.assertEqual(columns.get(['"sku-1"', " B0001 "], "asin"), "B0001")
        self.assertEqual(columns.get(["sku-1"], "asin"), "")
        self.assertEqual(columns.get(["sku-1", "B0001"], "campaign_id"), "")

    def test_bindings_are_read_only(self) -> None:
        columns = self.resolver.resolve(["SKU"])

        with self.assertRaises(TypeError):
            columns.bindings["asin"] = 3  # type: ignore[index]

    def test_empty_column_map(self) -> None:
        self.assertEqual(ColumnMap().get(["a"], "sku"), "")


if __name__ == "__main__":
    unittest.main()
