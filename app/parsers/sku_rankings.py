"""
Parser for catalog ranking exports (Keepa or hand-maintained sheets).
"""

from __future__ import annotations

from app.domain.report_rows import SkuRankingRow
from app.parsers.base import DelimitedReportParser, ParseContext
from app.parsers.coercion import parse_currency, parse_float, parse_int
from app.parsers.column_resolver import ColumnMap

SKU_RANKING_COLUMNS: dict[str, list[str]] = {
    "asin": ["asin"],
    "sku": ["sku", "seller sku"],
    "category_rank": ["category rank", "bsr", "sales rank", "rank"],
    "category_name": ["category", "category name", "root category"],
    "subcategory_rank": ["subcategory rank", "sub rank", "subcat rank"],
    "subcategory_name": ["subcategory", "subcategory name", "sub category"],
    "price": ["price", "current price", "list price"],
    "fba_price": ["fba price", "lowest fba", "fba lowest"],
    "buybox_price": ["buy box price", "buybox price", "bb price"],
    "buybox_seller": ["buy box seller", "buybox seller", "bb seller", "buybox winner"],
    "reviews": ["reviews", "review count", "number of reviews", "ratings count"],
    "rating": ["rating", "avg rating", "average rating", "star rating"],
    "drops_30d": ["drops 30", "30 day drops", "30d drops", "sales drops 30"],
    "drops_90d": ["drops 90", "90 day drops", "90d drops", "sales drops 90"],
    "monthly_sales": [
        "monthly sales",
        "est monthly",
        "estimated sales",
        "sales estimate",
        "est sales",
    ],
    "date": ["date", "snapshot date", "last update", "data date"],
}


def is_amazon_seller(seller: str) -> bool:
    lower = seller.lower()
    return "amazon" in lower or lower == "amzn"


class SkuRankingsParser(DelimitedReportParser[SkuRankingRow]):
    report_type = "sku_rankings"
    target_store = "sku_rankings"
    columns = SKU_RANKING_COLUMNS

    def parse_row(
        self,
        values: list[str],
        row_number: int,
        context: ParseContext,
        columns: ColumnMap,
    ) -> SkuRankingRow | None:
        asin = columns.get(values, "asin")
        if not asin:
            context.add_error(row_number, "Missing ASIN", "asin")
            return None

        snapshot_date = context.resolve_date(
            row_number, columns.get(values, "date"), "snapshot_date", default=self.today_iso()
        )
        if snapshot_date is None:
            return None
        buybox_seller = columns.get(values, "buybox_seller")

        context.record_date(snapshot_date)
        return SkuRankingRow(
            asin=asin,
            sku=columns.get(values, "sku"),
            category_rank=parse_int(columns.get(values, "category_rank")),
            category_name=columns.get(values, "category_name"),
            subcategory_rank=parse_int(columns.get(values, "subcategory_rank")),
            subcategory_name=columns.get(values, "subcategory_name"),
            current_price=parse_currency(columns.get(values, "price")),
            lowest_fba_price=parse_currency(columns.get(values, "fba_price")),
            buybox_price=parse_currency(columns.get(values, "buybox_price")),
            buybox_seller=buybox_seller,
            is_buybox_amazon=is_amazon_seller(buybox_seller),
            review_count=parse_int(columns.get(values, "reviews")),
            review_rating=parse_float(columns.get(values, "rating")),
            keepa_drops_30d=parse_int(columns.get(values, "drops_30d")),
            keepa_drops_90d=parse_int(columns.get(values, "drops_90d")),
            keepa_monthly_sales_estimate=parse_int(columns.get(values, "monthly_sales")),
            snapshot_date=snapshot_date,
        )
