"""Product catalog reads used by category aggregation."""

from __future__ import annotations

from typing import Sequence

from ..models.domain import Category, MerchantProduct, Product
from .base import SupabaseRepository, as_bool, batched


def category_from_row(row: dict) -> Category:
    display_order = row.get("display_order")
    return Category(
        category_id=str(row.get("id")),
        name=(row.get("name") or "").strip(),
        slug=row.get("slug"),
        is_active=as_bool(row.get("is_active"), default=True),
        display_order=int(display_order) if display_order is not None else None,
        raw=row,
    )


class CatalogRepository(SupabaseRepository):
    def active_merchant_products(self, merchant_ids: Sequence[str]) -> list[MerchantProduct]:
        """Merchant/product links that are both active and available."""

        links: list[MerchantProduct] = []
        for batch in batched(list(merchant_ids)):
            query = (
                self.client.table("merchant_products")
                .select("merchant_id, product_id, is_active, is_available")
                .in_("merchant_id", batch)
                .eq("is_active", True)
                .eq("is_available", True)
            )
            rows = self._execute(query, "fetch merchant products").data or []
            for row in rows:
                if row.get("merchant_id") is None or row.get("product_id") is None:
                    continue
                links.append(
                    MerchantProduct(
                        merchant_id=str(row["merchant_id"]),
                        product_id=str(row["product_id"]),
                        is_active=as_bool(row.get("is_active"), default=True),
                        is_available=as_bool(row.get("is_available"), default=True),
                    )
                )
        return links

    def active_products_with_categories(self, product_ids: Sequence[str]) -> list[Product]:
        """Active products with their categories populated through the junction table."""

        products: list[Product] = []
        for batch in batched(list(product_ids)):
            query = (
                self.client.table("products")
                .select("id, name, is_active, categories(id, name, slug, is_active, display_order)")
                .in_("id", batch)
                .eq("is_active", True)
            )
            rows = self._execute(query, "fetch products with categories").data or []
            for row in rows:
                products.append(
                    Product(
                        product_id=str(row["id"]),
                        name=(row.get("name") or "").strip(),
                        is_active=as_bool(row.get("is_active"), default=True),
                        categories=[category_from_row(category) for category in (row.get("categories") or [])],
                    )
                )
        return products
