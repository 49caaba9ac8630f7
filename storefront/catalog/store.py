"""
In-memory snapshot of the catalog for one storefront scope.

The store holds the products and categories from the last fetch and a
lookup from category id to category name. It does no filtering of its
own; the view engine reads it and derives everything else. A snapshot
is always replaced as a whole, so readers never see products from one
fetch next to categories from another.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional, Tuple

from .schemas import Category, Product


logger = logging.getLogger(__name__)


class CatalogStore:
    """Latest products/categories snapshot, exposed read-only."""

    def __init__(self) -> None:
        self._products: Tuple[Product, ...] = ()
        self._categories: Tuple[Category, ...] = ()
        self._category_names: Dict[str, str] = {}
        self._error: Optional[str] = None

    @property
    def products(self) -> Tuple[Product, ...]:
        return self._products

    @property
    def categories(self) -> Tuple[Category, ...]:
        return self._categories

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def is_empty(self) -> bool:
        return not self._products

    def load(self, products: Iterable[Product], categories: Iterable[Category]) -> None:
        """Replace the snapshot with freshly fetched data.

        Both sequences are materialised before anything is assigned so a
        failing iterable leaves the previous snapshot untouched. Products
        are unique by id; the first occurrence wins.
        """
        seen = set()
        unique = []
        for product in products:
            if product.id in seen:
                logger.warning("Duplicate product id %s dropped", product.id)
                continue
            seen.add(product.id)
            unique.append(product)
        new_products = tuple(unique)
        new_categories = tuple(categories)
        names = {c.id: c.name for c in new_categories}

        self._products = new_products
        self._categories = new_categories
        self._category_names = names
        self._error = None
        logger.info(
            "Catalog loaded: %d products, %d categories", len(new_products), len(new_categories)
        )

    def load_failed(self, reason: str) -> None:
        """Drop the snapshot and record why the fetch failed."""
        self._products = ()
        self._categories = ()
        self._category_names = {}
        self._error = reason
        logger.warning("Catalog load failed: %s", reason)

    def category_name(self, category_id: str) -> Optional[str]:
        """Name for a category id, or ``None`` if the category is unknown."""
        return self._category_names.get(category_id)

    def get_product(self, product_id: str) -> Optional[Product]:
        for product in self._products:
            if product.id == str(product_id):
                return product
        return None
