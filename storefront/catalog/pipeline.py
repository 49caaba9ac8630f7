"""
Derivation pipeline for the catalog view.

Every function here is pure: it takes a sequence of products (plus
whatever lookup it needs) and returns a new list without touching its
inputs. The "All Products" list is produced by running the stages in a
fixed order, category, search, price, then sort, so that sorting only
ever sees the already narrowed set.
"""

from __future__ import annotations

import math
import re
import unicodedata
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .schemas import (
    ALL_CATEGORIES,
    DEFAULT_PRICE_RANGE,
    Category,
    HomeSection,
    Product,
    ViewState,
)


CategoryLookup = Callable[[str], Optional[str]]

# Leading numeric prefix, the same portion JavaScript's parseFloat reads.
_NUMBER_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def _norm(s: Optional[str]) -> str:
    """Normalize a string for case-insensitive comparison."""
    return (s or "").strip().lower()


def parse_price(value: Optional[str]) -> float:
    """Parse a sale price string into a non-negative float.

    ``"12.50"`` gives 12.5 and ``"12.5 BDT"`` gives 12.5 (longest
    numeric prefix). Empty, unparsable, non-finite and negative values
    all give 0.0. Never raises.
    """
    if value is None:
        return 0.0
    m = _NUMBER_PREFIX.match(str(value))
    if not m:
        return 0.0
    try:
        price = float(m.group(1))
    except (OverflowError, ValueError):
        return 0.0
    if not math.isfinite(price) or price < 0:
        return 0.0
    return price


def filter_by_category(
    products: Iterable[Product], category: str, category_name: CategoryLookup
) -> List[Product]:
    """Keep products whose resolved category name matches ``category``.

    The ``"All"`` sentinel keeps everything. A product whose category
    id cannot be resolved never matches a named filter.
    """
    if category == ALL_CATEGORIES:
        return list(products)
    wanted = category.lower()
    result = []
    for product in products:
        name = category_name(product.category)
        if name is not None and name.lower() == wanted:
            result.append(product)
    return result


def filter_by_search(
    products: Iterable[Product], search: str, category_name: CategoryLookup
) -> List[Product]:
    """Plain case-insensitive substring match over name, category name,
    description and brand. An empty (or blank) query keeps everything."""
    query = _norm(search)
    if not query:
        return list(products)

    def _matches(product: Product) -> bool:
        fields = (
            product.name,
            category_name(product.category),
            product.description,
            product.brand,
        )
        return any(field and query in field.lower() for field in fields)

    return [p for p in products if _matches(p)]


def filter_by_price(products: Iterable[Product], price_min: float, price_max: float) -> List[Product]:
    return [p for p in products if price_min <= parse_price(p.sale_price) <= price_max]


def _name_key(product: Product) -> Tuple[str, str]:
    """Collation key close to a browser's default localeCompare.

    Accents are ignored at the first level so "Éclair" sorts among the
    E's; the case-folded name then orders accented and plain forms.
    """
    folded = (product.name or "").casefold()
    decomposed = unicodedata.normalize("NFKD", folded)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base, folded)


def sort_products(products: Iterable[Product], sort: str) -> List[Product]:
    """Stable sort by the given key. Unknown keys keep the input order."""
    items = list(products)
    if sort == "price-asc":
        items.sort(key=lambda p: parse_price(p.sale_price))
    elif sort == "price-desc":
        items.sort(key=lambda p: parse_price(p.sale_price), reverse=True)
    elif sort == "name-asc":
        items.sort(key=_name_key)
    elif sort == "name-desc":
        items.sort(key=_name_key, reverse=True)
    return items


def apply_view(
    products: Sequence[Product], state: ViewState, category_name: CategoryLookup
) -> List[Product]:
    """Run the full category -> search -> price -> sort pipeline."""
    items = filter_by_category(products, state.category, category_name)
    items = filter_by_search(items, state.search, category_name)
    items = filter_by_price(items, state.price_min, state.price_max)
    return sort_products(items, state.sort)


def group_by_category(
    products: Sequence[Product], categories: Sequence[Category], limit: int = 8
) -> List[HomeSection]:
    """Build the home page sections.

    Visible categories are walked in their given order and each gets the
    first ``limit`` products that belong to it, in store order. Hidden
    categories and categories without products produce no section.
    """
    sections: List[HomeSection] = []
    for category in categories:
        if category.show is False:
            continue
        members = [p for p in products if p.category == category.id][:limit]
        if members:
            sections.append(HomeSection(category=category, products=members))
    return sections


def derive_price_bounds(products: Sequence[Product]) -> Tuple[float, float]:
    """Slider extremes over the whole unfiltered product set.

    Returns ``(floor(min), ceil(max))`` of the parsed sale prices, or the
    default range when there are no products.
    """
    if not products:
        return DEFAULT_PRICE_RANGE
    prices = [parse_price(p.sale_price) for p in products]
    return (math.floor(min(prices)), math.ceil(max(prices)))
