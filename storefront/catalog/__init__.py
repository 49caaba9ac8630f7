"""
Catalog package for the storefront.

The view engine turns the products and categories fetched from a
store's public commerce API into what the shopper sees: home page
sections grouped by category, and an "All Products" list that can be
filtered by category, searched, bounded by price, sorted and paged.
``CatalogStore`` holds the fetched snapshot, ``CatalogViewEngine``
owns the shopper's selection and derives the view, and the router
exposes that view over HTTP.
"""

from .engine import CatalogViewEngine  # noqa: F401
from .errors import FetchFailure  # noqa: F401
from .router import router as catalog_router  # noqa: F401
from .store import CatalogStore  # noqa: F401
