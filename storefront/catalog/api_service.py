"""
Client for the store-scoped public commerce API.

Two endpoints are used, both relative to the store's public base URL
(``{api}/public/s/{store_id}/``):

* ``products`` (optionally ``products?q=<search>``) returns a JSON
  array of products.
* ``categories`` returns a JSON array of categories.

Requests go through the standard library. Unlike a best-effort lookup,
a catalog fetch must never hand back partial data: every transport,
status, decoding or validation problem is raised as ``FetchFailure``
and the view engine records it.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, List, Optional, Tuple

from pydantic import TypeAdapter, ValidationError

from ..config import Settings, settings as default_settings
from .errors import FetchFailure
from .schemas import Category, Product


logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

_products_adapter = TypeAdapter(List[Product])
_categories_adapter = TypeAdapter(List[Category])


def _http_get_json(url: str, timeout: int = 10) -> Any:
    """Perform an HTTP GET and return the decoded JSON body.

    Raises ``FetchFailure`` for network errors, non-200 responses and
    bodies that are not valid JSON.
    """
    request = urllib.request.Request(
        url,
        headers={
            "User-Agent": "storefront-catalog/1.0",
            "Accept": "application/json",
        },
    )
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            if response.status != 200:
                logger.warning("Catalog request to %s returned status %s", url, response.status)
                raise FetchFailure(f"Unexpected status {response.status}", url=url)
            data = response.read().decode("utf-8")
    except FetchFailure:
        raise
    except (urllib.error.URLError, OSError, ValueError) as exc:
        logger.error("Error fetching %s: %s", url, exc)
        raise FetchFailure(str(exc), url=url) from exc
    try:
        return json.loads(data)
    except json.JSONDecodeError as exc:
        logger.error("Invalid JSON from %s: %s", url, exc)
        raise FetchFailure("Invalid JSON in response", url=url) from exc


def _parse_list(adapter: TypeAdapter, payload: Any, url: str) -> list:
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise FetchFailure("Expected a JSON array", url=url)
    try:
        return adapter.validate_python(payload)
    except ValidationError as exc:
        logger.error("Malformed catalog payload from %s: %s", url, exc)
        raise FetchFailure("Malformed catalog payload", url=url) from exc


def products_url(public_base_url: str, search: Optional[str] = None) -> str:
    url = urllib.parse.urljoin(public_base_url, "products")
    if search:
        url = f"{url}?{urllib.parse.urlencode({'q': search})}"
    return url


def categories_url(public_base_url: str) -> str:
    return urllib.parse.urljoin(public_base_url, "categories")


class CatalogApiClient:
    """Fetches products and categories for a store scope."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or default_settings

    @property
    def scope(self) -> Optional[str]:
        return self.settings.public_base_url

    def fetch_products(self, scope: str, search: Optional[str] = None) -> List[Product]:
        url = products_url(scope, search)
        payload = _http_get_json(url, timeout=self.settings.http_timeout)
        return _parse_list(_products_adapter, payload, url)

    def fetch_categories(self, scope: str) -> List[Category]:
        url = categories_url(scope)
        payload = _http_get_json(url, timeout=self.settings.http_timeout)
        return _parse_list(_categories_adapter, payload, url)

    def fetch_catalog(
        self, scope: Optional[str], search: str = ""
    ) -> Tuple[List[Product], List[Category]]:
        """Fetch both collections, or raise ``FetchFailure``."""
        if not scope:
            raise FetchFailure("No store configured for the public catalog")
        logger.info("Fetching catalog from %s (search=%r)", scope, search)
        products = self.fetch_products(scope, search or None)
        categories = self.fetch_categories(scope)
        return products, categories
