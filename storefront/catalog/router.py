"""
Route definitions for the catalog view.

Endpoints under /api/catalog:
- GET   /view                          : current derived catalog view
- PATCH /view/state                    : change category/search/sort/price/page
- POST  /view/page/{page}              : go to a page (ignored when out of range)
- POST  /view/reset                    : reset all filters
- POST  /view/retry                    : reload after a failed fetch
- POST  /view/categories/{name}/open   : category banner clicked on the home page
- GET   /products/{product_id}         : one product from the loaded catalog
"""

from __future__ import annotations

import threading
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from ..config import settings
from .api_service import CatalogApiClient
from .engine import CatalogViewEngine
from .schemas import CatalogView, Product, ViewStateUpdate, ViewStatus

router = APIRouter(prefix="/api/catalog", tags=["catalog"])

# ---------------------------------------------------------------------------
# Engine instance
#
# The view engine is a single state owner. FastAPI runs these sync
# endpoints in a thread pool, so every read or mutation of the engine
# happens under ``_engine_lock``. The engine is built on first use so
# importing the app does not hit the network.

_engine: Optional[CatalogViewEngine] = None
_engine_lock = threading.Lock()


def build_engine(search: str = "") -> CatalogViewEngine:
    """Create an engine wired to the public API and issue the first fetch."""
    client = CatalogApiClient(settings)
    engine = CatalogViewEngine(
        fetcher=client,
        scope=client.scope,
        search=search,
        page_size=settings.page_size,
        home_section_limit=settings.home_section_limit,
    )
    engine.start()
    return engine


def get_engine() -> CatalogViewEngine:
    global _engine
    with _engine_lock:
        if _engine is None:
            _engine = build_engine()
        return _engine


@router.get("/view", response_model=CatalogView)
def get_view(engine: CatalogViewEngine = Depends(get_engine)) -> CatalogView:
    with _engine_lock:
        return engine.view()


@router.patch("/view/state", response_model=CatalogView)
def update_state(
    changes: ViewStateUpdate = Body(...),
    engine: CatalogViewEngine = Depends(get_engine),
) -> CatalogView:
    """Apply a partial view state change.

    Only the fields present in the body are changed. Changing any
    filter resets the page to 1; changing the search text refetches the
    catalog.
    """
    with _engine_lock:
        engine.update(**changes.model_dump(exclude_none=True))
        return engine.view()


@router.post("/view/page/{page}", response_model=CatalogView)
def go_to_page(page: int, engine: CatalogViewEngine = Depends(get_engine)) -> CatalogView:
    with _engine_lock:
        engine.go_to_page(page)
        return engine.view()


@router.post("/view/reset", response_model=CatalogView)
def reset_filters(engine: CatalogViewEngine = Depends(get_engine)) -> CatalogView:
    with _engine_lock:
        engine.reset_filters()
        return engine.view()


@router.post("/view/retry", response_model=CatalogView)
def retry(engine: CatalogViewEngine = Depends(get_engine)) -> CatalogView:
    with _engine_lock:
        if engine.status != ViewStatus.ERRORED:
            raise HTTPException(status_code=409, detail="Catalog is not in an error state")
        engine.retry()
        return engine.view()


@router.post("/view/categories/{name}/open", response_model=CatalogView)
def open_category(name: str, engine: CatalogViewEngine = Depends(get_engine)) -> CatalogView:
    with _engine_lock:
        engine.open_category(name)
        return engine.view()


@router.get("/products/{product_id}", response_model=Product)
def get_product(product_id: str, engine: CatalogViewEngine = Depends(get_engine)) -> Product:
    with _engine_lock:
        product = engine.store.get_product(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
