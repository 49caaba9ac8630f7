"""
Catalog view engine.

``CatalogViewEngine`` owns the shopper's ``ViewState`` and turns the
``CatalogStore`` snapshot into a ``CatalogView``: the home page
sections, the filtered/sorted "All Products" page and its pager.

All derivations are synchronous and recomputed wholesale from
(store snapshot, view state). The one asynchronous dependency is the
catalog fetch. Each fetch is tagged with a ``FetchRequest`` holding a
sequence number and the ``FetchKey`` (scope, search text) that caused
it; only the most recently issued request may update the store, so a
slow response for an old search is dropped when it finally arrives.
"""

from __future__ import annotations

import logging
from typing import Callable, List, NamedTuple, Optional, Sequence, Tuple, Union

from typing_extensions import Protocol

from .errors import FetchFailure
from .pagination import clamp_page, page_count, page_window, paginate
from .pipeline import apply_view, derive_price_bounds, group_by_category, parse_price
from .schemas import (
    ALL_CATEGORIES,
    CartItem,
    Category,
    CatalogView,
    PageInfo,
    Product,
    ViewState,
    ViewStatus,
)
from .store import CatalogStore


logger = logging.getLogger(__name__)

# Changing any of these changes the filtered set, so the page goes back to 1.
FILTER_FIELDS = ("category", "search", "sort", "price_min", "price_max")

# Categories shown in the strip of round icons above the home sections.
TOP_CATEGORY_LIMIT = 5

_TRANSITIONS = {
    ViewStatus.LOADING: {ViewStatus.LOADING, ViewStatus.READY, ViewStatus.ERRORED},
    ViewStatus.READY: {ViewStatus.READY, ViewStatus.ERRORED},
    ViewStatus.ERRORED: {ViewStatus.LOADING},
}


class FetchKey(NamedTuple):
    scope: Optional[str]
    search: str


class FetchRequest(NamedTuple):
    seq: int
    key: FetchKey


class ScrollToAllProducts(NamedTuple):
    category: str


class ViewProductDetail(NamedTuple):
    product_id: str


Intent = Union[ScrollToAllProducts, ViewProductDetail]


class CatalogFetcher(Protocol):
    def fetch_catalog(
        self, scope: Optional[str], search: str = ""
    ) -> Tuple[List[Product], List[Category]]:
        ...


class CartHooks(Protocol):
    def add_to_cart(self, item: CartItem, quantity: int) -> None:
        ...

    def buy_now(self, item: CartItem, quantity: int) -> None:
        ...


def to_cart_item(product: Product) -> CartItem:
    """Normalize a product for the cart: numeric price, images list."""
    return CartItem(
        id=product.id,
        name=product.name,
        brand=product.brand,
        category=product.category,
        sku=product.sku,
        sale_price=parse_price(product.sale_price),
        regular_price=product.regular_price,
        stock_status=product.stock_status,
        images=list(product.images or []),
    )


class CatalogViewEngine:
    """Owns the view state and derives the catalog view from the store.

    ``fetcher`` is optional. Without one, callers issue requests with
    ``start()``/``retry()`` and report results through ``complete()``
    and ``fail()`` themselves; with one, the engine runs the fetch as
    soon as it issues the request.
    """

    def __init__(
        self,
        store: Optional[CatalogStore] = None,
        fetcher: Optional[CatalogFetcher] = None,
        scope: Optional[str] = None,
        search: str = "",
        page_size: int = 8,
        home_section_limit: int = 8,
        cart: Optional[CartHooks] = None,
        on_intent: Optional[Callable[[Intent], None]] = None,
    ) -> None:
        self.store = store if store is not None else CatalogStore()
        self.fetcher = fetcher
        self.cart = cart
        self.on_intent = on_intent
        self.page_size = max(1, int(page_size))
        self.home_section_limit = max(0, int(home_section_limit))
        self._scope = scope
        self._state = ViewState(search=search or "")
        self._status = ViewStatus.LOADING
        self._seq = 0
        self._pending: Optional[FetchRequest] = None
        self._last_key: Optional[FetchKey] = None

    # ------------------------------------------------------------------
    # State accessors

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def status(self) -> ViewStatus:
        return self._status

    @property
    def scope(self) -> Optional[str]:
        return self._scope

    @property
    def fetch_key(self) -> FetchKey:
        return FetchKey(self._scope, self._state.search.strip())

    @property
    def pending(self) -> Optional[FetchRequest]:
        return self._pending

    @property
    def price_limits(self) -> Tuple[float, float]:
        return derive_price_bounds(self.store.products)

    def _set_status(self, status: ViewStatus) -> None:
        if status not in _TRANSITIONS[self._status]:
            raise RuntimeError(f"Illegal view transition {self._status.value} -> {status.value}")
        if status != self._status:
            logger.debug("View status %s -> %s", self._status.value, status.value)
        self._status = status

    # ------------------------------------------------------------------
    # Fetch orchestration

    def start(self) -> Optional[FetchRequest]:
        """Issue the initial fetch for the current scope and search text.

        An errored view is only reloaded through ``retry()``.
        """
        if self._status == ViewStatus.ERRORED:
            logger.info("Start ignored, view is errored; use retry()")
            return None
        return self._issue_fetch()

    def retry(self) -> Optional[FetchRequest]:
        """Reload after a failure. Does nothing unless the view is errored."""
        if self._status != ViewStatus.ERRORED:
            logger.info("Retry ignored, view is %s", self._status.value)
            return None
        self._set_status(ViewStatus.LOADING)
        return self._issue_fetch()

    def set_scope(self, scope: Optional[str]) -> Optional[FetchRequest]:
        """Point the engine at another store endpoint, refetching if it changed."""
        self._scope = scope
        return self._maybe_refetch()

    def _maybe_refetch(self) -> Optional[FetchRequest]:
        # An errored view only reloads on an explicit retry.
        if self._status == ViewStatus.ERRORED:
            return None
        # Nothing is fetched before start().
        if self._last_key is None or self.fetch_key == self._last_key:
            return None
        return self._issue_fetch()

    def _issue_fetch(self) -> FetchRequest:
        self._seq += 1
        request = FetchRequest(self._seq, self.fetch_key)
        self._pending = request
        self._last_key = request.key
        logger.info("Issued catalog fetch #%d for %s", request.seq, request.key)
        if self.fetcher is not None:
            self._run_fetch(request)
        return request

    def _run_fetch(self, request: FetchRequest) -> None:
        try:
            products, categories = self.fetcher.fetch_catalog(request.key.scope, request.key.search)
        except FetchFailure as exc:
            self.fail(request, str(exc) or "Failed to load products")
        else:
            self.complete(request, products, categories)

    def is_stale(self, request: FetchRequest) -> bool:
        return request != self._pending or request.key != self.fetch_key

    def complete(
        self,
        request: FetchRequest,
        products: Sequence[Product],
        categories: Sequence[Category],
    ) -> bool:
        """Apply a successful fetch. Returns ``False`` for a stale completion."""
        if self.is_stale(request):
            logger.debug("Discarding stale catalog fetch #%d", request.seq)
            return False
        self._set_status(ViewStatus.READY)
        self._pending = None
        self.store.load(products, categories)
        lo, hi = self.price_limits
        self._state = self._state.model_copy(
            update={"price_min": float(lo), "price_max": float(hi), "page": 1}
        )
        return True

    def fail(self, request: FetchRequest, reason: str) -> bool:
        """Record a failed fetch. Returns ``False`` for a stale completion."""
        if self.is_stale(request):
            logger.debug("Discarding stale catalog failure #%d: %s", request.seq, reason)
            return False
        self._set_status(ViewStatus.ERRORED)
        self._pending = None
        self.store.load_failed(reason)
        self._state = self._state.model_copy(update={"page": 1})
        return True

    # ------------------------------------------------------------------
    # View state mutation

    def update(self, **changes) -> ViewState:
        """Apply a partial change to the view state and re-derive.

        Any change to a filtering field resets the page to 1. A page
        outside ``1..page_count`` is ignored. A change of search text
        issues a new fetch.
        """
        unknown = set(changes) - set(ViewState.model_fields)
        if unknown:
            raise TypeError(f"Unknown view state fields: {', '.join(sorted(unknown))}")

        current = self._state
        data = current.model_dump()
        data.update(changes)
        new = ViewState(**data)

        if any(getattr(new, name) != getattr(current, name) for name in FILTER_FIELDS):
            new = new.model_copy(update={"page": 1})
        elif new.page != current.page:
            total_pages = page_count(len(self._filtered(new)), self.page_size)
            if not 1 <= new.page <= total_pages:
                new = new.model_copy(update={"page": current.page})

        self._state = new
        self._maybe_refetch()
        return self._state

    def select_category(self, category: str) -> ViewState:
        return self.update(category=category)

    def set_search(self, search: str) -> ViewState:
        return self.update(search=search)

    def set_sort(self, sort: str) -> ViewState:
        return self.update(sort=sort)

    def set_price_range(self, price_min: float, price_max: float) -> ViewState:
        return self.update(price_min=price_min, price_max=price_max)

    def open_category(self, category: str) -> ViewState:
        """A category banner or title was clicked on the home page."""
        state = self.update(category=category)
        self._emit(ScrollToAllProducts(category))
        return state

    def reset_filters(self) -> ViewState:
        lo, hi = self.price_limits
        return self.update(
            category=ALL_CATEGORIES,
            search="",
            sort="price-asc",
            price_min=lo,
            price_max=hi,
            page=1,
        )

    def go_to_page(self, page: int) -> bool:
        """Move to ``page`` if it exists. Returns whether the page changed."""
        before = self._state.page
        return self.update(page=page).page != before

    def next_page(self) -> bool:
        return self.go_to_page(self._state.page + 1)

    def previous_page(self) -> bool:
        return self.go_to_page(self._state.page - 1)

    # ------------------------------------------------------------------
    # Derivations

    def _filtered(self, state: ViewState) -> List[Product]:
        if self._status == ViewStatus.ERRORED:
            return []
        return apply_view(self.store.products, state, self.store.category_name)

    def filtered_products(self) -> List[Product]:
        """The full "All Products" list before pagination."""
        return self._filtered(self._state)

    def view(self) -> CatalogView:
        state = self._state
        items = self._filtered(state)
        total = len(items)
        total_pages = page_count(total, self.page_size)
        page = clamp_page(state.page, total_pages)

        searching = bool(state.search.strip())
        categories = self.store.categories
        visible = [c for c in categories if c.show is not False]
        sections = []
        if not searching and self._status != ViewStatus.ERRORED:
            sections = group_by_category(self.store.products, categories, self.home_section_limit)

        return CatalogView(
            status=self._status,
            error=self.store.error if self._status == ViewStatus.ERRORED else None,
            state=state,
            price_limits=self.price_limits,
            categories=[ALL_CATEGORIES] + [c.name for c in categories],
            top_categories=list(categories[:TOP_CATEGORY_LIMIT]),
            show_only_all_products=searching,
            no_visible_categories=not searching and not visible,
            home_sections=sections,
            items=paginate(items, page, self.page_size),
            pagination=PageInfo(
                page=page,
                page_size=self.page_size,
                total=total,
                total_pages=total_pages,
                window=page_window(page, total_pages),
                has_previous=page > 1,
                has_next=page < total_pages,
            ),
            is_empty=self._status == ViewStatus.READY and total == 0,
        )

    # ------------------------------------------------------------------
    # Display-layer actions

    def _emit(self, intent: Intent) -> None:
        if self.on_intent is not None:
            self.on_intent(intent)

    def view_product(self, product_id: str) -> ViewProductDetail:
        intent = ViewProductDetail(str(product_id))
        self._emit(intent)
        return intent

    def add_to_cart(self, product_id: str, quantity: int = 1) -> bool:
        return self._purchase("add_to_cart", product_id, quantity)

    def buy_now(self, product_id: str, quantity: int = 1) -> bool:
        return self._purchase("buy_now", product_id, quantity)

    def _purchase(self, action: str, product_id: str, quantity: int) -> bool:
        product = self.store.get_product(product_id)
        if product is None:
            logger.warning("Refused %s: unknown product %s", action, product_id)
            return False
        if product.out_of_stock:
            logger.warning("Refused %s: product %s is out of stock", action, product_id)
            return False
        if quantity < 1:
            logger.warning("Refused %s: invalid quantity %s", action, quantity)
            return False
        if self.cart is None:
            logger.warning("Refused %s: no cart attached", action)
            return False
        getattr(self.cart, action)(to_cart_item(product), quantity)
        return True
