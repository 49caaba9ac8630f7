"""
Pydantic schema definitions for the catalog module.

``Product`` and ``Category`` mirror the records returned by the
store-scoped public commerce API. Field aliases keep the API's
``_id``/camelCase names on the wire while Python code uses snake_case.
``ViewState`` is the single aggregate selection (category, search,
sort, price bounds, page) owned by the view engine, and
``CatalogView`` bundles everything a display layer needs to render the
home sections and the "All Products" grid.
"""

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing_extensions import Literal


ALL_CATEGORIES = "All"
DEFAULT_PRICE_RANGE: Tuple[float, float] = (0, 10000)

SortKey = Literal["price-asc", "price-desc", "name-asc", "name-desc"]


class StockStatus(str, Enum):
    IN_STOCK = "IN_STOCK"
    OUT_OF_STOCK = "OUT_OF_STOCK"


class ViewStatus(str, Enum):
    LOADING = "loading"
    READY = "ready"
    ERRORED = "errored"


def _to_str(value):
    # The API sends prices and counts as strings but numbers also occur.
    if value is None:
        return None
    if isinstance(value, bool):
        return str(int(value))
    return str(value)


class Product(BaseModel):
    """A single product as returned by the public products endpoint.

    ``sale_price`` is the authoritative price. It is kept as the raw
    string so the display layer can show exactly what the API sent;
    numeric comparisons go through ``pipeline.parse_price`` which
    degrades malformed values to zero. ``stock_status`` is ``None``
    when the API omits it or sends a value we do not recognise.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id")
    name: str = ""
    brand: Optional[str] = None
    category: str = ""
    sku: Optional[str] = None
    cost_price: Optional[str] = Field(default=None, alias="costPrice")
    regular_price: Optional[str] = Field(default=None, alias="regularPrice")
    sale_price: str = Field(default="", alias="salePrice")
    stock_status: Optional[StockStatus] = Field(default=None, alias="stockStatus")
    stock_number: Optional[str] = Field(default=None, alias="stockNumber")
    description: Optional[str] = None
    images: List[str] = Field(default_factory=list)

    @field_validator("name", "category", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value

    @field_validator("cost_price", "regular_price", "stock_number", mode="before")
    @classmethod
    def _optional_str(cls, value):
        return _to_str(value)

    @field_validator("sale_price", mode="before")
    @classmethod
    def _sale_price(cls, value):
        return _to_str(value) or ""

    @field_validator("stock_status", mode="before")
    @classmethod
    def _stock_status(cls, value):
        # The API spells it "OUT OF STOCK"; accept any spacing/case.
        if value is None or isinstance(value, StockStatus):
            return value
        key = "_".join(str(value).replace("-", " ").upper().split())
        try:
            return StockStatus(key)
        except ValueError:
            return None

    @field_validator("images", mode="before")
    @classmethod
    def _images(cls, value):
        return [] if value is None else value

    @property
    def out_of_stock(self) -> bool:
        return self.stock_status == StockStatus.OUT_OF_STOCK


class Category(BaseModel):
    """A product category. Hidden categories (``show`` false) are kept
    out of the home page grouping only."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id")
    name: str = ""
    img: Optional[str] = None
    banner: Optional[str] = None
    show: bool = True

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value):
        return "" if value is None else value

    @field_validator("show", mode="before")
    @classmethod
    def _show(cls, value):
        return True if value is None else value


class CartItem(BaseModel):
    """Normalized product record handed to the cart collaborator."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    name: str
    brand: Optional[str] = None
    category: str = ""
    sku: Optional[str] = None
    sale_price: float = Field(alias="salePrice")
    regular_price: Optional[str] = Field(default=None, alias="regularPrice")
    stock_status: Optional[StockStatus] = Field(default=None, alias="stockStatus")
    images: List[str] = Field(default_factory=list)


class ViewState(BaseModel):
    """The shopper's current selection.

    Instances are immutable; the engine replaces the whole value on
    every change so the page reset can be enforced in one place.
    """

    model_config = ConfigDict(frozen=True)

    category: str = ALL_CATEGORIES
    search: str = ""
    sort: SortKey = "price-asc"
    price_min: float = DEFAULT_PRICE_RANGE[0]
    price_max: float = DEFAULT_PRICE_RANGE[1]
    page: int = 1

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data):
        if isinstance(data, dict):
            data = dict(data)
            if data.get("category") in (None, ""):
                data["category"] = ALL_CATEGORIES
            if data.get("search") is None:
                data["search"] = ""
            lo, hi = data.get("price_min"), data.get("price_max")
            if lo is not None and hi is not None and lo > hi:
                data["price_min"], data["price_max"] = hi, lo
        return data

    @property
    def price_bounds(self) -> Tuple[float, float]:
        return (self.price_min, self.price_max)


class ViewStateUpdate(BaseModel):
    """Partial view state change sent by the display layer."""

    category: Optional[str] = None
    search: Optional[str] = None
    sort: Optional[SortKey] = None
    price_min: Optional[float] = Field(default=None, ge=0)
    price_max: Optional[float] = Field(default=None, ge=0)
    page: Optional[int] = None


class HomeSection(BaseModel):
    """Up to N products of one visible category, in store order."""

    category: Category
    products: List[Product]


class PageInfo(BaseModel):
    page: int
    page_size: int
    total: int
    total_pages: int
    window: List[int]
    has_previous: bool
    has_next: bool


class CatalogView(BaseModel):
    """Everything the display layer renders for the catalog page."""

    status: ViewStatus
    error: Optional[str] = None
    state: ViewState
    price_limits: Tuple[float, float]
    categories: List[str] = Field(default_factory=list)
    top_categories: List[Category] = Field(default_factory=list)
    show_only_all_products: bool = False
    no_visible_categories: bool = False
    home_sections: List[HomeSection] = Field(default_factory=list)
    items: List[Product] = Field(default_factory=list)
    pagination: PageInfo
    is_empty: bool = False
