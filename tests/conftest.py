import pytest

from storefront.catalog.engine import CatalogViewEngine
from storefront.catalog.errors import FetchFailure
from storefront.catalog.schemas import Category, Product


SCOPE = "http://api.test/public/s/store1/"


def make_product(pid, name, price, category, **extra):
    data = {"_id": pid, "name": name, "salePrice": price, "category": category}
    data.update(extra)
    return Product.model_validate(data)


def make_category(cid, name, **extra):
    data = {"_id": cid, "name": name}
    data.update(extra)
    return Category.model_validate(data)


def ids(products):
    return [p.id for p in products]


class FakeFetcher:
    """Stands in for the public API client; records every call."""

    def __init__(self, products=None, categories=None):
        self.products = list(products or [])
        self.categories = list(categories or [])
        self.error = None
        self.calls = []

    def fetch_catalog(self, scope, search=""):
        self.calls.append((scope, search))
        if self.error:
            raise FetchFailure(self.error)
        return list(self.products), list(self.categories)


class RecordingCart:
    def __init__(self):
        self.added = []
        self.bought = []

    def add_to_cart(self, item, quantity):
        self.added.append((item, quantity))

    def buy_now(self, item, quantity):
        self.bought.append((item, quantity))


@pytest.fixture
def categories():
    return [
        make_category("c1", "Shoes", banner="https://cdn.test/shoes.jpg"),
        make_category("c2", "Hats"),
        make_category("c3", "Hidden", show=False),
    ]


@pytest.fixture
def products():
    return [
        make_product("p1", "Runner", "120", "c1", brand="Fleet", description="Light running shoe"),
        make_product("p2", "boot", "80.50", "c1"),
        make_product("p3", "Cap", "15", "c2", stockStatus="OUT OF STOCK"),
        make_product("p4", "Beanie", "not-a-price", "c2", brand="Knit Co"),
        make_product("p5", "Scarf", "30", "c3"),
        make_product("p6", "Mystery", "50", "gone"),
    ]


@pytest.fixture
def fetcher(products, categories):
    return FakeFetcher(products, categories)


@pytest.fixture
def cart():
    return RecordingCart()


@pytest.fixture
def intents():
    return []


@pytest.fixture
def engine(fetcher, cart, intents):
    eng = CatalogViewEngine(fetcher=fetcher, scope=SCOPE, cart=cart, on_intent=intents.append)
    eng.start()
    return eng


@pytest.fixture
def many_engine():
    """17 products in one category priced 1..17."""
    items = [make_product(f"m{i:02d}", f"Item {i:02d}", str(i), "c1") for i in range(1, 18)]
    eng = CatalogViewEngine(fetcher=FakeFetcher(items, [make_category("c1", "Shoes")]), scope=SCOPE)
    eng.start()
    return eng
