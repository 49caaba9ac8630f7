import pytest
from fastapi.testclient import TestClient

from storefront.catalog.engine import CatalogViewEngine
from storefront.catalog.router import get_engine
from storefront.main import app

from conftest import SCOPE


@pytest.fixture
def client(engine):
    app.dependency_overrides[get_engine] = lambda: engine
    yield TestClient(app)
    app.dependency_overrides.clear()


def item_ids(body):
    return [item["_id"] for item in body["items"]]


class TestCatalogRoutes:

    def test_health(self, client):
        assert client.get("/").json()["status"] == "ok"

    def test_view(self, client):
        response = client.get("/api/catalog/view")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ready"
        assert item_ids(body) == ["p4", "p3", "p5", "p6", "p2", "p1"]
        assert body["items"][0]["salePrice"] == "not-a-price"
        assert [s["category"]["name"] for s in body["home_sections"]] == ["Shoes", "Hats"]
        assert body["categories"] == ["All", "Shoes", "Hats", "Hidden"]
        assert body["pagination"]["total_pages"] == 1

    def test_patch_state(self, client):
        response = client.patch("/api/catalog/view/state", json={"category": "Shoes", "sort": "price-desc"})
        assert response.status_code == 200
        body = response.json()
        assert body["state"]["category"] == "Shoes"
        assert item_ids(body) == ["p1", "p2"]

    def test_patch_rejects_unknown_sort(self, client):
        response = client.patch("/api/catalog/view/state", json={"sort": "popularity"})
        assert response.status_code == 422

    def test_search_hides_home_sections(self, client):
        body = client.patch("/api/catalog/view/state", json={"search": "knit"}).json()
        assert body["show_only_all_products"] is True
        assert body["home_sections"] == []
        assert item_ids(body) == ["p4"]

    def test_page_out_of_range_is_ignored(self, client):
        body = client.post("/api/catalog/view/page/7").json()
        assert body["state"]["page"] == 1

    def test_reset(self, client):
        client.patch("/api/catalog/view/state", json={"category": "Hats", "price_min": 10})
        body = client.post("/api/catalog/view/reset").json()
        assert body["state"]["category"] == "All"
        assert body["state"]["price_min"] == 0
        assert len(body["items"]) == 6

    def test_open_category(self, client):
        body = client.post("/api/catalog/view/categories/Hats/open").json()
        assert body["state"]["category"] == "Hats"
        assert item_ids(body) == ["p4", "p3"]

    def test_retry_requires_error(self, client):
        assert client.post("/api/catalog/view/retry").status_code == 409

    def test_product_detail(self, client):
        response = client.get("/api/catalog/products/p1")
        assert response.status_code == 200
        assert response.json()["name"] == "Runner"
        assert client.get("/api/catalog/products/nope").status_code == 404


def test_retry_after_failure(fetcher):
    fetcher.error = "upstream 502"
    engine = CatalogViewEngine(fetcher=fetcher, scope=SCOPE)
    engine.start()
    app.dependency_overrides[get_engine] = lambda: engine
    try:
        client = TestClient(app)
        body = client.get("/api/catalog/view").json()
        assert body["status"] == "errored"
        assert body["error"] == "upstream 502"

        fetcher.error = None
        body = client.post("/api/catalog/view/retry").json()
        assert body["status"] == "ready"
        assert body["error"] is None
        assert len(body["items"]) == 6
    finally:
        app.dependency_overrides.clear()
