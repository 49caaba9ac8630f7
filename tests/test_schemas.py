from storefront.catalog.schemas import Category, Product, StockStatus, ViewState


class TestProduct:

    def test_api_shape(self):
        product = Product.model_validate(
            {
                "_id": "p1",
                "name": "Runner",
                "category": "c1",
                "salePrice": 12.5,
                "regularPrice": 20,
                "stockStatus": "OUT OF STOCK",
                "images": None,
                "hasVariations": False,
            }
        )
        assert product.id == "p1"
        assert product.sale_price == "12.5"
        assert product.regular_price == "20"
        assert product.stock_status == StockStatus.OUT_OF_STOCK
        assert product.out_of_stock
        assert product.images == []

    def test_stock_status_spellings(self):
        assert Product.model_validate({"_id": "a", "stockStatus": "in-stock"}).stock_status == StockStatus.IN_STOCK
        assert Product.model_validate({"_id": "a", "stockStatus": "OUT_OF_STOCK"}).out_of_stock
        assert Product.model_validate({"_id": "a", "stockStatus": "BACKORDER"}).stock_status is None

    def test_missing_fields_default(self):
        product = Product.model_validate({"_id": "a", "name": None, "salePrice": None})
        assert product.name == ""
        assert product.sale_price == ""
        assert product.category == ""

    def test_serializes_with_api_names(self):
        product = Product.model_validate({"_id": "a", "salePrice": "3"})
        data = product.model_dump(by_alias=True)
        assert data["_id"] == "a"
        assert data["salePrice"] == "3"


class TestCategory:

    def test_show_defaults_to_true(self):
        assert Category.model_validate({"_id": "c", "name": "X"}).show is True
        assert Category.model_validate({"_id": "c", "name": "X", "show": None}).show is True
        assert Category.model_validate({"_id": "c", "name": "X", "show": False}).show is False


class TestViewState:

    def test_defaults(self):
        state = ViewState()
        assert state.category == "All"
        assert state.sort == "price-asc"
        assert state.price_bounds == (0, 10000)
        assert state.page == 1

    def test_reversed_price_bounds_are_swapped(self):
        state = ViewState(price_min=50, price_max=10)
        assert state.price_bounds == (10, 50)

    def test_empty_category_means_all(self):
        assert ViewState(category="").category == "All"
