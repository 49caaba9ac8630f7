import pytest
from pydantic import ValidationError

from storefront.config import Settings


class TestSettings:

    def test_public_base_url_requires_store(self):
        settings = Settings(api_url="http://api.test/", store_id=None)
        assert settings.public_base_url is None
        assert settings.build_public_url("products") is None

    def test_blank_store_id_is_unset(self):
        assert Settings(api_url="http://api.test/", store_id="").store_id is None

    def test_public_base_url(self):
        settings = Settings(api_url="http://api.test", store_id="store1")
        assert settings.public_base_url == "http://api.test/public/s/store1/"
        assert settings.build_public_url("/categories") == "http://api.test/public/s/store1/categories"

    def test_api_id_mapping(self, monkeypatch):
        monkeypatch.delenv("STOREFRONT_API_URL", raising=False)
        monkeypatch.setenv("STOREFRONT_API_ID", "4")
        assert Settings().api_base_url == "https://onno-server.vercel.app/"

    def test_unknown_api_id_uses_default(self, monkeypatch):
        monkeypatch.delenv("STOREFRONT_API_URL", raising=False)
        monkeypatch.setenv("STOREFRONT_API_ID", "99")
        assert Settings().api_base_url == "http://localhost:500/"

    def test_url_override_and_env_ints(self, monkeypatch):
        monkeypatch.setenv("STOREFRONT_API_URL", "http://override.test/")
        monkeypatch.setenv("STOREFRONT_API_ID", "4")
        monkeypatch.setenv("STOREFRONT_PAGE_SIZE", "12")
        settings = Settings()
        assert settings.api_base_url == "http://override.test/"
        assert settings.page_size == 12

    def test_bad_int_is_rejected(self, monkeypatch):
        monkeypatch.setenv("STOREFRONT_PAGE_SIZE", "lots")
        with pytest.raises(ValidationError):
            Settings()
