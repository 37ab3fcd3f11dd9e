"""Unit tests for storage provider selection"""

import pytest

from document_service.infrastructure.storage import (
    LocalStorage,
    S3Storage,
    get_storage_provider,
    reset_storage_provider,
)


@pytest.fixture(autouse=True)
def fresh_provider():
    reset_storage_provider()
    yield
    reset_storage_provider()


@pytest.mark.unit
class TestStorageFactory:
    def test_local_is_default_and_cached(self, monkeypatch, tmp_path):
        monkeypatch.delenv("STORAGE_PROVIDER", raising=False)
        monkeypatch.setenv("STORAGE_LOCAL_PATH", str(tmp_path))
        monkeypatch.setenv("STORAGE_SIGNING_KEY", "factory-key")

        provider = get_storage_provider()

        assert isinstance(provider, LocalStorage)
        assert provider.base_path == tmp_path.resolve()
        assert get_storage_provider() is provider

    def test_s3_selected_by_env(self, monkeypatch):
        monkeypatch.setenv("STORAGE_PROVIDER", "S3")
        monkeypatch.setenv("S3_BUCKET_NAME", "documenten")
        monkeypatch.setenv("S3_ENDPOINT_URL", "http://minio:9000")

        provider = get_storage_provider()

        assert isinstance(provider, S3Storage)
        assert provider.bucket_name == "documenten"
        assert provider.endpoint_url == "http://minio:9000"

    def test_azure_requires_connection_string(self, monkeypatch):
        monkeypatch.setenv("STORAGE_PROVIDER", "azure")
        monkeypatch.delenv("AZURE_STORAGE_CONNECTION_STRING", raising=False)

        with pytest.raises(ValueError):
            get_storage_provider()
