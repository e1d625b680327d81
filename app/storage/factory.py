from pathlib import Path

from app.config.settings import Settings
from app.storage.base import BaseStorageProvider
from app.storage.local_adapter import LocalStorageProvider
from app.storage.s3_adapter import S3StorageProvider, build_s3_client


class StorageProviderFactory:
    """Creates the configured storage provider."""

    PROVIDERS = ("local", "s3")

    @classmethod
    def create(cls, settings: Settings) -> BaseStorageProvider:
        provider = settings.storage_provider.lower()
        if provider == "local":
            return LocalStorageProvider(Path(settings.storage_local_root))
        if provider == "s3":
            client = build_s3_client(
                access_key=settings.s3_access_key,
                secret_key=settings.s3_secret_key,
                region=settings.s3_region,
                endpoint_url=settings.s3_endpoint_url,
            )
            return S3StorageProvider(client, settings.s3_bucket)
        raise ValueError(
            f"Unknown storage provider '{provider}'. Choose from: {list(cls.PROVIDERS)}"
        )
