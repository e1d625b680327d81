import boto3
from boto3.exceptions import Boto3Error
from botocore.client import BaseClient
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.exceptions import TransportError
from app.logging.logger import Log
from app.storage.base import BaseStorageProvider


def build_s3_client(
    *,
    access_key: str,
    secret_key: str,
    region: str,
    endpoint_url: str | None = None,
) -> BaseClient:
    """Create an S3 client; ``endpoint_url`` allows S3-compatible stores."""
    config = Config(
        signature_version="s3v4",
        s3={"addressing_style": "path"},
        retries={"max_attempts": 3, "mode": "standard"},
    )
    return boto3.client(
        "s3",
        aws_access_key_id=access_key or None,
        aws_secret_access_key=secret_key or None,
        region_name=region,
        endpoint_url=endpoint_url,
        config=config,
    )


class S3StorageProvider(BaseStorageProvider):
    """Stores artifacts as objects in an S3 bucket."""

    def __init__(self, client: BaseClient, bucket: str) -> None:
        if not bucket:
            raise ValueError("An S3 bucket name is required")
        self._client = client
        self._bucket = bucket

    def upload_file(self, local_path: str, remote_key: str) -> None:
        try:
            self._client.upload_file(local_path, self._bucket, remote_key)
        except (Boto3Error, BotoCoreError, ClientError) as exc:
            raise TransportError(
                f"S3 upload of '{remote_key}' to '{self._bucket}' failed: {exc}"
            ) from exc
        Log.debug("Uploaded artifact", bucket=self._bucket, key=remote_key)

    def kind(self) -> str:
        return "s3"

    def collection_ref(self) -> str:
        return self._bucket
