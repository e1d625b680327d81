from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "audit"
    db_username: str = "audit"
    db_password: str = "secret"

    task_collection: str = "audit-tasks"
    max_task_retries: int = 3
    task_lease_seconds: int = 900
    task_poll_interval_seconds: int = 5
    task_poll_limit: int = 1
    worker_threads: int = 1

    workspace_root: str = "/tmp/audit-worker"
    download_timeout_seconds: int = 60

    storage_provider: str = "local"
    storage_local_root: str = "/app/files/reports"
    s3_bucket: str = ""
    s3_endpoint_url: str | None = None
    s3_access_key: str = ""
    s3_secret_key: str = ""
    s3_region: str = "us-east-1"

    payload_transport: str = "file"
    payload_destination: str = "/app/files/payloads/{checksum}.json"
    payload_api_token: str = ""
    payload_timeout_seconds: int = 30

    phpcs_bin: str = "phpcs"
    phpcs_standards: str = "PHPCompatibility"

    def phpcs_standard_list(self) -> list[str]:
        """Return the configured PHPCS standards as a list."""
        return [s.strip() for s in self.phpcs_standards.split(",") if s.strip()]
