"""Environment-driven settings for the sync tool."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

from freee_beancount.domain.errors import ConfigurationError, missing_settings

SYNC_REQUIRED = ("api_url", "access_token", "company_id", "beancount_root")
STATS_REQUIRED = ("beancount_root",)
AUTH_REQUIRED = ("client_id", "client_secret")


class SyncSettings(BaseSettings):
    api_url: str = Field("http://localhost:8080", alias="FREEE_API_URL")
    access_token: str | None = Field(None, alias="FREEE_ACCESS_TOKEN")
    client_id: str | None = Field(None, alias="FREEE_CLIENT_ID")
    client_secret: str | None = Field(None, alias="FREEE_CLIENT_SECRET")
    company_id: int = Field(0, alias="FREEE_COMPANY_ID")

    beancount_root: str = Field("./beancount", alias="BEANCOUNT_ROOT")
    db_path: str | None = Field(None, alias="BEANCOUNT_DB_PATH")
    attachments_dir: str | None = Field(None, alias="BEANCOUNT_ATTACHMENTS_DIR")
    mapping_path: str = Field("config/account-mapping.yaml", alias="ACCOUNT_MAPPING_PATH")
    currency: str = Field("JPY", alias="BEANCOUNT_CURRENCY")

    request_timeout: float = Field(30.0, alias="FREEE_TIMEOUT")
    max_retries: int = Field(0, alias="FREEE_MAX_RETRIES")

    class Config:
        env_file = ".env"
        case_sensitive = False
        populate_by_name = True
        extra = "ignore"

    def require(self, *fields: str) -> None:
        """Raise ConfigurationError naming every required field that is unset."""
        missing = []
        for name in fields:
            if not getattr(self, name):
                alias = type(self).model_fields[name].alias
                missing.append(alias or name)
        if missing:
            raise ConfigurationError(missing_settings(missing))

    @property
    def resolved_db_path(self) -> Path:
        if self.db_path:
            return Path(self.db_path)
        return Path(self.beancount_root) / ".sync" / "sync.db"

    @property
    def resolved_attachments_dir(self) -> Path:
        if self.attachments_dir:
            return Path(self.attachments_dir)
        return Path(self.beancount_root) / "attachments"
