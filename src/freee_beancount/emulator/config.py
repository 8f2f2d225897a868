"""Emulator settings."""

from pydantic import Field
from pydantic_settings import BaseSettings


class EmulatorSettings(BaseSettings):
    app_name: str = "freee API emulator"
    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(8080, alias="PORT")
    db_path: str = Field("./data/freee.db", alias="DB_PATH")
    upload_dir: str = Field("./data/receipts", alias="UPLOAD_DIR")
    token_ttl: int = Field(3600, alias="TOKEN_TTL")

    class Config:
        env_file = ".env"
        case_sensitive = False
        populate_by_name = True
        extra = "ignore"
