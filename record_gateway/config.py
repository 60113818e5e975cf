import logging
from typing import Annotated, List, Literal, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_TABLE_NAME = "StudentRecords"
DEFAULT_KEY_FIELD = "student_id"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Settings(BaseSettings):
    """Resolved once per process: explicit keyword arguments, then environment, then defaults."""

    model_config = SettingsConfigDict(env_ignore_empty=True, populate_by_name=True, extra="ignore")

    table_name: str = DEFAULT_TABLE_NAME
    key_field: str = DEFAULT_KEY_FIELD
    store_backend: Literal["memory", "dynamodb", "shards"] = "dynamodb"
    # SHARD_URLS is comma separated
    shard_urls: Annotated[List[str], NoDecode] = ["http://shard1:8000"]
    request_timeout: float = Field(
        default=5.0,
        validation_alias=AliasChoices("STORE_TIMEOUT_SEC", "request_timeout"),
    )
    aws_region: Optional[str] = None
    log_level: str = "INFO"

    @field_validator("shard_urls", mode="before")
    @classmethod
    def _split_urls(cls, value):
        if isinstance(value, str):
            return [url.strip() for url in value.split(",") if url.strip()]
        return value


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(level.upper())
