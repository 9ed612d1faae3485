"""Settings for the message store service."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    store_name: str = Field("rabbitmq-store", validation_alias="STORE_NAME")
    store_backend: str = Field("rabbitmq", validation_alias="STORE_BACKEND")

    broker_host: str = Field("localhost", validation_alias="BROKER_HOST")
    broker_port: int = Field(5672, validation_alias="BROKER_PORT")
    broker_user: str = Field("guest", validation_alias="BROKER_USER")
    broker_password: str = Field("guest", validation_alias="BROKER_PASSWORD")
    broker_vhost: str = Field("/", validation_alias="BROKER_VHOST")

    queue_name: str = Field(..., validation_alias="QUEUE_NAME")
    # Empty means the default exchange, with queue_name as routing key.
    exchange_name: str | None = Field(None, validation_alias="EXCHANGE_NAME")

    initial_backoff_seconds: float = Field(1.0, validation_alias="INITIAL_BACKOFF_SECONDS")
    max_backoff_seconds: float = Field(30.0, validation_alias="MAX_BACKOFF_SECONDS")
    max_connection_attempts: int = Field(5, validation_alias="MAX_CONNECTION_ATTEMPTS")
    backoff_multiplier: float = Field(2.0, validation_alias="BACKOFF_MULTIPLIER")
    connect_timeout_seconds: float = Field(10.0, validation_alias="CONNECT_TIMEOUT_SECONDS")

    publish_timeout_seconds: float = Field(10.0, validation_alias="PUBLISH_TIMEOUT_SECONDS")
    inmemory_max_messages: int = Field(10_000, gt=0, validation_alias="INMEMORY_MAX_MESSAGES")

    @field_validator("exchange_name", mode="before")
    @classmethod
    def _blank_exchange_is_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = str(value).strip()
        return value or None
