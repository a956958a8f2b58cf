"""Configuration for request dispatch and the command line."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RequestOptions(BaseSettings):
    """Named defaults for sending requests.

    Every value can be overridden with an ``API_TESTER_`` environment
    variable or by passing it to the constructor.
    """

    model_config = SettingsConfigDict(env_prefix="API_TESTER_", case_sensitive=False)

    # Route requests through the CORS relay instead of calling the API directly.
    use_proxy: bool = Field(default=True)
    proxy_url: str = Field(default="http://localhost:8080/api/proxy")
    accept: str = Field(default="*/*")
    content_type: str = Field(default="application/json")
    timeout_seconds: float = Field(default=30)

    log_level: str = Field(default="INFO")


@lru_cache(maxsize=1)
def get_settings() -> RequestOptions:
    return RequestOptions()
