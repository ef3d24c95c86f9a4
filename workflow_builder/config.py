""" Settings for the workflow builder. """
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

# Merchant every compiled query is scoped to.
DEFAULT_MERCHANT_ID = "68468c7bbffca9a0a6b2a413"


class Settings(BaseSettings):
    default_merchant_id: str = DEFAULT_MERCHANT_ID
    log_level: str = "INFO"
    log_json: bool = False

    model_config = SettingsConfigDict(
        env_prefix="WORKFLOW_BUILDER_",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings.

    Call get_settings.cache_clear() after changing environment variables.
    """
    return Settings()
