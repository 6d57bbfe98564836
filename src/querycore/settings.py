"""Settings for the querycore filter compiler and field resolver."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class QueryCoreSettings(BaseSettings):
    """querycore configuration settings."""

    LOG_LEVEL: str = "INFO"

    # Filter compilation
    FILTER_KEY_SEPARATOR: str = "_"
    SUBSCRIPTION_NODE_KEY: str = "node"
    # When False, unclassifiable filter shapes become Raw nodes instead of raising
    STRICT_FILTERS: bool = True

    # Query arguments
    PAGINATION_MAX_ITEMS: int = 1000

    # Batching
    BATCH_MAX_PARENT_IDS: int = 500

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = QueryCoreSettings()
