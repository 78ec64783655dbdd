"""Application configuration loaded from environment variables and .env file."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Values are loaded from environment variables first,
    then from a .env file in the project root as fallback.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    DATABASE_URL: str = "sqlite:///./dev.db"
    DEBUG: bool = True
    DB_ECHO: bool = False
    LOG_LEVEL: str = "INFO"

    # Reference data
    ITEM_SEED_PATH: str = "src/data/seed_items.json"
    LOOT_PROFILE_PATH: str = "src/data/loot_profiles.json"

    # Containers
    BAG_CAPACITY: int = 20
    LOOT_LIFETIME_SECONDS: float = 20.0
    LOOT_MAX_ITEMS: int = 3

    # JSON snapshot export directory
    SAVE_DIR: str = "saves"


settings = Settings()
