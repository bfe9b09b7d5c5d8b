from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    ENV: str = Field(default="dev")  # dev|prod
    TZ: str = Field(default="Asia/Tokyo")

    # Snapshot store
    DATABASE_URL: str = Field(default="sqlite:///./data/termplan.db")
    STORAGE_KEY: str = Field(default="termplan_data_v1")

    # CORS
    CORS_ORIGINS: str = Field(default="http://localhost:3000,http://localhost")

    # Files
    EXPORT_DIR: str = Field(default="./data/exports")

    # Business defaults
    CONSUMPTION_TAX_RATE: float = Field(default=0.10)

    # Seed (dev)
    SEED_DEMO: bool = Field(default=True)


settings = Settings()
