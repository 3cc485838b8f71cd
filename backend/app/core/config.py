from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "Farm Settlements"
    version: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    APP_DOMAIN: str = "example.com"
    APP_DATABASE_DSN: str = "sqlite:////tmp/settlements.db"

    # Caller tokens are issued by the identity provider and verified here
    AUTH_JWT_SECRET: str = "change-me-to-a-long-random-signing-secret"
    AUTH_JWT_ALGORITHM: str = "HS256"
    AUTH_TOKEN_TTL_HOURS: int = 12

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Settlements
    DEFAULT_SETTLEMENT_METHOD: str = "manual"


settings = Settings()
