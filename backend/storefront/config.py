from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./dev.db"
    APP_NAME: str = "Storefront API"
    APP_VERSION: str = "1.0.0"
    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 8000
    LOG_LEVEL: str = "INFO"
    CORS_ALLOW_ORIGIN: str = "*"
    # reset_defaults | partial_patch
    PRODUCT_UPDATE_POLICY: str = "reset_defaults"
    # empty means each plan's own default; otherwise fail_fast | best_effort
    MIGRATION_POLICY: str = ""
    RESET_DB: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
