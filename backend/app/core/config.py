from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    POSTGRES_URL: str | None = None
    POSTGRES_URL_NON_POOLING: str | None = None
    DISABLE_POSTGRES_SSL: bool = False
    POSTGRES_SSL_ALLOW_SELF_SIGNED: bool = False
    ENVIRONMENT: str = "development"
    APP_NAME: str = "photo-gallery"
    LOG_LEVEL: str = "INFO"
    DB_BOOTSTRAP_ON_STARTUP: bool = False
    SLOW_QUERY_THRESHOLD_MS: int = 100

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


settings = Settings()
