from typing import List, Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "TeamFlow"
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    # Database
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "teamflow"
    POSTGRES_PORT: int = 5432
    DATABASE_URL: Optional[str] = None
    DB_ECHO: bool = False

    # "memory" keeps everything in process, "database" goes through SQLAlchemy
    STORAGE_BACKEND: Literal["database", "memory"] = "database"

    # Sessions
    SESSION_BACKEND: Literal["redis", "memory"] = "redis"
    SESSION_COOKIE_NAME: str = "sid"
    SESSION_COOKIE_SECURE: bool = False
    SESSION_IDLE_TIMEOUT: int = 60 * 60 * 24  # 1 day
    SESSION_MAX_LIFETIME: int = 60 * 60 * 24 * 7  # 7 days

    # Security
    BCRYPT_ROUNDS: int = 12

    # Redis
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0

    # Seeded global admin, skipped unless a password is set
    FIRST_ADMIN_USERNAME: str = "admin"
    FIRST_ADMIN_EMAIL: str = "admin@teamflow.com"
    FIRST_ADMIN_PASSWORD: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )


settings = Settings()
