from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):

    project_name:str="Stackr_Backend"
    app_name: str = "Stackr Finance"
    environment: str = "development"

    SQLITE_DB_FILE: str="stackr.db"
    DATABASE_URL: Optional[str] = None

    STORAGE_KEY_PREFIX: str = "stackr"
    SUGGESTION_COUNT: int = 3

    LOG_LEVEL: str = "INFO"
    DEBUG: bool = True

    class Config:
            env_file=".env"
            env_file_encoding="utf-8"
            extra="ignore"


settings=Settings()

if settings.DATABASE_URL:
    db_url = settings.DATABASE_URL
    if db_url.startswith("postgres://"):
        db_url = db_url.replace("postgres://", "postgresql+psycopg://", 1)
    SQLALCHEMY_DATABASE_URL = db_url
else:
    SQLALCHEMY_DATABASE_URL = f"sqlite:///{settings.SQLITE_DB_FILE}"
