import logging

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "postgres"
    POSTGRES_HOST: str = "db"
    POSTGRES_PORT: int = 5432
    # Full URL wins over the parts above (e.g. the Supabase pooler string)
    DATABASE_URL: str | None = None

    SUPABASE_URL: str | None = None
    SUPABASE_ANON_KEY: str | None = None

    # "postgres" queries the table over SQLAlchemy, "rest" goes through PostgREST
    RECORD_SOURCE: str = "postgres"
    GROUP_TABLE: str = "group"
    HTTP_TIMEOUT_SECONDS: float = 10.0

    MIN_QUERY_LENGTH: int = 2
    SEARCH_DEBOUNCE_SECONDS: float = 0.3

    RECENT_SEARCHES_KEY: str = "recentSearches"
    RECENT_SEARCHES_LIMIT: int = 7

    DISPLAY_LOCALE: str = "en"
    LOG_LEVEL: str = "INFO"

    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

settings = Settings()

def configure_logging(level: str | None = None):
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
