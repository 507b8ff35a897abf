from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def choose_env_file() -> str:
    return ".env.local" if Path(".env.local").exists() else ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=choose_env_file(),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # tolerate unrelated env vars
    )

    # Prismic
    PRISMIC_API_ENDPOINT: str = "https://spacetraveling.cdn.prismic.io/api/v2"
    PRISMIC_ACCESS_TOKEN: str = ""
    PRISMIC_TIMEOUT_SECONDS: float = 10.0

    # Posts
    POSTS_DOCUMENT_TYPE: str = "posts"
    WORDS_PER_MINUTE: int = 200
    STATIC_PATHS_PAGE_SIZE: int = 1
    NEIGHBOR_PAGE_SIZE: int = 20

    # Revalidation
    REVALIDATE_SECONDS: int = 60 * 5
    REVALIDATE_API_KEY: str = ""

    # Preview
    PREVIEW_COOKIE_NAME: str = "io.prismic.preview"
    PREVIEW_COOKIE_MAX_AGE: int = 30 * 60

    # Logging
    LOG_LEVEL: str = "INFO"


# Global settings instance (evaluated at import, but reads env on construction)
settings = Settings()
