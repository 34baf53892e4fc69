import logging
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    recipes_api_base_url: str = Field("http://localhost:4000", alias="RECIPES_API_BASE_URL")
    recipes_api_timeout_seconds: float = Field(10.0, alias="RECIPES_API_TIMEOUT_SECONDS")
    recipe_image_max_bytes: int = Field(5 * 1024 * 1024, alias="RECIPE_IMAGE_MAX_BYTES")
    # Delay before the success banner clears and the form reappears
    recipe_success_reset_seconds: float = Field(5.0, alias="RECIPE_SUCCESS_RESET_SECONDS")
    recipes_cache_ttl_seconds: int = Field(300, alias="RECIPES_CACHE_TTL_SECONDS")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(3000, alias="PORT")

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


logger = logging.getLogger(__name__)


@lru_cache
def get_settings() -> Settings:
    try:
        return Settings()
    except PermissionError:
        logger.warning("Unable to read .env; continuing with environment variables only")
        return Settings(_env_file=None)
