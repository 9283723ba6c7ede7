"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    usda_api_key: str
    usda_base_url: str = "https://api.nal.usda.gov/fdc/v1"
    off_base_url: str = "https://world.openfoodfacts.org"
    off_user_agent: str = "NutritionPipeline/1.0 (nutrition-pipeline)"
    edamam_app_id: str
    edamam_app_key: str
    edamam_base_url: str = "https://api.edamam.com/api/food-database/v2"
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    openai_store: bool = False
    nutrition_cache_table: str = "nutrition_cache_v2"
    source_concurrency: int = 3
    insight_concurrency: int = 3
    http_timeout_seconds: float = 15
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
