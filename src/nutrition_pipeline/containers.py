"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrition_pipeline.adapters.edamam_client import HttpxEdamamClient
from nutrition_pipeline.adapters.fdc_client import HttpxFdcClient
from nutrition_pipeline.adapters.off_client import HttpxOpenFoodFactsClient
from nutrition_pipeline.adapters.openai_insight_client import OpenAIInsightClient
from nutrition_pipeline.adapters.supabase_nutrition_cache_repository import (
    SupabaseNutritionCacheRepository,
)
from nutrition_pipeline.config import Settings
from nutrition_pipeline.services.background import BackgroundTasks
from nutrition_pipeline.services.cache import NutritionCache
from nutrition_pipeline.services.insights import (
    FallbackInsightGenerator,
    InsightGenerator,
    LLMInsightGenerator,
)
from nutrition_pipeline.services.pipeline import NutritionPipeline
from nutrition_pipeline.services.resolver import NutritionResolver
from nutrition_pipeline.services.sources.edamam import EdamamSource
from nutrition_pipeline.services.sources.openfoodfacts import OpenFoodFactsSource
from nutrition_pipeline.services.sources.usda import UsdaSource


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    cache: NutritionCache
    resolver: NutritionResolver
    pipeline: NutritionPipeline
    background: BackgroundTasks
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    background = BackgroundTasks()
    cache = NutritionCache(
        repository=SupabaseNutritionCacheRepository(
            supabase_client, table_name=resolved_settings.nutrition_cache_table
        ),
        background=background,
    )
    fdc_client = HttpxFdcClient.create(
        api_key=resolved_settings.usda_api_key,
        base_url=resolved_settings.usda_base_url,
        timeout=resolved_settings.http_timeout_seconds,
    )
    off_client = HttpxOpenFoodFactsClient.create(
        base_url=resolved_settings.off_base_url,
        user_agent=resolved_settings.off_user_agent,
        timeout=resolved_settings.http_timeout_seconds,
    )
    edamam_client = HttpxEdamamClient.create(
        app_id=resolved_settings.edamam_app_id,
        app_key=resolved_settings.edamam_app_key,
        base_url=resolved_settings.edamam_base_url,
        timeout=resolved_settings.http_timeout_seconds,
    )
    concurrency = resolved_settings.source_concurrency
    resolver = NutritionResolver(
        cache=cache,
        usda=UsdaSource(fdc_client, concurrency=concurrency),
        off=OpenFoodFactsSource(off_client, concurrency=concurrency),
        edamam=EdamamSource(edamam_client, concurrency=concurrency),
        background=background,
    )

    openai_client: OpenAIInsightClient | None = None
    insight_generator: InsightGenerator
    if resolved_settings.openai_api_key:
        openai_client = OpenAIInsightClient.create(resolved_settings.openai_api_key)
        insight_generator = LLMInsightGenerator(
            client=openai_client,
            model=resolved_settings.openai_model,
            store=resolved_settings.openai_store,
        )
    else:
        insight_generator = FallbackInsightGenerator()
    pipeline = NutritionPipeline(
        resolver=resolver,
        insight_generator=insight_generator,
        insight_concurrency=resolved_settings.insight_concurrency,
    )

    async def close_resources() -> None:
        await background.drain()
        await fdc_client.close()
        await off_client.close()
        await edamam_client.close()
        if openai_client is not None:
            await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        cache=cache,
        resolver=resolver,
        pipeline=pipeline,
        background=background,
        close_resources=close_resources,
    )
