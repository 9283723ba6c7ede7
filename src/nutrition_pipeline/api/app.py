"""FastAPI application factory."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query, Request, status

from nutrition_pipeline.api.admin import router as admin_router
from nutrition_pipeline.api.models import AnalyzeRequest, CompareRequest, GradeRequest
from nutrition_pipeline.app_logging import configure_logging
from nutrition_pipeline.containers import AppContainer
from nutrition_pipeline.domain.nutrition import FoodDescriptor, NutritionRecord
from nutrition_pipeline.services import glycemic, grading


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/nutrition/resolve")
    async def resolve(descriptor: FoodDescriptor, request: Request) -> dict[str, object]:
        """Resolve nutrition for one food descriptor."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.resolver.resolve(descriptor)
        return result.to_dict()

    @app.get("/nutrition/barcode/{barcode}")
    async def resolve_barcode(barcode: str, request: Request) -> dict[str, object]:
        """Resolve a packaged product by barcode."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.resolver.resolve_barcode(barcode)
        if result is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return result.to_dict()

    @app.post("/nutrition/analyze")
    async def analyze(payload: AnalyzeRequest, request: Request) -> dict[str, object]:
        """Resolve, grade and optionally explain every item of a meal."""
        state_container: AppContainer = request.app.state.container
        analysis = await state_container.pipeline.analyze_meal(
            payload.items,
            focus=payload.focus,
            generate_insights=payload.generate_insights,
            meal_type=payload.meal_type,
        )
        return analysis.to_dict()

    @app.post("/nutrition/compare")
    async def compare(payload: CompareRequest, request: Request) -> dict[str, object]:
        """Compare two or more foods deterministically."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.pipeline.compare(payload.items, focus=payload.focus)
        return result.to_dict()

    @app.post("/nutrition/grade")
    async def grade(payload: GradeRequest) -> dict[str, object]:
        """Grade a nutrition record without resolving it."""
        nutrition = NutritionRecord.from_mapping(payload.nutrition)
        gi_result = None
        if payload.food_name and glycemic.has_relevant_gi(nutrition):
            gi_result = glycemic.lookup(payload.food_name, nutrition, payload.serving_grams)
        result = grading.grade(
            nutrition,
            payload.serving_grams,
            food_group=payload.food_group or (gi_result.category if gi_result else None),
            is_beverage=payload.is_beverage,
            gi_result=gi_result,
        )
        return {
            "grading": result.to_dict(),
            "gi": gi_result.to_dict() if gi_result else None,
        }

    @app.get("/gi/lookup")
    async def gi_lookup(  # noqa: PLR0913
        name: str = Query(min_length=1),
        carbs: float = 0.0,
        fiber: float = 0.0,
        sugar: float = 0.0,
        protein: float = 0.0,
        serving_grams: float | None = None,
    ) -> dict[str, object]:
        """Look up GI and GL for a food name and its carbohydrate profile."""
        nutrition = NutritionRecord(carbs=carbs, fiber=fiber, sugar=sugar, protein=protein)
        result = glycemic.lookup(name, nutrition, serving_grams)
        return {
            **result.to_dict(),
            "relevant": glycemic.has_relevant_gi(nutrition),
            "explanation": glycemic.explain(result),
        }

    return app
