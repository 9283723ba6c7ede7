"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from nutrition_pipeline.services.cache import CacheUnavailableError

if TYPE_CHECKING:
    from nutrition_pipeline.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/cache/stats", dependencies=[Depends(require_admin)])
async def cache_stats(request: Request) -> dict[str, object]:
    """Return nutrition cache statistics."""
    container: AppContainer = request.app.state.container
    try:
        stats = await container.cache.stats()
    except CacheUnavailableError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
    return stats.to_dict()


@router.post("/cache/cleanup", dependencies=[Depends(require_admin)])
async def cache_cleanup(request: Request) -> dict[str, int]:
    """Delete a batch of expired cache entries."""
    container: AppContainer = request.app.state.container
    return {"deleted": await container.cache.cleanup_expired()}


@router.delete("/cache/{name}", dependencies=[Depends(require_admin)])
async def cache_invalidate(
    name: str, request: Request, serving_grams: float | None = None
) -> dict[str, str]:
    """Invalidate the cache entry for a food name and serving."""
    container: AppContainer = request.app.state.container
    await container.cache.invalidate(name, serving_grams)
    return {"status": "ok"}
