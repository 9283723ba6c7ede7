"""Common interface for external nutrition sources."""

import asyncio
import logging
from typing import Protocol

from nutrition_pipeline.domain.nutrition import SourceMatch

BATCH_MIN_CONFIDENCE = 0.7
DEFAULT_CONCURRENCY = 3

_logger = logging.getLogger(__name__)


class NutritionSource(Protocol):
    """A single external nutrition database."""

    name: str

    async def search(self, query: str) -> SourceMatch | None:
        """Return the best match for a query, or None on any failure."""

    async def batch_search(self, queries: list[str]) -> dict[str, SourceMatch]:
        """Search many queries; keys are lowercased queries."""


async def run_batch_search(
    source: NutritionSource,
    queries: list[str],
    concurrency: int = DEFAULT_CONCURRENCY,
    min_confidence: float = BATCH_MIN_CONFIDENCE,
) -> dict[str, SourceMatch]:
    """Fan out ``source.search`` with bounded concurrency.

    Only matches at or above ``min_confidence`` are returned.
    """
    semaphore = asyncio.Semaphore(concurrency)
    unique = list(dict.fromkeys(queries))

    async def _one(query: str) -> tuple[str, SourceMatch | None]:
        async with semaphore:
            return query, await source.search(query)

    results: dict[str, SourceMatch] = {}
    for query, match in await asyncio.gather(*(_one(query) for query in unique)):
        if match is not None and match.confidence >= min_confidence:
            results[query.lower()] = match
    _logger.debug(
        "%s batch search: queries=%s matched=%s", source.name, len(unique), len(results)
    )
    return results


def status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"
