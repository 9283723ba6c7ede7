"""Open Food Facts API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

SEARCH_FIELDS = (
    "code",
    "product_name",
    "brands",
    "nutriments",
    "serving_size",
    "serving_quantity",
)


class OpenFoodFactsClient(Protocol):
    """Interface for Open Food Facts API interactions."""

    async def search_products(
        self, query: str, page_size: int = 5
    ) -> dict[str, object]:
        """Search products by free text and return raw API data."""

    async def get_product(self, barcode: str) -> dict[str, object]:
        """Fetch a product by barcode and return raw API data."""


@dataclass
class HttpxOpenFoodFactsClient(OpenFoodFactsClient):
    """HTTPX-backed Open Food Facts client."""

    base_url: str
    user_agent: str
    http_client: httpx.AsyncClient
    timeout: float = 15

    @classmethod
    def create(
        cls, base_url: str, user_agent: str, timeout: float = 15
    ) -> "HttpxOpenFoodFactsClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url,
            user_agent=user_agent,
            http_client=httpx.AsyncClient(headers={"User-Agent": user_agent}),
            timeout=timeout,
        )

    async def search_products(
        self, query: str, page_size: int = 5
    ) -> dict[str, object]:
        """Search products by query."""
        response = await self.http_client.get(
            f"{self.base_url}/cgi/search.pl",
            params={
                "search_terms": query,
                "search_simple": 1,
                "action": "process",
                "json": 1,
                "page_size": page_size,
                "fields": ",".join(SEARCH_FIELDS),
            },
            headers={"User-Agent": self.user_agent},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    async def get_product(self, barcode: str) -> dict[str, object]:
        """Fetch a product by barcode."""
        response = await self.http_client.get(
            f"{self.base_url}/api/v0/product/{barcode}.json",
            headers={"User-Agent": self.user_agent},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
