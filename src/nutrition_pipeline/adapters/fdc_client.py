"""USDA FoodData Central API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

SEARCH_DATA_TYPES = ("Survey (FNDDS)", "Foundation", "SR Legacy")


class FdcClient(Protocol):
    """Interface for FoodData Central API interactions."""

    async def search_foods(self, query: str, page_size: int = 5) -> dict[str, object]:
        """Search generic foods by query and return raw API data."""

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        """Fetch a food by FDC id and return raw API data."""


@dataclass
class HttpxFdcClient(FdcClient):
    """HTTPX-backed FDC client."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 15

    @classmethod
    def create(
        cls, api_key: str, base_url: str, timeout: float = 15
    ) -> "HttpxFdcClient":
        """Create an FDC client with a managed httpx session."""
        return cls(
            api_key=api_key,
            base_url=base_url,
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def search_foods(self, query: str, page_size: int = 5) -> dict[str, object]:
        """Search foods by query, limited to the generic-food datasets."""
        url = f"{self.base_url}/foods/search"
        response = await self.http_client.get(
            url,
            params={
                "api_key": self.api_key,
                "query": query,
                "pageSize": page_size,
                "dataType": ",".join(SEARCH_DATA_TYPES),
            },
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        """Fetch a food by FDC id."""
        url = f"{self.base_url}/food/{fdc_id}"
        response = await self.http_client.get(
            url,
            params={"api_key": self.api_key},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
