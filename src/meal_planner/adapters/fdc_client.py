"""USDA FoodData Central API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

# Legacy nutrient numbers for energy, protein, fat and carbohydrate.
MACRO_NUTRIENT_NUMBERS = ("208", "203", "204", "205")
GENERIC_DATA_TYPES = ("Foundation", "SR Legacy", "Survey (FNDDS)")


class FdcClient(Protocol):
    """Interface for FoodData Central API interactions."""

    async def search_foods(self, query: str, page_size: int = 10) -> dict[str, object]:
        """Search foods by query and return raw API data."""

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        """Fetch a food by FDC id and return raw API data."""


@dataclass
class HttpxFdcClient(FdcClient):
    """FDC client restricted to generic foods; branded products are skipped."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient
    data_types: tuple[str, ...] = GENERIC_DATA_TYPES
    timeout_seconds: float = 15.0

    @classmethod
    def create(cls, api_key: str, base_url: str) -> "HttpxFdcClient":
        """Build a client that owns its httpx session."""
        return cls(api_key=api_key, base_url=base_url, http_client=httpx.AsyncClient())

    async def search_foods(self, query: str, page_size: int = 10) -> dict[str, object]:
        body = {
            "query": query,
            "pageSize": page_size,
            "dataType": list(self.data_types),
        }
        return await self._send("POST", "/foods/search", json=body)

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        return await self._send(
            "GET", f"/food/{fdc_id}", params={"nutrients": list(MACRO_NUTRIENT_NUMBERS)}
        )

    async def _send(
        self,
        method: str,
        path: str,
        params: dict[str, object] | None = None,
        json: dict[str, object] | None = None,
    ) -> dict[str, object]:
        response = await self.http_client.request(
            method,
            self.base_url.rstrip("/") + path,
            params={"api_key": self.api_key, **(params or {})},
            json=json,
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
