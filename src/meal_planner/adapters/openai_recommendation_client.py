"""OpenAI Responses API client for meal recommendations."""

import json
from dataclasses import dataclass

from openai import AsyncOpenAI

from meal_planner.services.recommendations import RecommendationClient


@dataclass
class OpenAIRecommendationClient(RecommendationClient):
    """Recommendation client backed by OpenAI structured outputs."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIRecommendationClient":
        """Create an OpenAI recommendation client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def generate(
        self,
        *,
        model: str,
        store: bool,
        instructions: str,
        prompt: str,
        schema: dict[str, object],
    ) -> dict[str, object]:
        """Call the Responses API and decode the JSON output."""
        response = await self.client.responses.create(
            model=model,
            instructions=instructions,
            input=prompt,
            text={
                "format": {
                    "type": "json_schema",
                    "name": "meal_recommendations",
                    "strict": True,
                    "schema": schema,
                }
            },
            store=store,
        )
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return json.loads(output_text)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
