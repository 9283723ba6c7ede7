"""OpenAI Responses API client for food insights."""

import json
from dataclasses import dataclass

from openai import AsyncOpenAI

from nutrition_pipeline.services.insights import InsightClient


@dataclass
class OpenAIInsightClient(InsightClient):
    """Insight client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIInsightClient":
        """Create an OpenAI insight client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def complete(
        self,
        *,
        model: str,
        store: bool,
        system_prompt: str,
        prompt: str,
        schema: dict[str, object],
    ) -> dict[str, object]:
        """Call OpenAI Responses API with structured outputs."""
        request_payload: dict[str, object] = {
            "model": model,
            "instructions": system_prompt,
            "input": [
                {
                    "role": "user",
                    "content": [{"type": "input_text", "text": prompt}],
                }
            ],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": "food_insight",
                    "strict": True,
                    "schema": schema,
                }
            },
            "max_output_tokens": 500,
            "store": store,
        }

        response = await self.client.responses.create(**request_payload)
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return json.loads(output_text)

    async def close(self) -> None:
        await self.client.close()
