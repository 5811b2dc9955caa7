"""OpenAI Responses API client for meal text extraction."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from meal_nutrition.services.extraction import CompletionClient


@dataclass
class OpenAICompletionClient(CompletionClient):
    """Completion client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str, timeout_seconds: float = 30.0) -> "OpenAICompletionClient":
        """Create an OpenAI completion client.

        SDK-level retries are disabled: extraction is attempted once per request.
        """
        return cls(
            client=AsyncOpenAI(
                api_key=api_key, timeout=timeout_seconds, max_retries=0
            )
        )

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        instructions: str,
        prompt: str,
        temperature: float | None,
        reasoning_effort: str | None,
        store: bool,
    ) -> str:
        """Call OpenAI Responses API and return the output text."""
        request_payload: dict[str, object] = {
            "model": model,
            "instructions": instructions,
            "input": prompt,
            "store": store,
        }
        if temperature is not None:
            request_payload["temperature"] = temperature
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}

        response = await self.client.responses.create(**request_payload)
        # Empty output is left to the parser, which degrades it to no items.
        return response.output_text or ""

    async def close(self) -> None:
        """Close the underlying SDK client."""
        await self.client.close()
