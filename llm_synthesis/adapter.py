"""LLM adapters for entity extraction.

Provides a base interface and concrete adapters for OpenAI-compatible
APIs and a deterministic mock for testing.
"""

import json
import os
from abc import ABC, abstractmethod
from typing import Optional


class BaseLLMAdapter(ABC):
    """Abstract base for all LLM adapters."""

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Send a prompt to the LLM and return the raw response text.

        Args:
            prompt: The fully formatted prompt string.

        Returns:
            Raw string response from the model (expected to contain JSON).
        """


class OpenAILLMAdapter(BaseLLMAdapter):
    """Adapter for OpenAI-compatible chat completion APIs."""

    def __init__(
        self,
        model: str = "gpt-4o",
        max_tokens: int = 2048,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> None:
        """Initialise the OpenAI adapter.

        Args:
            model: Model identifier.
            max_tokens: Maximum tokens in the completion.
            api_key: API key. Falls back to LLM_API_KEY, then OPENAI_API_KEY.
            base_url: Optional base URL for OpenAI-compatible endpoints.
        """
        try:
            from openai import OpenAI  # type: ignore[import-untyped]
        except ImportError as exc:
            raise ImportError(
                "openai package is required for OpenAILLMAdapter. "
                "Install it with: pip install openai"
            ) from exc

        resolved_key = (
            api_key
            or os.environ.get("LLM_API_KEY", "")
            or os.environ.get("OPENAI_API_KEY", "")
        )
        client_kwargs: dict = {"api_key": resolved_key}
        if base_url:
            client_kwargs["base_url"] = base_url

        self._client = OpenAI(**client_kwargs)
        self._model = model
        self._max_tokens = max_tokens

    def generate(self, prompt: str) -> str:
        response = self._client.chat.completions.create(
            model=self._model,
            messages=[{"role": "user", "content": prompt}],
            temperature=0,
            max_tokens=self._max_tokens,
            stream=False,
        )
        return response.choices[0].message.content or ""


# ---------------------------------------------------------------------------
# Fixed mock response used for local testing.
# ---------------------------------------------------------------------------
_MOCK_RESPONSE = {
    "entities": [
        {"name": "Customer Analytics", "confidence": 88, "category": "Product"},
        {"name": "Cloud Platform", "confidence": 82, "category": "Technology"},
        {"name": "Onboarding Support", "confidence": 71, "category": "Service"},
    ],
    "summary": "Mock summary for testing purposes.",
    "searchPhrase": "customer analytics cloud platform",
}

_MOCK_RESPONSE_TEXT = (
    "Here is the extraction you asked for:\n"
    + json.dumps(_MOCK_RESPONSE, indent=2)
    + "\nLet me know if you need anything else."
)


class MockLLMAdapter(BaseLLMAdapter):
    """Deterministic adapter that returns a fixed extraction.

    The JSON is wrapped in prose the way real models often answer, so
    the span locator is exercised even without an API.
    """

    def generate(self, prompt: str) -> str:
        return _MOCK_RESPONSE_TEXT


def build_llm_adapter(
    adapter: str,
    *,
    model: str = "gpt-4o",
    max_tokens: int = 2048,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
) -> BaseLLMAdapter:
    """Return the adapter selected by name ("openai" or "mock")."""
    name = adapter.strip().lower()
    if name == "mock":
        return MockLLMAdapter()
    if name == "openai":
        return OpenAILLMAdapter(
            model=model,
            max_tokens=max_tokens,
            api_key=api_key,
            base_url=base_url,
        )
    raise ValueError(f"Unknown LLM adapter '{adapter}'. Allowed: ['mock', 'openai'].")
