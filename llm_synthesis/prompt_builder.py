"""Structured prompt builder for LLM entity extraction."""

import json

_EXAMPLE_OUTPUT = json.dumps(
    {
        "entities": [
            {"name": "Entity Name", "confidence": 85, "category": "Technology"},
        ],
        "summary": "Brief 2-3 sentence business summary",
        "searchPhrase": "3-6 word search phrase to find competitors",
    },
    indent=2,
)

_SYSTEM_INSTRUCTIONS = """\
You are a business analyst extracting entities from website content.

STRICT RULES:
- Return ONLY a single JSON object with the exact structure shown below.
- "category" must be one of: Technology, Product, Service, Industry, Feature, Other.
- "confidence" is an integer between 60 and 95.
- Do NOT include any text outside the JSON object.
"""

_FOCUS = """\
Focus on:
- Products, services, technologies, features
- Industry terms and business concepts
- Target markets and use cases
"""


class EntityPromptBuilder:
    """Builds the fixed-template entity extraction prompt.

    Page text is truncated to ``content_length`` characters before it is
    embedded so prompt size stays bounded regardless of page size.
    """

    def __init__(self, content_length: int = 4000) -> None:
        self._content_length = content_length

    def build_prompt(self, content: str, url: str) -> str:
        """Build the full extraction prompt for one page.

        Args:
            content: Plain page text.
            url: Source URL of the page.

        Returns:
            A fully formatted prompt string ready for LLM consumption.
        """
        excerpt = content[: self._content_length]
        return (
            f"{_SYSTEM_INSTRUCTIONS}\n"
            f"# OUTPUT STRUCTURE\n\n"
            f"```json\n{_EXAMPLE_OUTPUT}\n```\n\n"
            f"{_FOCUS}\n"
            f"# CONTENT TO ANALYZE\n\n"
            f"{excerpt}\n\n"
            f"Website: {url}"
        )
