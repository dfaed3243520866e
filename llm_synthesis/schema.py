"""Structured output schemas for LLM entity extraction."""

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

EntityCategory = Literal[
    "Technology",
    "Product",
    "Service",
    "Industry",
    "Feature",
    "Other",
]

ENTITY_CATEGORIES = (
    "Technology",
    "Product",
    "Service",
    "Industry",
    "Feature",
    "Other",
)

MIN_CONFIDENCE = 60
MAX_CONFIDENCE = 95

DEFAULT_SUMMARY = "Business analysis unavailable"
DEFAULT_SEARCH_PHRASE = "business software tools"


class RawExtraction(BaseModel):
    """Shape of the JSON object the model is asked to return.

    Lenient on purpose: individual entity items are checked one by one
    after decoding so a single bad entity does not discard the payload.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    entities: List[Any] = Field(default_factory=list)
    summary: Optional[str] = None
    search_phrase: Optional[str] = Field(default=None, alias="searchPhrase")

    @field_validator("entities", mode="before")
    @classmethod
    def _null_entities_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class ExtractedEntity(BaseModel):
    """One cleaned business entity."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(min_length=1)
    confidence: int = Field(ge=MIN_CONFIDENCE, le=MAX_CONFIDENCE)
    category: EntityCategory = "Other"


class EntityExtraction(BaseModel):
    """Only allowed output contract for the extraction layer."""

    model_config = ConfigDict(frozen=True)

    entities: List[ExtractedEntity] = Field(default_factory=list)
    summary: str = Field(min_length=1)
    search_phrase: str = Field(min_length=1)
