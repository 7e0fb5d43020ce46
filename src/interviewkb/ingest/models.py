from __future__ import annotations
from enum import Enum
from typing import List, Optional
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Difficulty(str, Enum):
    JUNIOR = "junior"
    MID = "mid"
    SENIOR = "senior"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class _WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class RawQuestion(_WireModel):
    id: str
    source: str = Field("", description="e.g., 'dou-forum', 'reddit-dotnet', 'glassdoor'")
    source_url: str = ""
    question: str
    topic_area: str = ""          # free-text hint from the scraper, e.g. 'system-design'
    tags: List[str] = Field(default_factory=list)
    best_answer: str = ""
    upvotes: int = 0
    company: str = ""             # if mentioned
    seniority_context: str = ""   # 'senior', 'lead', ... if mentioned
    scraped_date: Optional[datetime] = None
    posted_date: Optional[datetime] = None

    @field_validator("scraped_date", "posted_date")
    @classmethod
    def _utc(cls, v):
        return as_utc(v)


class ClassifiedQuestion(_WireModel):
    original: RawQuestion
    topic_id: str
    topic_name: str
    confidence: float = Field(..., ge=0, le=100)
    inferred_difficulty: Difficulty = Difficulty.MID
    inferred_tags: List[str] = Field(default_factory=list)
    is_novel: bool = False

    @field_validator("inferred_difficulty", mode="before")
    @classmethod
    def _lower_difficulty(cls, v):
        return v.strip().lower() if isinstance(v, str) else v
