"""
AI Schemas

Request bodies and handler results for summaries, tags, autocomplete and
the Gemini playground.
"""

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from ai_memo.schemas.common import ActionResult
from ai_memo.services.prompts import SummaryLength, SummaryStyle

SuggestionType = Literal["word", "phrase", "sentence"]


class SummaryRead(BaseModel):
    id: uuid.UUID
    note_id: uuid.UUID
    summary: str
    model: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TagRead(BaseModel):
    id: uuid.UUID
    note_id: uuid.UUID
    tag: str
    model: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StyledSummaryRequest(BaseModel):
    """Request schema for POST /notes/{id}/summary/styled."""

    style: SummaryStyle = "bullet"
    length: SummaryLength = "medium"


class AutocompleteRequest(BaseModel):
    """Request schema for POST /ai/autocomplete."""

    input: str = Field(default="", description="Text typed so far")
    context: str = Field(default="", description="Surrounding note content")


class GeminiTestRequest(BaseModel):
    """Request schema for POST /ai/test (playground)."""

    prompt: str = Field(default="")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=2048, ge=1, le=8192)


class GenerateSummaryResult(ActionResult):
    summary: str | None = None
    cached: bool | None = None


class GetSummaryResult(ActionResult):
    summary: SummaryRead | None = None


class StyledSummaryResult(ActionResult):
    summary: str | None = None
    style: SummaryStyle | None = None
    length: SummaryLength | None = None


class GenerateTagsResult(ActionResult):
    tags: list[str] | None = None
    count: int | None = None


class GetTagsResult(ActionResult):
    tags: list[str] | None = None


class AutocompleteSuggestion(BaseModel):
    """Single continuation proposed by the model."""

    id: str
    text: str
    confidence: float = Field(ge=0.0, le=1.0)
    type: SuggestionType = "phrase"


class AutocompleteResult(ActionResult):
    suggestions: list[AutocompleteSuggestion] | None = None


class GeminiStatus(BaseModel):
    """Response of GET /ai/status."""

    configured: bool
    model: str
    connected: bool | None = None
    response_time_ms: int | None = None
    error: str | None = None


class GeminiTestResult(ActionResult):
    """Playground response with generation metadata."""

    text: str | None = None
    model: str | None = None
    input_tokens: int | None = None
    output_tokens: int | None = None
    total_tokens: int | None = None
    generation_time_ms: int | None = None
