"""Pydantic models for text refinement requests, results and history."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

FALLBACK_REFINED_TEXT = "Unable to refine text. Please try again."


class ToneType(str, Enum):
    """Tone the refined English text should be written in."""

    PROFESSIONAL = "Professional & Formal"
    ACADEMIC = "Academic & Rigorous"
    BUSINESS = "Business & Persuasive"
    FRIENDLY = "Friendly & Warm"
    CONCISE = "Clear & Concise"


class RefinementPayload(BaseModel):
    """Structured JSON the model is asked to return."""

    model_config = ConfigDict(extra="ignore")

    refinedText: str = ""
    explanation: str | None = None

    @field_validator("refinedText", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value


class RefinementOutcome(BaseModel):
    """Result shown to the user after a refinement or a history replay."""

    text: str
    explanation: str | None = None


class RefinementRecord(BaseModel):
    """A single past refinement kept in the history log."""

    model_config = ConfigDict(frozen=True)

    id: str
    original: str
    refined: str
    timestamp: int = Field(ge=0)  # epoch milliseconds
