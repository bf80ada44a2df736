"""Pydantic models for message tone analysis."""

from pydantic import BaseModel, Field

from models.types import ToneLabel


class ToneAnalysis(BaseModel):
    """Tone score for a co-parenting message."""

    score: float = Field(
        ge=0.0, le=1.0, description="0.0 very hostile to 1.0 very constructive"
    )
    label: ToneLabel
    warning: bool = Field(
        description="True if the message contains hostile, accusatory, or inflammatory language"
    )
    suggestion: str | None = Field(
        default=None, description="Brief suggestion to improve tone if needed"
    )
