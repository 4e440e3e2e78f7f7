"""Data models for Linguist Pro."""

from linguist_pro.models.refinement import (
    FALLBACK_REFINED_TEXT,
    RefinementOutcome,
    RefinementPayload,
    RefinementRecord,
    ToneType,
)

__all__ = [
    "FALLBACK_REFINED_TEXT",
    "RefinementOutcome",
    "RefinementPayload",
    "RefinementRecord",
    "ToneType",
]
