"""Text refinement agent: rewrites input in polished English for a chosen tone."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from linguist_pro.clients.llm_client import DEFAULT_MODEL, LLMClient
from linguist_pro.models.refinement import (
    FALLBACK_REFINED_TEXT,
    RefinementOutcome,
    RefinementPayload,
    ToneType,
)

logger = logging.getLogger(__name__)

FAILURE_MESSAGE = "Failed to refine text. Please check your connection or try again later."

REFINE_SYSTEM = """\
You are an expert English linguist, professional editor, and translation specialist.
Your task is to take the provided input text (which may be in any language) and transform it into high-quality, professional English.

GUIDELINES:
1. Translate to English if the input is in another language.
2. Correct all grammatical, spelling, and punctuation errors.
3. Enhance the vocabulary to be sophisticated yet natural.
4. Ensure professional sentence structures and flow.
5. Maintain the original meaning but adapt the tone to: {tone}.
6. Return ONLY the refined English text and a brief explanation of key improvements.

Respond with a single JSON object and nothing else:
{{"refinedText": "<the polished English version of the input>", "explanation": "<a very brief summary of major improvements>"}}
"refinedText" is required. "explanation" may be omitted."""


class RefinementError(Exception):
    """Raised when the remote refinement call fails or returns an unusable payload."""

    def __init__(self, message: str = FAILURE_MESSAGE):
        super().__init__(message)
        self.message = message


class TextRefiner:
    """Turn arbitrary text into refined English in the requested tone."""

    def __init__(
        self,
        llm: LLMClient,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.3,
        max_tokens: int = 2048,
    ):
        self.llm = llm
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def refine(
        self,
        text: str,
        tone: ToneType = ToneType.PROFESSIONAL,
    ) -> RefinementOutcome:
        """Refine ``text`` verbatim.

        An empty ``refinedText`` in an otherwise valid reply is replaced by
        FALLBACK_REFINED_TEXT. Transport and parse failures raise
        RefinementError.
        """
        system = REFINE_SYSTEM.format(tone=ToneType(tone).value)
        try:
            data = await self.llm.generate_json(
                prompt=text,
                system=system,
                model=self.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
            payload = self._parse_payload(data)
        except Exception as e:
            logger.exception("Text refinement LLM call failed")
            raise RefinementError() from e

        return RefinementOutcome(
            text=payload.refinedText or FALLBACK_REFINED_TEXT,
            explanation=payload.explanation or None,
        )

    @staticmethod
    def _parse_payload(data) -> RefinementPayload:
        """Validate the JSON reply. Only a non-object reply is an error."""
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
        try:
            return RefinementPayload.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"Malformed refinement payload: {e}") from e
