"""Tests for the TextRefiner agent."""

from __future__ import annotations

import pytest

from linguist_pro.models.refinement import FALLBACK_REFINED_TEXT, RefinementOutcome, ToneType
from linguist_pro.pipeline.text_refiner import FAILURE_MESSAGE, RefinementError, TextRefiner


class TestTextRefinerPrompt:
    async def test_text_sent_verbatim_as_prompt(self, mock_llm_client):
        mock_llm_client.generate_json.return_value = {"refinedText": "Hello."}
        refiner = TextRefiner(llm=mock_llm_client)

        await refiner.refine("  hola  ", ToneType.CONCISE)

        kwargs = mock_llm_client.generate_json.call_args.kwargs
        assert kwargs["prompt"] == "  hola  "

    async def test_tone_in_system_instruction(self, mock_llm_client):
        mock_llm_client.generate_json.return_value = {"refinedText": "Hello."}
        refiner = TextRefiner(llm=mock_llm_client, model="claude-test", temperature=0.1)

        await refiner.refine("hola", ToneType.ACADEMIC)

        kwargs = mock_llm_client.generate_json.call_args.kwargs
        assert "adapt the tone to: Academic & Rigorous." in kwargs["system"]
        assert '"refinedText"' in kwargs["system"]
        assert kwargs["model"] == "claude-test"
        assert kwargs["temperature"] == 0.1

    async def test_default_tone_is_professional(self, mock_llm_client):
        mock_llm_client.generate_json.return_value = {"refinedText": "Hello."}
        await TextRefiner(llm=mock_llm_client).refine("hola")

        assert "Professional & Formal" in mock_llm_client.generate_json.call_args.kwargs["system"]


class TestTextRefinerResponse:
    async def test_returns_text_and_explanation(self, mock_llm_client):
        mock_llm_client.generate_json.return_value = {
            "refinedText": "I'm feeling quite tired today.",
            "explanation": "Translated from French; adjusted tone to warm/casual.",
        }

        result = await TextRefiner(llm=mock_llm_client).refine(
            "je suis fatigue", ToneType.FRIENDLY
        )

        assert result == RefinementOutcome(
            text="I'm feeling quite tired today.",
            explanation="Translated from French; adjusted tone to warm/casual.",
        )

    @pytest.mark.parametrize(
        "payload",
        [{}, {"refinedText": ""}, {"refinedText": None}, {"explanation": "only this"}],
    )
    async def test_missing_refined_text_uses_fallback(self, mock_llm_client, payload):
        mock_llm_client.generate_json.return_value = payload

        result = await TextRefiner(llm=mock_llm_client).refine("text")

        assert result.text == FALLBACK_REFINED_TEXT

    async def test_empty_explanation_becomes_none(self, mock_llm_client):
        mock_llm_client.generate_json.return_value = {"refinedText": "Hi.", "explanation": ""}

        result = await TextRefiner(llm=mock_llm_client).refine("hi")

        assert result.explanation is None


class TestTextRefinerFailures:
    async def test_transport_error_raises_refinement_error(self, mock_llm_client):
        mock_llm_client.generate_json.side_effect = ConnectionError("network down")

        with pytest.raises(RefinementError) as exc_info:
            await TextRefiner(llm=mock_llm_client).refine("text")

        assert exc_info.value.message == FAILURE_MESSAGE
        assert str(exc_info.value) == FAILURE_MESSAGE
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    async def test_unparsable_payload_raises(self, mock_llm_client):
        mock_llm_client.generate_json.side_effect = ValueError("Could not extract JSON")

        with pytest.raises(RefinementError):
            await TextRefiner(llm=mock_llm_client).refine("text")

    async def test_non_object_payload_raises(self, mock_llm_client):
        mock_llm_client.generate_json.return_value = ["not", "an", "object"]

        with pytest.raises(RefinementError):
            await TextRefiner(llm=mock_llm_client).refine("text")

    async def test_wrong_field_type_raises(self, mock_llm_client):
        mock_llm_client.generate_json.return_value = {"refinedText": {"nested": True}}

        with pytest.raises(RefinementError):
            await TextRefiner(llm=mock_llm_client).refine("text")
