"""Shared test fixtures."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from linguist_pro.clients.llm_client import LLMClient, LLMResponse
from linguist_pro.history.store import HistoryStore
from linguist_pro.models.refinement import RefinementOutcome, RefinementRecord
from linguist_pro.pipeline.controller import InteractionController
from linguist_pro.pipeline.text_refiner import TextRefiner
from linguist_pro.storage.kv_store import MemoryStorage


@pytest.fixture
def mock_llm_client() -> LLMClient:
    """Create a mock LLM client."""
    client = AsyncMock(spec=LLMClient)
    client.generate = AsyncMock(
        return_value=LLMResponse(text="{}", input_tokens=100, output_tokens=50)
    )
    client.generate_json = AsyncMock(return_value={})
    client.get_token_summary = lambda: {"input": 100, "output": 50, "calls": []}
    return client


@pytest.fixture
def mock_refiner() -> TextRefiner:
    """Create a mock refiner returning a fixed outcome."""
    refiner = AsyncMock(spec=TextRefiner)
    refiner.refine = AsyncMock(
        return_value=RefinementOutcome(text="Refined text.", explanation="Fixed grammar.")
    )
    return refiner


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def history_store(storage: MemoryStorage) -> HistoryStore:
    return HistoryStore(storage)


@pytest.fixture
def controller(mock_refiner, history_store) -> InteractionController:
    return InteractionController(mock_refiner, history_store)


@pytest.fixture
def sample_record() -> RefinementRecord:
    return RefinementRecord(
        id="1700000000000",
        original="je suis fatigue",
        refined="I'm feeling quite tired today.",
        timestamp=1700000000000,
    )
