"""Wiring for one UI session: clients, stores and the interaction controller."""

from __future__ import annotations

import logging
import sqlite3
from typing import Callable

from linguist_pro.clients.llm_client import LLMClient
from linguist_pro.config import AppConfig
from linguist_pro.history.store import HistoryStore
from linguist_pro.logging.cost_calculator import calculate_cost
from linguist_pro.logging.models import UsageLog
from linguist_pro.logging.usage_store import UsageStore
from linguist_pro.pipeline.controller import InteractionController, UsageHook
from linguist_pro.pipeline.text_refiner import TextRefiner
from linguist_pro.storage.kv_store import KeyValueStorage, SQLiteStorage

logger = logging.getLogger(__name__)


def open_usage_store(config: AppConfig) -> UsageStore | None:
    """Open the usage database, or return None when usage logging is off or unavailable."""
    if not config.usage.enabled:
        return None
    try:
        return UsageStore(config.usage.resolved_db_path)
    except (sqlite3.Error, OSError):
        logger.exception("Usage logging disabled: could not open %s", config.usage.db_path)
        return None


def make_usage_hook(
    controller_ref: Callable[[], InteractionController],
    llm: LLMClient,
    store: UsageStore,
    model: str,
    session_id: str = "anonymous",
) -> UsageHook:
    """Build a callback that saves one UsageLog per refinement request."""

    def on_usage(success: bool, elapsed: float, error_message: str | None) -> None:
        controller = controller_ref()
        tokens = llm.get_token_summary()
        log = UsageLog(
            session_id=session_id,
            tone=controller.tone.value,
            model=model,
            input_chars=len(controller.input_text),
            output_chars=len(controller.outcome.text) if controller.outcome else 0,
            elapsed_seconds=elapsed,
            total_input_tokens=tokens["input"],
            total_output_tokens=tokens["output"],
            estimated_cost_usd=calculate_cost(tokens["calls"]),
            success=success,
            error_message=error_message,
        )
        store.save_log(log)

    return on_usage


def build_controller(
    config: AppConfig,
    llm: LLMClient | None = None,
    storage: KeyValueStorage | None = None,
    usage_store: UsageStore | None = None,
    clipboard: Callable[[str], None] | None = None,
    session_id: str = "anonymous",
) -> InteractionController:
    """Create a controller with history loaded from durable storage.

    Raises RuntimeError when the LLM client cannot be created, usually
    because ANTHROPIC_API_KEY is not set.
    """
    if llm is None:
        try:
            llm = LLMClient(timeout=config.llm.timeout, max_attempts=config.llm.max_attempts)
        except Exception as e:
            raise RuntimeError(f"LLM client init failed, check ANTHROPIC_API_KEY: {e}") from e

    refiner = TextRefiner(
        llm,
        model=config.llm.model,
        temperature=config.llm.temperature,
        max_tokens=config.llm.max_tokens,
    )
    history_store = HistoryStore(
        storage if storage is not None else SQLiteStorage(config.history.resolved_db_path),
        key=config.history.storage_key,
        max_entries=config.history.max_entries,
    )
    controller = InteractionController(refiner, history_store, clipboard=clipboard)

    if usage_store is None:
        usage_store = open_usage_store(config)
    if usage_store is not None:
        controller.on_usage = make_usage_hook(
            lambda: controller,
            llm,
            usage_store,
            model=config.llm.model,
            session_id=session_id,
        )

    logger.debug("Session %s started with %d history entries", session_id, len(controller.history))
    return controller
