"""Interaction controller: drives refinement requests, history and copy state."""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable, Optional

from linguist_pro.history.store import HistoryStore
from linguist_pro.models.refinement import RefinementOutcome, RefinementRecord, ToneType
from linguist_pro.pipeline.text_refiner import RefinementError, TextRefiner

logger = logging.getLogger(__name__)

COPY_ACK_SECONDS = 2.0

# (success, elapsed_seconds, error_message)
UsageHook = Callable[[bool, float, Optional[str]], None]


class ControllerState(str, Enum):
    IDLE = "idle"
    REQUESTING = "requesting"
    SUCCESS = "success"
    FAILED = "failed"


class InteractionController:
    """Owns the session state behind the refinement page.

    At most one refinement is in flight: ``refine`` flips the state to
    REQUESTING before its first await, and any trigger that arrives while
    it is set returns immediately without reaching the refiner.
    """

    def __init__(
        self,
        refiner: TextRefiner,
        history_store: HistoryStore,
        clipboard: Callable[[str], None] | None = None,
        on_usage: UsageHook | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.refiner = refiner
        self.history_store = history_store
        self.clipboard = clipboard
        self.on_usage = on_usage
        self._clock = clock

        self.input_text: str = ""
        self.tone: ToneType = ToneType.PROFESSIONAL
        self.outcome: RefinementOutcome | None = None
        self.error: str | None = None
        self.state: ControllerState = ControllerState.IDLE
        self.last_result: ControllerState | None = None
        # Bumped after every issued request; lets a UI drop clicks from a stale render
        self.generation: int = 0
        self._copied_at: float | None = None

        self.history: list[RefinementRecord] = history_store.load()

    # -- input -------------------------------------------------------------

    def set_input(self, text: str) -> None:
        self.input_text = text

    def set_tone(self, tone: ToneType | str) -> None:
        self.tone = ToneType(tone)

    @property
    def is_busy(self) -> bool:
        return self.state is ControllerState.REQUESTING

    @property
    def can_refine(self) -> bool:
        return self.state is ControllerState.IDLE and bool(self.input_text.strip())

    # -- actions -----------------------------------------------------------

    async def refine(self, generation: int | None = None) -> bool:
        """Run one refinement for the current input and tone.

        Returns False without side effects when the input is blank, a
        request is already in flight, or ``generation`` is given and a
        request has been issued since it was read.
        """
        if not self.can_refine:
            return False
        if generation is not None and generation != self.generation:
            return False

        self.state = ControllerState.REQUESTING
        self.error = None
        self.outcome = None
        text = self.input_text
        started = time.perf_counter()
        error_message: str | None = None

        try:
            outcome = await self.refiner.refine(text, self.tone)
        except RefinementError as e:
            error_message = e.message
            self.error = e.message
            self.last_result = ControllerState.FAILED
        else:
            self.outcome = outcome
            entry = self.history_store.new_record(
                original=text,
                refined=outcome.text,
                now_ms=self._next_timestamp(),
            )
            self.history = self.history_store.record(entry, self.history)
            self.last_result = ControllerState.SUCCESS
        finally:
            self.state = ControllerState.IDLE
            self.generation += 1

        self._report_usage(error_message is None, time.perf_counter() - started, error_message)
        return True

    def select_history_entry(self, entry: RefinementRecord) -> bool:
        """Load a past refinement into the input and result without a remote call."""
        if self.state is not ControllerState.IDLE:
            return False
        self.input_text = entry.original
        self.outcome = RefinementOutcome(text=entry.refined)
        self.error = None
        return True

    def clear_history(self) -> None:
        self.history = self.history_store.clear()

    def copy_result(self) -> bool:
        """Copy the displayed result text to the clipboard."""
        if self.outcome is None or self.clipboard is None:
            return False
        self.clipboard(self.outcome.text)
        self._copied_at = self._clock()
        return True

    @property
    def copy_acknowledged(self) -> bool:
        if self._copied_at is None:
            return False
        return self._clock() - self._copied_at < COPY_ACK_SECONDS

    # -- helpers -----------------------------------------------------------

    def _next_timestamp(self) -> int:
        now_ms = time.time_ns() // 1_000_000
        # Ids are timestamps, so keep them strictly increasing within a session
        if self.history and now_ms <= self.history[0].timestamp:
            now_ms = self.history[0].timestamp + 1
        return now_ms

    def _report_usage(self, success: bool, elapsed: float, error_message: str | None) -> None:
        if self.on_usage is None:
            return
        try:
            self.on_usage(success, elapsed, error_message)
        except Exception:
            logger.exception("Failed to record usage")
