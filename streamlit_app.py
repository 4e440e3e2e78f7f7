"""Streamlit Web UI for Linguist Pro.

Paste text in any language, pick a tone, get polished English back.
The last 10 refinements are kept in the sidebar across restarts.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import sqlite3
import uuid
from datetime import datetime

logger = logging.getLogger(__name__)

import nest_asyncio
import streamlit as st
import streamlit.components.v1 as components
from dotenv import load_dotenv

load_dotenv()
nest_asyncio.apply()

# Streamlit Cloud: sync st.secrets → os.environ so backend clients can read them
for key in ("ANTHROPIC_API_KEY",):
    if key not in os.environ:
        try:
            os.environ[key] = st.secrets[key]
        except Exception:
            pass

from linguist_pro.config import load_config
from linguist_pro.models.refinement import RefinementRecord, ToneType
from linguist_pro.pipeline.controller import InteractionController
from linguist_pro.logging.usage_store import UsageStore
from linguist_pro.session import build_controller, open_usage_store

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------

st.set_page_config(
    page_title="Linguist Pro",
    page_icon=":memo:",
    layout="wide",
)

# ---------------------------------------------------------------------------
# Optional password gate (only when APP_PASSWORD is configured)
# ---------------------------------------------------------------------------

try:
    APP_PASSWORD = st.secrets["APP_PASSWORD"]
except Exception:
    APP_PASSWORD = os.environ.get("APP_PASSWORD")

if APP_PASSWORD:
    if "authenticated" not in st.session_state:
        st.session_state.authenticated = False

    if not st.session_state.authenticated:
        st.markdown("## Linguist Pro")
        pw = st.text_input("Password", type="password")
        if pw and pw == APP_PASSWORD:
            st.session_state.authenticated = True
            st.rerun()
        elif pw:
            st.error("Wrong password")
        st.stop()

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _browser_clipboard(text: str) -> None:
    """Write text to the user's clipboard from a zero-height component."""
    components.html(
        f"<script>navigator.clipboard.writeText({json.dumps(text)});</script>",
        height=0,
    )


def _get_controller() -> InteractionController:
    """One controller per browser session; history is loaded once here."""
    if "controller" not in st.session_state:
        if "session_id" not in st.session_state:
            st.session_state.session_id = uuid.uuid4().hex
        config = load_config()
        st.session_state.usage_store = open_usage_store(config)
        st.session_state.controller = build_controller(
            config,
            usage_store=st.session_state.usage_store,
            clipboard=_browser_clipboard,
            session_id=st.session_state.session_id,
        )
    return st.session_state.controller


def _on_history_click(entry: RefinementRecord) -> None:
    controller = st.session_state.controller
    if controller.select_history_entry(entry):
        st.session_state.input_text = entry.original


def _on_clear_history() -> None:
    st.session_state.controller.clear_history()


def _on_refine_click(generation: int) -> None:
    # Remember which render the click came from; the controller drops stale ones
    st.session_state.refine_pending = generation


def _format_timestamp(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M")


try:
    controller = _get_controller()
except RuntimeError as e:
    logger.exception("Controller setup failed")
    st.error(str(e))
    st.stop()

if "input_text" not in st.session_state:
    st.session_state.input_text = controller.input_text

# ---------------------------------------------------------------------------
# Sidebar: history
# ---------------------------------------------------------------------------

with st.sidebar:
    st.title("Linguist Pro")
    st.caption("Recent refinements")

    if not controller.history:
        st.info("No history yet.")
    for entry in controller.history:
        preview = entry.original if len(entry.original) <= 60 else entry.original[:57] + "..."
        st.button(
            preview,
            key=f"history_{entry.id}",
            help=_format_timestamp(entry.timestamp),
            on_click=_on_history_click,
            args=(entry,),
            use_container_width=True,
        )

    if controller.history:
        st.divider()
        st.button("Clear all", on_click=_on_clear_history, type="secondary")

    usage_store: UsageStore | None = st.session_state.get("usage_store")
    if usage_store is not None:
        with st.expander("Usage"):
            try:
                stats = usage_store.get_monthly_stats()
                total_cost = usage_store.get_total_cost()
                recent = usage_store.get_logs(session_id=st.session_state.session_id, limit=5)
            except sqlite3.Error:
                logger.exception("Could not read usage stats")
                st.caption("Usage stats unavailable.")
            else:
                st.metric(f"Requests ({stats['month']})", stats["total_runs"])
                st.caption(
                    f"Success rate {stats['success_rate']:.0f}%, "
                    f"this month ${stats['total_cost_usd']:.4f}, all time ${total_cost:.4f}"
                )
                for log in recent:
                    status = "ok" if log.success else "failed"
                    st.caption(
                        f"{log.timestamp:%H:%M} {log.tone}, {log.input_chars} chars, "
                        f"{log.elapsed_seconds:.1f}s, {status}"
                    )

# ---------------------------------------------------------------------------
# Main area
# ---------------------------------------------------------------------------

st.header("Linguist Pro")
st.markdown("Polish your thoughts into professional, grammatically perfect English.")

tones = list(ToneType)
tone = st.radio(
    "Tone",
    tones,
    index=tones.index(controller.tone),
    format_func=lambda t: t.value,
    horizontal=True,
)
controller.set_tone(tone)

input_text = st.text_area(
    "Your text",
    key="input_text",
    height=200,
    placeholder="Paste your text in any language here...",
)
controller.set_input(input_text)

cols = st.columns([4, 1])
with cols[0]:
    st.caption(f"{len(input_text)} characters")
with cols[1]:
    st.button(
        "Refine",
        type="primary",
        disabled=not controller.can_refine,
        on_click=_on_refine_click,
        args=(controller.generation,),
        use_container_width=True,
    )

pending = st.session_state.pop("refine_pending", None)
if pending is not None:
    with st.spinner("Refining..."):
        issued = asyncio.run(controller.refine(generation=pending))
    if issued:
        st.rerun()

if controller.error:
    st.error(controller.error)

if controller.outcome is not None:
    st.subheader("Refined text")
    st.markdown(controller.outcome.text)
    if controller.outcome.explanation:
        st.caption(f"Key improvements: {controller.outcome.explanation}")

    if st.button("Copy"):
        controller.copy_result()
    if controller.copy_acknowledged:
        st.success("Copied!")
