"""Streamlit chat client for the Nomad RAG pipeline."""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path

import streamlit as st

from ui.i18n import get_translator

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------
st.set_page_config(page_title="Nomad RAG", page_icon="🧭", layout="wide")

if "lang" not in st.session_state:
    st.session_state.lang = "en"

if "history" not in st.session_state:
    st.session_state.history = []

with st.sidebar:
    lang = st.selectbox(
        "Language / Язык",
        options=["en", "ru"],
        index=["en", "ru"].index(st.session_state.lang),
        key="lang_selector",
    )
    st.session_state.lang = lang

t = get_translator(st.session_state.lang)

with st.sidebar:
    st.divider()
    provider_id = st.radio(t("sidebar_provider"), options=["claude", "grok", "gemini"])
    nomad_mode = st.toggle(t("sidebar_mode"), value=False)
    use_rag = st.toggle(t("sidebar_use_rag"), value=True)
    caller_prompt = st.text_area(t("sidebar_system_prompt"), value="")
    if st.button(t("sidebar_clear_chat")):
        st.session_state.history = []


# ---------------------------------------------------------------------------
# Cached resources
# ---------------------------------------------------------------------------
@st.cache_resource
def get_resources():
    from core.resources import init_resources

    return init_resources()


@st.cache_resource
def get_chat_service():
    from generation.chat import ChatService, build_providers
    from retrieval.retriever import Retriever

    resources = get_resources()
    return ChatService(build_providers(), Retriever(resources.embedder, resources.store))


def save_upload(uploaded) -> str:
    """Write an upload to its own temp dir, keeping the original file name."""
    path = Path(tempfile.mkdtemp(prefix="nomad-")) / Path(uploaded.name).name
    path.write_bytes(uploaded.getvalue())
    return str(path)


def discard_upload(path: str) -> None:
    shutil.rmtree(Path(path).parent, ignore_errors=True)


# ---------------------------------------------------------------------------
# Header
# ---------------------------------------------------------------------------
st.title(t("app_title"))
st.caption(t("app_subtitle"))

tab_chat, tab_kb, tab_settings = st.tabs(
    [t("tab_chat"), t("tab_knowledge"), t("tab_settings")]
)

# ===== Tab 1: Chat =====
with tab_chat:
    for turn in st.session_state.history:
        with st.chat_message(turn["role"]):
            st.markdown(turn["content"])

    attachments = st.file_uploader(
        t("chat_attachments"),
        type=["jpg", "jpeg", "png", "gif", "pdf", "doc", "docx", "txt"],
        accept_multiple_files=True,
    )
    message = st.chat_input(t("chat_input"))

    if message:
        from ingestion.loader import load_attachment

        with st.chat_message("user"):
            st.markdown(message)

        paths = [save_upload(f) for f in attachments or []]
        try:
            with st.spinner(t("chat_thinking")):
                response = get_chat_service().chat_turn(
                    provider_id,
                    {
                        "message": message,
                        "system_prompt": caller_prompt or None,
                        "conversation_history": st.session_state.history,
                        "use_rag": use_rag,
                        "mode": nomad_mode,
                        "attachments": [load_attachment(p) for p in paths],
                    },
                )

            with st.chat_message("assistant"):
                st.markdown(response.response)
                if response.rag_used:
                    st.caption(t("chat_rag_used", confidence=response.confidence))
                if response.outcome.value != "ok":
                    st.warning(t("chat_degraded", kind=response.error_kind))

            st.session_state.history.append({"role": "user", "content": message})
            st.session_state.history.append({"role": "assistant", "content": response.response})
        except Exception as e:
            st.error(t("error", msg=str(e)))
        finally:
            for p in paths:
                discard_upload(p)


# ===== Tab 2: Knowledge base =====
with tab_kb:
    st.header(t("kb_header"))

    uploaded = st.file_uploader(t("kb_upload"), type=["pdf", "doc", "docx", "txt"])

    if st.button(t("kb_button"), disabled=uploaded is None):
        from ingestion.pipeline import Ingestor

        resources = get_resources()
        path = save_upload(uploaded)
        try:
            result = Ingestor(resources.embedder, resources.store).ingest_file(path)
            st.success(t("kb_success", chunks=result.chunks_stored))
        except Exception as e:
            st.error(t("error", msg=str(e)))
        finally:
            discard_upload(path)

    st.divider()
    query = st.text_input(t("kb_search"))
    if query:
        from retrieval.retriever import Retriever

        resources = get_resources()
        result = Retriever(resources.embedder, resources.store).retrieve(query)
        status = "Accepted" if result.accepted else "Rejected"
        st.info(t("kb_result", status=status, confidence=result.confidence, count=result.match_count))
        if result.context_text:
            st.text(result.context_text)
        elif result.failure_reason:
            st.error(t("error", msg=result.failure_reason))


# ===== Tab 3: Settings & Stats =====
with tab_settings:
    st.header(t("settings_header"))

    st.subheader(t("settings_current"))

    from core.config import settings

    st.json(
        {
            "Embedding Model": settings.embedding_model,
            "Vector Backend": settings.vector_backend,
            "Chunk Size": settings.chunk_size,
            "Top-K": settings.top_k,
            "Confidence Threshold": settings.confidence_threshold,
            "History Limit": settings.history_limit,
            "Temperatures": [settings.precision_temperature, settings.exploratory_temperature],
            "Provider Timeout": settings.provider_timeout,
            "Models": [settings.anthropic_model, settings.grok_model, settings.gemini_model],
        }
    )

    st.subheader(t("settings_store_stats"))
    try:
        chunk_count = get_resources().store.count()
        st.metric(t("settings_total_chunks", count=chunk_count), value=chunk_count)
    except Exception as e:
        st.error(t("error", msg=str(e)))

    if st.button(t("settings_check_providers")):
        from generation.health import check_providers

        st.json(check_providers(get_chat_service().providers))

    st.subheader(t("settings_clear_db"))
    confirm = st.text_input(t("settings_clear_confirm"), key="clear_confirm")
    if st.button(t("settings_clear_button"), disabled=confirm != "DELETE"):
        try:
            deleted = get_resources().store.delete_all()
            st.success(t("settings_cleared", count=deleted))
        except Exception as e:
            st.error(t("error", msg=str(e)))
