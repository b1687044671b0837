# Role: Streamlit chat widget.
# - WidgetController is authoritative (history, in-flight guard, fallback replies).
# - Sidebar holds the confirm-guarded "clear history" action.

from __future__ import annotations

import streamlit as st

import backend.config
backend.config.load_env()

from backend.core.conversation_store import ConversationStore
from backend.core.widget_controller import WidgetController
from backend.models.message import ChatTurn
from backend.storage.local_storage import FileStorage
from backend.utils.formatting import format_message, format_relative_time


# ----------------------------
# Session helpers
# ----------------------------
def ensure_session() -> WidgetController:
    if "controller" not in st.session_state:
        settings = backend.config.get_settings()
        store = ConversationStore(
            storage=FileStorage(settings.storage_dir),
            max_messages=settings.max_messages,
            cache_expiry=settings.cache_expiry,
            welcome_message=settings.welcome_message,
        )
        store.load()
        controller = WidgetController.from_settings(settings, store)
        controller.open()
        st.session_state["controller"] = controller
    return st.session_state["controller"]


# ----------------------------
# UI polish
# ----------------------------
def inject_css() -> None:
    st.markdown(
        """
<style>
.block-container { max-width: 860px; padding-top: 2rem; padding-bottom: 2rem; }

.chat-message-content pre {
  border-radius: 10px;
  padding: 10px 12px;
  background: rgba(49, 51, 63, 0.06);
  overflow-x: auto;
}

.chat-message-content ol,
.chat-message-content ul { margin: 0.25rem 0 0.25rem 1.25rem; }

.chat-message-time {
  font-size: 0.75rem;
  opacity: 0.6;
  margin-top: 4px;
}

div[data-testid="stChatInput"] textarea { min-height: 44px; }
</style>
""",
        unsafe_allow_html=True,
    )


# ----------------------------
# Sidebar
# ----------------------------
def render_sidebar(controller: WidgetController) -> None:
    st.sidebar.title("Chat")
    st.sidebar.caption(f"Keeping the last {controller.settings.max_messages} messages.")

    confirm = st.sidebar.checkbox("Yes, clear my conversation history", disabled=controller.is_typing)
    if st.sidebar.button("🗑 Clear history", use_container_width=True, disabled=controller.is_typing):
        if controller.clear(confirm):
            st.rerun()
        st.sidebar.warning("Tick the confirmation box first.")


# ----------------------------
# Chat
# ----------------------------
def render_turn(turn: ChatTurn) -> None:
    with st.chat_message(turn.role):
        st.markdown(
            f'<div class="chat-message-content">{format_message(turn.content)}</div>'
            f'<div class="chat-message-time">{format_relative_time(turn.timestamp)}</div>',
            unsafe_allow_html=True,
        )


def render_chat(controller: WidgetController) -> None:
    for turn in controller.store.turns:
        render_turn(turn)


# ----------------------------
# Main
# ----------------------------
def main() -> None:
    st.set_page_config(page_title="Portfolio Assistant", page_icon="💬", layout="centered")
    inject_css()

    st.title("💬 Ask me anything")
    st.caption("Questions about the projects, skills, or how to get in touch.")

    controller = ensure_session()
    render_sidebar(controller)
    render_chat(controller)

    user_input = st.chat_input("Type a message…", disabled=controller.is_typing)
    if not user_input or not user_input.strip():
        return

    # Echo user message immediately; the controller appends it to the store on send().
    with st.chat_message("user"):
        st.markdown(format_message(user_input.strip()), unsafe_allow_html=True)

    with st.spinner("Thinking..."):
        reply = controller.send(user_input)

    if reply is not None:
        render_turn(reply)


if __name__ == "__main__":
    main()
