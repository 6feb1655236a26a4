from pathlib import Path
import sys

import streamlit as st

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

from src.code_reviewer.models import default_model_id, list_model_options  # noqa: E402
from src.code_reviewer.openrouter_client import OpenRouterChatClient  # noqa: E402
from src.code_reviewer.review_form import (  # noqa: E402
    STATUS_BUSY,
    ReviewFormController,
)
from src.code_reviewer.settings import Settings, configure_logging, load_settings  # noqa: E402

BUSY_NOTICE = "A review is already in progress."


@st.cache_resource
def get_settings() -> Settings:
    settings = load_settings(ROOT_DIR / ".env")
    configure_logging(settings.log_level)
    return settings


def get_controller() -> ReviewFormController:
    return st.session_state.review_controller


def ensure_state() -> None:
    settings = get_settings()
    if "review_controller" not in st.session_state:
        client = OpenRouterChatClient(
            api_url=settings.api_url,
            timeout_seconds=settings.timeout_seconds,
        )
        st.session_state.review_controller = ReviewFormController(
            client=client,
            default_api_key=settings.default_api_key,
        )
    state = get_controller().state
    if "code_text" not in st.session_state:
        st.session_state.code_text = state.code_text
    if "api_key" not in st.session_state:
        st.session_state.api_key = state.api_key
    if "model_id" not in st.session_state:
        st.session_state.model_id = state.model_id
    if "review_pending" not in st.session_state:
        st.session_state.review_pending = False
    if "review_notice" not in st.session_state:
        st.session_state.review_notice = ""


def handle_clear() -> None:
    controller = get_controller()
    controller.clear()
    # widget values must be reset before the widgets are rendered again
    st.session_state.code_text = controller.state.code_text
    st.session_state.model_id = controller.state.model_id


def request_review() -> None:
    # the request itself runs after the button has been rendered disabled
    st.session_state.review_pending = True
    st.session_state.review_notice = ""


def run_review() -> None:
    controller = get_controller()
    try:
        with st.spinner("Reviewing..."):
            outcome = controller.submit_review(
                code_text=st.session_state.code_text,
                api_key=st.session_state.api_key,
                model_id=st.session_state.model_id or default_model_id(),
            )
    finally:
        st.session_state.review_pending = False
    if outcome.notice:
        st.session_state.review_notice = outcome.notice
    elif outcome.status == STATUS_BUSY:
        st.session_state.review_notice = BUSY_NOTICE


st.set_page_config(page_title="AI Code Reviewer")
st.title("🧠 AI Code Reviewer")
ensure_state()

st.text_area(
    "Code",
    key="code_text",
    height=260,
    placeholder="Paste your code here...",
    label_visibility="collapsed",
)

st.text_input(
    "API Key:",
    key="api_key",
    type="password",
    placeholder="Enter your OpenRouter API key",
    help="Stored only in current Streamlit session.",
)
api_key_error_slot = st.empty()

model_options = list_model_options()
model_lookup = {option["id"]: option["name"] for option in model_options}
busy = st.session_state.review_pending or get_controller().state.loading

model_col, review_col, clear_col = st.columns([3, 1, 1])
with model_col:
    st.selectbox(
        "Model",
        [option["id"] for option in model_options],
        format_func=lambda x: model_lookup.get(x, x),
        key="model_id",
        label_visibility="collapsed",
    )
with review_col:
    st.button(
        "Reviewing..." if busy else "Review Code",
        key="review_button",
        on_click=request_review,
        disabled=busy,
        type="primary",
        use_container_width=True,
    )
with clear_col:
    st.button("Clear", key="clear_button", on_click=handle_clear, use_container_width=True)

if st.session_state.review_pending:
    run_review()
    st.rerun()

notice = st.session_state.review_notice
if notice:
    st.session_state.review_notice = ""
    st.warning(notice)

state = get_controller().state
if state.api_key_error:
    api_key_error_slot.error(state.api_key_error)

st.subheader("Review:")
if state.review_text:
    st.code(state.review_text, language="markdown", wrap_lines=True)
