import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Protocol

from .models import default_model_id, is_known_model
from .openrouter_client import AuthenticationError, ChatMessage, OpenRouterChatClient
from .prompts import build_review_messages

EMPTY_CODE_NOTICE = "Please enter some code."
API_KEY_REQUIRED_MESSAGE = "API key is required."
API_KEY_INVALID_MESSAGE = "❌ API key is invalid or expired. Please update your API key."
REVIEW_FAILED_MESSAGE = "❌ Error getting review. Check your API key or model."

STATUS_SUCCESS = "success"
STATUS_AUTH_ERROR = "auth_error"
STATUS_ERROR = "error"
STATUS_EMPTY_CODE = "empty_code"
STATUS_MISSING_API_KEY = "missing_api_key"
STATUS_BUSY = "busy"

logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
    def complete(self, api_key: str, model: str, messages: List[ChatMessage]) -> str:
        ...


@dataclass
class ReviewFormState:
    code_text: str = ""
    api_key: str = ""
    model_id: str = field(default_factory=default_model_id)
    review_text: str = ""
    api_key_error: str = ""
    loading: bool = False


@dataclass
class ReviewOutcome:
    status: str
    notice: str = ""


class ReviewFormController:
    """Owns the review form state and every transition applied to it.

    Field edits, ``submit_review`` and ``clear`` are the only writers. A
    submit that arrives while another call is outstanding is answered with
    ``STATUS_BUSY`` instead of issuing a second request.
    """

    def __init__(
        self,
        client: Optional[CompletionClient] = None,
        default_api_key: str = "",
    ) -> None:
        self.client = client or OpenRouterChatClient()
        self.state = ReviewFormState(api_key=default_api_key or "")
        self._submit_lock = threading.Lock()

    def set_code_text(self, code_text: str) -> None:
        self.state.code_text = code_text or ""

    def set_api_key(self, api_key: str) -> None:
        self.state.api_key = api_key or ""

    def select_model(self, model_id: str) -> None:
        if not is_known_model(model_id):
            raise ValueError(f"Unknown model: {model_id}")
        self.state.model_id = model_id

    def submit_review(
        self,
        code_text: Optional[str] = None,
        api_key: Optional[str] = None,
        model_id: Optional[str] = None,
    ) -> ReviewOutcome:
        if not self._submit_lock.acquire(blocking=False):
            logger.info("Ignoring review submit while a request is outstanding.")
            return ReviewOutcome(status=STATUS_BUSY)
        try:
            if code_text is not None:
                self.set_code_text(code_text)
            if api_key is not None:
                self.set_api_key(api_key)
            if model_id is not None:
                self.select_model(model_id)
            return self._submit_current()
        finally:
            self._submit_lock.release()

    def clear(self) -> None:
        self.state.code_text = ""
        self.state.review_text = ""
        self.state.model_id = default_model_id()

    def _submit_current(self) -> ReviewOutcome:
        state = self.state
        if not state.code_text.strip():
            logger.info("Review blocked: no code entered.")
            return ReviewOutcome(status=STATUS_EMPTY_CODE, notice=EMPTY_CODE_NOTICE)
        if not state.api_key.strip():
            logger.info("Review blocked: API key missing.")
            state.api_key_error = API_KEY_REQUIRED_MESSAGE
            return ReviewOutcome(status=STATUS_MISSING_API_KEY)

        state.api_key_error = ""
        state.review_text = ""
        with self._loading():
            try:
                state.review_text = self.client.complete(
                    api_key=state.api_key,
                    model=state.model_id,
                    messages=build_review_messages(state.code_text),
                )
                return ReviewOutcome(status=STATUS_SUCCESS)
            except AuthenticationError as exc:
                logger.warning("Review rejected by endpoint: %s", exc)
                state.api_key_error = API_KEY_INVALID_MESSAGE
                state.review_text = ""
                return ReviewOutcome(status=STATUS_AUTH_ERROR)
            except Exception:
                logger.exception("Review request failed (model=%s).", state.model_id)
                state.review_text = REVIEW_FAILED_MESSAGE
                return ReviewOutcome(status=STATUS_ERROR)

    @contextmanager
    def _loading(self) -> Iterator[None]:
        self.state.loading = True
        try:
            yield
        finally:
            self.state.loading = False
