import threading

import pytest

from src.code_reviewer.models import default_model_id, list_model_options
from src.code_reviewer.openrouter_client import AuthenticationError, CompletionError
from src.code_reviewer.review_form import (
    API_KEY_INVALID_MESSAGE,
    API_KEY_REQUIRED_MESSAGE,
    EMPTY_CODE_NOTICE,
    REVIEW_FAILED_MESSAGE,
    STATUS_AUTH_ERROR,
    STATUS_BUSY,
    STATUS_EMPTY_CODE,
    STATUS_ERROR,
    STATUS_MISSING_API_KEY,
    STATUS_SUCCESS,
    ReviewFormController,
)


class RecordingClient:
    def __init__(self, reply="Looks good", error=None):
        self.reply = reply
        self.error = error
        self.calls = []
        self.loading_seen = []
        self.controller = None

    def complete(self, api_key, model, messages):
        self.calls.append({"api_key": api_key, "model": model, "messages": messages})
        if self.controller is not None:
            self.loading_seen.append(self.controller.state.loading)
        if self.error is not None:
            raise self.error
        return self.reply


class ExplodingExtractionClient:
    def complete(self, api_key, model, messages):
        _ = api_key
        _ = model
        _ = messages
        return {"choices": []}["choices"][0]["message"]["content"]


def _controller(client, api_key="sk-or-test"):
    controller = ReviewFormController(client=client, default_api_key=api_key)
    if isinstance(client, RecordingClient):
        client.controller = controller
    return controller


def test_initial_state_uses_defaults():
    controller = _controller(RecordingClient(), api_key="sk-env")

    state = controller.state
    assert state.code_text == ""
    assert state.api_key == "sk-env"
    assert state.model_id == default_model_id()
    assert state.review_text == ""
    assert state.api_key_error == ""
    assert state.loading is False


@pytest.mark.parametrize("code", ["", "   ", "\n\t  \n"])
def test_empty_code_blocks_submission(code):
    client = RecordingClient()
    controller = _controller(client)
    controller.state.review_text = "previous review"

    outcome = controller.submit_review(code_text=code)

    assert outcome.status == STATUS_EMPTY_CODE
    assert outcome.notice == EMPTY_CODE_NOTICE
    assert client.calls == []
    assert controller.state.loading is False
    assert controller.state.review_text == "previous review"


@pytest.mark.parametrize("api_key", ["", "   "])
def test_missing_api_key_sets_key_error_without_calling_out(api_key):
    client = RecordingClient()
    controller = _controller(client, api_key="")

    outcome = controller.submit_review(code_text="print('hi')", api_key=api_key)

    assert outcome.status == STATUS_MISSING_API_KEY
    assert controller.state.api_key_error == API_KEY_REQUIRED_MESSAGE
    assert client.calls == []
    assert controller.state.loading is False


def test_success_sets_review_and_clears_key_error():
    client = RecordingClient(reply="Looks good")
    controller = _controller(client)
    controller.state.api_key_error = API_KEY_REQUIRED_MESSAGE

    outcome = controller.submit_review(code_text="x = 1")

    assert outcome.status == STATUS_SUCCESS
    assert controller.state.review_text == "Looks good"
    assert controller.state.api_key_error == ""
    assert controller.state.loading is False
    assert client.loading_seen == [True]


def test_request_carries_selected_model_key_and_prompt():
    client = RecordingClient()
    controller = _controller(client, api_key="sk-or-abc")
    selected = list_model_options()[2]["id"]

    controller.submit_review(code_text="def f():\n    pass", model_id=selected)

    call = client.calls[0]
    assert call["model"] == selected
    assert call["api_key"] == "sk-or-abc"
    assert call["messages"] == [
        {
            "role": "user",
            "content": "Please review this code and suggest improvements:\n\ndef f():\n    pass",
        }
    ]


def test_auth_rejection_sets_key_error_and_clears_review():
    client = RecordingClient(error=AuthenticationError("rejected", status_code=401))
    controller = _controller(client)
    controller.state.review_text = "stale review"

    outcome = controller.submit_review(code_text="x = 1")

    assert outcome.status == STATUS_AUTH_ERROR
    assert controller.state.api_key_error == API_KEY_INVALID_MESSAGE
    assert controller.state.review_text == ""
    assert controller.state.loading is False


@pytest.mark.parametrize(
    "error",
    [
        CompletionError("server error", status_code=500),
        CompletionError("Network error: connection refused"),
        ValueError("unexpected"),
    ],
)
def test_generic_failure_sets_review_message_and_keeps_key_error(error):
    client = RecordingClient(error=error)
    controller = _controller(client)

    outcome = controller.submit_review(code_text="x = 1")

    assert outcome.status == STATUS_ERROR
    assert controller.state.review_text == REVIEW_FAILED_MESSAGE
    assert controller.state.api_key_error == ""
    assert controller.state.loading is False


def test_resubmit_after_missing_key_clears_key_error_before_failing():
    controller = _controller(RecordingClient(error=CompletionError("boom", status_code=503)))
    controller.submit_review(code_text="x = 1", api_key="")
    assert controller.state.api_key_error == API_KEY_REQUIRED_MESSAGE

    controller.submit_review(api_key="sk-or-new")

    assert controller.state.review_text == REVIEW_FAILED_MESSAGE
    assert controller.state.api_key_error == ""


def test_loading_is_released_when_content_extraction_raises():
    controller = _controller(ExplodingExtractionClient())

    outcome = controller.submit_review(code_text="x = 1")

    assert outcome.status == STATUS_ERROR
    assert controller.state.loading is False
    assert controller.state.review_text == REVIEW_FAILED_MESSAGE


def test_clear_resets_code_review_and_model_only():
    client = RecordingClient(error=AuthenticationError("rejected", status_code=401))
    controller = _controller(client, api_key="sk-or-keep")
    controller.submit_review(code_text="x = 1", model_id=list_model_options()[1]["id"])
    controller.state.review_text = "some review"

    controller.clear()

    state = controller.state
    assert state.code_text == ""
    assert state.review_text == ""
    assert state.model_id == default_model_id()
    assert state.api_key == "sk-or-keep"
    assert state.api_key_error == API_KEY_INVALID_MESSAGE


def test_select_model_rejects_unknown_identifier():
    controller = _controller(RecordingClient())

    with pytest.raises(ValueError):
        controller.select_model("openai/gpt-4o")
    assert controller.state.model_id == default_model_id()


def test_overlapping_submit_is_rejected_as_busy():
    started = threading.Event()
    release = threading.Event()

    class BlockingClient:
        def __init__(self):
            self.calls = 0

        def complete(self, api_key, model, messages):
            self.calls += 1
            started.set()
            release.wait(timeout=5)
            return "first review"

    client = BlockingClient()
    controller = _controller(client)
    results = []
    worker = threading.Thread(
        target=lambda: results.append(controller.submit_review(code_text="x = 1"))
    )
    worker.start()
    assert started.wait(timeout=5)

    second = controller.submit_review(code_text="y = 2")
    release.set()
    worker.join(timeout=5)

    assert second.status == STATUS_BUSY
    assert client.calls == 1
    assert results[0].status == STATUS_SUCCESS
    assert controller.state.review_text == "first review"
    assert controller.state.loading is False
