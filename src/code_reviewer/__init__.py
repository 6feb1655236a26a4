from importlib import import_module
from typing import Any

__all__ = [
    "MODEL_OPTIONS",
    "default_model_id",
    "list_model_options",
    "OpenRouterChatClient",
    "ReviewFormController",
    "ReviewFormState",
    "Settings",
    "load_settings",
]


def __getattr__(name: str) -> Any:
    if name in {"MODEL_OPTIONS", "default_model_id", "list_model_options"}:
        module = import_module(".models", __name__)
        return getattr(module, name)
    if name == "OpenRouterChatClient":
        module = import_module(".openrouter_client", __name__)
        return getattr(module, name)
    if name in {"ReviewFormController", "ReviewFormState"}:
        module = import_module(".review_form", __name__)
        return getattr(module, name)
    if name in {"Settings", "load_settings"}:
        module = import_module(".settings", __name__)
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
