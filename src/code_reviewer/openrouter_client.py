import http.client
import json
import logging
import urllib.error
import urllib.request
from typing import Any, Dict, List, Optional

OPENROUTER_CHAT_COMPLETIONS_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_TIMEOUT_SECONDS = 60.0

ChatMessage = Dict[str, str]

logger = logging.getLogger(__name__)


class CompletionError(RuntimeError):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(CompletionError):
    """The endpoint rejected the API key (HTTP 401)."""


class OpenRouterChatClient:
    def __init__(
        self,
        api_url: Optional[str] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.api_url = api_url or OPENROUTER_CHAT_COMPLETIONS_URL
        self.timeout_seconds = timeout_seconds

    def build_payload(self, model: str, messages: List[ChatMessage]) -> Dict[str, Any]:
        return {"model": model, "messages": list(messages)}

    def build_headers(self, api_key: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def complete(self, api_key: str, model: str, messages: List[ChatMessage]) -> str:
        if not str(api_key or "").strip():
            raise AuthenticationError("API key is not configured.")

        body = json.dumps(self.build_payload(model, messages)).encode("utf-8")
        request = urllib.request.Request(
            url=self.api_url,
            data=body,
            method="POST",
            headers=self.build_headers(api_key),
        )
        logger.debug("Requesting chat completion model=%s url=%s", model, self.api_url)

        try:
            with urllib.request.urlopen(request, timeout=self.timeout_seconds) as response:
                raw = response.read()
        except urllib.error.HTTPError as exc:
            details = exc.read().decode("utf-8", errors="replace")
            logger.warning("Chat completion failed with HTTP %s: %s", exc.code, details)
            if exc.code == 401:
                raise AuthenticationError(
                    f"OpenRouter rejected the API key: {details}", status_code=exc.code
                ) from exc
            raise CompletionError(
                f"OpenRouter API error ({exc.code}): {details}", status_code=exc.code
            ) from exc
        except urllib.error.URLError as exc:
            logger.warning("Chat completion network error: %s", exc.reason)
            raise CompletionError(f"Network error: {exc.reason}") from exc
        except (OSError, http.client.HTTPException) as exc:
            # socket timeouts and truncated bodies surface here rather than as URLError
            logger.warning("Chat completion transport error: %r", exc)
            raise CompletionError(f"Transport error: {exc!r}") from exc

        return _extract_message_content(raw)


def _extract_message_content(raw: bytes) -> str:
    try:
        parsed = json.loads(raw.decode("utf-8"))
        content = parsed["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError) as exc:
        raise CompletionError(f"Malformed completion response: {exc}") from exc
    if not isinstance(content, str):
        raise CompletionError("Malformed completion response: message content is not text.")
    return content
