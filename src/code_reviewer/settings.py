import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Union

from dotenv import load_dotenv

from .openrouter_client import DEFAULT_TIMEOUT_SECONDS, OPENROUTER_CHAT_COMPLETIONS_URL

API_KEY_ENV_VARS = ("OPENROUTER_API_KEY", "VITE_OPENROUTER_API_KEY")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    default_api_key: str = ""
    api_url: str = OPENROUTER_CHAT_COMPLETIONS_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        default_api_key = ""
        for name in API_KEY_ENV_VARS:
            default_api_key = _read(env, name)
            if default_api_key:
                break
        return cls(
            default_api_key=default_api_key,
            api_url=_read(env, "OPENROUTER_API_URL") or OPENROUTER_CHAT_COMPLETIONS_URL,
            timeout_seconds=_parse_timeout(_read(env, "OPENROUTER_TIMEOUT_SECONDS")),
            log_level=(_read(env, "CODE_REVIEWER_LOG_LEVEL") or "INFO").upper(),
        )


def load_settings(dotenv_path: Optional[Union[str, Path]] = None) -> Settings:
    # variables already present in the environment take precedence over .env
    load_dotenv(dotenv_path=dotenv_path, override=False)
    return Settings.from_env()


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def _read(env: Mapping[str, str], name: str) -> str:
    return str(env.get(name, "") or "").strip()


def _parse_timeout(raw: str) -> float:
    if not raw:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"OPENROUTER_TIMEOUT_SECONDS must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"OPENROUTER_TIMEOUT_SECONDS must be positive, got {raw!r}")
    return value
