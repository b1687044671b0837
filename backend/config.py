# Role: Central configuration module. Loads .env into environment variables, computes runtime flags (DEBUG)
# and builds the widget-side ChatSettings. Importers read backend.config.DEBUG to control debug traces.

from __future__ import annotations

import os
from datetime import timedelta
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from backend.prompts.system_prompt import (
    FALLBACK_MESSAGE,
    WELCOME_MESSAGE,
    build_system_prompt,
)

DEBUG: bool = False

DEFAULT_RELAY_URL = "http://127.0.0.1:8000/api/chat"
DEFAULT_UPSTREAM_URL = "https://api.siliconflow.cn/v1/chat/completions"


def load_env() -> None:
    """
    Load .env into os.environ, then recompute DEBUG.
    This makes DEBUG correct even if load_env() is called after import.
    """
    global DEBUG
    load_dotenv()
    # Key line: accept common truthy values.
    DEBUG = os.getenv("DEBUG", "0").lower() in {"1", "true", "yes"}


class ChatSettings(BaseModel):
    # Key line: api_url defaults to the relay, so no credential has to live on the client.
    api_url: str = DEFAULT_RELAY_URL
    api_key: Optional[str] = None
    model: str = "Qwen/Qwen2.5-7B-Instruct"
    system_prompt: str = Field(default_factory=build_system_prompt)
    welcome_message: str = WELCOME_MESSAGE
    fallback_message: str = FALLBACK_MESSAGE
    cache_expiry: timedelta = timedelta(hours=24)
    max_messages: int = Field(default=20, ge=1)
    temperature: float = 0.7
    max_tokens: int = 1000
    request_timeout: float = Field(default=60.0, gt=0)
    storage_dir: str = ".chat_storage"


def get_settings() -> ChatSettings:
    # Role: read CHAT_* overrides from the environment; unset values keep model defaults.
    overrides = {}

    api_url = os.getenv("CHAT_API_URL")
    if api_url:
        overrides["api_url"] = api_url

    api_key = os.getenv("CHAT_API_KEY")
    if api_key:
        overrides["api_key"] = api_key

    model = os.getenv("CHAT_MODEL")
    if model:
        overrides["model"] = model

    expiry_hours = os.getenv("CHAT_CACHE_EXPIRY_HOURS")
    if expiry_hours:
        overrides["cache_expiry"] = timedelta(hours=float(expiry_hours))

    max_messages = os.getenv("CHAT_MAX_MESSAGES")
    if max_messages:
        overrides["max_messages"] = int(max_messages)

    temperature = os.getenv("CHAT_TEMPERATURE")
    if temperature:
        overrides["temperature"] = float(temperature)

    max_tokens = os.getenv("CHAT_MAX_TOKENS")
    if max_tokens:
        overrides["max_tokens"] = int(max_tokens)

    timeout = os.getenv("CHAT_REQUEST_TIMEOUT")
    if timeout:
        overrides["request_timeout"] = float(timeout)

    storage_dir = os.getenv("CHAT_STORAGE_DIR")
    if storage_dir:
        overrides["storage_dir"] = storage_dir

    return ChatSettings(**overrides)


def upstream_api_key() -> Optional[str]:
    # Key line: read per request so a missing key is detected without a restart.
    return os.getenv("UPSTREAM_API_KEY") or None


def upstream_api_url() -> str:
    return os.getenv("UPSTREAM_API_URL", DEFAULT_UPSTREAM_URL)


def upstream_timeout() -> float:
    return float(os.getenv("UPSTREAM_TIMEOUT_SECONDS", "60"))
