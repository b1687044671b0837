# Role: Minimal wrapper around the chat-completions endpoint (the relay by default). Centralizes URL,
# optional client-side key, timeout and error handling, so the widget calls a single method: complete(payload).
# The HTTP call runs on a worker thread so the caller can cancel it and enforce a hard deadline.

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import Any, Dict, Optional

import requests

import backend.config as config


class ChatClientError(RuntimeError):
    """Any failure to obtain a reply: transport, status, payload, cancel or timeout."""


class RequestCancelled(ChatClientError):
    pass


class RequestTimedOut(ChatClientError):
    pass


class CancelToken:
    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class ChatCompletionClient:
    _POLL_SECONDS = 0.05

    def __init__(
        self,
        api_url: str,
        api_key: Optional[str] = None,
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_url = api_url
        self.api_key = api_key
        self.timeout = timeout
        self._session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        # Key line: only the direct-to-upstream path carries a client-side key; the relay injects its own.
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _post(self, payload: Dict[str, Any]) -> requests.Response:
        return self._session.post(self.api_url, json=payload, headers=self._headers(), timeout=self.timeout)

    def complete(self, payload: Dict[str, Any], cancel_token: Optional[CancelToken] = None) -> str:
        # 1) Submit POST to the worker thread
        # 2) Poll until done, cancelled, or past the deadline
        # 3) Validate status + extract choices[0].message.content
        deadline = time.monotonic() + self.timeout
        # Key line: one worker per call; an abandoned call never queues ahead of the next one.
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="chat-client")
        future = executor.submit(self._post, payload)
        executor.shutdown(wait=False)

        while True:
            if cancel_token is not None and cancel_token.cancelled:
                future.cancel()
                raise RequestCancelled("Chat request cancelled")
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                future.cancel()
                raise RequestTimedOut(f"No reply within {self.timeout:.0f}s")
            try:
                resp = future.result(timeout=min(self._POLL_SECONDS, remaining))
                break
            except FutureTimeout:
                continue
            except requests.Timeout as e:
                raise RequestTimedOut(f"Chat request timed out: {e}") from e
            except requests.RequestException as e:
                raise ChatClientError(f"Chat request failed: {e}") from e

        if config.DEBUG:
            print("CHAT CLIENT status:", resp.status_code)

        if not resp.ok:
            raise ChatClientError(f"Chat request failed: HTTP {resp.status_code}")

        try:
            data = resp.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ChatClientError(f"Malformed chat response: {e!r}") from e

        if not isinstance(content, str):
            raise ChatClientError("Malformed chat response: content is not text")
        return content

    def close(self) -> None:
        self._session.close()
