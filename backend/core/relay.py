# Role: Credential-injecting pass-through to the upstream chat-completions API. Stateless: one payload in,
# one RelayResult out. Upstream status and JSON body are returned unchanged; failures map to fixed messages.

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

import requests

import backend.config as config

logger = logging.getLogger(__name__)

METHOD_NOT_ALLOWED = "Method not allowed"
KEY_NOT_CONFIGURED = "API Key not configured"
UPSTREAM_FAILED = "Failed to fetch AI response"


@dataclass(frozen=True)
class RelayResult:
    status_code: int
    body: Any


def error_result(status_code: int, message: str) -> RelayResult:
    return RelayResult(status_code=status_code, body={"error": message})


class RelayProxy:
    def __init__(
        self,
        api_key_provider: Optional[Callable[[], Optional[str]]] = None,
        upstream_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        # Key line: the key is looked up per call, never cached on the instance.
        self._api_key_provider = api_key_provider or config.upstream_api_key
        self._upstream_url = upstream_url
        self._timeout = timeout

    def forward(self, payload: Any) -> RelayResult:
        # 1) Fail fast when no credential is configured (no upstream call)
        # 2) POST the body verbatim with Bearer credential
        # 3) Mirror upstream status + JSON body
        api_key = self._api_key_provider()
        if not api_key:
            logger.error("Relay called without UPSTREAM_API_KEY configured")
            return error_result(500, KEY_NOT_CONFIGURED)

        url = self._upstream_url or config.upstream_api_url()
        timeout = self._timeout if self._timeout is not None else config.upstream_timeout()

        try:
            resp = requests.post(
                url,
                json=payload,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {api_key}",
                },
                timeout=timeout,
            )
        except requests.RequestException:
            logger.exception("Upstream request failed")
            return error_result(500, UPSTREAM_FAILED)

        try:
            data = resp.json()
        except ValueError:
            # requests.JSONDecodeError is both a ValueError and a RequestException.
            logger.exception("Upstream returned a non-JSON body (status %s)", resp.status_code)
            return error_result(500, UPSTREAM_FAILED)

        if config.DEBUG:
            print("RELAY upstream status:", resp.status_code)

        return RelayResult(status_code=resp.status_code, body=data)
