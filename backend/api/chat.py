# Role: Thin HTTP adapter for the relay endpoint. Parses the raw JSON body and delegates forwarding to
# RelayProxy (credential handling lives in core, not in the API layer). Non-POST methods get a JSON 405.

from __future__ import annotations

import json

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.api.deps import relay_proxy
from backend.core.relay import METHOD_NOT_ALLOWED

CHAT_PATH = "/api/chat"

router = APIRouter(tags=["chat"])


@router.post(CHAT_PATH)
async def chat(request: Request) -> JSONResponse:
    # 1) Parse body (malformed JSON never reaches upstream)
    # 2) Forward on a worker thread (requests is blocking)
    # 3) Mirror status + body
    raw = await request.body()
    try:
        payload = json.loads(raw)
    except ValueError:
        return JSONResponse(status_code=400, content={"error": "Invalid JSON body"})

    result = await run_in_threadpool(relay_proxy.forward, payload)
    return JSONResponse(status_code=result.status_code, content=result.body)


async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException) -> Response:
    # Key line: the router raises 405 for every method it has no route for (TRACE, HEAD, custom verbs).
    if exc.status_code == 405 and request.url.path == CHAT_PATH:
        return JSONResponse(
            status_code=405,
            content={"error": METHOD_NOT_ALLOWED},
            headers={"Allow": "POST"},
        )
    return await http_exception_handler(request, exc)
