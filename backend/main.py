# Role: FastAPI app bootstrap. Loads environment config early, configures logging, registers the relay
# router, and exposes health/docs endpoints.

import logging

from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException

import backend.config
backend.config.load_env()

from backend.api.chat import method_not_allowed_handler, router as chat_router

logging.basicConfig(
    level=logging.DEBUG if backend.config.DEBUG else logging.INFO,
    format="[%(asctime)s] %(levelname)s %(name)s - %(message)s",
)

app = FastAPI(title="Portfolio Chat Relay", version="0.1.0")
app.include_router(chat_router)
app.add_exception_handler(StarletteHTTPException, method_not_allowed_handler)

@app.get("/")
def root() -> dict:
    # Role: quick discoverability for clients (where are docs/health/relay).
    return {
        "message": "Portfolio chat relay is running",
        "chat": "/api/chat",
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
