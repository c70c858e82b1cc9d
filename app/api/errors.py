"""
app/api/errors.py

Request rejection error and its JSON rendering.

Error bodies are flat objects such as ``{"error": "..."}`` or
``{"message": "..."}`` rather than FastAPI's ``{"detail": ...}`` envelope.
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class APIRequestError(Exception):
    """
    Raised by routers and dependencies to answer with a specific status and body.
    """

    def __init__(self, status_code: int, **payload: Any) -> None:
        super().__init__(payload.get("error") or payload.get("message") or str(status_code))
        self.status_code = status_code
        self.payload = payload


async def _handle_api_request_error(_: Request, exc: APIRequestError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.payload)


def register_error_handlers(application: FastAPI) -> None:
    application.add_exception_handler(APIRequestError, _handle_api_request_error)
