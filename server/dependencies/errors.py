"""Exception handlers mapping failures onto {"success": false, "error": ...} responses.

Validation failures are client errors (400) with a descriptive message.
Downstream failures (embedding, vector store, provider) are logged in full and
surface to the caller only as a generic message (500).
"""

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException

from server.models.responses import ErrorResponse
from shared.clients.ClientInterface import ClientRequestError
from shared.clients.llm.LLMClientInterface import LLMProviderError

GENERIC_SEARCH_ERROR = "Knowledge base request failed. Please try again later."
GENERIC_PROVIDER_ERROR = "Answer generation failed. Please try again later."


def validation_message(errors: list[dict]) -> str:
    """Turn pydantic error entries into one readable message.

    Custom validator messages are used verbatim; other errors are prefixed
    with the offending field name.
    """
    if not errors:
        return "Invalid request"
    error = errors[0]
    ctx_error = (error.get("ctx") or {}).get("error")
    if ctx_error is not None:
        return str(ctx_error)
    field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    return f"{field}: {error.get('msg')}" if field else str(error.get("msg"))


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).to_json_dict())


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the knowledge-base error handlers to an app."""

    @app.exception_handler(RequestValidationError)
    async def _request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error(400, validation_message(exc.errors()))

    @app.exception_handler(ValidationError)
    async def _model_validation(request: Request, exc: ValidationError) -> JSONResponse:
        return _error(400, validation_message(exc.errors()))

    @app.exception_handler(HTTPException)
    async def _http(request: Request, exc: HTTPException) -> JSONResponse:
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(LLMProviderError)
    async def _provider(request: Request, exc: LLMProviderError) -> JSONResponse:
        request.app.state.logging.error(
            "Answer generation failed (%s, status %s): %s", exc.engine, exc.status_code, exc.body[:500]
        )
        return _error(500, GENERIC_PROVIDER_ERROR)

    @app.exception_handler(httpx.HTTPError)
    async def _transport(request: Request, exc: httpx.HTTPError) -> JSONResponse:
        request.app.state.logging.error("Downstream request failed: %s", exc)
        return _error(500, GENERIC_SEARCH_ERROR)

    @app.exception_handler(ClientRequestError)
    async def _client(request: Request, exc: ClientRequestError) -> JSONResponse:
        request.app.state.logging.error("Downstream request failed: %s", exc)
        return _error(500, GENERIC_SEARCH_ERROR)

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
        request.app.state.logging.exception("Unhandled error on %s: %s", request.url.path, exc)
        return _error(500, GENERIC_SEARCH_ERROR)
