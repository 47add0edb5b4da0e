"""Agent endpoint for the models extension using FastAPI."""

import logging
from functools import lru_cache

import uvicorn
from fastapi import Depends, FastAPI, Header, Request
from fastapi.responses import PlainTextResponse, StreamingResponse
from pydantic import ValidationError
from starlette.background import BackgroundTask

from models_extension.capabilities.registry import DEFAULT_REGISTRY
from models_extension.constants import KEY_IDENTIFIER_HEADER, SIGNATURE_HEADER, TOKEN_HEADER
from models_extension.errors import AuthenticationError, BadRequestError, ExtensionError
from models_extension.infra.runtime import (
    configure_logging,
    create_copilot_client,
    create_inference_client,
    ensure_langsmith_configured,
    flush_langsmith_traces,
    get_settings,
)
from models_extension.orchestration.base import ExtensionOrchestrator
from models_extension.orchestration.direct import DirectExtensionOrchestrator
from models_extension.orchestration.langgraph_flow import LangGraphExtensionOrchestrator
from models_extension.schemas import ExtensionRequest
from models_extension.services.extension_service import ExtensionService
from models_extension.streaming import ResponseChannel
from models_extension.verification import GitHubSignatureVerifier, RequestVerifier

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

app = FastAPI()


@lru_cache(maxsize=1)
def get_extension_service() -> ExtensionService:
    orchestrator: ExtensionOrchestrator
    if get_settings().orchestrator == "langgraph":
        orchestrator = LangGraphExtensionOrchestrator()
    else:
        orchestrator = DirectExtensionOrchestrator()
    return ExtensionService(
        registry=DEFAULT_REGISTRY,
        orchestrator=orchestrator,
        create_copilot_client=create_copilot_client,
        create_inference_client=create_inference_client,
    )


@lru_cache(maxsize=1)
def get_request_verifier() -> RequestVerifier:
    return GitHubSignatureVerifier()


def parse_extension_request(body: bytes) -> ExtensionRequest:
    try:
        return ExtensionRequest.model_validate_json(body)
    except ValidationError as e:
        raise BadRequestError("Request payload is not a valid conversation") from e


async def read_raw_body(request: Request) -> bytes:
    return await request.body()


@app.exception_handler(AuthenticationError)
def handle_authentication_error(request: Request, exc: AuthenticationError) -> PlainTextResponse:
    logger.warning("Request rejected", extra={"reason": str(exc)})
    return PlainTextResponse("Unauthorized", status_code=401)


@app.exception_handler(BadRequestError)
def handle_bad_request_error(request: Request, exc: BadRequestError) -> PlainTextResponse:
    logger.warning("Bad request", extra={"reason": str(exc)})
    return PlainTextResponse("Bad Request", status_code=400)


@app.exception_handler(ExtensionError)
def handle_extension_error(request: Request, exc: ExtensionError) -> PlainTextResponse:
    logger.error("Request failed before streaming", exc_info=exc)
    return PlainTextResponse("Internal Server Error", status_code=500)


@app.exception_handler(Exception)
def handle_unexpected_error(request: Request, exc: Exception) -> PlainTextResponse:
    logger.error("Unexpected error", exc_info=exc)
    return PlainTextResponse("Internal Server Error", status_code=500)


@app.post("/")
def agent(
    body: bytes = Depends(read_raw_body),
    signature: str = Header(default="", alias=SIGNATURE_HEADER),
    key_identifier: str = Header(default="", alias=KEY_IDENTIFIER_HEADER),
    token: str = Header(default="", alias=TOKEN_HEADER),
) -> StreamingResponse:
    """Select a capability for the turn and stream the resulting completion."""
    get_request_verifier().verify(body, signature, key_identifier, token)
    logger.info("Signature verified")
    if not token:
        raise BadRequestError(f"Missing {TOKEN_HEADER} header")

    request = parse_extension_request(body)
    ensure_langsmith_configured()
    channel = ResponseChannel()
    try:
        frames = get_extension_service().open_stream(request, token, channel)
    except Exception:
        flush_langsmith_traces()
        raise

    return StreamingResponse(
        frames,
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
        background=BackgroundTask(flush_langsmith_traces),
    )


@app.get("/", response_class=PlainTextResponse)
def health() -> str:
    """Health check endpoint."""
    return "OK"


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Server is running", extra={"port": settings.port})
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
