"""Runtime infrastructure helpers for settings, clients, logging and tracing."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, cast

from langsmith import traceable
from langsmith.run_trees import get_cached_client
from openai import OpenAI

from models_extension.constants import (
    COPILOT_API_BASE_URL,
    DEFAULT_PORT,
    LANGSMITH_PROJECT,
    MODELS_INFERENCE_BASE_URL,
    OrchestratorName,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtensionSettings:
    port: int
    orchestrator: OrchestratorName
    log_level: str
    langsmith_api_key: str | None


@lru_cache(maxsize=1)
def get_settings() -> ExtensionSettings:
    orchestrator = os.environ.get("EXTENSION_ORCHESTRATOR", "direct").lower()
    if orchestrator not in ("direct", "langgraph"):
        raise RuntimeError(f"Unsupported EXTENSION_ORCHESTRATOR: {orchestrator}")
    return ExtensionSettings(
        port=int(os.environ.get("PORT", str(DEFAULT_PORT))),
        orchestrator=cast(OrchestratorName, orchestrator),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        langsmith_api_key=os.environ.get("LANGSMITH_API_KEY") or None,
    )


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _configure_langsmith(langsmith_api_key: str | None) -> None:
    if not langsmith_api_key:
        os.environ.pop("LANGSMITH_TRACING", None)
        logger.info("LangSmith tracing disabled because API key is unavailable")
        return

    os.environ["LANGSMITH_TRACING"] = "true"
    os.environ["LANGSMITH_API_KEY"] = langsmith_api_key
    os.environ.setdefault("LANGSMITH_PROJECT", LANGSMITH_PROJECT)


@lru_cache(maxsize=1)
def ensure_langsmith_configured() -> None:
    """Configure LangSmith environment variables (called once via lru_cache)."""
    _configure_langsmith(get_settings().langsmith_api_key)


def flush_langsmith_traces() -> None:
    if os.environ.get("LANGSMITH_TRACING", "").lower() != "true":
        return
    if not os.environ.get("LANGSMITH_API_KEY"):
        return
    try:
        get_cached_client().flush()
    except Exception:
        logger.warning("Failed to flush LangSmith traces", exc_info=True)


def create_copilot_client(token: str) -> OpenAI:
    """Client for the Copilot API, used for tool selection and the fallback answer."""
    return OpenAI(base_url=COPILOT_API_BASE_URL, api_key=token)


def create_inference_client(token: str) -> OpenAI:
    """Client for the models inference API, used to run capability-selected models."""
    return OpenAI(base_url=MODELS_INFERENCE_BASE_URL, api_key=token)


@traceable(run_type="llm", name="copilot.chat.completions.create")
def invoke_tool_selection(client: Any, request_params: dict[str, Any]) -> Any:
    return client.chat.completions.create(**request_params)
