"""Shared constants and literal types for the models extension."""

from typing import Literal

COPILOT_API_BASE_URL = "https://api.githubcopilot.com"
MODELS_INFERENCE_BASE_URL = "https://models.inference.ai.azure.com"
MODEL_CATALOG_URL = f"{MODELS_INFERENCE_BASE_URL}/models"
COPILOT_PUBLIC_KEYS_URL = "https://api.github.com/meta/public_keys/copilot_api"

SIGNATURE_HEADER = "Github-Public-Key-Signature"
KEY_IDENTIFIER_HEADER = "Github-Public-Key-Identifier"
TOKEN_HEADER = "X-GitHub-Token"

SELECTOR_MODEL = "gpt-4"
DEFAULT_MODEL = "gpt-4"
CAPABILITY_MODEL = "gpt-4o-mini"

DEFAULT_PORT = 3000
HTTP_TIMEOUT_SECONDS = 30.0
LANGSMITH_PROJECT = "models-extension"

ACK_FRAME = b'data: {"choices":[{"index":0,"delta":{"content":"","role":"assistant"}}]}\n\n'
DONE_FRAME = b"data: [DONE]\n\n"

Role = Literal["system", "user", "assistant", "tool"]
OrchestratorName = Literal["direct", "langgraph"]
