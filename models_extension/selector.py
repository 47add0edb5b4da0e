"""Tool-selection stage: ask the backend which capability fits the turn."""

import json
import logging
import time
from collections.abc import Sequence
from typing import Any

from models_extension.capabilities.registry import CapabilityRegistry
from models_extension.catalog import ModelCatalogClient
from models_extension.constants import SELECTOR_MODEL
from models_extension.infra.runtime import invoke_tool_selection
from models_extension.schemas import CapabilityInvocation, Message, ModelSummary

logger = logging.getLogger(__name__)


def build_selector_preamble(summaries: Sequence[ModelSummary]) -> Message:
    listing = json.dumps([summary.model_dump() for summary in summaries])
    content = "\n".join(
        [
            "You are an extension of GitHub Copilot, built to interact with GitHub Models.",
            "GitHub Models is a language model playground, where you can experiment with "
            "different models and see how they respond to your prompts.",
            "Here is a list of some of the models available to the user:",
            "<-- LIST OF MODELS -->",
            listing,
            "<-- END OF LIST OF MODELS -->",
        ]
    )
    return Message(role="system", content=content)


class CapabilitySelector:
    """Issues the single non-streaming tool-selection completion for a request."""

    def __init__(
        self,
        client: Any,
        registry: CapabilityRegistry,
        catalog: ModelCatalogClient,
        model: str = SELECTOR_MODEL,
    ) -> None:
        self._client = client
        self._registry = registry
        self._catalog = catalog
        self._model = model

    def build_messages(self, messages: Sequence[Message]) -> list[dict[str, str]]:
        preamble = build_selector_preamble(self._catalog.summaries())
        return [preamble.to_param(), *(message.to_param() for message in messages)]

    def select(self, messages: Sequence[Message]) -> CapabilityInvocation | None:
        """Return the first tool call offered by the backend, or None."""
        request_params: dict[str, Any] = {
            "stream": False,
            "model": self._model,
            "messages": self.build_messages(messages),
            "tool_choice": "auto",
            "tools": self._registry.tools(),
        }

        start = time.time()
        response = invoke_tool_selection(self._client, request_params)
        duration_ms = int((time.time() - start) * 1000)

        tool_calls = []
        if response.choices and response.choices[0].message is not None:
            tool_calls = response.choices[0].message.tool_calls or []
        if not tool_calls or tool_calls[0].function is None:
            logger.info("No tool call found", extra={"tool_call_duration_ms": duration_ms})
            return None

        if len(tool_calls) > 1:
            logger.info(
                "Ignoring additional tool calls",
                extra={"discarded_tool_calls": len(tool_calls) - 1},
            )

        function = tool_calls[0].function
        invocation = CapabilityInvocation(
            capability_name=function.name,
            raw_arguments=function.arguments or "",
        )
        # Fail fast on unparseable arguments before any handler is resolved.
        invocation.parse_arguments()
        logger.info(
            "Tool call selected",
            extra={
                "capability": invocation.capability_name,
                "tool_call_duration_ms": duration_ms,
            },
        )
        return invocation
