"""Application service that wires one agent request through the pipeline."""

import logging
from collections.abc import Callable, Iterator
from typing import Any

from models_extension.capabilities.registry import CapabilityRegistry
from models_extension.catalog import ModelCatalogClient
from models_extension.executor import CapabilityExecutor
from models_extension.orchestration.base import ExtensionOrchestrator
from models_extension.schemas import ExtensionRequest
from models_extension.selector import CapabilitySelector
from models_extension.streaming import CompletionStreamer, ResponseChannel

logger = logging.getLogger(__name__)


class ExtensionService:
    def __init__(
        self,
        registry: CapabilityRegistry,
        orchestrator: ExtensionOrchestrator,
        create_copilot_client: Callable[[str], Any],
        create_inference_client: Callable[[str], Any],
        create_catalog: Callable[[str], ModelCatalogClient] = ModelCatalogClient,
    ) -> None:
        self._registry = registry
        self._orchestrator = orchestrator
        self._create_copilot_client = create_copilot_client
        self._create_inference_client = create_inference_client
        self._create_catalog = create_catalog

    def open_stream(
        self, request: ExtensionRequest, token: str, channel: ResponseChannel
    ) -> Iterator[bytes]:
        """Plan the completion and open its stream.

        Everything that can fail before the first model-derived frame runs
        here, so callers can still answer with a clean error status. The
        returned iterator yields the acknowledgement, the relayed chunks and
        the terminal sentinel.
        """
        logger.info("Extension request received", extra={"message_count": len(request.messages)})
        channel.acknowledge()
        try:
            catalog = self._create_catalog(token)
            copilot_client = self._create_copilot_client(token)
            selector = CapabilitySelector(copilot_client, self._registry, catalog)
            executor = CapabilityExecutor(self._registry, catalog)
            plan = self._orchestrator.plan(request.messages, selector, executor)

            streamer = CompletionStreamer(copilot_client, self._create_inference_client(token))
            stream = streamer.open(plan)
        except Exception:
            channel.close()
            raise

        logger.info(
            "Completion planned",
            extra={"target_model": plan.model, "capability": plan.capability},
        )
        return streamer.relay(stream, channel)
