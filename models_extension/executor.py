"""Bridge from a selected tool call to the matching capability handler."""

import logging
import time
from collections.abc import Sequence

from langsmith import traceable
from pydantic import ValidationError

from models_extension.capabilities.registry import CapabilityRegistry
from models_extension.catalog import ModelCatalogClient
from models_extension.errors import ExecutionError, MalformedArgumentsError
from models_extension.schemas import CapabilityInvocation, CapabilityResult, Message

logger = logging.getLogger(__name__)


class CapabilityExecutor:
    def __init__(self, registry: CapabilityRegistry, catalog: ModelCatalogClient) -> None:
        self._registry = registry
        self._catalog = catalog

    @traceable(run_type="tool", name="capability.execute")
    def execute(
        self, invocation: CapabilityInvocation, messages: Sequence[Message]
    ) -> CapabilityResult:
        # The name comes from the backend, so an unknown one raises here.
        capability_cls = self._registry.get(invocation.capability_name)
        try:
            arguments = capability_cls.arguments_model.model_validate(
                invocation.parse_arguments()
            )
        except ValidationError as e:
            raise MalformedArgumentsError(
                f"Arguments for {invocation.capability_name} do not match its schema"
            ) from e

        logger.info(
            "Executing capability",
            extra={
                "capability": invocation.capability_name,
                "arguments": arguments.model_dump(),
            },
        )
        capability = capability_cls(self._catalog)
        start = time.time()
        try:
            result = capability.execute(tuple(messages), arguments)
        except ExecutionError:
            raise
        except ValidationError as e:
            raise ExecutionError(
                f"Capability {invocation.capability_name} produced an invalid result"
            ) from e
        except Exception as e:
            raise ExecutionError(f"Capability {invocation.capability_name} failed") from e

        logger.info(
            "Capability executed",
            extra={
                "capability": invocation.capability_name,
                "target_model": result.model,
                "function_exec_duration_ms": int((time.time() - start) * 1000),
            },
        )
        return result
