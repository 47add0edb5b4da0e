"""Sequential select-then-execute orchestration."""

from collections.abc import Sequence

from models_extension.executor import CapabilityExecutor
from models_extension.orchestration.base import ExtensionOrchestrator
from models_extension.schemas import CompletionPlan, Message
from models_extension.selector import CapabilitySelector


class DirectExtensionOrchestrator(ExtensionOrchestrator):
    def plan(
        self,
        messages: Sequence[Message],
        selector: CapabilitySelector,
        executor: CapabilityExecutor,
    ) -> CompletionPlan:
        conversation = tuple(messages)
        invocation = selector.select(conversation)
        if invocation is None:
            return CompletionPlan.fallback(conversation)
        result = executor.execute(invocation, conversation)
        return CompletionPlan.from_result(result, invocation.capability_name)
