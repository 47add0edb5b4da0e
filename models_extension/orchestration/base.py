"""Orchestration interfaces for planning the completion of a turn."""

from collections.abc import Sequence
from typing import Protocol

from models_extension.executor import CapabilityExecutor
from models_extension.schemas import CompletionPlan, Message
from models_extension.selector import CapabilitySelector


class ExtensionOrchestrator(Protocol):
    def plan(
        self,
        messages: Sequence[Message],
        selector: CapabilitySelector,
        executor: CapabilityExecutor,
    ) -> CompletionPlan:
        """Resolve the target model and messages for the streaming completion."""
