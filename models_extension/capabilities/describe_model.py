"""Describe a single catalog model."""

from collections.abc import Sequence

from pydantic import Field

from models_extension.constants import CAPABILITY_MODEL
from models_extension.schemas import CapabilityResult, Message

from .base import Capability, CapabilityArguments, carry_conversation


class DescribeModelArguments(CapabilityArguments):
    model: str = Field(
        min_length=1,
        description=(
            "The name of the model to describe. It is ONLY the name of the model, "
            "not the publisher or registry."
        ),
    )


class DescribeModel(Capability):
    name = "describe_model"
    description = "Describes a specific model, including what it is good at and who publishes it."
    arguments_model = DescribeModelArguments

    def execute(
        self, messages: Sequence[Message], arguments: DescribeModelArguments
    ) -> CapabilityResult:
        # Raises NotFoundError when no entry matches the name.
        model = self._catalog.get_model(arguments.model)
        details = model.model_dump_json()
        system_prompt = "\n".join(
            [
                "The user is asking about the AI model with the following details:",
                details,
                "Respond with a concise and readable description of the model. "
                "Mention its publisher, what it is good at and any license terms.",
            ]
        )
        return CapabilityResult(
            model=CAPABILITY_MODEL,
            messages=(
                Message(role="system", content=system_prompt),
                *carry_conversation(messages),
            ),
        )
