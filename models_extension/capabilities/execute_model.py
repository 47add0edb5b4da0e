"""Run an instruction against a model named by the user."""

from collections.abc import Sequence

from pydantic import Field

from models_extension.schemas import CapabilityResult, Message

from .base import Capability, CapabilityArguments

IDENTITY_PROMPT = "Begin your response by telling the user the name of your language model."


class ExecuteModelArguments(CapabilityArguments):
    model: str = Field(
        min_length=1,
        description=(
            "The name of the model to execute. It is ONLY the name of the model, not the "
            "publisher or registry. For example: `gpt-4o`, or `cohere-command-r-plus`."
        ),
    )
    instruction: str = Field(min_length=1, description="The instruction to execute.")


class ExecuteModel(Capability):
    name = "execute_model"
    description = (
        'Executes a model. This will often be used by saying something like '
        '"using <model>: <instruction>".'
    )
    arguments_model = ExecuteModelArguments

    def execute(
        self, messages: Sequence[Message], arguments: ExecuteModelArguments
    ) -> CapabilityResult:
        return CapabilityResult(
            model=arguments.model,
            messages=(
                Message(role="system", content=IDENTITY_PROMPT),
                Message(role="user", content=arguments.instruction),
            ),
        )
