"""List the models available in the catalog."""

import json
from collections.abc import Sequence

from models_extension.constants import CAPABILITY_MODEL
from models_extension.schemas import CapabilityResult, Message

from .base import Capability, CapabilityArguments, carry_conversation


class ListModels(Capability):
    name = "list_models"
    description = "This function lists the AI models available in GitHub Models."

    def execute(
        self, messages: Sequence[Message], arguments: CapabilityArguments
    ) -> CapabilityResult:
        models = self._catalog.list_models()
        listing = json.dumps(
            [
                {
                    "name": model.friendly_name,
                    "publisher": model.publisher,
                    "description": model.summary,
                }
                for model in models
            ]
        )
        system_prompt = "\n".join(
            [
                "The user is asking for a list of available models.",
                "Respond with a concise and readable list of the models, "
                "with a short description for each one.",
                "Use markdown formatting to make each description more readable.",
                "Begin each model's description with a header consisting of the model's name.",
                "That list of models is as follows:",
                listing,
            ]
        )
        return CapabilityResult(
            model=CAPABILITY_MODEL,
            messages=(
                Message(role="system", content=system_prompt),
                *carry_conversation(messages),
            ),
        )
