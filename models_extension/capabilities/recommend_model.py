"""Recommend the catalog model that best fits a task."""

import json
import re
from collections.abc import Sequence

from pydantic import Field

from models_extension.constants import CAPABILITY_MODEL
from models_extension.errors import ExecutionError
from models_extension.schemas import CapabilityResult, CatalogModel, Message

from .base import Capability, CapabilityArguments, carry_conversation

MAX_ALTERNATIVES = 3
_WORD_PATTERN = re.compile(r"[a-z0-9]+")
_STOP_WORDS = frozenset(
    {"a", "an", "and", "the", "for", "to", "of", "in", "on", "with", "that", "is", "i", "me", "my"}
)


def _keywords(text: str) -> set[str]:
    return {word for word in _WORD_PATTERN.findall(text.lower()) if word not in _STOP_WORDS}


def score_model(model: CatalogModel, task_keywords: set[str]) -> int:
    """Count task keywords that appear in the model's catalog metadata."""
    haystack = _keywords(
        " ".join([model.name, model.friendly_name, model.summary, model.task, *model.tags])
    )
    return len(task_keywords & haystack)


def rank_models(models: Sequence[CatalogModel], task: str) -> list[CatalogModel]:
    task_keywords = _keywords(task)
    # sorted() is stable, so equal scores keep catalog order.
    return sorted(models, key=lambda model: score_model(model, task_keywords), reverse=True)


class RecommendModelArguments(CapabilityArguments):
    task: str = Field(
        min_length=1,
        description="The task, use case or requirements the user wants a model for.",
    )


class RecommendModel(Capability):
    name = "recommend_model"
    description = (
        "Determines and recommends the most appropriate model based on the provided "
        "use case or requirements."
    )
    arguments_model = RecommendModelArguments

    def execute(
        self, messages: Sequence[Message], arguments: RecommendModelArguments
    ) -> CapabilityResult:
        models = self._catalog.list_models()
        if not models:
            raise ExecutionError("Model catalog is empty; nothing to recommend")

        best, *rest = rank_models(models, arguments.task)
        alternatives = rest[:MAX_ALTERNATIVES]
        system_prompt = "\n".join(
            [
                "The user is asking for a recommendation for an AI model.",
                f"The user's task is: {arguments.task}",
                "Based on the catalog, the best fit is:",
                json.dumps(best.summary_view().model_dump()),
                "Other candidates worth mentioning are:",
                json.dumps([model.summary_view().model_dump() for model in alternatives]),
                "Recommend the best fit to the user and explain why it suits the task. "
                "Briefly mention the other candidates and when they might be preferable.",
            ]
        )
        return CapabilityResult(
            model=CAPABILITY_MODEL,
            messages=(
                Message(role="system", content=system_prompt),
                *carry_conversation(messages),
            ),
        )
