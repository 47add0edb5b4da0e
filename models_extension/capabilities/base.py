"""Contract shared by every capability the selector can choose."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict

from models_extension.catalog import ModelCatalogClient
from models_extension.schemas import CapabilityDescriptor, CapabilityResult, Message


class CapabilityArguments(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


def _tool_parameters(arguments_model: type[CapabilityArguments]) -> dict[str, Any]:
    schema = arguments_model.model_json_schema()
    schema.pop("title", None)
    for field_schema in schema.get("properties", {}).values():
        field_schema.pop("title", None)
    schema.setdefault("properties", {})
    return schema


class Capability(ABC):
    """A named unit of request handling that rewrites the completion.

    Subclasses declare a tool name, a description for the selector and a
    pydantic arguments model; the JSON schema offered to the backend is
    derived from that model. Instances are built per request around the
    request's catalog client.
    """

    name: ClassVar[str]
    description: ClassVar[str]
    arguments_model: ClassVar[type[CapabilityArguments]] = CapabilityArguments

    def __init__(self, catalog: ModelCatalogClient) -> None:
        self._catalog = catalog

    @classmethod
    def descriptor(cls) -> CapabilityDescriptor:
        return CapabilityDescriptor(
            name=cls.name,
            description=cls.description,
            parameters=_tool_parameters(cls.arguments_model),
        )

    @abstractmethod
    def execute(
        self, messages: Sequence[Message], arguments: CapabilityArguments
    ) -> CapabilityResult:
        """Produce the target model and rewritten messages for this turn."""


def carry_conversation(messages: Sequence[Message]) -> list[Message]:
    """Conversation messages that can be forwarded after a system prompt."""
    return [message for message in messages if message.content.strip()]
