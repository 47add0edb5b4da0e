"""Pydantic schemas for the models extension."""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .constants import DEFAULT_MODEL, Role
from .errors import MalformedArgumentsError


class Message(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    role: Role
    content: str = ""

    @field_validator("content", mode="before")
    @classmethod
    def coerce_missing_content(cls, content: Any) -> Any:
        return "" if content is None else content

    def to_param(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


class ExtensionRequest(BaseModel):
    """Inbound agent payload; only the conversation is used."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    messages: tuple[Message, ...] = Field(min_length=1)


class ModelSummary(BaseModel):
    friendly_name: str
    name: str
    publisher: str
    registry: str
    description: str


class CatalogModel(BaseModel):
    model_config = ConfigDict(extra="ignore", protected_namespaces=())

    name: str
    friendly_name: str = ""
    publisher: str = ""
    model_registry: str = ""
    summary: str = ""
    description: str = ""
    task: str = ""
    license: str = ""
    tags: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def default_friendly_name(self) -> "CatalogModel":
        if not self.friendly_name:
            self.friendly_name = self.name
        return self

    def matches(self, model_name: str) -> bool:
        wanted = model_name.strip().lower()
        return wanted in (self.name.lower(), self.friendly_name.lower())

    def summary_view(self) -> ModelSummary:
        return ModelSummary(
            friendly_name=self.friendly_name,
            name=self.name,
            publisher=self.publisher,
            registry=self.model_registry,
            description=self.summary,
        )


class CapabilityDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    parameters: dict[str, Any]

    def as_tool(self) -> dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


class CapabilityInvocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    capability_name: str
    raw_arguments: str

    def parse_arguments(self) -> dict[str, Any]:
        """Decode the raw tool-call argument text into a JSON object."""
        text = self.raw_arguments.strip() or "{}"
        try:
            arguments = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedArgumentsError(
                f"Arguments for {self.capability_name} are not valid JSON"
            ) from e
        if not isinstance(arguments, dict):
            raise MalformedArgumentsError(
                f"Arguments for {self.capability_name} must be a JSON object"
            )
        return arguments


class CapabilityResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    model: str = Field(min_length=1)
    messages: tuple[Message, ...] = Field(min_length=1)

    @model_validator(mode="after")
    def validate_message_content(self) -> "CapabilityResult":
        for index, message in enumerate(self.messages):
            if not message.content.strip():
                raise ValueError(f"messages[{index}] has empty content")
        return self


class CompletionPlan(BaseModel):
    """Target model and messages for the single streaming completion."""

    model_config = ConfigDict(frozen=True)

    model: str
    messages: tuple[Message, ...]
    capability: str | None = None

    @classmethod
    def fallback(cls, messages: tuple[Message, ...]) -> "CompletionPlan":
        return cls(model=DEFAULT_MODEL, messages=messages)

    @classmethod
    def from_result(cls, result: CapabilityResult, capability: str) -> "CompletionPlan":
        return cls(model=result.model, messages=result.messages, capability=capability)

    def message_params(self) -> list[dict[str, str]]:
        return [message.to_param() for message in self.messages]
