"""Closed registry of capabilities offered to the selector."""

from collections.abc import Sequence
from typing import Any

from models_extension.catalog import ModelCatalogClient
from models_extension.errors import UnknownCapabilityError

from .base import Capability
from .describe_model import DescribeModel
from .execute_model import ExecuteModel
from .list_models import ListModels
from .recommend_model import RecommendModel


class CapabilityRegistry:
    """Ordered, read-only mapping from tool names to capability classes."""

    def __init__(self, capabilities: Sequence[type[Capability]]) -> None:
        self._capabilities = tuple(capabilities)
        self._by_name = {capability.name: capability for capability in self._capabilities}
        if len(self._by_name) != len(self._capabilities):
            raise ValueError("Capability names must be unique")

    def names(self) -> list[str]:
        return [capability.name for capability in self._capabilities]

    def tools(self) -> list[dict[str, Any]]:
        return [capability.descriptor().as_tool() for capability in self._capabilities]

    def get(self, name: str) -> type[Capability]:
        capability = self._by_name.get(name)
        if capability is None:
            raise UnknownCapabilityError(f"Unknown capability: {name}")
        return capability

    def create(self, name: str, catalog: ModelCatalogClient) -> Capability:
        return self.get(name)(catalog)


DEFAULT_REGISTRY = CapabilityRegistry([ListModels, DescribeModel, ExecuteModel, RecommendModel])
