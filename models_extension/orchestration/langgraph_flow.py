"""LangGraph-based orchestration strategy for planning a completion."""

from collections.abc import Sequence
from typing import Literal, NotRequired, TypedDict, cast

from langgraph.graph import END, START, StateGraph

from models_extension.executor import CapabilityExecutor
from models_extension.schemas import CapabilityInvocation, CompletionPlan, Message
from models_extension.selector import CapabilitySelector

from .base import ExtensionOrchestrator


class ExtensionGraphState(TypedDict):
    messages: tuple[Message, ...]
    selector: CapabilitySelector
    executor: CapabilityExecutor
    invocation: NotRequired[CapabilityInvocation | None]
    plan: NotRequired[CompletionPlan]


class LangGraphExtensionOrchestrator(ExtensionOrchestrator):
    def __init__(self) -> None:
        graph = StateGraph(ExtensionGraphState)
        graph.add_node("select_capability", self._select_capability)
        graph.add_node("execute_capability", self._execute_capability)
        graph.add_node("fallback", self._fallback)
        graph.add_edge(START, "select_capability")
        graph.add_conditional_edges(
            "select_capability",
            self._route,
            {"execute": "execute_capability", "fallback": "fallback"},
        )
        graph.add_edge("execute_capability", END)
        graph.add_edge("fallback", END)
        self._graph = graph.compile()

    def _select_capability(
        self, state: ExtensionGraphState
    ) -> dict[str, CapabilityInvocation | None]:
        return {"invocation": state["selector"].select(state["messages"])}

    def _route(self, state: ExtensionGraphState) -> Literal["execute", "fallback"]:
        return "fallback" if state.get("invocation") is None else "execute"

    def _execute_capability(self, state: ExtensionGraphState) -> dict[str, CompletionPlan]:
        invocation = state["invocation"]
        if invocation is None:
            raise RuntimeError("execute_capability reached without an invocation")
        result = state["executor"].execute(invocation, state["messages"])
        return {"plan": CompletionPlan.from_result(result, invocation.capability_name)}

    def _fallback(self, state: ExtensionGraphState) -> dict[str, CompletionPlan]:
        return {"plan": CompletionPlan.fallback(state["messages"])}

    def plan(
        self,
        messages: Sequence[Message],
        selector: CapabilitySelector,
        executor: CapabilityExecutor,
    ) -> CompletionPlan:
        initial_state: ExtensionGraphState = {
            "messages": tuple(messages),
            "selector": selector,
            "executor": executor,
        }
        result = cast("ExtensionGraphState", self._graph.invoke(initial_state))
        plan = result.get("plan")
        if plan is None:
            raise RuntimeError("LangGraph execution did not return a completion plan")
        return plan
