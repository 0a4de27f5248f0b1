"""LangGraph graph definition with deterministic stage routing."""

import logging
import time

from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, START, StateGraph

from agents.coder import run_coder
from agents.designer import run_designer
from agents.orchestrator import (
    route_after_revalidation,
    route_after_validation,
    route_entry,
    run_agentic_fallback,
    run_finalizer,
)
from agents.planner import run_planner
from agents.repairer import run_repairer
from agents.template_fill import run_template_fill
from agents.validator import run_revalidator, run_validator
from contracts import GenerationCancelled
from observability.metrics import AGENT_LATENCY
from state import PipelineState, pipeline_context

logger = logging.getLogger(__name__)

TEMPLATE_FILL = "template_fill"
PLANNING = "planning"
DESIGNING = "designing"
CODING = "coding"
VALIDATING = "validating"
REPAIRING = "repairing"
REVALIDATING = "revalidating"
AGENTIC_FALLBACK = "agentic_fallback"
FINALIZING = "finalizing"


def _guarded(stage: str, fn):
    """Wrap a stage with the abort check and latency tracking."""
    async def wrapper(state: PipelineState, config: RunnableConfig) -> PipelineState:
        if pipeline_context(config).abort.is_set():
            raise GenerationCancelled(f"aborted before {stage}")

        start = time.time()
        try:
            return await fn(state, config)
        finally:
            AGENT_LATENCY.labels(agent=stage).observe(time.time() - start)
    return wrapper


def build_graph():
    graph = StateGraph(PipelineState)

    graph.add_node(TEMPLATE_FILL, _guarded(TEMPLATE_FILL, run_template_fill))
    graph.add_node(PLANNING, _guarded(PLANNING, run_planner))
    graph.add_node(DESIGNING, _guarded(DESIGNING, run_designer))
    graph.add_node(CODING, _guarded(CODING, run_coder))
    graph.add_node(VALIDATING, _guarded(VALIDATING, run_validator))
    graph.add_node(REPAIRING, _guarded(REPAIRING, run_repairer))
    graph.add_node(REVALIDATING, _guarded(REVALIDATING, run_revalidator))
    graph.add_node(AGENTIC_FALLBACK, _guarded(AGENTIC_FALLBACK, run_agentic_fallback))
    graph.add_node(FINALIZING, _guarded(FINALIZING, run_finalizer))

    graph.add_conditional_edges(
        START,
        route_entry,
        {TEMPLATE_FILL: TEMPLATE_FILL, PLANNING: PLANNING, CODING: CODING},
    )

    graph.add_edge(TEMPLATE_FILL, FINALIZING)
    graph.add_edge(PLANNING, DESIGNING)
    graph.add_edge(DESIGNING, CODING)
    graph.add_edge(CODING, VALIDATING)

    graph.add_conditional_edges(
        VALIDATING,
        route_after_validation,
        {FINALIZING: FINALIZING, REPAIRING: REPAIRING, AGENTIC_FALLBACK: AGENTIC_FALLBACK},
    )
    graph.add_edge(REPAIRING, REVALIDATING)
    graph.add_conditional_edges(
        REVALIDATING,
        route_after_revalidation,
        {FINALIZING: FINALIZING, AGENTIC_FALLBACK: AGENTIC_FALLBACK},
    )
    graph.add_edge(AGENTIC_FALLBACK, FINALIZING)
    graph.add_edge(FINALIZING, END)

    return graph.compile()
