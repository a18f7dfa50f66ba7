# tagger/agent/graph.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict

from langgraph.graph import END, StateGraph

from tagger.agent.nodes.categorize import assign_categories_node, induce_categories_node, label_tables_node
from tagger.agent.nodes.load_context import load_configurations_node, load_tables_node
from tagger.agent.nodes.persist_metadata import persist_metadata_node
from tagger.agent.nodes.select_tables import filter_tables_node, route_after_filter, sample_tables_node
from tagger.agent.state import TaggerState
from tagger.clients.storage_service import StorageServiceClient
from tagger.config import Settings
from tagger.core.completion import CompletionGateway
from tagger.models.parameters import TaggerParameters

logger = logging.getLogger("tagger.agent.graph")


@dataclass
class RunSummary:
    configurations: int
    tables_loaded: int
    tables_kept: int
    tables_excluded: int
    tags: int
    categories: int
    tables_written: int
    contract_violations: int


@dataclass
class TaggerGraph:
    storage: StorageServiceClient
    gateway: CompletionGateway
    settings: Settings

    def build(self):
        graph = StateGraph(TaggerState)

        graph.add_node("load_configurations", load_configurations_node(storage=self.storage, settings=self.settings))
        graph.add_node("load_tables", load_tables_node(storage=self.storage))
        graph.add_node("filter_tables", filter_tables_node)
        graph.add_node("sample_tables", sample_tables_node(storage=self.storage, settings=self.settings))
        graph.add_node("label_tables", label_tables_node(gateway=self.gateway, settings=self.settings))
        graph.add_node("induce_categories", induce_categories_node(gateway=self.gateway, settings=self.settings))
        graph.add_node("assign_categories", assign_categories_node(gateway=self.gateway, settings=self.settings))
        # terminal writer: nothing is persisted before every stage has completed
        graph.add_node("write_metadata", persist_metadata_node(storage=self.storage))

        graph.set_entry_point("load_configurations")
        graph.add_edge("load_configurations", "load_tables")
        graph.add_edge("load_tables", "filter_tables")
        graph.add_conditional_edges(
            "filter_tables",
            route_after_filter,
            {"sample_tables": "sample_tables", "label_tables": "label_tables"},
        )
        graph.add_edge("sample_tables", "label_tables")
        graph.add_edge("label_tables", "induce_categories")
        graph.add_edge("induce_categories", "assign_categories")
        graph.add_edge("assign_categories", "write_metadata")
        graph.add_edge("write_metadata", END)

        return graph.compile()


async def run_tagger(
    *,
    parameters: TaggerParameters,
    storage: StorageServiceClient,
    gateway: CompletionGateway,
    settings: Settings,
) -> RunSummary:
    compiled = TaggerGraph(storage=storage, gateway=gateway, settings=settings).build()

    initial_state: Dict[str, Any] = {"parameters": parameters}
    final_state: Dict[str, Any] = await compiled.ainvoke(initial_state)

    labeling = final_state["labeling"]
    summary = RunSummary(
        configurations=len(final_state["configurations"]),
        tables_loaded=final_state["tables_loaded"],
        tables_kept=len(final_state["tables"]),
        tables_excluded=len(final_state["exclusions"]),
        tags=len(labeling.tags),
        categories=len(final_state["categories"]),
        tables_written=len(final_state["written"]),
        contract_violations=gateway.contract_violations,
    )
    logger.info("Run summary: %s", summary)
    return summary
