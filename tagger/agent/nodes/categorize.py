# tagger/agent/nodes/categorize.py
from __future__ import annotations

import logging
from typing import Any, Dict

from tagger.agent.state import TaggerState
from tagger.config import Settings
from tagger.core.completion import CompletionGateway
from tagger.core.synthesizer import MetadataSynthesizer

logger = logging.getLogger("tagger.agent.nodes.categorize")


def _synthesizer(state: TaggerState, gateway: CompletionGateway, settings: Settings) -> MetadataSynthesizer:
    return MetadataSynthesizer(
        gateway,
        state["configurations"],
        state["parameters"].explanations,
        orchestrator_component_id=settings.orchestrator_component_id,
        tag_batch_size=settings.tag_batch_size,
        category_count=settings.category_count_hint,
    )


def label_tables_node(*, gateway: CompletionGateway, settings: Settings):
    async def _node(state: TaggerState) -> Dict[str, Any]:
        labeling = await _synthesizer(state, gateway, settings).label_tables(state["tables"])
        return {"labeling": labeling}

    return _node


def induce_categories_node(*, gateway: CompletionGateway, settings: Settings):
    async def _node(state: TaggerState) -> Dict[str, Any]:
        categories = await _synthesizer(state, gateway, settings).induce_categories(state["labeling"].tags)
        logger.info("Induced categories: %d", len(categories))
        return {"categories": categories}

    return _node


def assign_categories_node(*, gateway: CompletionGateway, settings: Settings):
    async def _node(state: TaggerState) -> Dict[str, Any]:
        table_metadata = await _synthesizer(state, gateway, settings).assign_categories(
            state["categories"], state["labeling"].table_metadata
        )
        return {"table_metadata": table_metadata}

    return _node
