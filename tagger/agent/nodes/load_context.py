# tagger/agent/nodes/load_context.py
from __future__ import annotations

import logging
from typing import Any, Dict

from tagger.agent.state import TaggerState
from tagger.clients.storage_service import StorageServiceClient
from tagger.config import Settings
from tagger.core.context_graph import build_configurations, build_tables

logger = logging.getLogger("tagger.agent.nodes.load_context")


def load_configurations_node(*, storage: StorageServiceClient, settings: Settings):
    async def _node(state: TaggerState) -> Dict[str, Any]:
        components = await storage.list_configurations()
        configurations = build_configurations(
            components,
            excluded_component_ids=settings.excluded_component_ids,
            orchestrator_component_id=settings.orchestrator_component_id,
        )
        return {"configurations": configurations}

    return _node


def load_tables_node(*, storage: StorageServiceClient):
    async def _node(state: TaggerState) -> Dict[str, Any]:
        tables = build_tables(await storage.list_tables())
        return {"tables": tables, "tables_loaded": len(tables)}

    return _node
