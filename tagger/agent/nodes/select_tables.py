# tagger/agent/nodes/select_tables.py
from __future__ import annotations

import logging
from typing import Any, Dict

from tagger.agent.state import TaggerState
from tagger.clients.storage_service import StorageServiceClient
from tagger.config import Settings
from tagger.core.sampling import enrich_with_samples
from tagger.core.table_filter import filter_tables

logger = logging.getLogger("tagger.agent.nodes.select_tables")


async def filter_tables_node(state: TaggerState) -> Dict[str, Any]:
    params = state["parameters"]
    result = filter_tables(
        state["tables"],
        state["configurations"],
        include_flows=params.include_flows,
        exclude_patterns=params.exclude_tables,
    )
    return {"tables": result.kept, "exclusions": result.excluded}


def sample_tables_node(*, storage: StorageServiceClient, settings: Settings):
    async def _node(state: TaggerState) -> Dict[str, Any]:
        tables = await enrich_with_samples(
            state["tables"],
            storage,
            preview_rows=settings.preview_rows_limit,
            values_limit=settings.sample_values_limit,
            value_length=settings.sample_value_length,
        )
        return {"tables": tables}

    return _node


def route_after_filter(state: TaggerState) -> str:
    if state["parameters"].use_data_previews:
        return "sample_tables"
    logger.info("Data previews disabled; prompts carry column names only")
    return "label_tables"
