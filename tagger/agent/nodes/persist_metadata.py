# tagger/agent/nodes/persist_metadata.py
from __future__ import annotations

from typing import Any, Dict

from tagger.agent.state import TaggerState
from tagger.clients.storage_service import StorageServiceClient
from tagger.core.writer import write_metadata


def persist_metadata_node(*, storage: StorageServiceClient):
    async def _node(state: TaggerState) -> Dict[str, Any]:
        written = await write_metadata(
            state["table_metadata"],
            state["labeling"].columns_metadata,
            storage,
            write_enabled=state["parameters"].write_data,
        )
        return {"written": written}

    return _node
