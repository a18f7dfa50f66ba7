from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

import pytest

from tagger.config import Settings
from tagger.llm.base import CompletionResult


class FakeLLM:
    """
    Scripted completion service: the responder maps a prompt to raw text.
    """

    def __init__(self, responder: Optional[Callable[[str], str]] = None) -> None:
        self.responder = responder or default_responder
        self.prompts: List[str] = []
        self.max_tokens: List[Optional[int]] = []

    async def acomplete(self, prompt: str, *, max_tokens: Optional[int] = None) -> CompletionResult:
        self.prompts.append(prompt)
        self.max_tokens.append(max_tokens)
        await asyncio.sleep(0)
        return CompletionResult(text=self.responder(prompt), raw={})


def default_responder(prompt: str) -> str:
    if "Generate two labels for the table" in prompt:
        return "content: {crm data}\nrole: {fact}"
    if "Generate three labels for the column" in prompt:
        return "content: {amount} category: {finance} data type: {number}"
    if "categories. List only the categories." in prompt:
        return "{Sales} {Finance} {Marketing}"
    if "Assign two of the above categories" in prompt:
        return "1. category: {Sales}\n2. category: {Finance}"
    return ""


class FakeStorage:
    def __init__(
        self,
        components: Optional[List[Dict[str, Any]]] = None,
        tables: Optional[List[Dict[str, Any]]] = None,
        previews: Optional[Dict[str, Dict[str, Any]]] = None,
    ) -> None:
        self.components = components or []
        self.tables = tables or []
        self.previews = previews or {}
        self.preview_calls: List[tuple[str, int]] = []
        self.writes: List[tuple[str, list, dict]] = []

    async def list_configurations(self) -> List[Dict[str, Any]]:
        return self.components

    async def list_tables(self) -> List[Dict[str, Any]]:
        return self.tables

    async def data_preview(self, table_id: str, *, limit: int = 100) -> Dict[str, Any]:
        self.preview_calls.append((table_id, limit))
        await asyncio.sleep(0)
        return self.previews.get(table_id, {"rows": []})

    async def set_table_metadata(self, table_id: str, table_metadata: list, columns_metadata: dict) -> Dict[str, Any]:
        self.writes.append((table_id, table_metadata, columns_metadata))
        return {"ok": True}


def component(cid: str, *configs: Dict[str, Any], name: str = "", type_: str = "extractor") -> Dict[str, Any]:
    return {"id": cid, "name": name or cid, "type": type_, "description": "", "configurations": list(configs)}


def flow(flow_id: str, *targets: tuple[str, str], name: str = "", description: str = "") -> Dict[str, Any]:
    return {
        "id": flow_id,
        "name": name or f"flow {flow_id}",
        "description": description,
        "configuration": {"tasks": [{"task": {"componentId": c, "configId": i}} for c, i in targets]},
    }


def table(tid: str, columns: List[str], component_id: Optional[str] = None, config_id: Optional[str] = None) -> Dict[str, Any]:
    metadata = []
    if component_id is not None:
        metadata.append({"key": "KBC.lastUpdatedBy.component.id", "value": component_id})
    if config_id is not None:
        metadata.append({"key": "KBC.lastUpdatedBy.configuration.id", "value": config_id})
    return {"id": tid, "name": tid.rsplit(".", 1)[-1], "columns": columns, "metadata": metadata}


@pytest.fixture
def workspace() -> Dict[str, Any]:
    """
    Two extractor configurations, one in flow "f1"; one denylisted scheduler.
    """
    components = [
        component(
            "keboola.ex-db-mysql",
            {"id": "101", "name": "CRM", "description": "CRM export"},
            {"id": "102", "name": "ERP", "description": ""},
            name="MySQL",
        ),
        component("keboola.scheduler", {"id": "900", "name": "nightly"}),
        component(
            "keboola.orchestrator",
            flow("f1", ("keboola.ex-db-mysql", "101"), name="Daily CRM", description="Loads CRM\nevery day"),
            name="Orchestrator",
            type_="other",
        ),
    ]
    tables = [
        table("in.c-crm.accounts", ["id", "amount"], "keboola.ex-db-mysql", "101"),
        table("in.c-erp.orders", ["order_id"], "keboola.ex-db-mysql", "102"),
        table("out.c-tmp.scratch", ["x"]),
    ]
    return {"components": components, "tables": tables}


@pytest.fixture
def settings() -> Settings:
    return Settings(
        storage_api_url="https://storage.test",
        storage_api_token="token",
        branch_id="",
        data_dir="/tmp",
        tag_batch_size=200,
    )
