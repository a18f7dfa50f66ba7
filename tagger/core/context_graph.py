# tagger/core/context_graph.py
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from tagger.models.records import (
    LAST_UPDATED_COMPONENT_KEY,
    LAST_UPDATED_CONFIGURATION_KEY,
    Column,
    ConfigurationKey,
    ConfigurationRecord,
    TableRecord,
)

logger = logging.getLogger("tagger.core.context_graph")


class ConfigurationIndex:
    """
    Read-only lookup of configuration records by (component id, configuration id).
    Iteration follows listing order.
    """

    def __init__(self, records: Iterable[ConfigurationRecord]) -> None:
        self._records: List[ConfigurationRecord] = list(records)
        self._by_key: Dict[ConfigurationKey, ConfigurationRecord] = {}
        for rec in self._records:
            self._by_key.setdefault(rec.key, rec)

    def __iter__(self):
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def get(self, component_id: Optional[str], configuration_id: Optional[str]) -> Optional[ConfigurationRecord]:
        if not component_id or not configuration_id:
            return None
        return self._by_key.get((component_id, configuration_id))

    def for_table(self, table: TableRecord) -> Optional[ConfigurationRecord]:
        key = table.configuration_key
        if key is None:
            return None
        return self._by_key.get(key)


def _str(v: Any) -> str:
    return "" if v is None else str(v)


def flatten_configurations(
    components: List[Dict[str, Any]],
    *,
    excluded_component_ids: Iterable[str],
) -> List[ConfigurationRecord]:
    """
    Phase 1: one base record per configuration, skipping denylisted components.
    """
    excluded = set(excluded_component_ids)
    records: List[ConfigurationRecord] = []
    for component in components or []:
        component_id = _str(component.get("id"))
        if component_id in excluded:
            continue
        for cfg in component.get("configurations") or []:
            records.append(
                ConfigurationRecord(
                    configuration_id=_str(cfg.get("id")),
                    configuration_name=_str(cfg.get("name")),
                    configuration_description=_str(cfg.get("description")),
                    component_id=component_id,
                    component_name=_str(component.get("name")),
                    component_type=_str(component.get("type")),
                    component_description=_str(component.get("description")),
                )
            )
    return records


def collect_flow_membership(
    components: List[Dict[str, Any]],
    known_keys: Set[ConfigurationKey],
    *,
    orchestrator_component_id: str,
) -> Dict[ConfigurationKey, Set[str]]:
    """
    Phase 2: configuration key -> ids of the orchestrator configurations
    whose tasks reference it. Unknown task targets are ignored.
    """
    orchestrator = next(
        (c for c in components or [] if _str(c.get("id")) == orchestrator_component_id),
        None,
    )
    membership: Dict[ConfigurationKey, Set[str]] = {}
    if orchestrator is None:
        logger.info("No %s component found; flow membership is empty", orchestrator_component_id)
        return membership

    for flow_cfg in orchestrator.get("configurations") or []:
        flow_id = _str(flow_cfg.get("id"))
        tasks = (flow_cfg.get("configuration") or {}).get("tasks") or []
        for task in tasks:
            target = (task or {}).get("task") or {}
            key = (_str(target.get("componentId")), _str(target.get("configId")))
            if key in known_keys:
                membership.setdefault(key, set()).add(flow_id)
    return membership


def build_configurations(
    components: List[Dict[str, Any]],
    *,
    excluded_component_ids: Iterable[str],
    orchestrator_component_id: str,
) -> ConfigurationIndex:
    """
    Flatten the component listing and merge flow membership into
    immutable configuration records.
    """
    base = flatten_configurations(components, excluded_component_ids=excluded_component_ids)
    membership = collect_flow_membership(
        components,
        {rec.key for rec in base},
        orchestrator_component_id=orchestrator_component_id,
    )
    records = [
        rec.model_copy(update={"flows": frozenset(membership[rec.key])}) if rec.key in membership else rec
        for rec in base
    ]
    logger.info(
        "Configurations loaded: %d (%d in at least one flow)",
        len(records),
        sum(1 for r in records if r.flows),
    )
    return ConfigurationIndex(records)


def _metadata_value(metadata: List[Mapping[str, Any]], key: str) -> Optional[str]:
    for item in metadata:
        if item.get("key") == key:
            value = item.get("value")
            return None if value in (None, "") else str(value)
    return None


def build_tables(tables_data: List[Dict[str, Any]]) -> List[TableRecord]:
    tables: List[TableRecord] = []
    for data in tables_data or []:
        metadata = data.get("metadata") or []
        tables.append(
            TableRecord(
                id=_str(data.get("id")),
                name=_str(data.get("name")),
                last_updated_component_id=_metadata_value(metadata, LAST_UPDATED_COMPONENT_KEY),
                last_updated_configuration_id=_metadata_value(metadata, LAST_UPDATED_CONFIGURATION_KEY),
                columns=tuple(Column(name=_str(name)) for name in data.get("columns") or []),
            )
        )
    logger.info("Tables loaded: %d", len(tables))
    return tables
