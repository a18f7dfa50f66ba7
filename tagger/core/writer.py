# tagger/core/writer.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol, Sequence

from tagger.models.records import Metadatum

logger = logging.getLogger("tagger.core.writer")


class MetadataSink(Protocol):
    async def set_table_metadata(
        self,
        table_id: str,
        table_metadata: List[Dict[str, str]],
        columns_metadata: Dict[str, List[Dict[str, str]]],
    ) -> Any:
        ...


@dataclass
class TableMetadataPayload:
    table_id: str
    metadata: List[Dict[str, str]] = field(default_factory=list)
    columns_metadata: Dict[str, List[Dict[str, str]]] = field(default_factory=dict)


def build_payload(
    table_id: str,
    table_metadata: Sequence[Metadatum],
    column_metadata: Sequence[Metadatum],
) -> TableMetadataPayload:
    payload = TableMetadataPayload(table_id=table_id)
    for m in table_metadata:
        logger.info('Setting table "%s" metadata "%s=%s"', table_id, m.key, m.value)
        payload.metadata.append({"key": m.key, "value": m.value})
    for m in column_metadata:
        logger.info('Setting column "%s" metadata "%s=%s"', m.id, m.key, m.value)
        payload.columns_metadata.setdefault(m.name or m.id, []).append({"key": m.key, "value": m.value})
    return payload


async def write_metadata(
    table_metadata: Dict[str, List[Metadatum]],
    columns_metadata: Dict[str, List[Metadatum]],
    sink: MetadataSink,
    *,
    write_enabled: bool,
) -> List[str]:
    """
    Group metadata per table and persist it. With writing disabled every
    payload is still built and logged (dry run). Returns the ids written.
    """
    payloads = [
        build_payload(table_id, metadata, columns_metadata.get(table_id) or [])
        for table_id, metadata in table_metadata.items()
    ]
    if not write_enabled:
        for p in payloads:
            logger.info("Dry run: table %s metadata not written (writeData is off).", p.table_id)
        return []

    async def _write(p: TableMetadataPayload) -> str:
        logger.info("Writing table %s metadata.", p.table_id)
        await sink.set_table_metadata(p.table_id, p.metadata, p.columns_metadata)
        return p.table_id

    return list(await asyncio.gather(*(_write(p) for p in payloads)))
