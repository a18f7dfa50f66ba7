# tagger/core/sampling.py
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Protocol, Sequence

from tagger.models.records import Column, TableRecord

logger = logging.getLogger("tagger.core.sampling")


class DataPreviewSource(Protocol):
    async def data_preview(self, table_id: str, *, limit: int = 100) -> Dict[str, Any]:
        ...


def collect_samples(
    table: TableRecord,
    rows: List[List[Dict[str, Any]]],
    *,
    values_limit: int = 5,
    value_length: int = 100,
) -> TableRecord:
    """
    Return a copy of `table` whose columns carry up to `values_limit` distinct
    values (truncated to `value_length`), first seen first, in row order.
    """
    samples: Dict[str, List[str]] = {c.name: [] for c in table.columns}
    for row in rows:
        for cell in row or []:
            bucket = samples.get(cell.get("columnName"))
            if bucket is None:
                logger.debug("Preview of %s returned unknown column %r", table.id, cell.get("columnName"))
                continue
            if len(bucket) >= values_limit:
                continue
            raw = cell.get("value")
            value = ("" if raw is None else str(raw))[:value_length]
            if value not in bucket:
                bucket.append(value)

    columns = tuple(
        Column(name=c.name, sample_values=tuple(samples[c.name]) if samples[c.name] else c.sample_values)
        for c in table.columns
    )
    return table.model_copy(update={"columns": columns})


async def enrich_with_samples(
    tables: Sequence[TableRecord],
    source: DataPreviewSource,
    *,
    preview_rows: int = 100,
    values_limit: int = 5,
    value_length: int = 100,
) -> List[TableRecord]:
    """
    Fetch previews for all tables concurrently. A failed fetch aborts the
    whole enrichment (asyncio.gather propagates the first error).
    """

    async def _one(table: TableRecord) -> TableRecord:
        preview = await source.data_preview(table.id, limit=preview_rows)
        rows = (preview or {}).get("rows") or []
        logger.debug("Preview rows for %s: %d", table.id, len(rows))
        return collect_samples(table, rows, values_limit=values_limit, value_length=value_length)

    enriched = await asyncio.gather(*(_one(t) for t in tables))
    logger.info("Sample values collected for %d tables", len(enriched))
    return list(enriched)
