# tagger/core/synthesizer.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, TypeVar

from tagger.core.completion import CompletionGateway
from tagger.core.context_graph import ConfigurationIndex
from tagger.core.prompts import (
    CategoryAssignmentRequest,
    CategoryInductionRequest,
    ColumnLabelRequest,
    TableLabelRequest,
    compose_table_context,
)
from tagger.models.parameters import Explanation
from tagger.models.records import (
    COLUMN_CATEGORY_KEY,
    COLUMN_CONTENT_KEY,
    COLUMN_DATA_TYPE_KEY,
    TABLE_CATEGORY1_KEY,
    TABLE_CATEGORY2_KEY,
    TABLE_CONTENT_KEY,
    TABLE_ROLE_KEY,
    Column,
    Metadatum,
    TableRecord,
    Tag,
    TargetKind,
)

logger = logging.getLogger("tagger.core.synthesizer")

T = TypeVar("T")


def batched(items: Sequence[T], size: int) -> List[List[T]]:
    """
    Consecutive slices of `size`; the last may be shorter, empty input gives none.
    """
    if size < 1:
        raise ValueError(f"Batch size must be positive, got {size}")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


@dataclass
class TableLabels:
    """
    Stage-1 output of one table; each concurrent task owns exactly one.
    """
    table_id: str
    table_metadata: List[Metadatum] = field(default_factory=list)
    column_metadata: List[Metadatum] = field(default_factory=list)
    tags: List[Tag] = field(default_factory=list)


@dataclass
class LabelingResult:
    table_metadata: Dict[str, List[Metadatum]] = field(default_factory=dict)
    columns_metadata: Dict[str, List[Metadatum]] = field(default_factory=dict)
    tags: List[Tag] = field(default_factory=list)

    @classmethod
    def merge(cls, labels: Sequence[TableLabels]) -> "LabelingResult":
        out = cls()
        for item in labels:
            out.table_metadata[item.table_id] = list(item.table_metadata)
            out.columns_metadata[item.table_id] = list(item.column_metadata)
            out.tags.extend(item.tags)
        return out


class MetadataSynthesizer:
    """
    Two-stage categorization over the filtered tables:

    1. per table and per column labels (content/role, content/category/data type),
       each producing metadata plus one tag;
    2. category induction over all tag sources in fixed-size batches;
    3. assignment of two induced categories to every table.

    Any transport failure propagates and aborts the run; there is no retry.
    """

    def __init__(
        self,
        gateway: CompletionGateway,
        configurations: ConfigurationIndex,
        explanations: Sequence[Explanation],
        *,
        orchestrator_component_id: str = "keboola.orchestrator",
        tag_batch_size: int = 200,
        category_count: int = 10,
    ) -> None:
        self.gateway = gateway
        self.configurations = configurations
        self.explanations = list(explanations)
        self.orchestrator_component_id = orchestrator_component_id
        self.tag_batch_size = tag_batch_size
        self.category_count = category_count

    # --------- Stage 1: labels --------- #

    async def _label_column(self, table: TableRecord, context: str, column: Column) -> TableLabels:
        content, category, data_type = await self.gateway.request(
            ColumnLabelRequest(context=context, column_name=column.name)
        )
        column_id = f"{table.id}.{column.name}"
        return TableLabels(
            table_id=table.id,
            column_metadata=[
                Metadatum(id=column_id, kind=TargetKind.COLUMN, key=COLUMN_CONTENT_KEY, value=content, name=column.name),
                Metadatum(id=column_id, kind=TargetKind.COLUMN, key=COLUMN_CATEGORY_KEY, value=category, name=column.name),
                Metadatum(id=column_id, kind=TargetKind.COLUMN, key=COLUMN_DATA_TYPE_KEY, value=data_type, name=column.name),
            ],
            tags=[Tag(id=column_id, kind=TargetKind.COLUMN, source=f"{category} {content}")],
        )

    async def label_table(self, table: TableRecord) -> TableLabels:
        context = compose_table_context(
            self.explanations,
            self.configurations,
            table,
            orchestrator_component_id=self.orchestrator_component_id,
        )

        table_task = self.gateway.request(TableLabelRequest(context=context))
        column_tasks = [self._label_column(table, context, c) for c in table.columns]
        (content, role), *columns = await asyncio.gather(table_task, *column_tasks)

        out = TableLabels(
            table_id=table.id,
            table_metadata=[
                Metadatum(id=table.id, kind=TargetKind.TABLE, key=TABLE_ROLE_KEY, value=role),
                Metadatum(id=table.id, kind=TargetKind.TABLE, key=TABLE_CONTENT_KEY, value=content),
            ],
            tags=[Tag(id=table.id, kind=TargetKind.TABLE, source=f"{role} {content}")],
        )
        for col in columns:
            out.column_metadata.extend(col.column_metadata)
            out.tags.extend(col.tags)
        logger.info('Labels generated for table "%s" (%d columns)', table.id, len(table.columns))
        return out

    async def label_tables(self, tables: Sequence[TableRecord]) -> LabelingResult:
        labels = await asyncio.gather(*(self.label_table(t) for t in tables))
        result = LabelingResult.merge(labels)
        logger.info("Stage 1 complete: %d tables, %d tags", len(result.table_metadata), len(result.tags))
        return result

    # --------- Stage 2: category induction --------- #

    async def induce_categories(self, tags: Sequence[Tag]) -> List[str]:
        categories: List[str] = []
        batches = batched(tags, self.tag_batch_size)
        # sequential: keeps the log and the category order stable
        for idx, batch in enumerate(batches):
            request = CategoryInductionRequest(
                sources=[t.source for t in batch],
                category_count=self.category_count,
            )
            induced = await self.gateway.request(request)
            logger.info("Batch %d/%d: %d tags -> %d categories", idx + 1, len(batches), len(batch), len(induced))
            categories.extend(induced)
        return categories

    # --------- Stage 3: category assignment --------- #

    async def assign_categories(
        self,
        categories: Sequence[str],
        table_metadata: Dict[str, List[Metadatum]],
    ) -> Dict[str, List[Metadatum]]:
        """
        Returns a new mapping; each table's list gains category1/category2.
        """
        prefix = CategoryAssignmentRequest.shared_prefix(categories)

        async def _assign(table_id: str, metadata: List[Metadatum]) -> List[Metadatum]:
            first, second = await self.gateway.request(CategoryAssignmentRequest(prefix=prefix, metadata=metadata))
            return list(metadata) + [
                Metadatum(id=table_id, kind=TargetKind.TABLE, key=TABLE_CATEGORY1_KEY, value=first),
                Metadatum(id=table_id, kind=TargetKind.TABLE, key=TABLE_CATEGORY2_KEY, value=second),
            ]

        table_ids = list(table_metadata)
        assigned = await asyncio.gather(*(_assign(tid, table_metadata[tid]) for tid in table_ids))
        return dict(zip(table_ids, assigned))
