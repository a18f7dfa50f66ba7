# tagger/core/table_filter.py
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from tagger.core.context_graph import ConfigurationIndex
from tagger.exceptions import UserConfigurationError
from tagger.models.records import TableRecord

logger = logging.getLogger("tagger.core.table_filter")


class ExclusionReason(str, Enum):
    NO_LINK = "no_link"
    UNRESOLVED_LINK = "unresolved_link"
    NO_FLOW_MATCH = "no_flow_match"
    PATTERN = "pattern"


@dataclass(frozen=True)
class TableExclusion:
    table_id: str
    reason: ExclusionReason
    message: str


@dataclass
class FilterResult:
    kept: List[TableRecord] = field(default_factory=list)
    excluded: List[TableExclusion] = field(default_factory=list)


def _flow_exclusion(
    table: TableRecord,
    configurations: ConfigurationIndex,
    include_flows: Sequence[str],
) -> Optional[TableExclusion]:
    if table.configuration_key is None:
        return TableExclusion(
            table.id,
            ExclusionReason.NO_LINK,
            f'Table "{table.id}" excluded because no configuration is associated to it.',
        )
    configuration = configurations.for_table(table)
    if configuration is None:
        return TableExclusion(
            table.id,
            ExclusionReason.UNRESOLVED_LINK,
            f'Table "{table.id}" excluded because configuration {table.last_updated_configuration_id} '
            f"of component {table.last_updated_component_id} does not exist.",
        )
    matched = sorted(configuration.flows.intersection(include_flows))
    if not matched:
        return TableExclusion(
            table.id,
            ExclusionReason.NO_FLOW_MATCH,
            f'Table "{table.id}" excluded because none of the flows is matched '
            f"(table flows: {sorted(configuration.flows)}).",
        )
    logger.info('Table "%s" belongs to flow "%s".', table.id, matched[0])
    return None


def filter_tables(
    tables: Sequence[TableRecord],
    configurations: ConfigurationIndex,
    include_flows: Optional[Sequence[str]] = None,
    exclude_patterns: Optional[Sequence[str]] = None,
) -> FilterResult:
    """
    Narrow the working set: flow membership first (only when include_flows
    is non-empty), then each exclusion pattern independently against the
    table id. Inputs are not mutated; survivors keep their order.
    """
    result = FilterResult()
    survivors: List[TableRecord] = list(tables)

    if include_flows:
        kept: List[TableRecord] = []
        for table in survivors:
            exclusion = _flow_exclusion(table, configurations, include_flows)
            if exclusion is None:
                kept.append(table)
            else:
                logger.info(exclusion.message)
                result.excluded.append(exclusion)
        survivors = kept

    for pattern in exclude_patterns or []:
        try:
            regexp = re.compile(pattern)
        except re.error as e:
            raise UserConfigurationError(f"Invalid table exclusion pattern \"{pattern}\": {e}") from e
        kept = []
        for table in survivors:
            if regexp.search(table.id):
                exclusion = TableExclusion(
                    table.id,
                    ExclusionReason.PATTERN,
                    f'Table "{table.id}" excluded by pattern "{pattern}".',
                )
                logger.info(exclusion.message)
                result.excluded.append(exclusion)
            else:
                kept.append(table)
        survivors = kept

    result.kept = survivors
    logger.info("Tables kept: %d, excluded: %d", len(result.kept), len(result.excluded))
    return result
