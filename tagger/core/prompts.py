# tagger/core/prompts.py
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import ClassVar, List, Optional, Sequence

from tagger.core.context_graph import ConfigurationIndex
from tagger.models.parameters import Explanation
from tagger.models.records import ConfigurationRecord, Metadatum, TableRecord

logger = logging.getLogger("tagger.core.prompts")

_NEWLINES = re.compile(r"\r?\n|\r")


# ─────────────────────────────────────────────────────────────
# Table context block
# ─────────────────────────────────────────────────────────────

def _glossary_section(explanations: Sequence[Explanation]) -> str:
    return "\n".join(f'"{e.source}" means {e.explanation}.' for e in explanations)


def _pick_flow(
    configuration: Optional[ConfigurationRecord],
    configurations: ConfigurationIndex,
    orchestrator_component_id: str,
) -> Optional[ConfigurationRecord]:
    if configuration is None or not configuration.flows:
        return None
    # lexicographically smallest flow id keeps the prompt stable across runs
    flow_id = min(configuration.flows)
    flow = configurations.get(orchestrator_component_id, flow_id)
    if flow is None:
        logger.debug("Flow %s of %s is not among known configurations", flow_id, configuration.key)
    return flow


def _flow_section(flow: Optional[ConfigurationRecord]) -> str:
    if flow is None:
        return ""
    description = _NEWLINES.sub(" ", flow.configuration_description)
    return f'There is a flow named "{flow.configuration_name}" with description "{description}".'


def _columns_section(table: TableRecord) -> str:
    lines: List[str] = []
    for column in table.columns:
        if column.sample_values:
            lines.append(f'The column "{column.name}" with sample values: {", ".join(column.sample_values)}')
        else:
            lines.append(f'The column "{column.name}".')
    return "\n".join(lines)


def _table_section(table: TableRecord, configuration: Optional[ConfigurationRecord]) -> str:
    text = f'The table "{table.id}" contains the above columns.'
    if configuration is not None:
        text += (
            f'\nThe table "{table.id}" is produced by "{configuration.configuration_name}" '
            f"{configuration.component_name} {configuration.component_type}."
        )
    return text


def compose_table_context(
    explanations: Sequence[Explanation],
    configurations: ConfigurationIndex,
    table: TableRecord,
    *,
    orchestrator_component_id: str = "keboola.orchestrator",
) -> str:
    """
    Describe one table for the model: glossary, the flow producing it (if
    any), its columns and, when known, the configuration that produced it.
    Pure text assembly; identical inputs give identical text.
    """
    configuration = configurations.for_table(table)
    flow = _pick_flow(configuration, configurations, orchestrator_component_id)
    sections = [
        _glossary_section(explanations),
        _flow_section(flow),
        _columns_section(table),
        _table_section(table, configuration),
    ]
    return "\n\n".join(s for s in sections if s)


def _quoted(context: str) -> str:
    return f'"""\n{context}\n"""\n'


# ─────────────────────────────────────────────────────────────
# Request variants (expected label count + instruction)
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TableLabelRequest:
    expected_count: ClassVar[int] = 2
    max_tokens: ClassVar[int] = 50

    context: str

    def render(self) -> str:
        return _quoted(self.context) + (
            "Generate two labels for the table representing the content and role.\n"
            "Insert each label in curly braces.\n"
            "\n"
            "content: {...}\n"
            "role: {...}\n"
        )


@dataclass(frozen=True)
class ColumnLabelRequest:
    expected_count: ClassVar[int] = 3
    max_tokens: ClassVar[int] = 50

    context: str
    column_name: str

    def render(self) -> str:
        return _quoted(self.context) + (
            f'Generate three labels for the column "{self.column_name}" '
            "representing the content, category, data type.\n"
            "Insert each label in curly braces.\n"
            "\n"
            "content: {...}\n"
            "category: {...}\n"
            "data type: {...}\n"
        )


@dataclass(frozen=True)
class CategoryInductionRequest:
    # the category count is a hint to the model, not a contract
    expected_count: ClassVar[int] = 0
    max_tokens: ClassVar[int] = 200

    sources: Sequence[str]
    category_count: int = 10

    def render(self) -> str:
        items = "".join(f"{s}\n" for s in self.sources)
        return items + (
            f"Assign the above items into {self.category_count} categories. "
            "List only the categories. Enclose each category in curly braces."
        )


@dataclass(frozen=True)
class CategoryAssignmentRequest:
    expected_count: ClassVar[int] = 2
    max_tokens: ClassVar[int] = 50

    prefix: str
    metadata: Sequence[Metadatum]

    @staticmethod
    def shared_prefix(categories: Sequence[str]) -> str:
        return "\n".join(categories) + (
            "\nAssign two of the above categories to the following object. "
            "Enclose each category in curly braces.\n"
        )

    def render(self) -> str:
        described = "".join(f"{m.key}: {m.value}\n" for m in self.metadata)
        return self.prefix + described + "1. category:\n2. category:"


LabelRequest = TableLabelRequest | ColumnLabelRequest | CategoryInductionRequest | CategoryAssignmentRequest
