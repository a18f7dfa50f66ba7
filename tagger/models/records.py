# tagger/models/records.py
from __future__ import annotations

from enum import Enum
from typing import FrozenSet, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


# ─────────────────────────────────────────────────────────────
# Context graph
# ─────────────────────────────────────────────────────────────

ConfigurationKey = Tuple[str, str]  # (component_id, configuration_id)


class ConfigurationRecord(BaseModel):
    """
    One configuration of one component, flattened from the component listing.
    `flows` holds the ids of orchestrator configurations whose tasks run it.
    """
    model_config = ConfigDict(frozen=True)

    configuration_id: str
    configuration_name: str = ""
    configuration_description: str = ""
    component_id: str
    component_name: str = ""
    component_type: str = ""
    component_description: str = ""
    flows: FrozenSet[str] = Field(default_factory=frozenset)

    @property
    def key(self) -> ConfigurationKey:
        return (self.component_id, self.configuration_id)


class Column(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    # insertion order = first seen in preview row order
    sample_values: Optional[Tuple[str, ...]] = None


class TableRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    last_updated_component_id: Optional[str] = None
    last_updated_configuration_id: Optional[str] = None
    columns: Tuple[Column, ...] = ()

    @property
    def configuration_key(self) -> Optional[ConfigurationKey]:
        if not self.last_updated_component_id or not self.last_updated_configuration_id:
            return None
        return (self.last_updated_component_id, self.last_updated_configuration_id)


# ─────────────────────────────────────────────────────────────
# Synthesized output
# ─────────────────────────────────────────────────────────────

class TargetKind(str, Enum):
    TABLE = "table"
    COLUMN = "column"


class Metadatum(BaseModel):
    """
    One key/value annotation. `id` is the table id, or `<table id>.<column>`
    for column metadata; `name` carries the bare column name.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    kind: TargetKind
    key: str
    value: str
    name: Optional[str] = None


class Tag(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    kind: TargetKind
    source: str


# Metadata keys written back to storage
TABLE_CONTENT_KEY = "KBC.guessed.content"
TABLE_ROLE_KEY = "KBC.guessed.role"
TABLE_CATEGORY1_KEY = "KBC.guessed.category1"
TABLE_CATEGORY2_KEY = "KBC.guessed.category2"
COLUMN_CONTENT_KEY = "KBC.guessed.content"
COLUMN_CATEGORY_KEY = "KBC.guessed.category"
COLUMN_DATA_TYPE_KEY = "KBC.guessed.dataType"

# Metadata keys read from the table listing
LAST_UPDATED_COMPONENT_KEY = "KBC.lastUpdatedBy.component.id"
LAST_UPDATED_CONFIGURATION_KEY = "KBC.lastUpdatedBy.configuration.id"
