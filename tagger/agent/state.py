# tagger/agent/state.py
from __future__ import annotations

from typing import Dict, List, TypedDict

from tagger.core.context_graph import ConfigurationIndex
from tagger.core.synthesizer import LabelingResult
from tagger.core.table_filter import TableExclusion
from tagger.models.parameters import TaggerParameters
from tagger.models.records import Metadatum, TableRecord


class TaggerState(TypedDict, total=False):
    parameters: TaggerParameters
    configurations: ConfigurationIndex
    tables_loaded: int
    tables: List[TableRecord]
    exclusions: List[TableExclusion]
    labeling: LabelingResult
    categories: List[str]
    table_metadata: Dict[str, List[Metadatum]]
    written: List[str]
