# tagger/models/parameters.py
from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Explanation(BaseModel):
    """
    Glossary entry restated to the model as `"<source>" means <explanation>.`
    """
    model_config = ConfigDict(frozen=True)

    source: str
    explanation: str


class TaggerParameters(BaseModel):
    """
    `parameters` node of the component's config.json.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    explanations: List[Explanation] = Field(default_factory=list)
    include_flows: List[str] = Field(default_factory=list, alias="includeFlows")
    exclude_tables: List[str] = Field(default_factory=list, alias="excludeTables")
    use_data_previews: bool = Field(default=False, alias="useDataPreviews")
    write_data: bool = Field(default=False, alias="writeData")
    openai_api_key: str = Field(default="", alias="#openApiKey")

    @field_validator("explanations", "include_flows", "exclude_tables", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        # the UI stores cleared lists as null
        return [] if v is None else v

    @field_validator("include_flows", mode="before")
    @classmethod
    def _flow_ids_as_str(cls, v):
        return [str(x) for x in v] if isinstance(v, list) else v
