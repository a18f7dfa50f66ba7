# tagger/config.py
from __future__ import annotations
import os
from typing import List

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Storage API (injected by the platform runner)
    storage_api_url: str = os.getenv("KBC_URL", "")
    storage_api_token: str = os.getenv("KBC_TOKEN", "")
    branch_id: str = os.getenv("KBC_BRANCHID", "")
    data_dir: str = os.getenv("KBC_DATADIR", "/data/")

    # HTTP client
    http_client_timeout_seconds: float = float(
        os.getenv("HTTP_CLIENT_TIMEOUT_SECONDS", "30")
    )
    # 1 = no retry; storage failures abort the run
    http_get_attempts: int = int(os.getenv("HTTP_GET_ATTEMPTS", "1"))

    # Identity
    service_name: str = os.getenv("SERVICE_NAME", "ai-table-tagger")
    metadata_provider: str = os.getenv("METADATA_PROVIDER", "app-tagger")

    # LLM (text completion)
    llm_provider: str = os.getenv("LLM_PROVIDER", "openai")
    llm_model: str = os.getenv("LLM_MODEL", "gpt-3.5-turbo-instruct")
    llm_base_url: str = os.getenv("LLM_BASE_URL", "")
    llm_temperature: float = float(os.getenv("LLM_TEMPERATURE", "0"))
    llm_frequency_penalty: float = float(os.getenv("LLM_FREQUENCY_PENALTY", "2"))
    llm_presence_penalty: float = float(os.getenv("LLM_PRESENCE_PENALTY", "1.5"))
    llm_timeout_seconds: float = float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))

    # Pipeline constants
    # comma separated; read from EXCLUDED_COMPONENT_IDS
    excluded_components: str = Field(
        default=os.getenv("EXCLUDED_COMPONENT_IDS", "orchestrator,keboola.scheduler,keboola.sandboxes"),
        validation_alias=AliasChoices("EXCLUDED_COMPONENT_IDS", "excluded_components"),
    )
    orchestrator_component_id: str = os.getenv("ORCHESTRATOR_COMPONENT_ID", "keboola.orchestrator")
    sample_values_limit: int = int(os.getenv("SAMPLE_VALUES_LIMIT", "5"))
    sample_value_length: int = int(os.getenv("SAMPLE_VALUE_LENGTH", "100"))
    preview_rows_limit: int = int(os.getenv("PREVIEW_ROWS_LIMIT", "100"))
    tag_batch_size: int = int(os.getenv("TAG_BATCH_SIZE", "200"))
    category_count_hint: int = int(os.getenv("CATEGORY_COUNT_HINT", "10"))
    label_sentinel: str = os.getenv("LABEL_SENTINEL", "not available")

    model_config = SettingsConfigDict(env_file=None, extra="ignore")

    @property
    def excluded_component_ids(self) -> List[str]:
        return [c.strip() for c in self.excluded_components.split(",") if c.strip()]


settings = Settings()
