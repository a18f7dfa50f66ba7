# tagger/llm/factory.py
from __future__ import annotations

from typing import Optional

from tagger.config import Settings, settings as default_settings
from tagger.llm.base import CompletionLLM
from tagger.llm.openai_adapter import OpenAIAdapter


def get_completion_llm(api_key: str, *, settings: Optional[Settings] = None) -> CompletionLLM:
    """
    Factory for the completion service that labels tables.
    Switchable via LLM_PROVIDER in config.
    """
    cfg = settings or default_settings
    provider = cfg.llm_provider.lower()
    if provider in {"openai", "azure_openai"}:
        # Azure works through the same SDK when LLM_BASE_URL points at the deployment
        return OpenAIAdapter(api_key, settings=cfg)
    raise ValueError(f"Unsupported LLM provider: {provider}")
