# tagger/llm/openai_adapter.py
from __future__ import annotations

import logging
from typing import Optional

from openai import APIError, AsyncOpenAI

from tagger.config import Settings, settings as default_settings
from tagger.exceptions import CompletionServiceError, UserConfigurationError
from tagger.llm.base import CompletionLLM, CompletionResult

logger = logging.getLogger("tagger.llm.openai")


class OpenAIAdapter(CompletionLLM):
    def __init__(self, api_key: str, *, settings: Optional[Settings] = None) -> None:
        cfg = settings or default_settings
        if not api_key:
            raise UserConfigurationError("OpenAI API key is not configured")

        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=cfg.llm_base_url or None,
            timeout=cfg.llm_timeout_seconds,
        )
        self.model = cfg.llm_model
        self.temperature = cfg.llm_temperature
        self.frequency_penalty = cfg.llm_frequency_penalty
        self.presence_penalty = cfg.llm_presence_penalty

    async def acomplete(self, prompt: str, *, max_tokens: Optional[int] = None) -> CompletionResult:
        """
        Legacy text completion; deterministic and discouraging repetition.
        """
        try:
            resp = await self.client.completions.create(
                model=self.model,
                prompt=prompt,
                temperature=self.temperature,
                max_tokens=max_tokens or 50,
                frequency_penalty=self.frequency_penalty,
                presence_penalty=self.presence_penalty,
            )
        except APIError as e:
            raise CompletionServiceError(f"Completion request failed: {e}") from e

        text = (resp.choices[0].text if resp.choices else None) or ""
        logger.debug("OpenAI completion result: %s", text[:200])
        return CompletionResult(text=text, raw=resp.model_dump())
