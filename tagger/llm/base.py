# tagger/llm/base.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol


@dataclass
class CompletionResult:
    text: str
    raw: Dict[str, Any]


class CompletionLLM(Protocol):
    """
    Interface for the text-completion service that produces labels.
    """

    async def acomplete(self, prompt: str, *, max_tokens: Optional[int] = None) -> CompletionResult:
        """
        Free-form completion. Generation parameters are fixed by the adapter.
        """
