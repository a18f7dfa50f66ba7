# tagger/core/completion.py
from __future__ import annotations

import logging
import re
from typing import List

from tagger.core.prompts import LabelRequest
from tagger.exceptions import ModelContractViolation
from tagger.llm.base import CompletionLLM

logger = logging.getLogger("tagger.core.completion")

_LABEL = re.compile(r"\{(.*?)\}")


def extract_labels(text: str) -> List[str]:
    """
    Every `{...}` span of the completion, trimmed, in order of appearance.
    """
    return [m.group(1).strip() for m in _LABEL.finditer(text or "")]


def parse_labels(text: str, expected_count: int) -> List[str]:
    labels = extract_labels(text)
    if expected_count and len(labels) != expected_count:
        raise ModelContractViolation(expected=expected_count, labels=labels)
    return labels


class CompletionGateway:
    """
    Sends prompts to the completion service and returns bracket-delimited
    labels. A response with the wrong number of labels never fails the run:
    it is replaced by `expected_count` sentinel labels. Transport errors
    propagate unchanged.
    """

    def __init__(self, llm: CompletionLLM, *, sentinel: str = "not available") -> None:
        self.llm = llm
        self.sentinel = sentinel
        self.contract_violations = 0

    async def complete(self, prompt: str, expected_count: int, max_tokens: int = 50) -> List[str]:
        result = await self.llm.acomplete(prompt, max_tokens=max_tokens)
        try:
            return parse_labels(result.text, expected_count)
        except ModelContractViolation as e:
            self.contract_violations += 1
            logger.warning("[llm] %s", e)
            logger.debug("[llm] raw completion: %s", (result.text or "")[:400])
            return [self.sentinel] * expected_count

    async def request(self, req: LabelRequest) -> List[str]:
        return await self.complete(req.render(), req.expected_count, req.max_tokens)
