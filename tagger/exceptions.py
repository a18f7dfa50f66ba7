# tagger/exceptions.py
from __future__ import annotations

from typing import Optional


class TaggerError(Exception):
    """
    Base exception for all tagger errors.
    """


class UserConfigurationError(TaggerError):
    """
    Missing credentials or parameters, or a disallowed execution context.
    Raised before any network call; never retried.
    """


class TransportError(TaggerError):
    """
    Network or decoding failure talking to the storage or completion service.
    """


class ServiceClientError(TransportError):
    def __init__(self, *, service: str, status: Optional[int], url: str, body: str) -> None:
        super().__init__(f"{service} HTTP {status}: {url} :: {body[:500]}")
        self.service = service
        self.status = status
        self.url = url
        self.body = body


class CompletionServiceError(TransportError):
    pass


class ModelContractViolation(TaggerError):
    """
    The completion text did not carry the contracted number of labels.
    Only ever raised and absorbed inside the completion gateway.
    """

    def __init__(self, *, expected: int, labels: list[str]) -> None:
        super().__init__(f"Size mismatch, expected {expected}, got {','.join(labels)}.")
        self.expected = expected
        self.labels = labels
