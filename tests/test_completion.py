from __future__ import annotations

import logging

import pytest
from conftest import FakeLLM

from tagger.core.completion import CompletionGateway, extract_labels, parse_labels
from tagger.core.prompts import CategoryInductionRequest, TableLabelRequest
from tagger.exceptions import CompletionServiceError, ModelContractViolation


def test_extract_labels_in_order_and_trimmed():
    assert extract_labels("content: { crm data } role: {fact}") == ["crm data", "fact"]
    assert extract_labels("") == []
    assert extract_labels("no braces here") == []


def test_parse_labels_enforces_count():
    assert parse_labels("{a}{b}", 2) == ["a", "b"]
    with pytest.raises(ModelContractViolation):
        parse_labels("{a}", 2)


async def test_well_formed_response():
    gateway = CompletionGateway(FakeLLM(lambda p: "content: {crm data} role: {fact}"))

    assert await gateway.complete("prompt", 2) == ["crm data", "fact"]
    assert gateway.contract_violations == 0


async def test_short_response_is_replaced_by_sentinels(caplog):
    gateway = CompletionGateway(FakeLLM(lambda p: "content: {only one}"))

    with caplog.at_level(logging.WARNING, logger="tagger.core.completion"):
        labels = await gateway.complete("prompt", 2)

    assert labels == ["not available", "not available"]
    assert gateway.contract_violations == 1
    assert "Size mismatch, expected 2" in caplog.text


@pytest.mark.parametrize("raw", ["", "{a}{b}{c}{d}", "garbage {unclosed", "{a}"])
async def test_contracted_length_always_returned(raw):
    gateway = CompletionGateway(FakeLLM(lambda p: raw), sentinel="N/A")

    labels = await gateway.complete("prompt", 3)

    assert len(labels) == 3


async def test_unconstrained_count_accepts_anything():
    gateway = CompletionGateway(FakeLLM(lambda p: "{x} {y} {z} {w}"))

    assert await gateway.complete("prompt", 0) == ["x", "y", "z", "w"]
    gateway.llm.responder = lambda p: "nothing"
    assert await gateway.complete("prompt", 0) == []
    assert gateway.contract_violations == 0


async def test_request_uses_variant_arity_and_budget():
    llm = FakeLLM(lambda p: "{a} {b}")
    gateway = CompletionGateway(llm)

    assert await gateway.request(TableLabelRequest(context="ctx")) == ["a", "b"]
    assert await gateway.request(CategoryInductionRequest(sources=["s"])) == ["a", "b"]
    assert llm.max_tokens == [50, 200]


async def test_transport_errors_propagate():
    class Broken(FakeLLM):
        async def acomplete(self, prompt, *, max_tokens=None):
            raise CompletionServiceError("connection reset")

    gateway = CompletionGateway(Broken())
    with pytest.raises(CompletionServiceError):
        await gateway.complete("prompt", 2)
