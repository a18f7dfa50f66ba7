from __future__ import annotations

import json

import pytest
from conftest import FakeLLM, FakeStorage

import tagger.main as entry
from tagger.config import Settings
from tagger.exceptions import CompletionServiceError, UserConfigurationError
from tagger.main import check_environment, load_parameters, run
from tagger.models.parameters import TaggerParameters


def _params(**overrides) -> TaggerParameters:
    data = {
        "#openApiKey": "sk-test",
        "explanations": [{"source": "MRR", "explanation": "monthly recurring revenue"}],
        "includeFlows": [],
        "excludeTables": [],
        "useDataPreviews": False,
        "writeData": True,
    }
    data.update(overrides)
    return TaggerParameters.model_validate(data)


async def test_full_run_writes_labels_for_flow_tables(workspace, settings):
    storage = FakeStorage(workspace["components"], workspace["tables"])
    llm = FakeLLM()

    summary = await run(_params(includeFlows=["f1"]), settings=settings, storage=storage, llm=llm)

    assert summary.tables_loaded == 3
    assert summary.tables_kept == 1
    assert summary.tables_excluded == 2
    # one table tag + two column tags
    assert summary.tags == 3
    assert summary.categories == 3
    assert summary.tables_written == 1
    assert summary.contract_violations == 0

    table_id, table_metadata, columns_metadata = storage.writes[0]
    assert table_id == "in.c-crm.accounts"
    assert {"key": "KBC.guessed.category1", "value": "Sales"} in table_metadata
    assert {"key": "KBC.guessed.category2", "value": "Finance"} in table_metadata
    assert set(columns_metadata) == {"id", "amount"}
    assert storage.preview_calls == []
    assert any('There is a flow named "Daily CRM"' in p for p in llm.prompts)


async def test_data_previews_feed_prompts(workspace, settings):
    previews = {"in.c-erp.orders": {"rows": [[{"columnName": "order_id", "value": "A-1"}]]}}
    storage = FakeStorage(workspace["components"], workspace["tables"], previews)
    llm = FakeLLM()

    await run(_params(useDataPreviews=True, excludeTables=["accounts", "scratch"]), settings=settings, storage=storage, llm=llm)

    assert storage.preview_calls == [("in.c-erp.orders", 100)]
    assert any('The column "order_id" with sample values: A-1' in p for p in llm.prompts)


async def test_dry_run_does_not_write(workspace, settings):
    storage = FakeStorage(workspace["components"], workspace["tables"])

    summary = await run(_params(writeData=False), settings=settings, storage=storage, llm=FakeLLM())

    assert summary.tables_kept == 3
    assert summary.tables_written == 0
    assert storage.writes == []


async def test_completion_failure_aborts_before_any_write(workspace, settings):
    class Broken(FakeLLM):
        async def acomplete(self, prompt, *, max_tokens=None):
            if "Assign two of the above categories" in prompt:
                raise CompletionServiceError("service unavailable")
            return await super().acomplete(prompt, max_tokens=max_tokens)

    storage = FakeStorage(workspace["components"], workspace["tables"])
    with pytest.raises(CompletionServiceError):
        await run(_params(), settings=settings, storage=storage, llm=Broken())
    assert storage.writes == []


async def test_missing_api_key_is_a_user_error(settings):
    with pytest.raises(UserConfigurationError):
        await run(_params(**{"#openApiKey": ""}), settings=settings, storage=FakeStorage())


def test_load_parameters(tmp_path):
    (tmp_path / "config.json").write_text(json.dumps({
        "parameters": {"#openApiKey": "sk", "includeFlows": [123], "excludeTables": None, "writeData": True}
    }))

    params = load_parameters(str(tmp_path))

    assert params.openai_api_key == "sk"
    assert params.include_flows == ["123"]
    assert params.exclude_tables == []
    assert params.write_data is True
    assert params.use_data_previews is False


@pytest.mark.parametrize("content", [None, "{not json", json.dumps({"parameters": {}})])
def test_load_parameters_user_errors(tmp_path, content):
    if content is not None:
        (tmp_path / "config.json").write_text(content)

    with pytest.raises(UserConfigurationError):
        load_parameters(str(tmp_path))


@pytest.mark.parametrize(
    "overrides",
    [{"storage_api_token": ""}, {"storage_api_url": ""}, {"branch_id": "1234"}],
)
def test_check_environment(settings, overrides):
    check_environment(settings)
    with pytest.raises(UserConfigurationError):
        check_environment(settings.model_copy(update=overrides))


def test_main_exit_codes(tmp_path, monkeypatch, settings):
    (tmp_path / "config.json").write_text(json.dumps({"parameters": {"#openApiKey": "sk"}}))

    monkeypatch.setattr(entry, "default_settings", settings.model_copy(update={"branch_id": "42"}))
    assert entry.main(["--data-dir", str(tmp_path)]) == entry.EXIT_USER_ERROR

    async def _boom(parameters, *, settings=None, storage=None, llm=None):
        raise RuntimeError("unexpected")

    monkeypatch.setattr(entry, "default_settings", settings)
    monkeypatch.setattr(entry, "run", _boom)
    assert entry.main(["--data-dir", str(tmp_path)]) == entry.EXIT_APPLICATION_ERROR


def test_settings_component_denylist():
    cfg = Settings(excluded_components="orchestrator, keboola.scheduler,,keboola.sandboxes")

    assert cfg.excluded_component_ids == ["orchestrator", "keboola.scheduler", "keboola.sandboxes"]


def test_settings_component_denylist_from_environment(monkeypatch):
    monkeypatch.setenv("EXCLUDED_COMPONENT_IDS", "keboola.sandboxes")

    assert Settings().excluded_component_ids == ["keboola.sandboxes"]
