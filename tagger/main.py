# tagger/main.py
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import List, Optional

from pydantic import ValidationError

from tagger.agent.graph import RunSummary, run_tagger
from tagger.clients.http_utils import close_http_clients
from tagger.clients.storage_service import StorageServiceClient
from tagger.config import Settings, settings as default_settings
from tagger.core.completion import CompletionGateway
from tagger.exceptions import UserConfigurationError
from tagger.infra.logging import setup_logging
from tagger.llm.base import CompletionLLM
from tagger.llm.factory import get_completion_llm
from tagger.models.parameters import TaggerParameters

logger = logging.getLogger("tagger.main")

EXIT_USER_ERROR = 1
EXIT_APPLICATION_ERROR = 2


def check_environment(settings: Settings) -> None:
    """
    Storage credentials must be present and the run must not target a dev branch.
    """
    if not settings.storage_api_token:
        raise UserConfigurationError("Storage API token is missing from environment variable KBC_TOKEN.")
    if not settings.storage_api_url:
        raise UserConfigurationError("Storage API URL is missing from environment variable KBC_URL.")
    if settings.branch_id:
        raise UserConfigurationError("Component cannot run in branch.")


def load_parameters(data_dir: str) -> TaggerParameters:
    path = os.path.join(data_dir, "config.json")
    try:
        with open(path, "r", encoding="utf-8") as f:
            config = json.load(f)
    except FileNotFoundError as e:
        raise UserConfigurationError(f"Configuration file {path} does not exist.") from e
    except json.JSONDecodeError as e:
        raise UserConfigurationError(f"Configuration file {path} is not valid JSON: {e}") from e

    try:
        parameters = TaggerParameters.model_validate((config or {}).get("parameters") or {})
    except ValidationError as e:
        raise UserConfigurationError(f"Invalid parameters in {path}: {e}") from e

    if not parameters.openai_api_key:
        raise UserConfigurationError("#openApiKey must be specified in parameters.")
    return parameters


async def run(
    parameters: TaggerParameters,
    *,
    settings: Optional[Settings] = None,
    storage: Optional[StorageServiceClient] = None,
    llm: Optional[CompletionLLM] = None,
) -> RunSummary:
    """
    Label every selected table and (optionally) write the labels back.
    """
    cfg = settings or default_settings
    if not parameters.openai_api_key and llm is None:
        raise UserConfigurationError("#openApiKey must be specified in parameters.")

    storage = storage or StorageServiceClient(settings=cfg)
    gateway = CompletionGateway(
        llm or get_completion_llm(parameters.openai_api_key, settings=cfg),
        sentinel=cfg.label_sentinel,
    )
    return await run_tagger(parameters=parameters, storage=storage, gateway=gateway, settings=cfg)


async def _amain(settings: Settings) -> RunSummary:
    try:
        check_environment(settings)
        logger.info("Data directory: %s", settings.data_dir)
        parameters = load_parameters(settings.data_dir)
        return await run(parameters, settings=settings)
    finally:
        await close_http_clients()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="ai-table-tagger",
        description="Label storage tables and columns with completion-model generated metadata.",
    )
    parser.add_argument("--data-dir", default=None, help="Directory holding config.json (default: KBC_DATADIR)")
    args = parser.parse_args(argv)

    settings = default_settings
    if args.data_dir:
        settings = settings.model_copy(update={"data_dir": args.data_dir})

    setup_logging(settings.service_name)
    try:
        asyncio.run(_amain(settings))
    except UserConfigurationError as e:
        logger.error("%s", e)
        return EXIT_USER_ERROR
    except Exception:
        logger.exception("Run failed")
        return EXIT_APPLICATION_ERROR
    return 0


if __name__ == "__main__":
    sys.exit(main())
