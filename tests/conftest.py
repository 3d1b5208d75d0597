import logging

import pytest

from shared.helper.HelperConfig import HelperConfig


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in ("INDEX_ENGINE", "INDEX_LINEAR_DIMENSION", "EVAL_CONTEXT_TOP_K", "EVAL_QUERY_MAX_WORDS", "LLM_ENGINE"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("TIMEZONE", "UTC")


@pytest.fixture
def helper_config() -> HelperConfig:
    return HelperConfig(logger=logging.getLogger("doc_eval.tests"))
