# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-12
# Updated: 2026-01-27
# Description: test_config.py
# -----------------------------------------------------------------------------
import pytest

from config.Config import Config


@pytest.fixture
def clean_env(monkeypatch):
    for env_name in Config.ENV_VARS.values():
        monkeypatch.delenv(env_name, raising=False)
    return monkeypatch


def test_missing_api_key_fails_fast(clean_env):
    clean_env.setenv("QA_VECTOR_BACKEND", "memory")
    with pytest.raises(ValueError, match="OPENAI_API_KEY"):
        Config.from_env()


def test_postgres_backend_requires_database_url(clean_env):
    clean_env.setenv("OPENAI_API_KEY", "sk-test")
    with pytest.raises(ValueError, match="DATABASE_URL"):
        Config.from_env()


def test_memory_backend_needs_no_database(clean_env):
    clean_env.setenv("OPENAI_API_KEY", "sk-test")
    clean_env.setenv("QA_VECTOR_BACKEND", "memory")

    cfg = Config.from_env()

    assert cfg.vector_backend == "memory"
    assert cfg.openai_chat_model == "gpt-4o-mini"
    assert cfg.openai_embed_model == "text-embedding-3-small"


def test_unknown_backend_rejected():
    with pytest.raises(ValueError, match="QA_VECTOR_BACKEND"):
        Config(openai_api_key="sk-test", vector_backend="sqlite")


def test_summary_hides_secrets():
    cfg = Config(openai_api_key="sk-secret", database_url="postgresql://u:pw@db.internal:5432/care")
    summary = cfg.summary()

    assert "sk-secret" not in str(summary)
    assert "pw" not in str(summary)
    assert summary["database_host"] == "db.internal:5432/care"
