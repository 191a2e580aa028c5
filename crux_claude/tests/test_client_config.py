from __future__ import annotations

import json

import httpx
import pytest

import crux_claude
from crux_claude.config import ClientConfig, load_client_config
from crux_claude.config.defaults import (
    ANTHROPIC_DEFAULT_API_VERSION,
    ANTHROPIC_DEFAULT_BASE_URL,
    CONFIG_FILE_ENV,
    DEFAULT_MAX_RETRIES,
)
from crux_claude.config.env import ENV_FIELD_MAP, is_placeholder, resolve_env_value


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for names in ENV_FIELD_MAP.values():
        for name in names:
            monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv(CONFIG_FILE_ENV, raising=False)


def test_defaults():
    cfg = load_client_config()
    assert cfg == ClientConfig()  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.base_url == ANTHROPIC_DEFAULT_BASE_URL  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.api_version == ANTHROPIC_DEFAULT_API_VERSION  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.max_retries == DEFAULT_MAX_RETRIES  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.api_key is None  # nosec B101 - asserts are appropriate in unit tests


def test_env_vars_are_read_and_coerced(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-env")
    monkeypatch.setenv("ANTHROPIC_BETA", "files-api-2025-04-14, ,prompt-caching-2024-07-31")
    monkeypatch.setenv("CRUX_CLAUDE_TIMEOUT_SECONDS", "12.5")
    monkeypatch.setenv("CRUX_CLAUDE_MAX_RETRIES", "0")
    cfg = load_client_config()
    assert cfg.api_key == "sk-env"  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.beta == ("files-api-2025-04-14", "prompt-caching-2024-07-31")  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.timeout_seconds == 12.5  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.max_retries == 1  # nosec B101 - at least one attempt is always made


def test_version_alias_and_canonical_precedence(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_VERSION", "alias")
    assert resolve_env_value("api_version") == ("alias", "ANTHROPIC_API_VERSION")  # nosec B101 - asserts are appropriate in unit tests
    monkeypatch.setenv("ANTHROPIC_VERSION", "canon")
    assert load_client_config().api_version == "canon"  # nosec B101 - asserts are appropriate in unit tests


def test_placeholder_keys_are_ignored(monkeypatch):
    assert is_placeholder(" Your-API-Key-here ")  # nosec B101 - asserts are appropriate in unit tests
    assert not is_placeholder("sk-real")  # nosec B101 - asserts are appropriate in unit tests
    monkeypatch.setenv("ANTHROPIC_API_KEY", "changeme")
    assert load_client_config().api_key is None  # nosec B101 - asserts are appropriate in unit tests


def test_yaml_file_anthropic_section(monkeypatch, tmp_path):
    path = tmp_path / "crux.yaml"
    path.write_text(
        "anthropic:\n"
        "  api_version: '2099-01-01'\n"
        "  beta: [a, b]\n"
        "  timeout_seconds: 5\n"
        "  unknown_key: ignored\n",
        encoding="utf-8",
    )
    monkeypatch.setenv(CONFIG_FILE_ENV, str(path))
    cfg = load_client_config()
    assert cfg.api_version == "2099-01-01"  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.beta == ("a", "b")  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.timeout_seconds == 5.0  # nosec B101 - asserts are appropriate in unit tests


def test_json_file_top_level(monkeypatch, tmp_path):
    path = tmp_path / "crux.json"
    path.write_text(json.dumps({"base_url": "http://localhost:9/v1/"}), encoding="utf-8")
    monkeypatch.setenv(CONFIG_FILE_ENV, str(path))
    assert load_client_config().base_url == "http://localhost:9/v1/"  # nosec B101 - asserts are appropriate in unit tests


def test_missing_file_is_ignored(monkeypatch, tmp_path):
    monkeypatch.setenv(CONFIG_FILE_ENV, str(tmp_path / "absent.yaml"))
    assert load_client_config() == ClientConfig()  # nosec B101 - asserts are appropriate in unit tests


def test_precedence_file_then_env_then_overrides(monkeypatch, tmp_path):
    path = tmp_path / "crux.json"
    path.write_text(json.dumps({"anthropic": {"api_key": "sk-file", "max_retries": 7}}), encoding="utf-8")
    monkeypatch.setenv(CONFIG_FILE_ENV, str(path))
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-env")
    cfg = load_client_config({"max_retries": 2, "api_version": None, "not_a_field": 1})
    assert cfg.api_key == "sk-env"  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.max_retries == 2  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.api_version == ANTHROPIC_DEFAULT_API_VERSION  # nosec B101 - None overrides are skipped


def test_with_beta_appends_and_deduplicates():
    cfg = ClientConfig(beta=("a",))
    updated = cfg.with_beta("b", "a", "")
    assert updated.beta == ("a", "b")  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.beta == ("a",)  # nosec B101 - original left untouched


def test_create_client_uses_merged_config(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-env")
    client = crux_claude.create_client({"beta": "a,b"}, transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    try:
        assert client.config.api_key == "sk-env"  # nosec B101 - asserts are appropriate in unit tests
        assert client.headers["anthropic-beta"] == "a,b"  # nosec B101 - asserts are appropriate in unit tests
    finally:
        client.close()
