"""Tests for configuration loading."""

import pytest

from article_content.config import Config
from article_content.extraction.models import DEFAULT_LIMITS
from article_content.fetching.fetcher import BROWSER_USER_AGENT


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("FETCH_TIMEOUT_SECONDS", raising=False)
    monkeypatch.delenv("READER_USER_AGENT", raising=False)


def test_missing_file_gives_defaults(tmp_path):
    cfg = Config.from_yaml(tmp_path / "missing.yaml")
    assert cfg.fetch_timeout_seconds == 10
    assert cfg.user_agent == BROWSER_USER_AGENT
    assert cfg.limits() == DEFAULT_LIMITS


def test_values_from_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("fetch_timeout_seconds: 5\nmax_blocks: 40\nmax_depth: 8\n")

    cfg = Config.from_yaml(path)

    assert cfg.fetch_timeout_seconds == 5
    limits = cfg.limits()
    assert limits.max_blocks == 40
    assert limits.max_depth == 8
    assert limits.max_code_length == 5000


def test_environment_takes_precedence(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text("fetch_timeout_seconds: 5\nuser_agent: FromYaml\n")
    monkeypatch.setenv("FETCH_TIMEOUT_SECONDS", "3")
    monkeypatch.setenv("READER_USER_AGENT", "FromEnv")

    cfg = Config.from_yaml(path)

    assert cfg.fetch_timeout_seconds == 3
    assert cfg.user_agent == "FromEnv"


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")
    assert Config.from_yaml(path).max_blocks == 100


def test_non_positive_values_are_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("max_depth: 0\n")
    with pytest.raises(ValueError):
        Config.from_yaml(path)


def test_non_mapping_is_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ValueError):
        Config.from_yaml(path)
