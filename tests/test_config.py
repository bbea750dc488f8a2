import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from mtgid.config import DEFAULT_MODEL_NAME, IdentifierConfig, MissingAPIKey, load_env, read_api_key


def test_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("MTGID_MODEL", raising=False)

    config = IdentifierConfig()

    assert config.unidentified_dir == tmp_path.resolve() / "Unidentified"
    assert config.examples_dir == tmp_path.resolve() / "Examples"
    assert config.allowed_extensions == (".jpg", ".jpeg", ".png")
    assert config.max_retries == 3
    assert config.request_delay == 1.0
    assert config.api_model == DEFAULT_MODEL_NAME


def test_model_from_environment(monkeypatch):
    monkeypatch.setenv("MTGID_MODEL", "gpt-4o")

    assert IdentifierConfig().api_model == "gpt-4o"


def test_paths_and_extensions_normalised(tmp_path):
    config = IdentifierConfig(unidentified_dir=str(tmp_path / "in"), allowed_extensions=["JPG", ".Png"])

    assert config.unidentified_dir == Path(tmp_path / "in").resolve()
    assert config.allowed_extensions == (".jpg", ".png")


def test_negative_retries_rejected():
    with pytest.raises(ValidationError):
        IdentifierConfig(max_retries=-1)


def test_load_env_does_not_override(tmp_path, monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "from-shell")
    monkeypatch.setenv("OPENAI_ORG", "placeholder")
    monkeypatch.delenv("OPENAI_ORG")
    (tmp_path / ".env").write_text(
        "# comment\nOPENAI_API_KEY=from-file\nOPENAI_ORG=\"org-123\"\n", encoding="utf-8"
    )

    load_env(tmp_path)

    assert os.environ["OPENAI_API_KEY"] == "from-shell"
    assert os.environ["OPENAI_ORG"] == "org-123"


def test_read_api_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(MissingAPIKey):
        read_api_key()

    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    assert read_api_key() == "sk-test"
