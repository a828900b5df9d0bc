import json
import logging
import sys

import pytest
from pydantic import ValidationError

from yoyak.config import (
    Settings,
    get_settings,
    read_settings_file,
    save_settings,
    settings_path,
)


@pytest.mark.skipif(sys.platform == "win32", reason="XDG layout")
def test_settings_path_follows_xdg(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert settings_path() == tmp_path / "yoyak" / "yoyak.json"


def test_defaults():
    settings = Settings()
    assert settings.model == "gpt-4o-mini"
    assert settings.language == "en"
    assert settings.summary_paragraphs == 1
    assert settings.max_continuations is None


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("YOYAK_MODEL", "deepseek-chat")
    monkeypatch.setenv("YOYAK_MAX_CONTINUATIONS", "3")
    settings = Settings()
    assert settings.model == "deepseek-chat"
    assert settings.max_continuations == 3


def test_saved_settings_are_loaded_back():
    path = save_settings(
        Settings(model="claude-3-5-haiku-latest", api_key="sk-test", language="ko")
    )

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["model"] == "claude-3-5-haiku-latest"
    assert "azure_api_version" not in data

    settings = Settings()
    assert settings.model == "claude-3-5-haiku-latest"
    assert settings.api_key == "sk-test"
    assert settings.language == "ko"
    assert Settings(model="gpt-4o").model == "gpt-4o"


def test_invalid_values_rejected():
    with pytest.raises(ValidationError):
        Settings(summary_paragraphs=0)
    with pytest.raises(ValidationError):
        Settings(max_continuations=-1)


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


def test_malformed_settings_file_counts_as_empty(caplog):
    path = settings_path()
    path.parent.mkdir(parents=True)
    path.write_text("{not json", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="yoyak"):
        settings = Settings()

    assert settings.model == "gpt-4o-mini"
    assert settings.api_key == ""
    assert read_settings_file() == {}
    assert "Ignoring unreadable settings file" in caplog.text


def test_settings_file_must_hold_an_object():
    path = settings_path()
    path.parent.mkdir(parents=True)
    path.write_text('["gpt-4o"]', encoding="utf-8")

    assert read_settings_file() == {}
    assert Settings().model == "gpt-4o-mini"


def test_save_settings_can_write_a_subset():
    path = save_settings(Settings(model="gpt-4o", api_key="sk-test"), fields={"model"})
    assert json.loads(path.read_text(encoding="utf-8")) == {"model": "gpt-4o"}
