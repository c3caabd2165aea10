import json

import pytest

from yflow.config import (
    DEFAULT_BATCH_SIZE,
    ConfigError,
    create_sample_config,
    load_config,
    resolve_config,
    resolve_config_path,
    validate_config,
)

from conftest import write_json

VALID = {
    "messagesDir": "./locales",
    "projectId": 3,
    "apiUrl": "https://i18n.example.com/api/",
    "apiKey": "secret",
}


def test_environment_overrides_file_values():
    resolved = resolve_config(VALID, {
        "I18N_PROJECT_ID": "42",
        "I18N_API_URL": "http://other.test/api",
        "I18N_API_KEY": "from-env",
        "I18N_MESSAGES_DIR": "/tmp/messages",
    })

    assert resolved["projectId"] == 42
    assert resolved["apiUrl"] == "http://other.test/api"
    assert resolved["apiKey"] == "from-env"
    assert resolved["messagesDir"] == "/tmp/messages"
    assert VALID["projectId"] == 3


def test_empty_environment_values_are_ignored():
    assert resolve_config(VALID, {"I18N_API_KEY": ""}) == VALID


def test_non_integer_project_id_from_environment():
    with pytest.raises(ConfigError) as exc_info:
        resolve_config(VALID, {"I18N_PROJECT_ID": "abc"})
    assert exc_info.value.hint


def test_validate_reports_every_problem():
    errors = validate_config({"projectId": 0, "apiUrl": "ftp://x"})

    assert len(errors) == 4
    assert any("messagesDir" in e for e in errors)
    assert any("projectId" in e for e in errors)
    assert any("apiUrl" in e for e in errors)
    assert any("apiKey" in e for e in errors)


def test_validate_rejects_bad_optional_fields():
    errors = validate_config(dict(VALID, languageMapping={"zh_CN": 1}, batchSize=0, projectId=True))

    assert len(errors) == 3


def test_load_config_resolves_relative_messages_dir(tmp_path):
    path = write_json(tmp_path / ".i18nrc.json", dict(VALID, languageMapping={"zh_CN": "zh"}))

    config = load_config(path, environ={})

    assert config.messages_dir == tmp_path.resolve() / "locales"
    assert config.api_url == "https://i18n.example.com/api"
    assert config.project_id == 3
    assert config.language_mapping == {"zh_CN": "zh"}
    assert config.batch_size == DEFAULT_BATCH_SIZE
    assert config.source_path == path


def test_load_config_applies_environment(tmp_path):
    path = write_json(tmp_path / ".i18nrc.json", VALID)

    config = load_config(path, environ={"I18N_API_KEY": "rotated"})

    assert config.api_key == "rotated"


def test_load_config_invalid_json(tmp_path):
    path = tmp_path / ".i18nrc.json"
    path.write_text("{broken", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid config file format"):
        load_config(path, environ={})


def test_load_config_validation_failure(tmp_path):
    path = write_json(tmp_path / ".i18nrc.json", dict(VALID, apiKey=""))

    with pytest.raises(ConfigError, match="apiKey"):
        load_config(path, environ={})


def test_missing_explicit_config_path(tmp_path):
    with pytest.raises(ConfigError) as exc_info:
        resolve_config_path(tmp_path / "nope.json")
    assert "yflow init" in exc_info.value.hint


def test_config_found_in_current_directory(tmp_path, monkeypatch):
    write_json(tmp_path / ".i18nrc.json", VALID)
    monkeypatch.chdir(tmp_path)

    assert resolve_config_path().resolve() == (tmp_path / ".i18nrc.json").resolve()


def test_sample_config_is_valid():
    content = create_sample_config()

    assert content.endswith("\n")
    assert validate_config(json.loads(content)) == []
