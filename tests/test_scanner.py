from pathlib import Path

import pytest

from yflow.project.scanner import DirectoryNotFound, NotADirectory, scan_messages_dir
from yflow.project.writer import atomic_write_json, load_json_file

from conftest import write_json


def test_scan_collects_languages_and_files(messages_dir):
    result = scan_messages_dir(messages_dir)

    assert result.languages == ["en", "zh_CN"]
    assert result.translations["en"] == {
        "app.title": "My App",
        "app.save": "Save",
        "home.welcome": "Welcome",
    }
    assert result.translations["zh_CN"] == {"app.title": "我的应用"}
    assert result.files == ["en/common.json", "en/pages/home.json", "zh_CN/common.json"]
    assert result.key_count == 4
    assert result.errors == []


def test_files_for_language(messages_dir):
    result = scan_messages_dir(messages_dir)

    assert result.files_for_language("en") == ["en/common.json", "en/pages/home.json"]
    assert result.files_for_language("fr") == []


def test_later_file_wins_on_duplicate_keys(tmp_path):
    write_json(tmp_path / "en" / "a.json", {"k": "first"})
    write_json(tmp_path / "en" / "b.json", {"k": "second"})

    result = scan_messages_dir(tmp_path)

    assert result.translations["en"] == {"k": "second"}


def test_invalid_files_are_reported_and_skipped(tmp_path):
    write_json(tmp_path / "en" / "good.json", {"ok": "OK"})
    (tmp_path / "en" / "broken.json").write_text("{not json", encoding="utf-8")
    write_json(tmp_path / "en" / "list.json", ["a", "b"])

    result = scan_messages_dir(tmp_path)

    assert result.translations["en"] == {"ok": "OK"}
    assert result.files == ["en/good.json"]
    assert len(result.errors) == 2
    assert any("broken.json" in error for error in result.errors)
    assert any("list.json" in error for error in result.errors)


def test_empty_language_dir_and_stray_files(tmp_path):
    (tmp_path / "fr").mkdir()
    write_json(tmp_path / "root.json", {"ignored": "yes"})
    (tmp_path / "fr" / "notes.txt").write_text("not a translation", encoding="utf-8")

    result = scan_messages_dir(tmp_path)

    assert result.translations == {"fr": {}}
    assert result.files == []
    assert result.key_count == 0


def test_missing_directory(tmp_path):
    with pytest.raises(DirectoryNotFound):
        scan_messages_dir(tmp_path / "missing")

    with pytest.raises(FileNotFoundError):
        scan_messages_dir(tmp_path / "missing")


def test_path_is_a_file(tmp_path):
    path = tmp_path / "messages.json"
    path.write_text("{}", encoding="utf-8")

    with pytest.raises(NotADirectory):
        scan_messages_dir(path)


def test_atomic_write_is_pretty_and_keeps_unicode(tmp_path):
    path = tmp_path / "zh" / "sync.json"

    atomic_write_json(path, {"app": {"title": "我的应用"}})

    assert path.read_text(encoding="utf-8") == '{\n  "app": {\n    "title": "我的应用"\n  }\n}\n'
    assert load_json_file(path) == {"app": {"title": "我的应用"}}
    assert [p.name for p in path.parent.iterdir()] == ["sync.json"]


def test_load_json_file_accepts_bom(tmp_path):
    path = tmp_path / "bom.json"
    path.write_bytes(b'\xef\xbb\xbf{"a": "b"}')

    assert load_json_file(path) == {"a": "b"}


def test_unreadable_subdirectory_keeps_rest_of_language(tmp_path, monkeypatch):
    write_json(tmp_path / "en" / "common.json", {"a": "A"})
    write_json(tmp_path / "en" / "private" / "secret.json", {"b": "B"})
    real_iterdir = Path.iterdir

    def iterdir(self):
        if self.name == "private":
            raise PermissionError(13, "Permission denied", str(self))
        return real_iterdir(self)

    monkeypatch.setattr(Path, "iterdir", iterdir)

    result = scan_messages_dir(tmp_path)

    assert result.translations == {"en": {"a": "A"}}
    assert result.files == ["en/common.json"]
    assert len(result.errors) == 1
    assert "private" in result.errors[0]
