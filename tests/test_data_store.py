import json
import os

import data_store
from models import EditorSettings


def test_missing_settings_give_defaults():
    assert data_store.load_settings() == EditorSettings()


def test_save_then_load_settings():
    settings = EditorSettings(default_scale=1.5, history_capacity=3, stroke_color="#00ff00")
    data_store.save_settings(settings)
    assert data_store.load_settings() == settings


def test_partial_settings_fill_in_defaults():
    with open(data_store.SETTINGS_PATH, "w") as f:
        json.dump({"rectangle_size": 40, "unknown": True}, f)
    settings = data_store.load_settings()
    assert settings.rectangle_size == 40.0
    assert settings.default_scale == 2.1


def test_malformed_settings_give_defaults():
    with open(data_store.SETTINGS_PATH, "w") as f:
        f.write("{not json")
    assert data_store.load_settings() == EditorSettings()


def test_last_dir_falls_back_to_home():
    assert data_store.load_session_config() is None
    assert data_store.last_dir() == os.path.expanduser("~")


def test_last_dir_is_remembered(tmp_path):
    folder = tmp_path / "pdfs"
    folder.mkdir()
    data_store.save_session_config(str(folder))
    assert data_store.load_session_config() == {"last_dir": str(folder)}
    assert data_store.last_dir() == str(folder)


def test_last_dir_ignores_deleted_folder(tmp_path):
    data_store.save_session_config(str(tmp_path / "gone"))
    assert data_store.last_dir() == os.path.expanduser("~")


def test_malformed_session_config_falls_back_to_home():
    with open(data_store.SESSION_CONFIG_PATH, "w") as f:
        f.write("{broken")
    assert data_store.last_dir() == os.path.expanduser("~")


def test_non_object_session_config_falls_back_to_home():
    with open(data_store.SESSION_CONFIG_PATH, "w") as f:
        json.dump(["not", "a", "dict"], f)
    assert data_store.last_dir() == os.path.expanduser("~")
