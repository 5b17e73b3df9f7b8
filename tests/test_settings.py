from __future__ import annotations

from pathlib import Path

from red_engine.runtime import EditorSettings, load_settings


def test_defaults_without_environment(tmp_path: Path) -> None:
    settings = load_settings({}, config_dir=tmp_path)

    assert settings.tab_width == 4
    assert settings.fast_move_rows == 5
    assert settings.history_limit == 10_000
    assert settings.max_file_size == 100 * 1024 * 1024
    assert settings.config_dir == tmp_path


def test_environment_overrides(tmp_path: Path) -> None:
    env = {
        "RED_ENGINE_TAB_WIDTH": "2",
        "RED_ENGINE_HISTORY_LIMIT": "50",
        "RED_ENGINE_FILE_POLL_INTERVAL": "0.25",
        "RED_ENGINE_CONFIG_DIR": str(tmp_path / "cfg"),
    }

    settings = load_settings(env)

    assert settings.tab_width == 2
    assert settings.history_limit == 50
    assert settings.file_poll_interval == 0.25
    assert settings.config_dir == tmp_path / "cfg"


def test_bad_values_fall_back_to_defaults(tmp_path: Path) -> None:
    env = {
        "RED_ENGINE_TAB_WIDTH": "wide",
        "RED_ENGINE_STATUS_TIMEOUT": "soon",
        "RED_ENGINE_SUGGESTION_LIMIT": "0",
    }

    settings = load_settings(env, config_dir=tmp_path)

    assert settings.tab_width == 4
    assert settings.status_timeout == 3.0
    assert settings.suggestion_limit == 1


def test_explicit_config_dir_wins_over_environment(tmp_path: Path) -> None:
    env = {"RED_ENGINE_CONFIG_DIR": "/nowhere"}

    assert load_settings(env, config_dir=tmp_path).config_dir == tmp_path


def test_derived_paths_live_under_config_dir(tmp_path: Path) -> None:
    settings = EditorSettings(config_dir=tmp_path)

    assert settings.history_file == tmp_path / "history"
    assert settings.log_dir == tmp_path / "logs"
