from __future__ import annotations

import pytest

from sudoku_match import project_config
from sudoku_match.project_config import load_session_config


def setup_function():
    project_config.reload()


def teardown_function():
    project_config.reload()


def test_defaults_come_from_toml() -> None:
    config = load_session_config(env={})
    assert config.difficulty == 0.5
    assert config.max_players == 2
    assert config.dispose_delay_s == 5.0
    assert config.reconnect_window_s == 20.0
    assert config.service.match_type_name == "Sudoku"
    assert config.service.match_finish_path == "/match/{uuid}/finish/"
    assert config.events_dir == ""


def test_environment_overrides_toml() -> None:
    env = {"SUDOKU_DIFFICULTY": "0.8", "SERVER_URL": "https://matches.example", "SERVER_KEY": "k"}
    config = load_session_config(env=env)
    assert config.difficulty == 0.8
    assert config.service.base_url == "https://matches.example"
    assert config.service.headers()["X-Server-Key"] == "k"


def test_explicit_overrides_beat_environment() -> None:
    config = load_session_config(
        env={"SUDOKU_DIFFICULTY": "0.8", "SUDOKU_DISPOSE_DELAY_S": "9"},
        overrides={"difficulty": 0.1},
    )
    assert config.difficulty == 0.1
    assert config.dispose_delay_s == 9.0


def test_unparseable_values_keep_previous_layer() -> None:
    config = load_session_config(
        env={"SUDOKU_DIFFICULTY": "hard", "SUDOKU_RECONNECT_WINDOW_S": "3"},
        overrides={"reconnect_window_s": "soon"},
    )
    assert config.difficulty == 0.5
    assert config.reconnect_window_s == 3.0


def test_difficulty_is_clamped() -> None:
    assert load_session_config(env={"SUDOKU_DIFFICULTY": "2.5"}).difficulty == 1.0
    assert load_session_config(env={"SUDOKU_DIFFICULTY": "-1"}).difficulty == 0.0


def test_capacity_must_be_two() -> None:
    with pytest.raises(ValueError):
        load_session_config(env={"SUDOKU_MAX_PLAYERS": "3"})


def test_service_urls_join_base_and_path() -> None:
    config = load_session_config(env={"SERVER_URL": "http://svc:9000/"})
    assert config.service.url("/match/create/") == "http://svc:9000/match/create/"
    assert "X-Server-Key" not in config.service.headers()


def test_config_file_can_be_replaced(tmp_path, monkeypatch) -> None:
    source = project_config._config_path().read_text("utf-8")
    custom = tmp_path / "custom.toml"
    custom.write_text(source.replace("dispose_delay_s = 5.0", "dispose_delay_s = 1.5"), "utf-8")
    monkeypatch.setenv(project_config.CONFIG_PATH_ENV, str(custom))
    project_config.reload()

    assert project_config.get_section("session.dispose_delay_s") == 1.5
    assert load_session_config(env={}).dispose_delay_s == 1.5


def test_missing_config_file_is_reported(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv(project_config.CONFIG_PATH_ENV, str(tmp_path / "absent.toml"))
    project_config.reload()
    with pytest.raises(RuntimeError):
        project_config.get_config()


def test_get_section_reports_unknown_path() -> None:
    with pytest.raises(KeyError):
        project_config.get_section("session.nope")
    assert project_config.get_section("session.nope", default=3) == 3
