"""Tests for structured logging setup."""

import json
from pathlib import Path

import pytest
import structlog

from wildcurrent.logging import bind_turn, configure_logging, get_logger
from wildcurrent.session import GameSession


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


def _events(log_file: Path) -> list[dict]:
    return [json.loads(line) for line in log_file.read_text().splitlines()]


def test_json_logs_to_file(tmp_path: Path):
    log_file = tmp_path / "game.log"
    configure_logging(log_level="INFO", log_file=log_file, json_logs=True)
    get_logger("test").info("patrol_spawned", wanted=3)

    (event,) = _events(log_file)
    assert event["event"] == "patrol_spawned"
    assert event["level"] == "info"
    assert event["wanted"] == 3
    assert "timestamp" in event


def test_level_filter(tmp_path: Path):
    log_file = tmp_path / "game.log"
    configure_logging(log_level="WARNING", log_file=log_file, json_logs=True)
    logger = get_logger("test")
    logger.info("game_saved")
    logger.warning("game_load_failed", path="save1.json")

    assert [e["event"] for e in _events(log_file)] == ["game_load_failed"]


def test_console_logs_go_to_stderr(capsys):
    configure_logging(log_level="INFO")
    get_logger("test").info("world_loaded", rooms=23)

    captured = capsys.readouterr()
    assert "world_loaded" in captured.err
    assert "rooms=23" in captured.err
    assert captured.out == ""


def test_turn_context_is_attached(tmp_path: Path):
    log_file = tmp_path / "game.log"
    configure_logging(log_level="INFO", log_file=log_file, json_logs=True)
    bind_turn(day=2, hour=5, room="dock")
    get_logger("test").info("combat_started", enemy="navy_patrol")

    (event,) = _events(log_file)
    assert (event["day"], event["hour"], event["room"]) == (2, 5, "dock")


def test_session_binds_each_turn(tmp_path: Path, session: GameSession):
    log_file = tmp_path / "game.log"
    configure_logging(log_level="INFO", log_file=log_file, json_logs=True)
    session.state.hour = 14
    session.process_command("look")
    get_logger("test").info("turn_checked")

    event = _events(log_file)[-1]
    assert event["event"] == "turn_checked"
    assert (event["day"], event["hour"], event["room"]) == (1, 14, "ship_deck")
