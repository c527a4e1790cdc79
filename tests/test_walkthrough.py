"""Test that the game can be played through to a victorious escape.

The route never raises the wanted level, so no patrol ever spawns and the
run does not depend on the random source.

Route reference:
  ship_cabin: navigation log
  market_lane: buy spice and storm lantern, trade spice for cipher lens
  tavern: buy rum, trade it to the broker for the stone key
  ember_forge -> ruins_gate -> ruins_hall: fragments A and B, open the doors
  reef_shallows -> mist_pier -> mist_library: fragment C, decode the core
  back to ship_deck and set sail
"""

from pathlib import Path

import pytest

from wildcurrent.engine.state import FRAGMENTS, TREASURE_CORE, Flag
from wildcurrent.engine.world import World
from wildcurrent.session import GameSession


def _run(session: GameSession, commands: list[str]) -> list[list[str]]:
    """Run a list of commands and return all responses."""
    responses = []
    for cmd in commands:
        resp = session.process_command(cmd)
        responses.append(resp)
        assert not session.is_finished, f"Game ended unexpectedly after {cmd!r}: {resp}"
    return responses


def _assert_at(session: GameSession, room_id: str) -> None:
    location = session.state.player.location
    assert location == room_id, f"Expected {room_id}, at {location}"


@pytest.fixture
def session(world: World, scripted, save_path: Path) -> GameSession:
    # An empty script: any random roll along the route fails the test.
    return GameSession(world, rng=scripted(), save_path=save_path)


def test_full_walkthrough(session: GameSession):
    state = session.state

    # Phase 1: the log and the market
    _run(session, ["south", "take navigation log", "north", "north", "east"])
    _assert_at(session, "market_lane")
    _run(session, ["buy island spice", "buy storm lantern"])
    assert state.money == 38

    _run(session, ["use island spice on gadgeteer", "use cipher lens on navigation log"])
    assert "cipher_lens" in state.player.inventory
    assert Flag.MAP_DECODED in state.flags

    # Phase 2: rum for the stone key
    _run(session, ["east", "east", "buy bottle of rum", "use rum on broker"])
    _assert_at(session, "tavern")
    assert "stone_key" in state.player.inventory
    assert state.quests["broker"].done

    # Phase 3: the ruins
    _run(session, ["west", "west", "north", "east", "north", "take glyph fragment a"])
    _assert_at(session, "ember_forge")
    _run(session, ["north", "use stone key", "north", "take glyph fragment b"])
    _assert_at(session, "ruins_hall")
    _run(session, ["use storm lantern"])
    assert Flag.INNER_UNLOCKED in state.flags

    # Phase 4: the library
    _run(session, ["south", "south", "south", "south", "west", "north", "north"])
    _assert_at(session, "mist_library")
    responses = _run(session, ["take glyph fragment c"])
    assert responses[-1][-1].startswith("Quest complete: Glyph Stone Hunt.")
    assert all(frag in state.player.inventory for frag in FRAGMENTS)

    _run(session, ["use cipher lens"])
    assert TREASURE_CORE in state.player.inventory

    # Phase 5: home and away
    _run(session, ["south", "south", "east", "south"])
    _assert_at(session, "ship_deck")
    lines = session.process_command("use treasure coordinate core")
    assert lines == [
        "You set the coordinates and cut the sails.",
        "=== The End ===",
        "You vanish into the Wild Current with the treasure. Legends will whisper your name.",
    ]
    assert session.ending[0] == "escaped"
    assert state.wanted == 0
    assert state.day == 2


def test_walkthrough_survives_save_and_load(session: GameSession):
    _run(session, ["south", "take navigation log", "north", "north", "east"])
    _run(session, ["buy island spice", "use spice on gadgeteer", "save"])

    _run(session, ["west", "load"])
    _assert_at(session, "market_lane")
    assert session.state.quests["gadgeteer"].done
    _run(session, ["use cipher lens on log"])
    assert Flag.MAP_DECODED in session.state.flags
