"""Tests for command parsing and dispatch."""

from wildcurrent.engine.commands import (
    UNKNOWN_COMMAND,
    handle_command,
    normalize_direction,
    parse_command,
    split_use,
)
from wildcurrent.engine.state import Flag, GameState
from wildcurrent.engine.world import World


def test_parse_lowercases_words():
    command = parse_command("  TAKE Coil   of Rope ")
    assert command.verb == "take"
    assert command.args == ("coil", "of", "rope")
    assert command.text == "coil of rope"
    assert command.raw == "TAKE Coil   of Rope"


def test_parse_blank():
    assert parse_command("") is None
    assert parse_command("   ") is None


def test_direction_aliases():
    assert normalize_direction("N") == "north"
    assert normalize_direction("sw") == "southwest"
    assert normalize_direction("up") is None


def test_split_use():
    assert split_use(parse_command("use Bottle of Rum ON Shady Broker")) == (
        "bottle of rum",
        "shady broker",
    )
    assert split_use(parse_command("use rum")) == ("rum", "")


def test_split_use_splits_once():
    assert split_use(parse_command("use lens on log on shelf")) == ("lens", "log on shelf")


def test_blank_input_is_a_no_op(world: World, state: GameState, scripted):
    assert handle_command(world, state, "", scripted()) == []
    assert state.hour == 9


def test_unknown_verb(world: World, state: GameState, scripted):
    assert handle_command(world, state, "xyzzy", scripted()) == [UNKNOWN_COMMAND]


def test_missing_arguments_prompt(world: World, state: GameState, scripted):
    rng = scripted()
    assert handle_command(world, state, "go", rng) == ["Go where?"]
    assert handle_command(world, state, "take", rng) == ["Take what?"]
    assert handle_command(world, state, "talk", rng) == ["Talk to whom?"]
    assert handle_command(world, state, "use", rng) == ["Use what?"]
    assert handle_command(world, state, "route", rng) == ["Route to where?"]


def test_bare_direction_moves(world: World, state: GameState, scripted):
    lines = handle_command(world, state, "N", scripted())
    assert state.player.location == "dock"
    assert lines[0].startswith("Harbor Dock")


def test_go_with_alias(world: World, state: GameState, scripted):
    handle_command(world, state, "go s", scripted())
    assert state.player.location == "ship_cabin"


def test_go_bad_direction(world: World, state: GameState, scripted):
    rng = scripted()
    assert handle_command(world, state, "go ne", rng) == ["You can't go that way."]
    assert handle_command(world, state, "go up", rng) == ["That direction makes no sense."]
    assert state.player.location == "ship_deck"


def test_take_alias(world: World, state: GameState, scripted):
    handle_command(world, state, "get signal flare", scripted())
    assert state.player.inventory == ["flare"]


def test_talk_to(world: World, state: GameState, scripted):
    assert handle_command(world, state, "talk to ship cook", scripted()) == [
        "Keep your hands busy and your belly fuller."
    ]


def test_use_on_target(world: World, state: GameState, scripted):
    state.player.location = "tavern"
    state.player.inventory = ["rum"]
    lines = handle_command(world, state, "USE Bottle of Rum on Shady Broker", scripted())
    assert lines == ["The broker trades the rum for a stone key."]


def test_help(world: World, state: GameState, scripted):
    text = handle_command(world, state, "help", scripted())[0]
    assert text.startswith("Commands:")
    assert "ROUTE <place>" in text


def test_quit(world: World, state: GameState, scripted):
    handle_command(world, state, "quit", scripted())
    assert Flag.QUIT in state.flags


def test_save_needs_a_session(world: World, state: GameState, scripted):
    assert handle_command(world, state, "save", scripted()) == [
        "Saving and loading need an active game session."
    ]


def test_map_and_route(world: World, state: GameState, scripted):
    rng = scripted()
    handle_command(world, state, "north", rng)
    text = handle_command(world, state, "map", rng)[0]
    assert "Harbor Isle: Harbor Dock" in text
    assert handle_command(world, state, "route captain's cabin", rng) == [
        "Route to Captain's Cabin: south, south"
    ]
