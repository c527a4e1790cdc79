"""Tests for quest completion and ending checks."""

from wildcurrent.engine.quests import check_ending, evaluate_quests
from wildcurrent.engine.state import FRAGMENTS, Flag, GameState
from wildcurrent.engine.world import World


def test_nothing_to_complete_on_fresh_game(world: World, state: GameState):
    assert evaluate_quests(world, state) == []
    assert check_ending(state) is None


def test_fragments_complete_main_quest_once(world: World, state: GameState):
    state.player.inventory = list(FRAGMENTS)
    lines = evaluate_quests(world, state)
    assert lines == [
        "Quest complete: Glyph Stone Hunt. "
        "Fragments secured. Decode them with a cipher lens."
    ]
    assert state.quests["main"].done

    assert evaluate_quests(world, state) == []
    assert state.quests["main"].outcome == (
        "Fragments secured. Decode them with a cipher lens."
    )


def test_main_quest_stays_done_after_dropping_fragments(world: World, state: GameState):
    state.player.inventory = list(FRAGMENTS)
    evaluate_quests(world, state)
    state.player.inventory = []
    evaluate_quests(world, state)
    assert state.quests["main"].done


def test_unlocked_ruin_completes_broker(world: World, state: GameState):
    state.flags.add(Flag.RUIN_UNLOCKED)
    assert evaluate_quests(world, state) == ["Quest complete: Rum for Keys. Key delivered."]


def test_traded_broker_quest_keeps_its_outcome(world: World, state: GameState):
    state.quests["broker"].done = True
    state.quests["broker"].outcome = "The broker traded a stone key."
    state.flags.add(Flag.RUIN_UNLOCKED)
    assert evaluate_quests(world, state) == []
    assert state.quests["broker"].outcome == "The broker traded a stone key."


def test_defeat_takes_priority(state: GameState):
    state.player.hp = 0
    state.flags.add(Flag.TREASURE_ESCAPED)
    state.wanted = 9
    name, text = check_ending(state)
    assert name == "defeated"
    assert "captures you" in text


def test_drowned_before_captured(state: GameState):
    state.flags.add(Flag.DROWNED)
    state.wanted = 7
    assert check_ending(state)[0] == "drowned"


def test_captured(state: GameState):
    state.wanted = 7
    assert check_ending(state) == (
        "captured",
        "Bluecoat Navy corners you. Chains clamp shut.",
    )


def test_escape_variants(state: GameState):
    state.flags.add(Flag.TREASURE_ESCAPED)
    assert "Legends will whisper" in check_ending(state)[1]
    state.wanted = 4
    assert "bounty posters" in check_ending(state)[1]
    state.player.active_fruit = "gale_fruit"
    assert "curse twists your fate" in check_ending(state)[1]


def test_treasure_lost(state: GameState):
    state.flags.add(Flag.TREASURE_LOST)
    assert check_ending(state)[0] == "treasure_lost"
