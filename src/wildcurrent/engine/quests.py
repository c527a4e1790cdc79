"""Quest completion and ending predicates, re-scanned after each turn.

Quest rules look only at flags and inventory, never at the done flag, and
complete_quest() refuses a second transition, so re-running is a no-op.
"""

from collections.abc import Callable
from dataclasses import dataclass

from ..logging import get_logger
from .state import (
    CAPTURE_WANTED,
    ESCAPE_HEAT_WANTED,
    Flag,
    GameState,
    complete_quest,
    has_fragments,
)
from .world import World

logger = get_logger(__name__)


@dataclass(frozen=True)
class QuestRule:
    quest_id: str
    predicate: Callable[[GameState], bool]
    outcome: str


_QUEST_RULES: tuple[QuestRule, ...] = (
    QuestRule(
        "main",
        has_fragments,
        "Fragments secured. Decode them with a cipher lens.",
    ),
    QuestRule(
        "broker",
        lambda s: Flag.RUIN_UNLOCKED in s.flags,
        "Key delivered.",
    ),
)


def evaluate_quests(world: World, state: GameState) -> list[str]:
    """Complete every quest whose rule now holds; return announcements."""
    lines = []
    for rule in _QUEST_RULES:
        if not rule.predicate(state):
            continue
        if complete_quest(state, rule.quest_id, rule.outcome):
            logger.info("quest_completed", quest=rule.quest_id)
            quest = world.quests.get(rule.quest_id)
            name = quest.name if quest else rule.quest_id
            lines.append(f"Quest complete: {name}. {rule.outcome}")
    return lines


def _escape_ending(state: GameState) -> str:
    if state.player.active_fruit is not None:
        return "You escape with the treasure, but the curse twists your fate. The sea will always hunt you."
    if state.wanted >= ESCAPE_HEAT_WANTED:
        return "You slip the Bluecoat blockade by a hair. The treasure is yours, and so is a lifetime of bounty posters."
    return "You vanish into the Wild Current with the treasure. Legends will whisper your name."


_ENDINGS: tuple[tuple[str, Callable[[GameState], bool], Callable[[GameState], str]], ...] = (
    (
        "defeated",
        lambda s: s.player.hp <= 0,
        lambda s: "You slump to the ground. The Bluecoat Navy captures you.",
    ),
    (
        "drowned",
        lambda s: Flag.DROWNED in s.flags,
        lambda s: "The sea claims you for daring its curse.",
    ),
    (
        "captured",
        lambda s: s.wanted >= CAPTURE_WANTED,
        lambda s: "Bluecoat Navy corners you. Chains clamp shut.",
    ),
    (
        "escaped",
        lambda s: Flag.TREASURE_ESCAPED in s.flags,
        _escape_ending,
    ),
    (
        "treasure_lost",
        lambda s: Flag.TREASURE_LOST in s.flags,
        lambda s: "The rival pirate steals the treasure core. Your legend ends in a whimper.",
    ),
)


def check_ending(state: GameState) -> tuple[str, str] | None:
    """Return (ending name, narration) for the first ending that applies."""
    for name, predicate, narrate in _ENDINGS:
        if predicate(state):
            return name, narrate(state)
    return None
