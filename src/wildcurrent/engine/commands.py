"""Command parsing and dispatch.

handle_command(world, state, raw_input, rng) -> list[str] is the main entry
point. It tokenizes, normalizes directions, and dispatches to the World State
operations in actions.py. While a combat record is open, every turn is routed
to combat handling instead.
"""

import random
import re
from collections.abc import Callable
from dataclasses import dataclass

from . import actions, combat
from .state import Flag, GameState
from .world import World

DIRECTION_ALIASES = {
    "north": "north",
    "n": "north",
    "south": "south",
    "s": "south",
    "east": "east",
    "e": "east",
    "west": "west",
    "w": "west",
    "northeast": "northeast",
    "ne": "northeast",
    "northwest": "northwest",
    "nw": "northwest",
    "southeast": "southeast",
    "se": "southeast",
    "southwest": "southwest",
    "sw": "southwest",
}

UNKNOWN_COMMAND = "Unknown command. Type HELP for options."

# Verbs the session handles because they replace or export the whole state
SESSION_VERBS = frozenset({"save", "load"})

# Verbs that stay available mid-fight because they never mutate state
COMBAT_SAFE_VERBS = frozenset({"look", "l", "examine", "x", "inventory", "i", "help", "map"})

_ON_SPLIT = re.compile(r" on ", re.IGNORECASE)


@dataclass(frozen=True)
class Command:
    verb: str
    args: tuple[str, ...]
    raw: str

    @property
    def text(self) -> str:
        return " ".join(self.args)


def normalize_direction(word: str) -> str | None:
    return DIRECTION_ALIASES.get(word.lower())


def parse_command(raw_input: str) -> Command | None:
    """Split a line into a lower-cased verb and arguments. None for blank input."""
    raw = raw_input.strip()
    words = raw.lower().split()
    if not words:
        return None
    return Command(verb=words[0], args=tuple(words[1:]), raw=raw)


def split_use(command: Command) -> tuple[str, str]:
    """Split 'use X on Y' once on ' on '. No ' on ' means an empty target."""
    body = " ".join(command.raw.split()[1:])
    parts = _ON_SPLIT.split(body, maxsplit=1)
    item = parts[0].strip().lower()
    target = parts[1].strip().lower() if len(parts) > 1 else ""
    return item, target


Handler = Callable[[World, GameState, Command, random.Random], str | list[str]]


@dataclass(frozen=True)
class Verb:
    handler: Handler
    min_args: int = 0
    prompt: str = ""


def _cmd_go(world: World, state: GameState, command: Command, rng: random.Random) -> str:
    direction = normalize_direction(command.args[0])
    if direction is None:
        return "That direction makes no sense."
    return actions.move(world, state, direction, rng)


def _cmd_look(world: World, state: GameState, command: Command, rng: random.Random) -> str:
    return actions.look(world, state)


def _cmd_examine(world: World, state: GameState, command: Command, rng: random.Random) -> str:
    return actions.examine(world, state, command.text)


def _cmd_take(world: World, state: GameState, command: Command, rng: random.Random) -> str:
    return actions.take(world, state, command.text)


def _cmd_drop(world: World, state: GameState, command: Command, rng: random.Random) -> str:
    return actions.drop(world, state, command.text)


def _cmd_inventory(world: World, state: GameState, command: Command, rng: random.Random) -> str:
    return actions.inventory(world, state)


def _cmd_talk(world: World, state: GameState, command: Command, rng: random.Random) -> str:
    name = command.text
    if name.startswith("to "):
        name = name[3:]
    return actions.talk(world, state, name)


def _cmd_bribe(world: World, state: GameState, command: Command, rng: random.Random) -> str:
    return actions.bribe(world, state, command.text)


def _cmd_threaten(world: World, state: GameState, command: Command, rng: random.Random) -> str:
    return actions.threaten(world, state, command.text, rng)


def _cmd_use(world: World, state: GameState, command: Command, rng: random.Random) -> str:
    item, target = split_use(command)
    return actions.use(world, state, item, target)


def _cmd_attack(
    world: World, state: GameState, command: Command, rng: random.Random
) -> list[str]:
    lines = [actions.attack(world, state, command.text)]
    if state.combat is not None:
        lines.extend(_fight(world, state, rng))
    return lines


def _cmd_buy(world: World, state: GameState, command: Command, rng: random.Random) -> str:
    return actions.buy(world, state, command.text)


def _cmd_sell(world: World, state: GameState, command: Command, rng: random.Random) -> str:
    return actions.sell(world, state, command.text)


def _cmd_map(world: World, state: GameState, command: Command, rng: random.Random) -> str:
    return actions.chart(world, state)


def _cmd_route(world: World, state: GameState, command: Command, rng: random.Random) -> str:
    return actions.route(world, state, command.text)


def _cmd_quit(world: World, state: GameState, command: Command, rng: random.Random) -> str:
    state.flags.add(Flag.QUIT)
    return "You lower the sails and end your tale... for now."


def _cmd_help(world: World, state: GameState, command: Command, rng: random.Random) -> str:
    return "\n".join(
        [
            "Commands:",
            "Movement: GO NORTH, NORTH, N (also south/east/west and ne/nw/se/sw)",
            "Actions: LOOK, EXAMINE <thing>, TAKE <item>, DROP <item>, INVENTORY",
            "Social: TALK <npc>, BRIBE <npc>, THREATEN <npc>",
            "Use: USE <item> [ON <target>]",
            "Combat: ATTACK <enemy>",
            "Economy: BUY <item>, SELL <item>",
            "Charts: MAP, ROUTE <place>",
            "Utility: HELP, SAVE, LOAD, QUIT",
            "Goal: Collect three Glyph Stone fragments and escape with the treasure core.",
        ]
    )


def _cmd_session_only(
    world: World, state: GameState, command: Command, rng: random.Random
) -> str:
    return "Saving and loading need an active game session."


_VERB_DISPATCH: dict[str, Verb] = {
    **dict.fromkeys(("go", "move", "enter", "dock"), Verb(_cmd_go, 1, "Go where?")),
    **dict.fromkeys(("look", "l"), Verb(_cmd_look)),
    **dict.fromkeys(("examine", "x"), Verb(_cmd_examine, 1, "Examine what?")),
    **dict.fromkeys(("take", "get"), Verb(_cmd_take, 1, "Take what?")),
    "drop": Verb(_cmd_drop, 1, "Drop what?"),
    **dict.fromkeys(("inventory", "i"), Verb(_cmd_inventory)),
    "talk": Verb(_cmd_talk, 1, "Talk to whom?"),
    "bribe": Verb(_cmd_bribe, 1, "Bribe whom?"),
    "threaten": Verb(_cmd_threaten, 1, "Threaten whom?"),
    "use": Verb(_cmd_use, 1, "Use what?"),
    "attack": Verb(_cmd_attack, 1, "Attack whom?"),
    "buy": Verb(_cmd_buy, 1, "Buy what?"),
    "sell": Verb(_cmd_sell, 1, "Sell what?"),
    "route": Verb(_cmd_route, 1, "Route to where?"),
    "map": Verb(_cmd_map),
    "help": Verb(_cmd_help),
    **dict.fromkeys(("quit", "exit"), Verb(_cmd_quit)),
    **dict.fromkeys(SESSION_VERBS, Verb(_cmd_session_only)),
}


def _fight(world: World, state: GameState, rng: random.Random) -> list[str]:
    """Run one combat exchange and resolve the encounter if it just ended."""
    lines = combat.exchange(state.combat, state, rng)
    if state.combat.resolved:
        lines.extend(combat.resolve_combat(world, state))
    return [line for line in lines if line]


def _combat_turn(
    world: World, state: GameState, command: Command, rng: random.Random
) -> list[str]:
    if command.verb == "attack":
        return _fight(world, state, rng)
    if command.verb in COMBAT_SAFE_VERBS:
        verb = _VERB_DISPATCH[command.verb]
        if len(command.args) < verb.min_args:
            return [verb.prompt]
        return _as_lines(verb.handler(world, state, command, rng))
    return ["You're in a fight! ATTACK or face the consequences."]


def _as_lines(result: str | list[str]) -> list[str]:
    if isinstance(result, str):
        return [result]
    return result


def dispatch(
    world: World, state: GameState, command: Command, rng: random.Random
) -> list[str]:
    """Route a parsed command to its handler and return narration lines."""
    if state.combat is not None:
        return _combat_turn(world, state, command, rng)

    direction = normalize_direction(command.verb)
    if direction is not None:
        return [actions.move(world, state, direction, rng)]

    verb = _VERB_DISPATCH.get(command.verb)
    if verb is None:
        return [UNKNOWN_COMMAND]
    if len(command.args) < verb.min_args:
        return [verb.prompt]
    return _as_lines(verb.handler(world, state, command, rng))


def handle_command(
    world: World, state: GameState, raw_input: str, rng: random.Random
) -> list[str]:
    """Process one raw line. Blank input yields no output and no mutation."""
    command = parse_command(raw_input)
    if command is None:
        return []
    return dispatch(world, state, command, rng)
