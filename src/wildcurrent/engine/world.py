"""Immutable data structures for the Wild Current world catalog.

These are loaded once from world.json at startup and never mutated. Anything
that changes during play lives on GameState instead.
"""

from dataclasses import dataclass, field
from enum import Enum


class Disposition(str, Enum):
    """How an NPC currently feels about the player."""

    FRIENDLY = "friendly"
    NEUTRAL = "neutral"
    MET = "met"
    HOSTILE = "hostile"


@dataclass(frozen=True)
class Item:
    """Something the player can carry."""

    id: str
    name: str
    description: str = ""
    type: str = "misc"
    slots: int = 1
    value: int = 0
    contraband: bool = False
    fruit: bool = False


@dataclass(frozen=True)
class NPC:
    """A person the player can talk to, bribe or threaten."""

    id: str
    name: str
    description: str = ""
    talk: str = ""
    disposition: Disposition = Disposition.NEUTRAL
    shop: tuple[str, ...] = ()


@dataclass(frozen=True)
class Enemy:
    """Enemy template. Rooms and combat encounters refer to it by id."""

    id: str
    name: str
    description: str = ""
    hp: int = 1
    min_damage: int = 1
    max_damage: int = 1
    wanted_gain: int = 0
    flee_chance: float = 0.0
    is_boss: bool = False


@dataclass(frozen=True)
class Room:
    """A location in the game world.

    items and enemies are the starting contents only; the live sets are
    copied onto GameState by new_game_state().
    """

    id: str
    name: str
    island: str
    description: str = ""
    exits: dict[str, str] = field(default_factory=dict)
    items: tuple[str, ...] = ()
    npcs: tuple[str, ...] = ()
    enemies: tuple[str, ...] = ()
    tags: frozenset[str] = frozenset()
    coords: tuple[int, int] = (0, 0)


@dataclass(frozen=True)
class Quest:
    """A quest definition. Progress is tracked in QuestRecord."""

    id: str
    name: str
    description: str = ""
    active: bool = True


@dataclass(frozen=True)
class Island:
    """A named group of rooms."""

    id: str
    name: str
    description: str = ""
    rooms: tuple[str, ...] = ()


@dataclass
class World:
    """The complete immutable game catalog, loaded from world.json."""

    rooms: dict[str, Room] = field(default_factory=dict)
    items: dict[str, Item] = field(default_factory=dict)
    npcs: dict[str, NPC] = field(default_factory=dict)
    enemies: dict[str, Enemy] = field(default_factory=dict)
    quests: dict[str, Quest] = field(default_factory=dict)
    islands: dict[str, Island] = field(default_factory=dict)
