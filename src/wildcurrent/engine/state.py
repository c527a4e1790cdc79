"""Mutable per-game state.

GameState is the single owned aggregate: everything that changes during play
lives here, keyed by catalog ids. Catalog records (World) are never copied
in, so a state can be serialized without dragging the catalog along.
"""

from dataclasses import dataclass, field
from enum import Enum

from .world import Disposition, World

# Starting position and discovered rooms
START_ROOM = "ship_deck"
START_DISCOVERED = ("ship_deck", "ship_cabin")

STARTING_MONEY = 80
STARTING_HP = 24
STARTING_SLOTS = 12
START_DAY = 1
START_HOUR = 9
HOURS_PER_DAY = 24

# Key item ids
NAV_LOG = "nav_log"
RUM = "rum"
SPICE = "spice"
BRIBE_POUCH = "bribe"
GADGET_GULL = "gadget_gull"
MEDKIT = "medkit"
BALM = "balm"
SUN_COIN = "sun_coin"
STONE_KEY = "stone_key"
CIPHER_LENS = "cipher_lens"
STORM_LANTERN = "storm_lantern"
REPAIR_KIT = "repair_kit"
DOCK_PASS = "dock_pass"
TREASURE_CORE = "treasure_core"
FRAGMENTS = ("glyph_frag_1", "glyph_frag_2", "glyph_frag_3")

# Fruits with combat or gating effects
GALE_FRUIT = "gale_fruit"
STONE_FRUIT = "stone_fruit"
SPARK_FRUIT = "spark_fruit"

# Enemy ids with special handling
NAVY_PATROL = "navy_patrol"
RIVAL_PIRATE = "rival_pirate"

# Room tags
TAG_SHOP = "shop"
TAG_HOME = "home"

# Wanted/morale thresholds
PATROL_WANTED = 3
PATROL_CHANCE = 0.3
HARSH_TALK_WANTED = 4
ESCAPE_HEAT_WANTED = 4
OUTPOST_LOCKDOWN_WANTED = 5
CAPTURE_WANTED = 7
DISCOUNT_MORALE = 3
BRIBE_COST = 25
SKILL_CHECK_TARGET = 12


class Flag(str, Enum):
    """Closed vocabulary of world-progress flags."""

    BRIBED = "bribed"
    MAP_DECODED = "mapDecoded"
    RUIN_UNLOCKED = "ruinUnlocked"
    INNER_UNLOCKED = "innerUnlocked"
    COORDS_DECODED = "coordsDecoded"
    SHRINE_BLESSING = "shrineBlessing"
    DROWNED = "drowned"
    TREASURE_ESCAPED = "treasureEscaped"
    TREASURE_LOST = "treasureLost"
    QUIT = "quit"


class CombatOutcome(str, Enum):
    ENEMY_DOWN = "enemy_down"
    ENEMY_FLED = "enemy_fled"


@dataclass
class Player:
    location: str = START_ROOM
    inventory: list[str] = field(default_factory=list)
    equipped: dict[str, str] = field(
        default_factory=lambda: {"weapon": "", "charm": "", "tool": ""}
    )
    max_slots: int = STARTING_SLOTS
    hp: int = STARTING_HP
    max_hp: int = STARTING_HP
    grit: int = 2
    charm: int = 2
    wits: int = 2
    active_fruit: str | None = None


@dataclass
class QuestRecord:
    """Progress on one catalog quest. outcome is set iff done."""

    active: bool = True
    done: bool = False
    outcome: str = ""


@dataclass
class LogEntry:
    time: str
    text: str
    kind: str = "narration"


@dataclass
class EnemySnapshot:
    """Copy of an enemy template's stats, owned by one combat encounter."""

    name: str
    hp: int
    min_damage: int
    max_damage: int
    wanted_gain: int
    flee_chance: float


@dataclass
class CombatState:
    enemy_id: str
    enemy: EnemySnapshot
    turn: int = 1
    resolved: bool = False
    outcome: CombatOutcome | None = None


@dataclass
class GameState:
    """All mutable per-game state."""

    player: Player = field(default_factory=Player)

    # Live room contents: room_id → ordered ids
    room_items: dict[str, list[str]] = field(default_factory=dict)
    room_enemies: dict[str, list[str]] = field(default_factory=dict)

    flags: set[Flag] = field(default_factory=set)
    npc_state: dict[str, Disposition] = field(default_factory=dict)
    quests: dict[str, QuestRecord] = field(default_factory=dict)

    wanted: int = 0
    morale: int = 0
    money: int = STARTING_MONEY
    day: int = START_DAY
    hour: int = START_HOUR

    discovered: set[str] = field(default_factory=set)
    log: list[LogEntry] = field(default_factory=list)

    # Non-None only while an attack is being fought out
    combat: CombatState | None = None

    @property
    def in_combat(self) -> bool:
        return self.combat is not None


def timestamp(state: GameState) -> str:
    return f"Day {state.day} {state.hour:02d}:00"


def add_log(state: GameState, text: str, kind: str = "narration") -> None:
    state.log.append(LogEntry(time=timestamp(state), text=text, kind=kind))


def advance_time(state: GameState) -> None:
    """Advance the clock one hour, rolling over to the next day at 24:00."""
    state.hour += 1
    if state.hour >= HOURS_PER_DAY:
        state.day += 1
        state.hour = 0


def mark_discovered(state: GameState, room_id: str) -> None:
    state.discovered.add(room_id)


def has_item(state: GameState, item_id: str) -> bool:
    return item_id in state.player.inventory


def has_fragments(state: GameState) -> bool:
    return all(has_item(state, frag) for frag in FRAGMENTS)


def inventory_slots(world: World, state: GameState) -> int:
    """Total slot cost of everything the player carries."""
    return sum(world.items[item_id].slots for item_id in state.player.inventory)


def can_carry(world: World, state: GameState, item_id: str, freed: int = 0) -> bool:
    """Check whether item_id fits, optionally after freeing `freed` slots."""
    needed = world.items[item_id].slots
    return inventory_slots(world, state) - freed + needed <= state.player.max_slots


def complete_quest(state: GameState, quest_id: str, outcome: str) -> bool:
    """Mark a quest done with its outcome, once. Returns True on transition."""
    record = state.quests.get(quest_id)
    if record is None or record.done:
        return False
    record.done = True
    record.outcome = outcome
    return True


def new_game_state(world: World) -> GameState:
    """Create a fresh game state with room contents copied from the catalog."""
    state = GameState()

    for room_id, room in world.rooms.items():
        state.room_items[room_id] = list(room.items)
        state.room_enemies[room_id] = list(room.enemies)

    for npc_id, npc in world.npcs.items():
        state.npc_state[npc_id] = npc.disposition

    for quest_id, quest in world.quests.items():
        state.quests[quest_id] = QuestRecord(active=quest.active)

    for room_id in START_DISCOVERED:
        mark_discovered(state, room_id)

    add_log(
        state,
        "You are a rookie captain chasing legendary treasure across the Wild Current.",
        "story",
    )
    add_log(state, "Try LOOK, INVENTORY, and GO NORTH to begin.", "hint")
    return state
