"""World State operations, one per verb.

Every public function mutates state in place and returns narration text.
Expected failures (missing item, no money, blocked exit) are reported in the
returned text and leave state untouched.
"""

import random
from collections.abc import Callable
from dataclasses import dataclass

from ..logging import get_logger
from . import combat, effects
from .pathfinder import find_route
from .state import (
    BRIBE_COST,
    DISCOUNT_MORALE,
    HARSH_TALK_WANTED,
    NAVY_PATROL,
    OUTPOST_LOCKDOWN_WANTED,
    PATROL_CHANCE,
    PATROL_WANTED,
    SKILL_CHECK_TARGET,
    STONE_FRUIT,
    TAG_HOME,
    TAG_SHOP,
    Flag,
    GameState,
    advance_time,
    can_carry,
    inventory_slots,
    mark_discovered,
)
from .world import Disposition, Room, World

logger = get_logger(__name__)


def find_item(world: World, name: str, ids: list[str]) -> str | None:
    """Match name against item names or ids in ids, case-insensitively."""
    name = name.lower()
    for item_id in ids:
        if item_id == name or world.items[item_id].name.lower() == name:
            return item_id
    return None


def find_npc(world: World, name: str, ids) -> str | None:
    name = name.lower()
    for npc_id in ids:
        if npc_id == name or world.npcs[npc_id].name.lower() == name:
            return npc_id
    return None


def find_enemy(world: World, name: str, ids: list[str]) -> str | None:
    name = name.lower()
    for enemy_id in ids:
        if enemy_id == name or world.enemies[enemy_id].name.lower() == name:
            return enemy_id
    return None


def _names(catalog: dict, ids) -> str:
    return ", ".join(catalog[i].name for i in ids if i in catalog)


def look(world: World, state: GameState) -> str:
    """Describe the current room: contents, people, threats and exits."""
    room = world.rooms.get(state.player.location)
    if room is None:
        return "You see nothing but mist."

    lines = [f"{room.name} - {room.island}", room.description]
    items = state.room_items.get(room.id, [])
    enemies = state.room_enemies.get(room.id, [])
    if items:
        lines.append("You see: " + _names(world.items, items))
    if room.npcs:
        lines.append("People here: " + _names(world.npcs, room.npcs))
    if enemies:
        lines.append("Threats: " + _names(world.enemies, enemies))
    lines.append("Exits: " + ", ".join(room.exits))
    return "\n".join(lines)


# --- Movement ---------------------------------------------------------------


@dataclass(frozen=True)
class Gate:
    """A named precondition on entering a room.

    blocks(state) returns True when passage is refused. When fatal_flag is
    set, refusing passage also raises that flag, which ends the game.
    """

    name: str
    destination: str
    blocks: Callable[[GameState], bool]
    message: str
    fatal_flag: Flag | None = None


_GATES: tuple[Gate, ...] = (
    Gate(
        "requires_bribe",
        "navy_outpost",
        lambda s: Flag.BRIBED not in s.flags,
        "The Bluecoat officer blocks the way. A donation might help.",
    ),
    Gate(
        "requires_decoded_map",
        "ruins_gate",
        lambda s: Flag.MAP_DECODED not in s.flags,
        "The jungle splits endlessly. You need better directions.",
    ),
    Gate(
        "requires_ruin_key",
        "ruins_hall",
        lambda s: Flag.RUIN_UNLOCKED not in s.flags,
        "The stone gate is locked.",
    ),
    Gate(
        "requires_inner_light",
        "ruins_core",
        lambda s: Flag.INNER_UNLOCKED not in s.flags,
        "A sealed door bars the way. The sea must hear your call.",
    ),
    Gate(
        "cursed_water",
        "reef_shallows",
        lambda s: s.player.active_fruit is not None,
        "The cursed power drags you under the waves. The sea refuses you.",
        fatal_flag=Flag.DROWNED,
    ),
    Gate(
        "too_heavy_for_lift",
        "sky_shrine",
        lambda s: s.player.active_fruit == STONE_FRUIT,
        "The stone curse makes the storm lift impossible. You're too heavy.",
    ),
    Gate(
        "outpost_lockdown",
        "navy_outpost",
        lambda s: s.wanted >= OUTPOST_LOCKDOWN_WANTED,
        "Bluecoat Navy seals the outpost. You're turned away.",
    ),
)


def check_gates(state: GameState, destination: str) -> str | None:
    """Return a blocking message for destination, or None if passage is clear."""
    for gate in _GATES:
        if gate.destination != destination or not gate.blocks(state):
            continue
        if gate.fatal_flag is not None:
            state.flags.add(gate.fatal_flag)
        logger.debug("gate_blocked", gate=gate.name, destination=destination)
        return gate.message
    return None


def _maybe_patrol(world: World, state: GameState, rng: random.Random) -> str | None:
    if state.wanted < PATROL_WANTED:
        return None
    room = world.rooms[state.player.location]
    if TAG_HOME in room.tags or state.room_enemies.get(room.id):
        return None
    if rng.random() >= PATROL_CHANCE:
        return None
    state.room_enemies.setdefault(room.id, []).append(NAVY_PATROL)
    logger.info("patrol_spawned", room=room.id, wanted=state.wanted)
    return "A Bluecoat patrol storms in, nets ready."


def move(world: World, state: GameState, direction: str, rng: random.Random) -> str:
    room = world.rooms.get(state.player.location)
    if room is None:
        return "You are lost in the Wild Current."
    dest = room.exits.get(direction)
    if dest is None:
        return "You can't go that way."

    blocked = check_gates(state, dest)
    if blocked:
        return blocked

    state.player.location = dest
    mark_discovered(state, dest)
    advance_time(state)
    patrol = _maybe_patrol(world, state, rng)

    description = look(world, state)
    if patrol:
        return description + "\n" + patrol
    return description


# --- Items ------------------------------------------------------------------


def examine(world: World, state: GameState, name: str) -> str:
    here = state.player.location
    item_id = find_item(world, name, state.player.inventory) or find_item(
        world, name, state.room_items.get(here, [])
    )
    if item_id:
        return world.items[item_id].description
    npc_id = find_npc(world, name, world.rooms[here].npcs)
    if npc_id:
        return world.npcs[npc_id].description
    enemy_id = find_enemy(world, name, state.room_enemies.get(here, []))
    if enemy_id:
        return world.enemies[enemy_id].description
    return "You find nothing like that to examine."


def take(world: World, state: GameState, name: str) -> str:
    room_items = state.room_items.setdefault(state.player.location, [])
    item_id = find_item(world, name, room_items)
    if item_id is None:
        return "You don't see that here."
    if not can_carry(world, state, item_id):
        return "You're carrying too much already."

    item = world.items[item_id]
    room_items.remove(item_id)
    state.player.inventory.append(item_id)
    if item.contraband:
        state.wanted += 1
        return f"You take the {item.name}. That felt illegal. Wanted level rises."
    return f"You take the {item.name}."


def drop(world: World, state: GameState, name: str) -> str:
    item_id = find_item(world, name, state.player.inventory)
    if item_id is None:
        return "You don't have that."
    state.player.inventory.remove(item_id)
    state.room_items.setdefault(state.player.location, []).append(item_id)
    return f"You drop the {world.items[item_id].name}."


def inventory(world: World, state: GameState) -> str:
    if not state.player.inventory:
        return "Your pockets are empty."
    lines = ["Inventory:"]
    lines.extend(f"- {world.items[item_id].name}" for item_id in state.player.inventory)
    if state.player.active_fruit:
        lines.append(f"Active fruit: {world.items[state.player.active_fruit].name}")
    lines.append(
        f"Slots used: {inventory_slots(world, state)}/{state.player.max_slots}"
    )
    lines.append(f"Coins: {state.money}")
    return "\n".join(lines)


def use(world: World, state: GameState, item_name: str, target: str) -> str:
    item_id = find_item(world, item_name, state.player.inventory)
    if item_id is None:
        return "You don't have that to use."
    return effects.apply(world, state, item_id, target)


# --- People -----------------------------------------------------------------


def skill_check(state: GameState, stat: str, rng: random.Random) -> bool:
    """Roll d20 + stat + morale/2 against the fixed target."""
    roll = rng.randint(1, 20)
    stat_bonus = {
        "grit": state.player.grit,
        "charm": state.player.charm,
        "wits": state.player.wits,
    }.get(stat, 0)
    return roll + stat_bonus + state.morale // 2 >= SKILL_CHECK_TARGET


def talk(world: World, state: GameState, name: str) -> str:
    npc_id = find_npc(world, name, world.rooms[state.player.location].npcs)
    if npc_id is None:
        return "No one like that is here."
    if state.npc_state.get(npc_id) == Disposition.HOSTILE:
        return "They glare and refuse to speak."

    npc = world.npcs[npc_id]
    response = npc.talk
    if state.wanted >= HARSH_TALK_WANTED and npc.disposition == Disposition.HOSTILE:
        response = "The Bluecoat glowers. 'Hands where I can see them.'"
    if state.npc_state.get(npc_id) == Disposition.NEUTRAL:
        state.npc_state[npc_id] = Disposition.MET
    return response


def bribe(world: World, state: GameState, name: str) -> str:
    npc_id = find_npc(world, name, world.rooms[state.player.location].npcs)
    if npc_id is None:
        return "There's no one here to bribe."
    if state.money < BRIBE_COST:
        return "You don't have enough coin to bribe convincingly."

    state.money -= BRIBE_COST
    state.wanted = max(0, state.wanted - 1)
    state.flags.add(Flag.BRIBED)
    state.npc_state[npc_id] = Disposition.FRIENDLY
    return "The bribe slips into a pocket. The way is suddenly less guarded."


def threaten(world: World, state: GameState, name: str, rng: random.Random) -> str:
    npc_id = find_npc(world, name, world.rooms[state.player.location].npcs)
    if npc_id is None:
        return "No one here looks threatened."

    # The roll only picks the narration; heat and hostility follow either way.
    passed = skill_check(state, "grit", rng)
    state.wanted += 1
    state.npc_state[npc_id] = Disposition.HOSTILE
    if passed:
        return "Your threat lands. People scatter and the wanted posters multiply."
    return "Your threat falls flat. Someone laughs."


def attack(world: World, state: GameState, name: str) -> str:
    enemy_id = find_enemy(world, name, state.room_enemies.get(state.player.location, []))
    if enemy_id is None:
        return "No enemy by that name is here."
    state.combat = combat.start_combat(world, enemy_id)
    logger.info("combat_started", enemy=enemy_id, room=state.player.location)
    return f"Combat begins with {world.enemies[enemy_id].name}!"


# --- Trade ------------------------------------------------------------------


def price(state: GameState, base: int) -> int:
    modifier = 1.0 + state.wanted * 0.05
    if state.morale >= DISCOUNT_MORALE:
        modifier -= 0.1
    return int(base * modifier)


def _out_of_stock(world: World, room: Room, item_name: str) -> str | None:
    """Name a shopkeeper here who deals in item_name but has none on hand."""
    for npc_id in room.npcs:
        npc = world.npcs[npc_id]
        if find_item(world, item_name, list(npc.shop)):
            return f"{npc.name} deals in that, but has none on hand."
    return None


def buy(world: World, state: GameState, item_name: str) -> str:
    room = world.rooms[state.player.location]
    if TAG_SHOP not in room.tags:
        return "There's nothing for sale here."
    room_items = state.room_items.setdefault(room.id, [])
    item_id = find_item(world, item_name, room_items)
    if item_id is None:
        return _out_of_stock(world, room, item_name) or "That item isn't for sale here."

    item = world.items[item_id]
    cost = price(state, item.value)
    if state.money < cost:
        return "You can't afford that."
    if not can_carry(world, state, item_id):
        return "You're carrying too much already."

    state.money -= cost
    room_items.remove(item_id)
    state.player.inventory.append(item_id)
    return f"You buy {item.name} for {cost} coins."


def sell(world: World, state: GameState, item_name: str) -> str:
    room = world.rooms[state.player.location]
    if TAG_SHOP not in room.tags:
        return "No one is buying here."
    item_id = find_item(world, item_name, state.player.inventory)
    if item_id is None:
        return "You don't have that to sell."

    item = world.items[item_id]
    sale = price(state, item.value // 2)
    state.money += sale
    state.player.inventory.remove(item_id)
    state.room_items.setdefault(room.id, []).append(item_id)
    return f"You sell {item.name} for {sale} coins."


# --- Charts -----------------------------------------------------------------


def chart(world: World, state: GameState) -> str:
    """List discovered rooms grouped by island, in catalog order."""
    lines = ["Charted waters:"]
    for island in world.islands.values():
        known = [r for r in island.rooms if r in state.discovered]
        if known:
            lines.append(f"{island.name}: {_names(world.rooms, known)}")
    here = world.rooms[state.player.location]
    lines.append(f"You are at {here.name}.")
    return "\n".join(lines)


def route(world: World, state: GameState, place: str) -> str:
    place = place.lower()
    target = next(
        (
            room_id
            for room_id in world.rooms
            if room_id in state.discovered
            and place in (room_id, world.rooms[room_id].name.lower())
        ),
        None,
    )
    if target is None:
        return "You haven't charted any place like that."

    name = world.rooms[target].name
    path = find_route(world, state.player.location, target)
    if path is None:
        return f"No known route to {name}."
    if not path:
        return f"You're already at {name}."
    return f"Route to {name}: " + ", ".join(path)
