"""USE effects, keyed by item id.

Each handler takes (world, state, target) and returns narration, or None
when the item/target/location combination does nothing. A None result must
leave state untouched; the caller answers "Nothing happens." for it.
"""

from collections.abc import Callable

from ..logging import get_logger
from .state import (
    BALM,
    BRIBE_POUCH,
    CIPHER_LENS,
    DOCK_PASS,
    ESCAPE_HEAT_WANTED,
    GADGET_GULL,
    MEDKIT,
    NAV_LOG,
    REPAIR_KIT,
    RUM,
    SPICE,
    START_ROOM,
    STONE_KEY,
    STORM_LANTERN,
    SUN_COIN,
    TREASURE_CORE,
    Flag,
    GameState,
    can_carry,
    complete_quest,
    has_fragments,
    has_item,
)
from .world import World

logger = get_logger(__name__)

NOTHING_HAPPENS = "Nothing happens."

Handler = Callable[[World, GameState, str], str | None]


def _npc_here(world: World, state: GameState, npc_id: str, target: str) -> bool:
    """True if target names npc_id and that NPC stands in the current room."""
    if npc_id not in world.rooms[state.player.location].npcs:
        return False
    return target in (npc_id, world.npcs[npc_id].name.lower())


def _consume(state: GameState, item_id: str) -> None:
    state.player.inventory.remove(item_id)


def _grant(state: GameState, item_id: str) -> None:
    """Put item_id in the inventory, pulling it out of any room that holds it."""
    for items in state.room_items.values():
        if item_id in items:
            items.remove(item_id)
    state.player.inventory.append(item_id)


def _trade(
    world: World,
    state: GameState,
    give: str,
    get: str,
    quest_id: str,
    outcome: str,
    message: str,
    morale: int = 0,
) -> str:
    if has_item(state, get):
        return f"You already have the {world.items[get].name}."
    if not can_carry(world, state, get, freed=world.items[give].slots):
        return "You'd have no room for what they offer."
    _consume(state, give)
    _grant(state, get)
    state.morale += morale
    if complete_quest(state, quest_id, outcome):
        logger.info("quest_completed", quest=quest_id)
    return message


def _heal(state: GameState, item_id: str, amount: int, message: str) -> str:
    _consume(state, item_id)
    state.player.hp = min(state.player.max_hp, state.player.hp + amount)
    return message


def _use_fruit(world: World, state: GameState, item_id: str) -> str:
    if state.player.active_fruit is not None:
        return "Only one cursed fruit at a time. The sea insists."
    _consume(state, item_id)
    state.player.active_fruit = item_id
    state.morale += 1
    logger.info("fruit_eaten", fruit=item_id)
    return "Power surges through you. The sea now resents you."


def _use_cipher_lens(world: World, state: GameState, target: str) -> str | None:
    if target in ("log", "nav log", "navigation log", NAV_LOG):
        if not has_item(state, NAV_LOG):
            return "You need the navigation log to decipher."
        state.flags.add(Flag.MAP_DECODED)
        return "The cipher lens reveals a route to the jungle ruins."

    if state.player.location != "mist_library":
        return "The lens needs a quiet library to read the glyphs."
    if not has_fragments(state):
        return "The lens reveals hints, but you need all fragments."
    if Flag.COORDS_DECODED in state.flags:
        return "The fragments have already given up their secret."
    if not can_carry(world, state, TREASURE_CORE):
        return "The coordinates shimmer, but you have no room to hold them."
    state.flags.add(Flag.COORDS_DECODED)
    _grant(state, TREASURE_CORE)
    return "The lens reveals the Treasure Coordinate Core within the fragments."


def _use_stone_key(world: World, state: GameState, target: str) -> str | None:
    if state.player.location != "ruins_gate":
        return None
    state.flags.add(Flag.RUIN_UNLOCKED)
    return "The stone key turns. The gate groans open."


def _use_storm_lantern(world: World, state: GameState, target: str) -> str | None:
    if state.player.location != "ruins_hall":
        return None
    state.flags.add(Flag.INNER_UNLOCKED)
    return "The lantern's glow wakes hidden runes. The inner door opens."


def _use_gadget_gull(world: World, state: GameState, target: str) -> str | None:
    state.morale += 1
    return "The gull chirps. Your crew laughs. Morale rises."


def _use_rum(world: World, state: GameState, target: str) -> str | None:
    if _npc_here(world, state, "broker", target):
        return _trade(
            world,
            state,
            RUM,
            STONE_KEY,
            "broker",
            "The broker traded a stone key.",
            "The broker trades the rum for a stone key.",
        )
    if target:
        return None
    _consume(state, RUM)
    state.morale += 1
    return "You drain the bottle. Courage bubbles up."


def _use_medkit(world: World, state: GameState, target: str) -> str | None:
    if _npc_here(world, state, "dockhand", target):
        return _trade(
            world,
            state,
            MEDKIT,
            SUN_COIN,
            "dockhand",
            "The dockhand repaid your kindness.",
            "You patch the dockhand. They slip you a sun coin.",
        )
    if target:
        return None
    return _heal(state, MEDKIT, 6, "You patch yourself up.")


def _use_balm(world: World, state: GameState, target: str) -> str | None:
    if target:
        return None
    return _heal(state, BALM, 4, "The balm soothes your bruises.")


def _use_sun_coin(world: World, state: GameState, target: str) -> str | None:
    if state.player.location != "sky_shrine":
        return None
    _consume(state, SUN_COIN)
    state.morale += 2
    state.flags.add(Flag.SHRINE_BLESSING)
    if complete_quest(state, "priest", "The shrine accepted your offering."):
        logger.info("quest_completed", quest="priest")
    return "The shrine hums. The storm calms for now."


def _use_bribe_pouch(world: World, state: GameState, target: str) -> str | None:
    if not _npc_here(world, state, "officer", target):
        return None
    _consume(state, BRIBE_POUCH)
    state.flags.add(Flag.BRIBED)
    return "The officer pockets the coins and steps aside."


def _use_spice(world: World, state: GameState, target: str) -> str | None:
    if not _npc_here(world, state, "gadgeteer", target):
        return None
    return _trade(
        world,
        state,
        SPICE,
        CIPHER_LENS,
        "gadgeteer",
        "Spice traded for a cipher lens.",
        "The gadgeteer trades a cipher lens for the spice.",
    )


def _use_repair_kit(world: World, state: GameState, target: str) -> str | None:
    if not _npc_here(world, state, "shipwright", target):
        return None
    return _trade(
        world,
        state,
        REPAIR_KIT,
        DOCK_PASS,
        "shipwright",
        "The shipwright granted you a dock pass.",
        "The shipwright hands you a dock pass.",
        morale=1,
    )


def _use_treasure_core(world: World, state: GameState, target: str) -> str | None:
    if state.player.location != START_ROOM:
        return None
    state.flags.add(Flag.TREASURE_ESCAPED)
    if state.player.active_fruit is not None:
        return "You set the coordinates. The curse in your veins churns the sea behind you."
    if state.wanted >= ESCAPE_HEAT_WANTED:
        return "You set the coordinates, but Bluecoat sails already crowd the horizon."
    return "You set the coordinates and cut the sails."


_USE_HANDLERS: dict[str, Handler] = {
    CIPHER_LENS: _use_cipher_lens,
    STONE_KEY: _use_stone_key,
    STORM_LANTERN: _use_storm_lantern,
    GADGET_GULL: _use_gadget_gull,
    RUM: _use_rum,
    MEDKIT: _use_medkit,
    BALM: _use_balm,
    SUN_COIN: _use_sun_coin,
    BRIBE_POUCH: _use_bribe_pouch,
    SPICE: _use_spice,
    REPAIR_KIT: _use_repair_kit,
    TREASURE_CORE: _use_treasure_core,
}


def apply(world: World, state: GameState, item_id: str, target: str) -> str:
    """Apply the USE effect of a carried item, optionally on a target."""
    if world.items[item_id].fruit:
        return _use_fruit(world, state, item_id)
    handler = _USE_HANDLERS.get(item_id)
    if handler is None:
        return NOTHING_HAPPENS
    return handler(world, state, target.strip().lower()) or NOTHING_HAPPENS
