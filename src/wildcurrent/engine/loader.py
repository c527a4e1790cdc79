"""Parse the packaged world.json data file into a World object.

The file holds one JSON array per section (items, npcs, enemies, rooms,
quests, islands). Sections are parsed in dependency order so that rooms can
be checked against the items, NPCs and enemies they reference.
"""

import json
from collections.abc import Callable
from importlib import resources
from pathlib import Path
from typing import Any

from .world import NPC, Disposition, Enemy, Island, Item, Quest, Room, World

DIRECTIONS = (
    "north",
    "south",
    "east",
    "west",
    "northeast",
    "northwest",
    "southeast",
    "southwest",
)


class CatalogError(ValueError):
    """The world data file is malformed or internally inconsistent."""


def default_world_path() -> Path:
    """Locate world.json via importlib.resources (works when installed)."""
    return resources.files("wildcurrent.data").joinpath("world.json")


def _require(entry: dict[str, Any], key: str, section: str) -> Any:
    try:
        return entry[key]
    except KeyError:
        raise CatalogError(f"{section} entry is missing {key!r}: {entry!r}") from None


def _parse_item(world: World, entry: dict[str, Any]) -> None:
    item_id = _require(entry, "id", "item")
    world.items[item_id] = Item(
        id=item_id,
        name=_require(entry, "name", "item"),
        description=entry.get("description", ""),
        type=entry.get("type", "misc"),
        slots=int(entry.get("slots", 1)),
        value=int(entry.get("value", 0)),
        contraband=bool(entry.get("contraband", False)),
        fruit=bool(entry.get("fruit", False)),
    )


def _parse_npc(world: World, entry: dict[str, Any]) -> None:
    npc_id = _require(entry, "id", "npc")
    try:
        disposition = Disposition(entry.get("disposition", "neutral"))
    except ValueError:
        raise CatalogError(f"npc {npc_id!r} has an unknown disposition") from None
    world.npcs[npc_id] = NPC(
        id=npc_id,
        name=_require(entry, "name", "npc"),
        description=entry.get("description", ""),
        talk=entry.get("talk", ""),
        disposition=disposition,
        shop=tuple(entry.get("shop", ())),
    )


def _parse_enemy(world: World, entry: dict[str, Any]) -> None:
    enemy_id = _require(entry, "id", "enemy")
    enemy = Enemy(
        id=enemy_id,
        name=_require(entry, "name", "enemy"),
        description=entry.get("description", ""),
        hp=int(_require(entry, "hp", "enemy")),
        min_damage=int(entry.get("min_damage", 1)),
        max_damage=int(entry.get("max_damage", 1)),
        wanted_gain=int(entry.get("wanted_gain", 0)),
        flee_chance=float(entry.get("flee_chance", 0.0)),
        is_boss=bool(entry.get("is_boss", False)),
    )
    if enemy.min_damage > enemy.max_damage:
        raise CatalogError(f"enemy {enemy_id!r} has min_damage above max_damage")
    world.enemies[enemy_id] = enemy


def _parse_room(world: World, entry: dict[str, Any]) -> None:
    room_id = _require(entry, "id", "room")
    exits = dict(entry.get("exits", {}))
    for direction in exits:
        if direction not in DIRECTIONS:
            raise CatalogError(f"room {room_id!r} has unknown exit {direction!r}")

    room = Room(
        id=room_id,
        name=_require(entry, "name", "room"),
        island=_require(entry, "island", "room"),
        description=entry.get("description", ""),
        exits=exits,
        items=tuple(entry.get("items", ())),
        npcs=tuple(entry.get("npcs", ())),
        enemies=tuple(entry.get("enemies", ())),
        tags=frozenset(entry.get("tags", ())),
        coords=tuple(entry.get("coords", (0, 0))),
    )
    _check_refs(room_id, room.items, world.items, "item")
    _check_refs(room_id, room.npcs, world.npcs, "npc")
    _check_refs(room_id, room.enemies, world.enemies, "enemy")
    world.rooms[room_id] = room


def _parse_quest(world: World, entry: dict[str, Any]) -> None:
    quest_id = _require(entry, "id", "quest")
    world.quests[quest_id] = Quest(
        id=quest_id,
        name=_require(entry, "name", "quest"),
        description=entry.get("description", ""),
        active=bool(entry.get("active", True)),
    )


def _parse_island(world: World, entry: dict[str, Any]) -> None:
    island_id = _require(entry, "id", "island")
    world.islands[island_id] = Island(
        id=island_id,
        name=entry.get("name", island_id),
        description=entry.get("description", ""),
        rooms=tuple(entry.get("rooms", ())),
    )


def _check_refs(owner: str, ids, known: dict, kind: str) -> None:
    for ref in ids:
        if ref not in known:
            raise CatalogError(f"{owner!r} references unknown {kind} {ref!r}")


def _validate(world: World) -> None:
    """Cross-section checks that only make sense once everything is parsed."""
    placed: dict[str, str] = {}
    for room in world.rooms.values():
        for direction, dest in room.exits.items():
            if dest not in world.rooms:
                raise CatalogError(
                    f"room {room.id!r} exit {direction!r} leads to unknown room {dest!r}"
                )
        for item_id in room.items:
            if item_id in placed:
                raise CatalogError(
                    f"item {item_id!r} placed in both {placed[item_id]!r} and {room.id!r}"
                )
            placed[item_id] = room.id

    for island in world.islands.values():
        _check_refs(island.id, island.rooms, world.rooms, "room")
    for npc in world.npcs.values():
        _check_refs(npc.id, npc.shop, world.items, "item")


_SECTION_PARSERS: dict[str, Callable[[World, dict[str, Any]], None]] = {
    "items": _parse_item,
    "npcs": _parse_npc,
    "enemies": _parse_enemy,
    "rooms": _parse_room,
    "quests": _parse_quest,
    "islands": _parse_island,
}


def load_world(data_path: Path | None = None) -> World:
    """Parse world.json and return a populated World."""
    data_path = data_path or default_world_path()
    with open(data_path, encoding="utf-8") as fh:
        try:
            raw = json.load(fh)
        except json.JSONDecodeError as exc:
            raise CatalogError(f"world data is not valid JSON: {exc}") from exc

    world = World()
    for section, parser in _SECTION_PARSERS.items():
        for entry in raw.get(section, []):
            parser(world, entry)

    _validate(world)
    return world
