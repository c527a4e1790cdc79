"""Save/load of the mutable game state as a flat JSON snapshot.

The snapshot schema is a set of SQLModel data models (no tables), so a
document is validated field by field before any of it reaches a GameState.
Loading always rebuilds a fresh state from the catalog and overlays only the
fields the snapshot carries, then checks the result as a whole. A snapshot
that fails any check is rejected outright.
"""

import contextlib
import json
import os
from pathlib import Path

from pydantic import ValidationError
from sqlmodel import Field, SQLModel

from .engine.state import (
    START_DAY,
    START_HOUR,
    START_ROOM,
    STARTING_HP,
    STARTING_MONEY,
    STARTING_SLOTS,
    Flag,
    GameState,
    inventory_slots,
    new_game_state,
)
from .engine.world import Disposition, World
from .logging import get_logger

logger = get_logger(__name__)

SNAPSHOT_VERSION = 1


class SnapshotError(ValueError):
    """A snapshot decoded cleanly but describes an impossible world."""


class PlayerRecord(SQLModel):
    location: str = START_ROOM
    inventory: list[str] = Field(default_factory=list)
    equipped: dict[str, str] = Field(default_factory=dict)
    max_slots: int = Field(default=STARTING_SLOTS, ge=0)
    hp: int = STARTING_HP
    max_hp: int = Field(default=STARTING_HP, ge=1)
    grit: int = 2
    charm: int = 2
    wits: int = 2
    active_fruit: str | None = None


class QuestSnapshot(SQLModel):
    active: bool = True
    done: bool = False
    outcome: str = ""


class SaveDocument(SQLModel):
    """A saved game.

    Field defaults only describe the schema. Older snapshots may leave fields
    out; restore() copies just the fields a document actually carries, so
    anything missing keeps its new-game value.
    """

    version: int = SNAPSHOT_VERSION
    player: PlayerRecord
    room_items: dict[str, list[str]] = Field(default_factory=dict)
    room_enemies: dict[str, list[str]] = Field(default_factory=dict)
    flags: list[Flag] = Field(default_factory=list)
    npc_state: dict[str, Disposition] = Field(default_factory=dict)
    wanted: int = Field(default=0, ge=0)
    morale: int = 0
    money: int = Field(default=STARTING_MONEY, ge=0)
    day: int = Field(default=START_DAY, ge=1)
    hour: int = Field(default=START_HOUR, ge=0, le=23)
    discovered: list[str] = Field(default_factory=list)
    quests: dict[str, QuestSnapshot] = Field(default_factory=dict)


def snapshot(state: GameState) -> SaveDocument:
    """Capture the serialized subset of state. The log and combat are left out."""
    player = state.player
    return SaveDocument(
        player=PlayerRecord(
            location=player.location,
            inventory=list(player.inventory),
            equipped=dict(player.equipped),
            max_slots=player.max_slots,
            hp=player.hp,
            max_hp=player.max_hp,
            grit=player.grit,
            charm=player.charm,
            wits=player.wits,
            active_fruit=player.active_fruit,
        ),
        room_items={room: list(ids) for room, ids in state.room_items.items()},
        room_enemies={room: list(ids) for room, ids in state.room_enemies.items()},
        flags=sorted(state.flags, key=lambda flag: flag.value),
        npc_state=dict(state.npc_state),
        wanted=state.wanted,
        morale=state.morale,
        money=state.money,
        day=state.day,
        hour=state.hour,
        discovered=sorted(state.discovered),
        quests={
            quest_id: QuestSnapshot(
                active=record.active, done=record.done, outcome=record.outcome
            )
            for quest_id, record in state.quests.items()
        },
    )


_PLAYER_FIELDS = (
    "location",
    "inventory",
    "max_slots",
    "hp",
    "max_hp",
    "grit",
    "charm",
    "wits",
    "active_fruit",
)
_SCALAR_FIELDS = ("wanted", "morale", "money", "day", "hour")


def _overlay(target, record: SQLModel, names) -> None:
    """Copy the named fields of record onto target, if record carried them."""
    for name in names:
        if name in record.model_fields_set:
            setattr(target, name, getattr(record, name))


def _check_ids(ids, known: dict, kind: str) -> None:
    for ref in ids:
        if ref not in known:
            raise SnapshotError(f"unknown {kind} {ref!r}")


def _check_state(world: World, state: GameState) -> None:
    """Reject a restored state that describes an impossible world.

    Runs after the overlay, so rooms the snapshot left at their catalog
    contents are checked together with everything it did carry.
    """
    player = state.player
    if player.location not in world.rooms:
        raise SnapshotError(f"unknown location {player.location!r}")

    if player.active_fruit is not None:
        fruit = world.items.get(player.active_fruit)
        if fruit is None or not fruit.fruit:
            raise SnapshotError(f"{player.active_fruit!r} is not a fruit")

    # An eaten fruit is gone, so it counts as one more place an id can be.
    holders = [player.inventory, [player.active_fruit] if player.active_fruit else []]
    holders.extend(state.room_items.values())
    seen: set[str] = set()
    for ids in holders:
        _check_ids(ids, world.items, "item")
        for item_id in ids:
            if item_id in seen:
                raise SnapshotError(f"item {item_id!r} is in two places at once")
            seen.add(item_id)

    if inventory_slots(world, state) > player.max_slots:
        raise SnapshotError("inventory exceeds carrying capacity")
    if player.hp > player.max_hp:
        raise SnapshotError("hp exceeds max hp")

    for enemies in state.room_enemies.values():
        _check_ids(enemies, world.enemies, "enemy")
    for quest_id, quest in state.quests.items():
        if quest.done != bool(quest.outcome):
            raise SnapshotError(f"quest {quest_id!r} outcome disagrees with done")


def restore(world: World, doc: SaveDocument) -> GameState:
    """Build a fresh state from the catalog and overlay the snapshot onto it."""
    state = new_game_state(world)
    state.log.clear()

    _overlay(state.player, doc.player, _PLAYER_FIELDS)
    if "equipped" in doc.player.model_fields_set:
        state.player.equipped = {**state.player.equipped, **doc.player.equipped}

    # Rooms the catalog no longer has are ignored; new rooms keep their defaults.
    for room_id, items in doc.room_items.items():
        if room_id in state.room_items:
            state.room_items[room_id] = list(items)
    for room_id, enemies in doc.room_enemies.items():
        if room_id in state.room_enemies:
            state.room_enemies[room_id] = list(enemies)

    if "flags" in doc.model_fields_set:
        state.flags = set(doc.flags)
    for npc_id, disposition in doc.npc_state.items():
        if npc_id in world.npcs:
            state.npc_state[npc_id] = disposition
    for quest_id, quest in doc.quests.items():
        if quest_id in state.quests:
            _overlay(state.quests[quest_id], quest, ("active", "done", "outcome"))

    _overlay(state, doc, _SCALAR_FIELDS)
    if "discovered" in doc.model_fields_set:
        state.discovered = {room for room in doc.discovered if room in world.rooms}

    _check_state(world, state)
    return state


def save_game(state: GameState, path: Path) -> str:
    """Write a snapshot to path. Returns narration; never raises."""
    if state.combat is not None:
        return "No time to write in the log mid-fight!"

    path = Path(path)
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        payload = snapshot(state).model_dump(mode="json")
        with open(tmp_path, "w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2)
        os.replace(tmp_path, path)
    except (OSError, TypeError, ValueError) as exc:
        with contextlib.suppress(OSError):
            tmp_path.unlink()
        logger.warning("game_save_failed", path=str(path), error=str(exc))
        return "Could not write save file."

    logger.info("game_saved", path=str(path), day=state.day, hour=state.hour)
    return f"Game saved to {path.name}"


def load_game(world: World, path: Path) -> tuple[GameState | None, str]:
    """Read a snapshot from path.

    Returns (state, narration). state is None when nothing could be loaded,
    in which case the caller's current state must stay in place.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as fh:
            raw = json.load(fh)
    except OSError as exc:
        logger.warning("game_load_failed", path=str(path), error=str(exc))
        return None, "Could not load save file."
    except ValueError as exc:
        logger.warning("game_load_failed", path=str(path), error=str(exc))
        return None, "Save file corrupted."

    try:
        doc = SaveDocument.model_validate(raw)
        state = restore(world, doc)
    except (ValidationError, SnapshotError) as exc:
        logger.warning("game_load_failed", path=str(path), error=str(exc))
        return None, "Save file corrupted."

    logger.info("game_loaded", path=str(path), day=state.day, hour=state.hour)
    return state, "Game loaded."
