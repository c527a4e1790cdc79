"""Tests for route finding."""

from wildcurrent.engine.pathfinder import find_route
from wildcurrent.engine.world import Room, World


def _graph(edges: dict[str, dict[str, str]]) -> World:
    world = World()
    for room_id, exits in edges.items():
        world.rooms[room_id] = Room(id=room_id, name=room_id.upper(), island="X", exits=exits)
    return world


def test_same_room_is_empty_route(world: World):
    assert find_route(world, "dock", "dock") == []


def test_shortest_route(world: World):
    assert find_route(world, "ship_deck", "mist_library") == [
        "north",
        "west",
        "north",
        "north",
    ]


def test_route_ignores_gates(world: World):
    assert find_route(world, "town_square", "navy_outpost") == ["north", "north"]


def test_unknown_rooms(world: World):
    assert find_route(world, "ship_deck", "atlantis") is None
    assert find_route(world, "atlantis", "ship_deck") is None


def test_exits_are_directed():
    world = _graph({"a": {"north": "b"}, "b": {}, "c": {}})
    assert find_route(world, "a", "b") == ["north"]
    assert find_route(world, "b", "a") is None
    assert find_route(world, "a", "c") is None


def test_ties_break_on_sorted_labels():
    world = _graph(
        {
            "a": {"north": "c", "east": "b"},
            "b": {"north": "d"},
            "c": {"east": "d"},
            "d": {},
        }
    )
    assert find_route(world, "a", "d") == ["east", "north"]
