"""Shortest-route search over the room graph.

Exits are directed, labeled edges. Labels are visited in sorted order so
that, among several shortest routes, the same one is always returned.
"""

from collections import deque

from .world import World


def find_route(world: World, start: str, target: str) -> list[str] | None:
    """Return the exit labels along a shortest path, or None if unreachable.

    An empty list means start and target are the same room. Gating checks
    are not consulted; this is a map, not a promise.
    """
    if start == target:
        return []
    if start not in world.rooms or target not in world.rooms:
        return None

    previous: dict[str, tuple[str, str]] = {}
    visited = {start}
    queue = deque([start])

    while queue:
        current = queue.popleft()
        exits = world.rooms[current].exits
        for direction in sorted(exits):
            nxt = exits[direction]
            if nxt in visited:
                continue
            visited.add(nxt)
            previous[nxt] = (current, direction)
            if nxt == target:
                return _unwind(previous, start, target)
            queue.append(nxt)

    return None


def _unwind(previous: dict[str, tuple[str, str]], start: str, target: str) -> list[str]:
    path: list[str] = []
    current = target
    while current != start:
        current, direction = previous[current]
        path.append(direction)
    path.reverse()
    return path
