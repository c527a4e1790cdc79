"""Shared test fixtures for Wild Current."""

import random
from pathlib import Path

import pytest

from wildcurrent.engine.loader import load_world
from wildcurrent.engine.state import GameState, new_game_state
from wildcurrent.engine.world import World
from wildcurrent.session import GameSession


class ScriptedRandom(random.Random):
    """A random source that replays fixed rolls and fails on unexpected ones."""

    def __init__(self, floats=(), ints=()):
        super().__init__(0)
        self.floats = list(floats)
        self.ints = list(ints)

    def random(self) -> float:
        if not self.floats:
            raise AssertionError("unexpected random() call")
        return self.floats.pop(0)

    def randint(self, a: int, b: int) -> int:
        if not self.ints:
            raise AssertionError("unexpected randint() call")
        value = self.ints.pop(0)
        assert a <= value <= b, f"scripted roll {value} outside [{a}, {b}]"
        return value


@pytest.fixture
def world() -> World:
    return load_world()


@pytest.fixture
def state(world: World) -> GameState:
    return new_game_state(world)


@pytest.fixture
def scripted():
    """Factory for ScriptedRandom: scripted(floats=[...], ints=[...])."""
    return ScriptedRandom


@pytest.fixture
def save_path(tmp_path: Path) -> Path:
    return tmp_path / "save1.json"


@pytest.fixture
def session(world: World, save_path: Path) -> GameSession:
    return GameSession(world, rng=random.Random(42), save_path=save_path)
