"""Session layer: owns the GameState and runs one turn at a time."""

import random
from pathlib import Path

from .engine.commands import SESSION_VERBS, dispatch, parse_command
from .engine.loader import load_world
from .engine.quests import check_ending, evaluate_quests
from .engine.state import Flag, GameState, add_log, new_game_state
from .engine.world import World
from .logging import bind_turn, get_logger
from .persistence import load_game, save_game

logger = get_logger(__name__)

GAME_OVER = "The tale is over. Start a new game to sail again."


class GameSession:
    """Wraps the World catalog, the live GameState and the random source.

    Callers submit one raw line at a time to process_command() and render
    the narration lines it returns. Once an ending fires (or the player
    quits) further commands are refused.
    """

    def __init__(
        self,
        world: World,
        state: GameState | None = None,
        rng: random.Random | None = None,
        save_path: Path = Path("save1.json"),
    ):
        self.world = world
        self.state = state if state is not None else new_game_state(world)
        self.rng = rng if rng is not None else random.Random()
        self.save_path = Path(save_path)
        self.ending: tuple[str, str] | None = None

    @classmethod
    def new_game(
        cls,
        world_path: Path | None = None,
        seed: int | None = None,
        save_path: Path = Path("save1.json"),
    ) -> "GameSession":
        """Load the catalog and start a fresh game."""
        world = load_world(world_path)
        logger.info(
            "world_loaded",
            rooms=len(world.rooms),
            items=len(world.items),
            npcs=len(world.npcs),
            enemies=len(world.enemies),
        )
        return cls(world, rng=random.Random(seed), save_path=save_path)

    @property
    def is_finished(self) -> bool:
        return self.ending is not None or Flag.QUIT in self.state.flags

    def process_command(self, raw_input: str) -> list[str]:
        """Run one turn and return its narration lines."""
        if self.is_finished:
            return [GAME_OVER]

        command = parse_command(raw_input)
        if command is None:
            return []
        bind_turn(self.state.day, self.state.hour, self.state.player.location)

        combat_turn = self.state.in_combat or command.verb == "attack"
        if command.verb in SESSION_VERBS:
            lines = [self._save() if command.verb == "save" else self._load()]
        else:
            lines = dispatch(self.world, self.state, command, self.rng)

        if not combat_turn:
            lines.extend(evaluate_quests(self.world, self.state))

        ending = check_ending(self.state)
        if ending is not None:
            self.ending = ending
            lines.extend(["=== The End ===", ending[1]])
            logger.info("ending_reached", ending=ending[0], wanted=self.state.wanted)

        add_log(self.state, command.raw, "command")
        for line in lines:
            add_log(self.state, line)
        logger.debug("command_processed", verb=command.verb, lines=len(lines))
        return lines

    def _save(self) -> str:
        return save_game(self.state, self.save_path)

    def _load(self) -> str:
        if self.state.in_combat:
            return "No time to rummage through old logs mid-fight!"
        loaded, message = load_game(self.world, self.save_path)
        if loaded is not None:
            loaded.log = self.state.log
            self.state = loaded
        return message

    def reset(self) -> None:
        """Start over with a fresh game."""
        self.state = new_game_state(self.world)
        self.ending = None
        logger.info("game_reset")
