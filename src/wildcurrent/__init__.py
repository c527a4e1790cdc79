"""Wild Current: a turn-based pirate text adventure."""

from .config import Config
from .logging import configure_logging, get_logger
from .session import GameSession

__all__ = ["main", "GameSession", "Config"]


def main() -> None:
    """Entry point: a plain line-oriented console loop."""
    config = Config.from_env()

    configure_logging(
        log_level=config.log_level,
        log_file=config.log_file,
        json_logs=config.json_logs,
    )

    logger = get_logger(__name__)
    logger.info("game_starting", save_path=str(config.save_path), seed=config.seed)

    session = GameSession.new_game(
        world_path=config.world_path,
        seed=config.seed,
        save_path=config.save_path,
    )
    print("=== Wild Current: A Pirate Tale ===")
    for entry in session.state.log:
        print(entry.text)
    print()
    for line in session.process_command("look"):
        print(line)

    while not session.is_finished:
        try:
            raw = input("> ")
        except EOFError:
            break
        for line in session.process_command(raw):
            print(line)
