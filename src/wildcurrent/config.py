"""Configuration for Wild Current."""

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass
class Config:
    """Game configuration."""

    save_path: Path = Path("save1.json")
    world_path: Path | None = None
    seed: int | None = None
    log_level: str = "WARNING"
    log_file: Path | None = None
    json_logs: bool = False

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        world_path = os.getenv("WILDCURRENT_WORLD_PATH")
        seed = os.getenv("WILDCURRENT_SEED")
        log_file = os.getenv("WILDCURRENT_LOG_FILE")

        return cls(
            save_path=Path(os.getenv("WILDCURRENT_SAVE_PATH", str(cls.save_path))),
            world_path=Path(world_path) if world_path else None,
            seed=int(seed) if seed else None,
            log_level=os.getenv("WILDCURRENT_LOG_LEVEL", cls.log_level),
            log_file=Path(log_file) if log_file else None,
            json_logs=os.getenv("WILDCURRENT_JSON_LOGS", "").lower()
            in ("true", "1", "yes"),
        )
