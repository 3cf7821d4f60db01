# Project board: configuration
# Override defaults via config.yaml or PROJECTBOARD_* environment variables.

import logging
import os
import sys
import yaml
from pathlib import Path
from dataclasses import dataclass
from typing import Optional

CONFIG_PATH = Path(__file__).parent / "config.yaml"


@dataclass
class BoardConfig:
    """Runtime configuration for the project board."""

    # Persistence (None = in-memory only)
    db_path: Optional[str] = None

    # Store wiring
    use_shared_store: bool = True
    seed_demo_data: bool = False

    # Invariant violations raise instead of being logged
    strict: bool = False

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s [projectboard] %(levelname)s: %(message)s"

    def resolve_paths(self):
        """Expand ~ and apply environment overrides."""
        env_db = os.environ.get("PROJECTBOARD_DB")
        if env_db:
            self.db_path = env_db
        env_strict = os.environ.get("PROJECTBOARD_STRICT")
        if env_strict:
            self.strict = env_strict.strip().lower() in ("1", "true", "yes", "on")
        env_level = os.environ.get("PROJECTBOARD_LOG_LEVEL")
        if env_level:
            self.log_level = env_level

        if self.db_path:
            self.db_path = str(Path(self.db_path).expanduser())
        self.log_level = str(self.log_level).upper()

    @classmethod
    def load(cls, path: Optional[str] = None) -> "BoardConfig":
        """Load config from YAML file, falling back to defaults."""
        cfg_path = Path(path) if path else CONFIG_PATH
        if cfg_path.exists():
            try:
                with open(cfg_path, "r") as f:
                    data = yaml.safe_load(f) or {}
                cfg = cls(**{k: v for k, v in data.items() if hasattr(cls, k)})
            except (OSError, yaml.YAMLError, TypeError, AttributeError) as e:
                logging.getLogger(__name__).warning(f"Ignoring unreadable config {cfg_path}: {e}")
                cfg = cls()
        else:
            cfg = cls()
        cfg.resolve_paths()
        return cfg


def configure_logging(cfg: BoardConfig) -> None:
    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        format=cfg.log_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
