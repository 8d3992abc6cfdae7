"""Configuration for the kanban board, read from a YAML file."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

from .models import DEFAULT_DATE_FORMAT, DEFAULT_EFFORT, DEFAULT_SEED_LABELS

logger = logging.getLogger(__name__)

CONFIG_PATH = Path.home() / ".config" / "kanban-board" / "config.yaml"


@dataclass
class Config:
    """Runtime configuration.

    Every field has a default, so an empty or missing config file is fine.
    """

    board_path: str = "~/.local/share/kanban-board/board.json"
    date_format: str = DEFAULT_DATE_FORMAT
    default_effort: str = DEFAULT_EFFORT
    log_level: str = "INFO"
    seed_labels: list[str] = field(default_factory=lambda: list(DEFAULT_SEED_LABELS))

    def resolve_paths(self) -> None:
        self.board_path = str(Path(self.board_path).expanduser())

    @classmethod
    def load(cls, path: str | Path | None = None) -> Config:
        """Load config from YAML, falling back to defaults.

        Unknown keys are ignored. A value of the wrong type is reported and
        the default kept for that field. A file that cannot be parsed is
        reported and replaced by the defaults.
        """
        cfg_path = Path(path) if path else CONFIG_PATH
        known = {f.name for f in fields(cls)}
        cfg = cls()
        if cfg_path.exists():
            try:
                with open(cfg_path, "r", encoding="utf-8") as f:
                    data = yaml.safe_load(f) or {}
                if not isinstance(data, dict):
                    raise ValueError("top level must be a mapping")
                values = {}
                for key, value in data.items():
                    if key not in known:
                        continue
                    if _valid_value(key, value):
                        values[key] = value
                    else:
                        logger.warning(
                            "Ignoring config value %s=%r in %s; using the default",
                            key, value, cfg_path,
                        )
                cfg = cls(**values)
            except (OSError, yaml.YAMLError, ValueError, TypeError) as e:
                logger.warning("Ignoring config file %s: %s", cfg_path, e)
                cfg = cls()
        cfg.resolve_paths()
        return cfg


def _valid_value(key: str, value: object) -> bool:
    if key == "seed_labels":
        return isinstance(value, list) and all(
            isinstance(label, str) and label.strip() for label in value
        )
    if key in ("board_path", "date_format"):
        return isinstance(value, str) and bool(value.strip())
    return isinstance(value, str)
