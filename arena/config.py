"""
Rules configuration for the arena.

Defaults live on GameConfig; a YAML rules file may override any of them.
A missing file falls back to the defaults.
"""

import logging
import yaml
from dataclasses import dataclass, fields, replace
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_RULES_PATH = Path("data") / "rules.yaml"


@dataclass(frozen=True)
class GameConfig:
    """Tunable game rules."""
    max_players: int = 4
    min_players: int = 2  # Players needed to leave the lobby
    allowed_grid_sizes: tuple[int, ...] = (8, 10, 12)
    default_grid_size: int = 10
    max_health: int = 10
    attack_damage: int = 3
    obstacle_charges: int = 3
    obstacle_health: int = 5
    default_color: str = "#888888"

    def validate(self) -> "GameConfig":
        """Raise ValueError if the rules cannot produce a playable game."""
        if self.min_players < 2:
            raise ValueError("min_players must be at least 2")
        if self.min_players > self.max_players:
            raise ValueError("min_players cannot exceed max_players")
        if not self.allowed_grid_sizes:
            raise ValueError("allowed_grid_sizes must not be empty")
        if any(size < 2 for size in self.allowed_grid_sizes):
            raise ValueError("grid sizes must be at least 2")
        if self.default_grid_size not in self.allowed_grid_sizes:
            raise ValueError(
                f"default_grid_size {self.default_grid_size} is not in "
                f"allowed_grid_sizes {list(self.allowed_grid_sizes)}"
            )
        if self.max_health <= 0 or self.obstacle_health <= 0:
            raise ValueError("health values must be positive")
        if self.attack_damage <= 0:
            raise ValueError("attack_damage must be positive")
        if self.obstacle_charges < 0:
            raise ValueError("obstacle_charges cannot be negative")
        return self

    @classmethod
    def from_dict(cls, data: dict) -> "GameConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown rule keys: {sorted(unknown)}")

        values = {k: v for k, v in data.items() if k in known}
        if "allowed_grid_sizes" in values:
            values["allowed_grid_sizes"] = tuple(int(s) for s in values["allowed_grid_sizes"])
        return replace(cls(), **values).validate()


def load_config(path: Path | str = DEFAULT_RULES_PATH) -> GameConfig:
    """Load rules from YAML, falling back to defaults if the file is absent."""
    path = Path(path)
    if not path.exists():
        logger.info(f"No rules file at {path}, using default rules")
        return GameConfig().validate()

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Rules file {path} must contain a mapping")

    rules = data.get("rules", data)
    if not isinstance(rules, dict):
        raise ValueError(f"Rules file {path} must contain a mapping")

    config = GameConfig.from_dict(rules)
    logger.info(f"Rules loaded from {path}")
    return config
