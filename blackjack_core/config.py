"""Configuration management with environment variable support."""

import logging
import os
from dataclasses import dataclass, field
from decimal import Decimal

from blackjack_core.rules import RuleSet


def _env_bool(name: str, default: str) -> bool:
    """Parse a true/false environment variable."""
    return os.getenv(name, default).strip().lower() == "true"


@dataclass(frozen=True)
class GameConfig:
    """Default table configuration."""

    num_decks: int = field(
        default_factory=lambda: int(os.getenv("BLACKJACK_NUM_DECKS", "6"))
    )
    stand_on_soft_17: bool = field(
        default_factory=lambda: _env_bool("BLACKJACK_STAND_ON_SOFT_17", "true")
    )
    allow_surrender: bool = field(
        default_factory=lambda: _env_bool("BLACKJACK_ALLOW_SURRENDER", "true")
    )
    starting_chips: Decimal = field(
        default_factory=lambda: Decimal(os.getenv("BLACKJACK_STARTING_CHIPS", "1000"))
    )

    def to_rules(self) -> RuleSet:
        """Build the table rules for this configuration."""
        return RuleSet(
            num_decks=self.num_decks,
            stand_on_soft_17=self.stand_on_soft_17,
            allow_surrender=self.allow_surrender,
        )


@dataclass(frozen=True)
class EngineConfig:
    """Engine configuration."""

    log_level: str = field(
        default_factory=lambda: os.getenv("BLACKJACK_LOG_LEVEL", "WARNING").upper()
    )
    game: GameConfig = field(default_factory=GameConfig)


def configure_logging(level: str | int | None = None) -> None:
    """
    Attach a basic stderr handler for applications embedding the engine.

    Args:
        level: Log level name or number (defaults to the configured level)
    """
    logging.basicConfig(
        level=level if level is not None else config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Global configuration instance
config = EngineConfig()
