"""Constructor-injected engine settings."""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class EngineSettings:
    """Settings shared by the bot and FX engines.

    Attributes:
        seed: Seed for the engine's RandomSource when none is injected.
        speed: Time compression. Every cycle interval and entry offset is
               divided by it (2.0 runs the feed twice as fast).
    """
    seed: Optional[int] = None
    speed: float = 1.0

    def __post_init__(self):
        if self.speed <= 0:
            raise ValueError(f"speed must be positive, got {self.speed}")

    @classmethod
    def from_config(cls, config) -> "EngineSettings":
        """Build settings from a Config (YAML + environment overrides)."""
        return cls(seed=config.sim_seed, speed=config.sim_speed)
