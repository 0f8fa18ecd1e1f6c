"""
Configuration management for the simulation engines
Loads and validates configuration from YAML files and environment variables
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional
import yaml
from dotenv import load_dotenv


class Config:
    """Configuration manager for the trading console simulation"""

    def __init__(self, config_dir: str = "configs", project_root: Optional[Path] = None):
        """
        Initialize configuration manager

        Args:
            config_dir: Directory containing configuration files
            project_root: Root the config directory is resolved against
                          (defaults to the repository root)
        """
        self.config_dir = Path(config_dir)
        self.project_root = Path(project_root) if project_root else Path(__file__).parent.parent.parent

        # Load environment variables
        load_dotenv(self.project_root / ".env")

        # Load YAML configurations
        self.main_config = self._load_yaml("config.yaml")
        self.strategies_config = self._load_yaml("strategies.yaml")

    def _load_yaml(self, filename: str) -> Dict[str, Any]:
        """Load YAML configuration file"""
        config_path = self.project_root / self.config_dir / filename
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "r") as f:
            return yaml.safe_load(f) or {}

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation key

        Args:
            key: Configuration key in dot notation (e.g., 'engine.speed')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split(".")
        value = self.main_config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def get_strategy_config(self, strategy_id: str) -> Dict[str, Any]:
        """Get overrides for a specific strategy personality or FX agent"""
        return self.strategies_config.get(strategy_id) or {}

    def get_env(self, key: str, default: Any = None) -> Any:
        """Get environment variable"""
        return os.getenv(key, default)

    # Engine Configuration
    @property
    def sim_seed(self) -> Optional[int]:
        """Get random seed (None means a fresh, unseeded run)"""
        seed = self.get_env("SIM_SEED", self.get("engine.seed"))
        if seed is None or seed == "":
            return None
        return int(seed)

    @property
    def sim_speed(self) -> float:
        """Get time compression factor for cycle intervals and entry delays"""
        speed = float(self.get_env("SIM_SPEED", self.get("engine.speed", 1.0)))
        if speed <= 0:
            raise ValueError(f"SIM_SPEED must be positive, got {speed}")
        return speed

    @property
    def boot_sequence(self) -> bool:
        """Whether the console boot lines are emitted on start"""
        return bool(self.get("engine.boot_sequence", False))

    @property
    def instruments(self) -> list:
        """Get instrument filter for the bot engine (empty = profile defaults)"""
        return self.get("bots.instruments", []) or []

    @property
    def venues(self) -> list:
        """Get venue (chain) filter for the bot engine"""
        return self.get("bots.venues", []) or []

    @property
    def forex_pairs(self) -> list:
        """Get pair filter for the FX engine (empty = all supported pairs)"""
        return self.get("forex.pairs", []) or []

    @property
    def forex_venues(self) -> list:
        """Get settlement network filter for the FX engine"""
        return self.get("forex.venues", []) or []

    # Logging Configuration
    @property
    def logs_dir(self) -> Path:
        """Get logs directory path"""
        logs_path = self.project_root / self.get("logging.dir", "logs")
        logs_path.mkdir(parents=True, exist_ok=True)
        return logs_path

    @property
    def log_level(self) -> str:
        """Get log level"""
        return self.get_env("LOG_LEVEL", self.get("logging.level", "INFO"))

    def __repr__(self) -> str:
        return f"Config(seed={self.sim_seed}, speed={self.sim_speed})"


# Global configuration instance
_config = None


def get_config() -> Config:
    """Get global configuration instance (singleton)"""
    global _config
    if _config is None:
        _config = Config()
    return _config
