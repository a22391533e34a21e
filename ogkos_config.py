#!/usr/bin/env python3
"""
Configuration management for Ogkos

Handles persistent storage of display settings and usage statistics
in the .ogkos directory.
"""

import json
import pathlib
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Optional


def _default_stats() -> dict:
    return {"total_runs": 0, "total_removed": 0, "total_reclaimed_bytes": 0}


@dataclass
class OgkosConfig:
    """Configuration for Ogkos"""

    version: str = "1.0"
    max_rows: int = 40
    min_percentage: float = 5.0
    name_width: int = 64
    count_directory_size: bool = True
    last_run: Optional[str] = None
    stats: dict = field(default_factory=_default_stats)

    def record_run(self, removed: int, reclaimed: int):
        """Accumulate the statistics of one interactive session"""
        for key, value in _default_stats().items():
            self.stats.setdefault(key, value)
        self.stats["total_runs"] += 1
        self.stats["total_removed"] += removed
        self.stats["total_reclaimed_bytes"] += reclaimed
        self.last_run = datetime.now(timezone.utc).isoformat()

    def reset_stats(self):
        """Clear accumulated statistics"""
        self.stats = _default_stats()
        self.last_run = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "OgkosConfig":
        """Create from dictionary, falling back to defaults for invalid values"""
        default = cls()
        max_rows = data.get("max_rows", default.max_rows)
        min_percentage = data.get("min_percentage", default.min_percentage)
        name_width = data.get("name_width", default.name_width)
        stats = data.get("stats")
        return cls(
            version=data.get("version", default.version),
            max_rows=max_rows if isinstance(max_rows, int) and max_rows > 0 else default.max_rows,
            min_percentage=(
                float(min_percentage)
                if isinstance(min_percentage, (int, float)) and 0 <= min_percentage < 100
                else default.min_percentage
            ),
            name_width=name_width if isinstance(name_width, int) and name_width >= 8 else default.name_width,
            count_directory_size=bool(data.get("count_directory_size", default.count_directory_size)),
            last_run=data.get("last_run"),
            stats=dict(stats) if isinstance(stats, dict) else _default_stats(),
        )


class ConfigManager:
    """Manages loading and saving configuration"""

    def __init__(self, config_dir: Optional[pathlib.Path] = None):
        """Initialize configuration manager

        Args:
            config_dir: Override default .ogkos directory location
        """
        if config_dir:
            self.config_dir = config_dir
        else:
            self.config_dir = pathlib.Path.home() / ".ogkos"

        self.config_file = self.config_dir / "config.json"

    def load(self) -> OgkosConfig:
        """Load configuration from file"""
        if self.config_file.exists():
            try:
                with self.config_file.open() as f:
                    data = json.load(f)
                    if isinstance(data, dict):
                        return OgkosConfig.from_dict(data)
            except (json.JSONDecodeError, KeyError, OSError):
                # If config is corrupted, return default
                return OgkosConfig()
        return OgkosConfig()

    def save(self, config: OgkosConfig):
        """Save configuration to file"""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        with self.config_file.open("w") as f:
            json.dump(config.to_dict(), f, indent=2)
