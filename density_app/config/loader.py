"""Configuration loader with 3-tier parameter precedence."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from .defaults import DefaultConfig, get_default_config


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: DefaultConfig

    @classmethod
    def create(cls, config_dir: Optional[Union[str, Path]] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def load_event_config(self, event_name: str) -> dict[str, Any]:
        """Load overrides for a single event stream from events.yaml."""
        events_file = self.config_dir / "events.yaml"

        if not events_file.exists():
            return {}

        with open(events_file) as f:
            events_config = yaml.safe_load(f) or {}

        return events_config.get("events", {}).get(event_name, {})  # type: ignore[no-any-return]

    def load_global_config(self) -> dict[str, Any]:
        """Load the top-level (non per-event) section of events.yaml."""
        events_file = self.config_dir / "events.yaml"

        if not events_file.exists():
            return {}

        with open(events_file) as f:
            events_config = yaml.safe_load(f) or {}

        return {k: v for k, v in events_config.items() if k != "events"}

    def merge_config(
        self,
        event_name: Optional[str] = None,
        request_overrides: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Per-request overrides (highest priority)
        2. File overrides: global section, then the event-specific section
        3. Global defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)

        config = self._deep_merge(config, self.load_global_config())
        if event_name:
            config = self._deep_merge(config, self.load_event_config(event_name))

        if request_overrides:
            config = self._deep_merge(config, request_overrides)

        return config

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
