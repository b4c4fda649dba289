# src/financial_history/config.py
"""
Engine configuration.

Defaults ship in data/engine_defaults.yaml; callers can override them from
a dict or their own YAML file.
"""

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .core.exceptions import ConfigurationError

DEFAULTS_PATH = Path(__file__).parent / "data" / "engine_defaults.yaml"


@dataclass
class EngineConfig:
    """Tunable parameters for one processing run."""

    # Accounting equation tolerance (absolute, per date)
    balance_tolerance: float = 0.01

    # Allowed gap between retained earnings change and net income
    retained_earnings_tolerance: float = 1.0

    # Gap at which a fully assigned constraint is reported as a conflict
    constraint_tolerance: float = 0.01

    # None draws fresh entropy each run
    random_seed: Optional[int] = None

    # Verify the accounting equation after balancing
    verify: bool = True

    # Name used when no existing account can absorb the plug
    fallback_balancing_account: str = "Balancing Equity Adjustment"

    def __post_init__(self):
        for name in ('balance_tolerance', 'retained_earnings_tolerance', 'constraint_tolerance'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                raise ConfigurationError(f"{name} must be a non-negative number, got {value!r}")
            setattr(self, name, float(value))

        if self.random_seed is not None and (
            isinstance(self.random_seed, bool) or not isinstance(self.random_seed, int)
        ):
            raise ConfigurationError(f"random_seed must be an integer or null, got {self.random_seed!r}")

        if not isinstance(self.verify, bool):
            raise ConfigurationError(f"verify must be true or false, got {self.verify!r}")

        if not isinstance(self.fallback_balancing_account, str) or not self.fallback_balancing_account.strip():
            raise ConfigurationError("fallback_balancing_account must be a non-empty string")

    @classmethod
    def from_dict(cls, values: Optional[Dict[str, Any]]) -> 'EngineConfig':
        """
        Build a config from a mapping, rejecting unknown keys.

        Raises:
            ConfigurationError: unknown key or invalid value
        """
        values = dict(values or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigurationError(f"Unknown engine configuration keys: {', '.join(unknown)}")
        return cls(**values)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> 'EngineConfig':
        """Load a config from a YAML file with an optional top-level `engine` section."""
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigurationError(f"Expected a mapping in {path}, got {type(data).__name__}")
        if 'engine' in data:
            data = data['engine'] or {}
        return cls.from_dict(data)

    @classmethod
    def load_default(cls) -> 'EngineConfig':
        return cls.from_yaml(DEFAULTS_PATH)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
