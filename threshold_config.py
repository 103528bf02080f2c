"""Configuration for the threshold BLS scheme."""

import os
import json
import logging
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, model_validator

from bls_curve import DST

logger = logging.getLogger(__name__)

# Examples: (4,3), (5,3), (7,5) - any N and T <= N
DEFAULT_N = 4  # Default number of participants
DEFAULT_T = 3  # Default threshold
DEFAULT_DEALERS = 1


class ThresholdConfig(BaseModel):
    """Parameters of one threshold scheme instance."""

    model_config = ConfigDict(frozen=True)

    n: int = DEFAULT_N
    t: int = DEFAULT_T
    dealers: int = DEFAULT_DEALERS
    dst: str = DST.decode("ascii")
    lagrange_mode: Literal["field", "integer"] = "field"

    @model_validator(mode="after")
    def _check_sizes(self) -> "ThresholdConfig":
        if self.n < 1:
            raise ValueError(f"Number of participants {self.n} must be at least 1")
        if self.t < 1:
            raise ValueError(f"Threshold {self.t} must be at least 1")
        if self.t > self.n:
            raise ValueError(f"Threshold {self.t} cannot be greater than total participants {self.n}")
        if self.dealers < 1:
            raise ValueError(f"Number of dealers {self.dealers} must be at least 1")
        return self

    @property
    def dst_bytes(self) -> bytes:
        return self.dst.encode("ascii")

    @property
    def participant_ids(self) -> range:
        return range(1, self.n + 1)

    def __str__(self) -> str:
        return f"{self.n} participants, {self.t}-of-{self.n} threshold, {self.dealers} dealer(s)"


class SchemeSettings:
    """Loads a ThresholdConfig from an override, the environment, a file or defaults."""

    def __init__(self, config_file: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None):
        """Initialize scheme settings.

        Args:
            config_file: Path to a JSON or YAML config file
            overrides: Optional settings that take precedence over every other source
        """
        self.config_file = config_file or os.environ.get('THRESHOLD_CONFIG_FILE', 'threshold_config.json')
        self.overrides = overrides
        raw = self._load_config()
        # Apply environment variable overrides after loading config
        self._apply_env_overrides(raw)
        self.config = ThresholdConfig(**raw)

    def _load_config(self) -> Dict[str, Any]:
        """Load raw settings from overrides, environment, file, or defaults."""
        if self.overrides:
            logger.info(f"Using provided threshold configuration: {sorted(self.overrides)}")
            return dict(self.overrides)

        env_config = self._load_from_environment()
        if env_config is not None:
            return env_config

        if os.path.exists(self.config_file):
            with open(self.config_file, 'r') as f:
                if self.config_file.endswith(('.yaml', '.yml')):
                    config = yaml.safe_load(f) or {}
                else:
                    config = json.load(f)
            logger.info(f"Loaded threshold config from {self.config_file}")
            return config

        logger.info(f"Using default threshold config ({DEFAULT_T}-of-{DEFAULT_N})")
        return {}

    def _load_from_environment(self) -> Optional[Dict[str, Any]]:
        """Load the full configuration from THRESHOLD_CONFIG_JSON."""
        config_json = os.environ.get('THRESHOLD_CONFIG_JSON')
        if not config_json:
            return None
        config = json.loads(config_json)
        logger.info("Loaded threshold config from THRESHOLD_CONFIG_JSON environment variable")
        return config

    def _apply_env_overrides(self, raw: Dict[str, Any]) -> None:
        """Apply per-field environment variable overrides."""
        for env_name, key in (
            ('THRESHOLD_N', 'n'),
            ('THRESHOLD_T', 't'),
            ('THRESHOLD_DEALERS', 'dealers'),
        ):
            value = os.environ.get(env_name)
            if value:
                try:
                    raw[key] = int(value)
                except ValueError:
                    raise ValueError(f"Invalid {env_name} value: {value}") from None
                logger.info(f"Overriding {key} with {env_name}={value}")

        dst = os.environ.get('THRESHOLD_DST')
        if dst:
            raw['dst'] = dst
            logger.info("Overriding hash-to-curve DST with THRESHOLD_DST")

        mode = os.environ.get('THRESHOLD_LAGRANGE_MODE')
        if mode:
            raw['lagrange_mode'] = mode
            logger.info(f"Overriding Lagrange mode with THRESHOLD_LAGRANGE_MODE={mode}")

    def save_config(self) -> None:
        """Save current configuration to file as JSON."""
        with open(self.config_file, 'w') as f:
            json.dump(self.config.model_dump(), f, indent=2)
        logger.info(f"Saved threshold config to {self.config_file}")


def load_config(config_file: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> ThresholdConfig:
    return SchemeSettings(config_file, overrides).config
