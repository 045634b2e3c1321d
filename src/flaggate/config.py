"""
Evaluator configuration
Defaults, then an optional JSON file, then environment variables
"""

import os
import json
import logging
from typing import Any, Dict, Optional
from dataclasses import dataclass

from .models.mode import EvaluationMode

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = '/etc/flaggate/config.json'
CONFIG_PATH_ENV = 'FLAGGATE_CONFIG'
MODE_ENV = 'FLAGGATE_EVALUATION_MODE'
TRACE_ENV = 'FLAGGATE_TRACE_CONDITIONS'

_TRUTHY = ('true', '1', 'yes', 'on')


@dataclass
class EvaluatorConfig:
    """Runtime settings for FlagEvaluator"""
    default_mode: EvaluationMode = EvaluationMode.FULL
    trace_all_conditions: bool = False

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> 'EvaluatorConfig':
        """Build configuration from file and environment"""
        config = cls()
        path = config_path or os.getenv(CONFIG_PATH_ENV, DEFAULT_CONFIG_PATH)
        config.apply(load_from_file(path))
        config.apply(load_from_environment())
        logger.info(
            f"Evaluator config loaded: mode={config.default_mode.value} "
            f"trace_all_conditions={config.trace_all_conditions}"
        )
        return config

    def apply(self, values: Dict[str, Any]) -> None:
        """Overlay recognised keys, keeping defaults for invalid values"""
        if 'default_mode' in values:
            try:
                self.default_mode = EvaluationMode(values['default_mode'])
            except ValueError:
                logger.warning(f"Ignoring unknown evaluation mode: {values['default_mode']!r}")

        if 'trace_all_conditions' in values:
            trace = values['trace_all_conditions']
            if isinstance(trace, str):
                trace = trace.lower() in _TRUTHY
            self.trace_all_conditions = bool(trace)


def load_from_file(config_path: str) -> Dict[str, Any]:
    """Load configuration from a JSON file; a missing file yields {}"""
    if not os.path.exists(config_path):
        logger.debug(f"Evaluator config file not found: {config_path}")
        return {}

    try:
        with open(config_path, 'r') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to load evaluator config from {config_path}: {e}")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"Evaluator config in {config_path} is not an object, ignoring")
        return {}
    return data


def load_from_environment() -> Dict[str, Any]:
    """Load configuration from environment variables"""
    config: Dict[str, Any] = {}

    mode = os.getenv(MODE_ENV)
    if mode is not None:
        config['default_mode'] = mode.strip().lower()

    trace = os.getenv(TRACE_ENV)
    if trace is not None:
        config['trace_all_conditions'] = trace.lower() in _TRUTHY

    return config
