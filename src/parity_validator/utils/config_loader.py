"""Configuration loader for YAML and environment variables."""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from dotenv import load_dotenv


DEFAULT_CONFIG: Dict[str, Any] = {
    'histogram': {
        'bins': 100,
        'bool_bins': 2,
    },
    'sentinel': {
        'reserved_names': ['_0'],
        'drop_trailing': False,
    },
    'comparison': {
        'element_distributions': True,
        'chi_square': True,
    },
    'reporting': {
        'output_dir': './reports',
        'formats': [],
        'charts': False,
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``override`` into a copy of ``base``, recursing into nested dicts."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigLoader:
    """Loads and manages configuration from YAML and environment variables."""

    def __init__(self, config_path: Optional[str] = None, env_path: Optional[str] = None):
        """
        Initialize configuration loader.

        Args:
            config_path: Path to YAML config file (default: config/config.yaml if present)
            env_path: Path to .env file (default: .env in project root)

        Raises:
            FileNotFoundError: If an explicit config_path does not exist
        """
        # Load environment variables
        if env_path:
            load_dotenv(env_path)
        else:
            load_dotenv()  # Load from default .env location

        # Load YAML config
        if config_path is None:
            config_path = self._find_config_file()
        elif not Path(config_path).exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        user_config = self._load_yaml(config_path) if config_path else {}
        self.config = _deep_merge(DEFAULT_CONFIG, user_config)
        self._merge_env_overrides()

    def _find_config_file(self) -> Optional[str]:
        """Find config.yaml in project structure."""
        possible_paths = [
            Path(__file__).parent.parent.parent.parent / 'config' / 'config.yaml',
            Path('config/config.yaml'),
            Path('../config/config.yaml'),
        ]

        for path in possible_paths:
            if path.exists():
                return str(path)

        return None

    def _load_yaml(self, path: str) -> Dict[str, Any]:
        """Load YAML configuration file."""
        with open(path, 'r') as f:
            return yaml.safe_load(f) or {}

    def _merge_env_overrides(self):
        """Override config values with environment variables if present."""
        # Histogram overrides
        if os.getenv('PARITY_HISTOGRAM_BINS'):
            self.config.setdefault('histogram', {})['bins'] = int(os.getenv('PARITY_HISTOGRAM_BINS'))

        if os.getenv('PARITY_BOOL_BINS'):
            self.config.setdefault('histogram', {})['bool_bins'] = int(os.getenv('PARITY_BOOL_BINS'))

        # Reporting overrides
        if os.getenv('PARITY_REPORT_DIR'):
            self.config.setdefault('reporting', {})['output_dir'] = os.getenv('PARITY_REPORT_DIR')

        # Sentinel overrides
        if os.getenv('PARITY_SENTINEL_NAMES'):
            names = [name.strip() for name in os.getenv('PARITY_SENTINEL_NAMES').split(',') if name.strip()]
            self.config.setdefault('sentinel', {})['reserved_names'] = names

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Example: config.get('histogram.bins')
        """
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default

            if value is None:
                return default

        return value

    def get_all(self) -> Dict[str, Any]:
        """Get entire configuration dictionary."""
        return self.config
