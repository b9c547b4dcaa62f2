#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HiCWeaver v0.1.0

Configuration parser: YAML loading, merging and validation.

Author: HiCWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import copy
import os
import re
import yaml
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .schema import DEFAULT_CONFIG, _deep_merge, validate_config

ENV_PATTERN = re.compile(r'\$\{([^}:]+)(?::-(.*?))?\}')


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""
    pass


class ConfigParser:
    """
    Parse and validate HiCWeaver configuration files.

    Features:
    - Load YAML configuration files
    - Merge with default values
    - Environment variable substitution (${VAR} and ${VAR:-default})
    - CLI parameter overrides
    - Schema validation
    - Dotted notation access (e.g., config.get('sort.hard_threshold'))
    """

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        """
        Initialize configuration parser.

        Args:
            config_file: Path to YAML configuration file (optional)
        """
        self.config_file = Path(config_file) if config_file else None
        self._config: Dict[str, Any] = copy.deepcopy(DEFAULT_CONFIG)

        # Load user configuration if provided
        if self.config_file:
            self._load_user_config()

    def _load_user_config(self):
        """Load and merge user configuration file."""
        if not self.config_file or not self.config_file.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {self.config_file}"
            )

        try:
            with open(self.config_file, 'r') as f:
                user_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigValidationError(
                f"Invalid YAML in config file {self.config_file}: {e}"
            )

        if user_config is None:
            return
        if not isinstance(user_config, dict):
            raise ConfigValidationError(
                f"Config file {self.config_file} must contain a mapping at top level"
            )

        # User values override defaults
        self._config = _deep_merge(self._config, user_config)
        self._config = self._substitute_env_vars(self._config)

    def _substitute_env_vars(self, config: Any) -> Any:
        """
        Recursively substitute environment variables in configuration.

        Supports:
        - ${VAR}: Replace with environment variable VAR
        - ${VAR:-default}: Replace with VAR, or 'default' if not set

        A value consisting of a single placeholder is re-parsed as a YAML
        scalar, so '${WINDOW:-8}' yields the integer 8.

        Args:
            config: Configuration value (can be dict, list, or string)

        Returns:
            Configuration with substituted values
        """
        if isinstance(config, dict):
            return {k: self._substitute_env_vars(v) for k, v in config.items()}

        elif isinstance(config, list):
            return [self._substitute_env_vars(item) for item in config]

        elif isinstance(config, str):
            def replace_var(match):
                return os.environ.get(match.group(1), match.group(2) or '')

            substituted = ENV_PATTERN.sub(replace_var, config)
            if substituted != config and ENV_PATTERN.fullmatch(config):
                try:
                    return yaml.safe_load(substituted) if substituted else None
                except yaml.YAMLError:
                    return substituted
            return substituted

        else:
            return config

    def merge_cli_overrides(self, overrides: Dict[str, Any]):
        """
        Merge command-line overrides into configuration.

        Args:
            overrides: Dictionary of override values. Keys can use dotted
                notation (e.g., 'cut.window_size'); None values are skipped.
        """
        for key, value in overrides.items():
            if value is None:
                continue
            keys = key.split('.')

            # Navigate to the nested dictionary
            target = self._config
            for k in keys[:-1]:
                if not isinstance(target.get(k), dict):
                    target[k] = {}
                target = target[k]

            target[keys[-1]] = value

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key.

        Supports dotted notation for nested access.

        Args:
            key: Configuration key (e.g., 'sort.hard_threshold')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        value = self._config

        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def get_sort_config(self) -> Dict[str, Any]:
        """Get sort configuration section."""
        return self._config.get('sort', {})

    def get_cut_config(self) -> Dict[str, Any]:
        """Get cut configuration section."""
        return self._config.get('cut', {})

    def get_decay_config(self) -> Dict[str, Any]:
        """Get contact decay configuration section."""
        return self._config.get('decay', {})

    def get_output_config(self) -> Dict[str, Any]:
        """Get output configuration section."""
        return self._config.get('output', {})

    def to_dict(self) -> Dict[str, Any]:
        """
        Export configuration as dictionary.

        Returns:
            Deep copy of the complete configuration dictionary
        """
        return copy.deepcopy(self._config)

    def validate(self) -> bool:
        """
        Validate configuration against the schema.

        Returns:
            True if valid

        Raises:
            ConfigValidationError: If validation fails
        """
        errors = validate_config(self._config)
        if errors:
            raise ConfigValidationError(
                "Invalid configuration:\n  " + "\n  ".join(errors)
            )
        return True

    def __repr__(self) -> str:
        """String representation."""
        return f"ConfigParser(config_file={self.config_file})"

# HiCWeaver v0.1.0
# Any usage is subject to this software's license.
