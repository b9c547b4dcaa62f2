#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HiCWeaver v0.1.0

Configuration schema for HiCWeaver.

Defines all available configuration parameters with defaults and validation.

Author: HiCWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import copy
from typing import Dict, Any, Optional, List
from pathlib import Path
import yaml


# Default configuration values
DEFAULT_CONFIG = {
    # ========================================================================
    # Sort (chain assembly)
    # ========================================================================
    'sort': {
        'max_diagonal_distance': 20,  # Sampling window for profile and link scoring
        'signal_cutoff': 0.01,  # Cheap pre-filter on best link score
        'hard_threshold': 0.8,  # Acceptance bar for merging
        'merge_threshold': None,  # Enables the hierarchical merge post-pass when set
    },

    # ========================================================================
    # Cut (breakpoint detection)
    # ========================================================================
    'cut': {
        'cut_threshold': 0.30,  # Relative drop below local baseline
        'window_size': 8,  # Max diagonal distance sampled around an offset
        'min_fragment_size': 16,  # Overview pixels
        'min_confidence': 0.5,
    },

    # ========================================================================
    # Contact decay
    # ========================================================================
    'decay': {
        'max_distance': None,  # Default: min(size // 2, 500)
    },

    # ========================================================================
    # Output
    # ========================================================================
    'output': {
        'logging': {
            'level': 'INFO',  # 'DEBUG', 'INFO', 'WARNING', 'ERROR'
            'log_file': None,
        },
    },
}

TEMPLATES = ('default', 'overview', 'strict')
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration from file or return defaults.

    Args:
        config_path: Path to YAML config file (None = use defaults)

    Returns:
        Configuration dictionary
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path:
        config_path = Path(config_path)
        if config_path.exists():
            with open(config_path) as f:
                user_config = yaml.safe_load(f)

            # Deep merge user config into defaults
            if isinstance(user_config, dict):
                config = _deep_merge(config, user_config)

    return config


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Override dictionary

    Returns:
        Merged dictionary
    """
    result = copy.deepcopy(base)

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def save_config_template(output_path: Path, template: str = 'default'):
    """
    Save a configuration template to file.

    Args:
        output_path: Output file path
        template: Template type ('default', 'overview', 'strict')
    """
    if template not in TEMPLATES:
        raise ValueError(f"Unknown template: {template} (choose from {', '.join(TEMPLATES)})")

    config = copy.deepcopy(DEFAULT_CONFIG)

    # Customize for specific templates
    if template == 'overview':
        # Downsampled maps carry less signal per pixel
        config['sort']['max_diagonal_distance'] = 10
        config['sort']['hard_threshold'] = 0.2

    elif template == 'strict':
        config['sort']['hard_threshold'] = 0.9
        config['cut']['min_confidence'] = 0.7

    with open(output_path, 'w') as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration dictionary.

    Args:
        config: Configuration to validate

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    # Validate sort settings
    sort_cfg = config.get('sort', {}) or {}
    if not _is_positive_int(sort_cfg.get('max_diagonal_distance')):
        errors.append("sort.max_diagonal_distance must be a positive integer")
    for key in ('signal_cutoff', 'hard_threshold'):
        if not _is_number(sort_cfg.get(key)):
            errors.append(f"sort.{key} must be a number")
    merge_threshold = sort_cfg.get('merge_threshold')
    if merge_threshold is not None and not _is_number(merge_threshold):
        errors.append("sort.merge_threshold must be a number or null")

    # Validate cut settings
    cut_cfg = config.get('cut', {}) or {}
    cut_threshold = cut_cfg.get('cut_threshold')
    if not _is_number(cut_threshold):
        errors.append("cut.cut_threshold must be a number")
    elif not 0 <= cut_threshold <= 1:
        errors.append(f"cut.cut_threshold must be in [0, 1], got {cut_threshold}")
    for key in ('window_size', 'min_fragment_size'):
        if not _is_positive_int(cut_cfg.get(key)):
            errors.append(f"cut.{key} must be a positive integer")
    if not _is_number(cut_cfg.get('min_confidence')):
        errors.append("cut.min_confidence must be a number")

    # Validate decay settings
    decay_max = (config.get('decay', {}) or {}).get('max_distance')
    if decay_max is not None and not _is_positive_int(decay_max):
        errors.append("decay.max_distance must be a positive integer or null")

    # Validate logging
    log_cfg = (config.get('output', {}) or {}).get('logging', {}) or {}
    level = str(log_cfg.get('level', 'INFO')).upper()
    if level not in LOG_LEVELS:
        errors.append(f"Invalid logging level: {log_cfg.get('level')}")

    return errors


# HiCWeaver v0.1.0
# Any usage is subject to this software's license.
