#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HiCWeaver v0.1.0

Tests for configuration loading, templates and validation.

Author: HiCWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import copy

import pytest
import yaml

from hicweaver.config import (
    DEFAULT_CONFIG,
    ConfigParser,
    ConfigValidationError,
    load_config,
    save_config_template,
    validate_config,
)


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

class TestDefaults:
    """Test default values and load_config."""

    def test_default_values(self):
        """Defaults match the documented parameters."""
        assert DEFAULT_CONFIG['sort']['max_diagonal_distance'] == 20
        assert DEFAULT_CONFIG['sort']['signal_cutoff'] == 0.01
        assert DEFAULT_CONFIG['sort']['hard_threshold'] == 0.8
        assert DEFAULT_CONFIG['cut']['cut_threshold'] == 0.30
        assert DEFAULT_CONFIG['cut']['window_size'] == 8
        assert DEFAULT_CONFIG['cut']['min_fragment_size'] == 16
        assert DEFAULT_CONFIG['cut']['min_confidence'] == 0.5

    def test_defaults_are_valid(self):
        assert validate_config(DEFAULT_CONFIG) == []

    def test_load_without_path(self):
        """No path returns a copy of the defaults."""
        config = load_config()
        assert config == DEFAULT_CONFIG
        config['sort']['hard_threshold'] = 0.1
        assert DEFAULT_CONFIG['sort']['hard_threshold'] == 0.8

    def test_load_merges_partial_file(self, temp_output_dir):
        """User values override defaults, the rest is kept."""
        path = temp_output_dir / "partial.yaml"
        path.write_text("cut:\n  window_size: 12\n")

        config = load_config(path)

        assert config['cut']['window_size'] == 12
        assert config['cut']['cut_threshold'] == 0.30
        assert config['sort'] == DEFAULT_CONFIG['sort']

    def test_load_missing_file_gives_defaults(self, temp_output_dir):
        assert load_config(temp_output_dir / "absent.yaml") == DEFAULT_CONFIG


class TestTemplates:
    """Test save_config_template."""

    @pytest.mark.parametrize("template", ['default', 'overview', 'strict'])
    def test_templates_are_valid(self, template, temp_output_dir):
        """Every template loads back as a valid configuration."""
        path = temp_output_dir / f"{template}.yaml"
        save_config_template(path, template)

        with open(path) as f:
            config = yaml.safe_load(f)

        assert validate_config(config) == []

    def test_strict_template(self, temp_output_dir):
        path = temp_output_dir / "strict.yaml"
        save_config_template(path, 'strict')

        config = load_config(path)

        assert config['sort']['hard_threshold'] == 0.9
        assert config['cut']['min_confidence'] == 0.7

    def test_overview_template(self, temp_output_dir):
        path = temp_output_dir / "overview.yaml"
        save_config_template(path, 'overview')

        config = load_config(path)

        assert config['sort']['max_diagonal_distance'] == 10
        assert config['sort']['hard_threshold'] == 0.2

    def test_unknown_template(self, temp_output_dir):
        with pytest.raises(ValueError, match="Unknown template"):
            save_config_template(temp_output_dir / "x.yaml", 'nonexistent')


class TestValidateConfig:
    """Test validate_config error reporting."""

    def _config(self):
        return copy.deepcopy(DEFAULT_CONFIG)

    def test_bad_window_size(self):
        config = self._config()
        config['cut']['window_size'] = 0
        assert "cut.window_size must be a positive integer" in validate_config(config)

    def test_bool_is_not_a_number(self):
        config = self._config()
        config['sort']['hard_threshold'] = True
        assert "sort.hard_threshold must be a number" in validate_config(config)

    def test_cut_threshold_range(self):
        config = self._config()
        config['cut']['cut_threshold'] = 1.5
        errors = validate_config(config)
        assert any("cut.cut_threshold must be in [0, 1]" in e for e in errors)

    def test_merge_threshold_optional(self):
        config = self._config()
        config['sort']['merge_threshold'] = 0.05
        assert validate_config(config) == []
        config['sort']['merge_threshold'] = "high"
        assert validate_config(config) == ["sort.merge_threshold must be a number or null"]

    def test_decay_max_distance(self):
        config = self._config()
        config['decay']['max_distance'] = -3
        assert validate_config(config) == ["decay.max_distance must be a positive integer or null"]

    def test_invalid_log_level(self):
        config = self._config()
        config['output']['logging']['level'] = 'LOUD'
        assert validate_config(config) == ["Invalid logging level: LOUD"]

    def test_collects_every_error(self):
        config = self._config()
        config['sort']['max_diagonal_distance'] = 2.5
        config['cut']['min_fragment_size'] = -1
        assert len(validate_config(config)) == 2


# ---------------------------------------------------------------------------
# ConfigParser
# ---------------------------------------------------------------------------

class TestConfigParser:
    """Test ConfigParser loading and access."""

    def test_defaults_without_file(self):
        parser = ConfigParser()
        assert parser.to_dict() == DEFAULT_CONFIG
        assert parser.validate()

    def test_dotted_get(self):
        parser = ConfigParser()
        assert parser.get('sort.hard_threshold') == 0.8
        assert parser.get('output.logging.level') == 'INFO'
        assert parser.get('sort.missing', 'fallback') == 'fallback'
        assert parser.get('sort.hard_threshold.deeper') is None

    def test_section_getters(self):
        parser = ConfigParser()
        assert parser.get_sort_config()['signal_cutoff'] == 0.01
        assert parser.get_cut_config()['window_size'] == 8
        assert parser.get_decay_config()['max_distance'] is None
        assert parser.get_output_config()['logging']['log_file'] is None

    def test_user_file_merged(self, temp_output_dir):
        path = temp_output_dir / "user.yaml"
        path.write_text("sort:\n  hard_threshold: 0.6\n")

        parser = ConfigParser(path)

        assert parser.get('sort.hard_threshold') == 0.6
        assert parser.get('sort.max_diagonal_distance') == 20

    def test_missing_file(self, temp_output_dir):
        with pytest.raises(FileNotFoundError):
            ConfigParser(temp_output_dir / "absent.yaml")

    def test_invalid_yaml(self, temp_output_dir):
        path = temp_output_dir / "broken.yaml"
        path.write_text("sort: [unclosed\n")

        with pytest.raises(ConfigValidationError, match="Invalid YAML"):
            ConfigParser(path)

    def test_non_mapping_yaml(self, temp_output_dir):
        path = temp_output_dir / "list.yaml"
        path.write_text("- 1\n- 2\n")

        with pytest.raises(ConfigValidationError, match="mapping"):
            ConfigParser(path)

    def test_empty_file_gives_defaults(self, temp_output_dir):
        path = temp_output_dir / "empty.yaml"
        path.write_text("")
        assert ConfigParser(path).to_dict() == DEFAULT_CONFIG

    def test_env_substitution(self, temp_output_dir, monkeypatch):
        """Placeholders are filled from the environment, with typed defaults."""
        monkeypatch.setenv("HICWEAVER_WINDOW", "12")
        monkeypatch.delenv("HICWEAVER_UNSET", raising=False)
        path = temp_output_dir / "env.yaml"
        path.write_text(
            "cut:\n"
            "  window_size: ${HICWEAVER_WINDOW}\n"
            "  min_fragment_size: ${HICWEAVER_UNSET:-24}\n"
            "output:\n"
            "  logging:\n"
            "    log_file: logs/${HICWEAVER_WINDOW}.log\n"
        )

        parser = ConfigParser(path)

        assert parser.get('cut.window_size') == 12
        assert parser.get('cut.min_fragment_size') == 24
        assert parser.get('output.logging.log_file') == "logs/12.log"
        assert parser.validate()

    def test_cli_overrides(self):
        parser = ConfigParser()
        parser.merge_cli_overrides({
            'cut.window_size': 4,
            'sort.hard_threshold': None,
            'extra.nested.value': 'x',
        })

        assert parser.get('cut.window_size') == 4
        assert parser.get('sort.hard_threshold') == 0.8
        assert parser.get('extra.nested.value') == 'x'

    def test_validate_raises(self):
        parser = ConfigParser()
        parser.merge_cli_overrides({'cut.cut_threshold': 2.0})

        with pytest.raises(ConfigValidationError, match="cut.cut_threshold"):
            parser.validate()

    def test_to_dict_is_a_copy(self):
        parser = ConfigParser()
        snapshot = parser.to_dict()
        snapshot['sort']['hard_threshold'] = 0.0
        assert parser.get('sort.hard_threshold') == 0.8

    def test_repr(self):
        assert repr(ConfigParser()) == "ConfigParser(config_file=None)"

# HiCWeaver v0.1.0
# Any usage is subject to this software's license.
