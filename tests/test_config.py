"""Tests for locator configuration and config file loading."""

import pytest

from anchor_patch import LocatorConfig, SpanLocator, ValidationError, load_config


class TestLocatorConfig:
    """Test LocatorConfig validation."""

    def test_defaults(self):
        """Test the default tuning constants."""
        config = LocatorConfig()
        assert config.whitespace_slack == 50
        assert config.phrase_prefix_length == 30
        assert config.min_clause_length == 10
        assert config.line_block_factor == 2

    def test_from_dict_partial(self):
        """Test missing settings keep their defaults."""
        config = LocatorConfig.from_dict({"whitespace_slack": 80})
        assert config.whitespace_slack == 80
        assert config.phrase_prefix_length == 30

    def test_to_dict_round_trip(self):
        """Test to_dict output is accepted by from_dict."""
        config = LocatorConfig(phrase_prefix_length=12)
        assert LocatorConfig.from_dict(config.to_dict()) == config

    def test_zero_slack_allowed(self):
        """Test whitespace slack may be zero."""
        assert LocatorConfig.from_dict({"whitespace_slack": 0}).whitespace_slack == 0

    def test_collects_all_errors(self):
        """Test every invalid entry is reported at once."""
        with pytest.raises(ValidationError) as exc_info:
            LocatorConfig.from_dict(
                {
                    "colour": 1,
                    "phrase_prefix_length": 0,
                    "line_block_factor": "2",
                    "whitespace_slack": True,
                }
            )

        errors = exc_info.value.errors
        assert len(errors) == 4
        assert any("Unknown setting 'colour'" in e for e in errors)
        assert any("phrase_prefix_length" in e and "at least 1" in e for e in errors)


class TestLoadConfig:
    """Test loading settings from YAML and JSON files."""

    def test_yaml_with_locator_key(self, tmp_path):
        """Test settings nested under a locator key."""
        path = tmp_path / "anchor.yaml"
        path.write_text("locator:\n  whitespace_slack: 80\n  phrase_prefix_length: 40\n")

        config = load_config(path)

        assert config.whitespace_slack == 80
        assert config.phrase_prefix_length == 40

    def test_yaml_flat(self, tmp_path):
        """Test settings at the top level."""
        path = tmp_path / "anchor.yml"
        path.write_text("min_clause_length: 5\n")
        assert load_config(path).min_clause_length == 5

    def test_json(self, tmp_path):
        """Test JSON config files."""
        path = tmp_path / "anchor.json"
        path.write_text('{"line_block_factor": 3}')
        assert load_config(path).line_block_factor == 3

    def test_empty_file(self, tmp_path):
        """Test an empty file gives the defaults."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == LocatorConfig()

    def test_missing_file(self, tmp_path):
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        """Test unparseable YAML raises ValidationError."""
        path = tmp_path / "bad.yaml"
        path.write_text("locator: [unclosed\n")
        with pytest.raises(ValidationError, match="Failed to parse"):
            load_config(path)

    def test_invalid_json(self, tmp_path):
        """Test unparseable JSON raises ValidationError."""
        path = tmp_path / "bad.json"
        path.write_text("{")
        with pytest.raises(ValidationError, match="Failed to parse"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path):
        """Test a list at the top level is rejected."""
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValidationError, match="dictionary"):
            load_config(path)

    def test_loaded_config_drives_locator(self, tmp_path):
        """Test a loaded config changes locator behaviour."""
        path = tmp_path / "anchor.yaml"
        path.write_text("locator:\n  max_document_length: 4\n")
        locator = SpanLocator(load_config(path))
        assert locator.config.max_document_length == 4
