"""Tests for configuration loading, inheritance and substitution."""

import json

import pytest
import yaml

from docknobs_common import ConfigurationError, NotFoundError
from docknobs_config import (
    CircularReferenceError,
    ConfigError,
    ConfigNotFoundError,
    deep_merge,
    load_config,
    substitute_env_vars,
)


class TestDeepMerge:
    """Test deep merging of dictionaries."""

    def test_nested_merge(self):
        """Test that nested dicts merge and scalars override."""
        base = {"a": 1, "n": {"x": 1, "y": 2}}
        override = {"a": 2, "n": {"y": 3}}

        assert deep_merge(base, override) == {"a": 2, "n": {"x": 1, "y": 3}}

    def test_inputs_not_modified(self):
        """Test that the base dict is left untouched."""
        base = {"n": {"x": 1}}
        deep_merge(base, {"n": {"x": 2}})
        assert base == {"n": {"x": 1}}

    def test_lists_replaced(self):
        """Test that lists are replaced rather than concatenated."""
        assert deep_merge({"l": [1, 2]}, {"l": [3]}) == {"l": [3]}


class TestSubstitution:
    """Test environment variable substitution."""

    def test_simple_substitution(self, monkeypatch):
        """Test simple variable substitution."""
        monkeypatch.setenv("TEST_VAR", "test_value")
        assert substitute_env_vars("${TEST_VAR}") == "test_value"

    def test_substitution_with_default(self, monkeypatch):
        """Test substitution with default value."""
        monkeypatch.delenv("MISSING_VAR", raising=False)
        assert substitute_env_vars("${MISSING_VAR:fallback}") == "fallback"

    def test_missing_variable_error(self, monkeypatch):
        """Test that a missing variable without default raises ConfigError."""
        monkeypatch.delenv("MISSING_VAR", raising=False)

        with pytest.raises(ConfigError) as exc_info:
            substitute_env_vars("${MISSING_VAR}")
        assert exc_info.value.context["variable"] == "MISSING_VAR"

    def test_nested_structures(self, monkeypatch):
        """Test substitution inside dicts and lists."""
        monkeypatch.setenv("HOST", "localhost")

        result = substitute_env_vars({"hosts": ["${HOST}", "other"], "port": 5432})
        assert result == {"hosts": ["localhost", "other"], "port": 5432}

    def test_mixed_content(self, monkeypatch):
        """Test substitution inside a longer string."""
        monkeypatch.setenv("COLLECTION", "users")
        assert substitute_env_vars("documents:${COLLECTION}") == "documents:users"


class TestLoadConfig:
    """Test loading configuration from dicts and files."""

    def test_load_dict(self, sample_config_dict):
        """Test that dicts pass through."""
        config = load_config(sample_config_dict)
        assert config == sample_config_dict
        assert config is not sample_config_dict

    def test_load_yaml(self, temp_dir, sample_config_dict):
        """Test loading a YAML file."""
        path = temp_dir / "users.yaml"
        path.write_text(yaml.safe_dump(sample_config_dict))

        assert load_config(path) == sample_config_dict

    def test_load_json(self, temp_dir, sample_config_dict):
        """Test loading a JSON file given as a string path."""
        path = temp_dir / "users.json"
        path.write_text(json.dumps(sample_config_dict))

        assert load_config(str(path)) == sample_config_dict

    def test_substitution_in_file(self, temp_dir, monkeypatch):
        """Test that values from files are substituted."""
        monkeypatch.setenv("SCHEMA_NAME", "people")
        path = temp_dir / "schema.yaml"
        path.write_text("name: ${SCHEMA_NAME}\n")

        assert load_config(path) == {"name": "people"}
        assert load_config(path, substitute_vars=False) == {"name": "${SCHEMA_NAME}"}

    def test_missing_file(self, temp_dir):
        """Test that a missing file raises ConfigNotFoundError."""
        with pytest.raises(ConfigNotFoundError):
            load_config(temp_dir / "absent.yaml")

        assert issubclass(ConfigNotFoundError, NotFoundError)

    def test_non_mapping_file(self, temp_dir):
        """Test that a file holding a list is rejected."""
        path = temp_dir / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigError):
            load_config(path)

    def test_invalid_yaml(self, temp_dir):
        """Test that unparseable YAML raises ConfigError."""
        path = temp_dir / "broken.yaml"
        path.write_text("fields: [unclosed\n")

        with pytest.raises(ConfigError):
            load_config(path)

    def test_extends(self, temp_dir):
        """Test that a file is deep-merged over the file it extends."""
        (temp_dir / "base.yaml").write_text(yaml.safe_dump({
            "name": "base",
            "fields": {"name": {"type": "string"}},
        }))
        (temp_dir / "users.yaml").write_text(yaml.safe_dump({
            "extends": "base.yaml",
            "name": "users",
            "fields": {"email": {"type": "string"}},
        }))

        config = load_config(temp_dir / "users.yaml")

        assert config == {
            "name": "users",
            "fields": {
                "name": {"type": "string"},
                "email": {"type": "string"},
            },
        }

    def test_extends_missing_parent(self, temp_dir):
        """Test that a missing parent file is reported."""
        (temp_dir / "child.yaml").write_text("extends: nowhere.yaml\n")

        with pytest.raises(ConfigNotFoundError):
            load_config(temp_dir / "child.yaml")

    def test_circular_extends(self, temp_dir):
        """Test that inheritance cycles are detected."""
        (temp_dir / "a.yaml").write_text("extends: b.yaml\n")
        (temp_dir / "b.yaml").write_text("extends: a.yaml\n")

        with pytest.raises(CircularReferenceError):
            load_config(temp_dir / "a.yaml")

        assert issubclass(CircularReferenceError, ConfigurationError)
