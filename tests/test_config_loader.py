"""Tests for codesync.config_loader -- hierarchical config loading."""

import textwrap

import pytest
import yaml

from codesync.config_loader import (
    discover_config_files,
    interpolate_env_vars,
    interpolate_tree,
    load_hierarchical_config,
    load_yaml,
)


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Run in an empty project directory with an empty home."""
    monkeypatch.delenv("CODESYNC_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    home = tmp_path / "home"
    monkeypatch.setenv("HOME", str(home))
    return tmp_path


def _write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(text))
    return path


# -------------------------------------------------------------------------
# Env var interpolation
# -------------------------------------------------------------------------


class TestInterpolateEnvVars:
    """Tests for ${VAR} and ${VAR:-default} substitution."""

    def test_replaces_set_var(self, monkeypatch):
        monkeypatch.setenv("SVN_HOST", "svn.local")
        assert interpolate_env_vars("https://${SVN_HOST}/repo") == (
            "https://svn.local/repo"
        )

    def test_unset_var_replaced_with_empty(self, monkeypatch):
        monkeypatch.delenv("UNSET_VAR_XYZ", raising=False)
        assert interpolate_env_vars("${UNSET_VAR_XYZ}") == ""

    def test_default_used_when_unset_or_empty(self, monkeypatch):
        monkeypatch.delenv("UNSET_VAR_XYZ", raising=False)
        monkeypatch.setenv("EMPTY_VAR", "")
        assert interpolate_env_vars("${UNSET_VAR_XYZ:-main}") == "main"
        assert interpolate_env_vars("${EMPTY_VAR:-main}") == "main"

    def test_default_ignored_when_set(self, monkeypatch):
        monkeypatch.setenv("BRANCH", "release")
        assert interpolate_env_vars("${BRANCH:-main}") == "release"

    def test_literal_dollar_brace_no_closing(self):
        assert interpolate_env_vars("${NO_CLOSE") == "${NO_CLOSE"

    def test_recursive_walk(self, monkeypatch):
        monkeypatch.setenv("CLONE", "/src/internal")
        data = {
            "repositories": {"internal": {"path": "${CLONE}", "n": 3}},
            "branches": ["${CLONE}", 7],
        }
        assert interpolate_tree(data) == {
            "repositories": {"internal": {"path": "/src/internal", "n": 3}},
            "branches": ["/src/internal", 7],
        }


# -------------------------------------------------------------------------
# YAML !include support
# -------------------------------------------------------------------------


class TestIncludeDirective:
    """Tests for !include YAML loading via the ConfigLoader subclass."""

    def test_include_relative_file(self, tmp_path):
        _write(tmp_path / "repos.yml", "internal:\n  type: git\n")
        main = _write(tmp_path / "config.yml", "repositories: !include repos.yml\n")

        assert load_yaml(main) == {
            "repositories": {"internal": {"type": "git"}}
        }

    def test_include_nonexistent_raises(self, tmp_path):
        main = _write(tmp_path / "config.yml", "data: !include missing.yml\n")
        with pytest.raises(FileNotFoundError, match="missing.yml"):
            load_yaml(main)

    def test_circular_include_raises(self, tmp_path):
        a = _write(tmp_path / "a.yml", "x: !include b.yml\n")
        _write(tmp_path / "b.yml", "y: !include a.yml\n")
        with pytest.raises(ValueError, match="Circular include"):
            load_yaml(a)

    def test_global_safe_loader_not_polluted(self, tmp_path):
        cfg = _write(tmp_path / "test.yml", "x: !include other.yml\n")
        with pytest.raises(yaml.constructor.ConstructorError):
            with open(cfg) as fh:
                yaml.safe_load(fh)


# -------------------------------------------------------------------------
# Convention-based file discovery
# -------------------------------------------------------------------------


class TestDiscoverConfigFiles:
    """Tests for discover_config_files() precedence and filtering."""

    def test_env_var_takes_highest_precedence(self, isolated, monkeypatch):
        custom = _write(isolated / "custom.yml", "name: custom\n")
        _write(isolated / ".codesync" / "config.yml", "name: project\n")
        monkeypatch.setenv("CODESYNC_CONFIG", str(custom))

        result = discover_config_files()
        assert result[0] == custom.resolve()
        assert len(result) == 2

    def test_project_before_global(self, isolated):
        proj = _write(isolated / ".codesync" / "config.yml", "a: 1\n")
        glob = _write(
            isolated / "home" / ".config" / "codesync" / "config.yml", "b: 2\n"
        )
        assert discover_config_files() == [proj.resolve(), glob.resolve()]

    def test_yaml_extension(self, isolated):
        proj = _write(isolated / ".codesync" / "config.yaml", "a: 1\n")
        assert discover_config_files() == [proj.resolve()]

    def test_nothing_found(self, isolated):
        assert discover_config_files() == []


# -------------------------------------------------------------------------
# Hierarchical merge
# -------------------------------------------------------------------------


class TestLoadHierarchicalConfig:
    """Tests for load_hierarchical_config() merge and interpolation."""

    def test_zero_config_returns_empty_dict(self, isolated):
        assert load_hierarchical_config() == {}

    def test_project_overrides_global_at_section_level(self, isolated):
        _write(
            isolated / "home" / ".config" / "codesync" / "config.yml",
            """\
            merge:
              tool: merge3
            db:
              path: /var/codesync/db.json
            """,
        )
        _write(
            isolated / ".codesync" / "config.yml",
            """\
            db:
              path: local.json
            """,
        )

        result = load_hierarchical_config()
        assert result["db"] == {"path": "local.json"}
        assert result["merge"] == {"tool": "merge3"}

    def test_explicit_path_wins(self, isolated):
        _write(isolated / ".codesync" / "config.yml", "name: project\n")
        explicit = _write(isolated / "other.yml", "name: explicit\n")

        assert load_hierarchical_config(explicit)["name"] == "explicit"

    def test_explicit_path_missing_raises(self, isolated):
        with pytest.raises(FileNotFoundError):
            load_hierarchical_config(isolated / "absent.yml")

    def test_env_var_interpolation_after_merge(self, isolated, monkeypatch):
        monkeypatch.setenv("INTERNAL_CLONE", "/src/internal")
        _write(
            isolated / ".codesync" / "config.yml",
            """\
            repositories:
              internal:
                type: git
                path: "${INTERNAL_CLONE}"
            """,
        )
        result = load_hierarchical_config()
        assert result["repositories"]["internal"]["path"] == "/src/internal"

    def test_non_dict_root_skipped(self, isolated, monkeypatch):
        bad = _write(isolated / "bad.yml", "- item1\n- item2\n")
        monkeypatch.setenv("CODESYNC_CONFIG", str(bad))
        assert load_hierarchical_config() == {}
