"""
Hierarchical configuration loader for codesync.

Config files are plain YAML mappings.  Several may apply at once (an
explicit ``--config`` file, ``$CODESYNC_CONFIG``, the project's
``.codesync/`` directory, the user's ``~/.config/codesync/``); they are
layered so the most specific file wins per top-level section.

Two extensions over plain YAML:

* ``!include other.yml`` inlines another file, resolved relative to the
  including file.
* ``${VAR}`` / ``${VAR:-default}`` in any string is replaced from the
  environment once all files are merged.

Usage:
    from codesync.config_loader import load_hierarchical_config

    raw = load_hierarchical_config()
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Sequence

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "CODESYNC_CONFIG"
PROJECT_DIR = ".codesync"

# ---------------------------------------------------------------------------
# Environment expansion
# ---------------------------------------------------------------------------

# ${NAME} or ${NAME:-fallback}
_ENV_REF = re.compile(r"\$\{([^}:]+?)(?::-(.*?))?\}")


def interpolate_env_vars(value: str) -> str:
    """Expand ``${VAR}`` and ``${VAR:-default}`` references in *value*.

    An unset or empty variable expands to its default, or to ``""``
    without one.  An unterminated ``${`` is left as is.
    """
    return _ENV_REF.sub(
        lambda m: os.environ.get(m.group(1)) or m.group(2) or "", value
    )


def interpolate_tree(node: Any) -> Any:
    """Return a copy of *node* with every string in it expanded."""
    if isinstance(node, str):
        return interpolate_env_vars(node)
    if isinstance(node, list):
        return [interpolate_tree(item) for item in node]
    if isinstance(node, dict):
        return {key: interpolate_tree(item) for key, item in node.items()}
    return node


# ---------------------------------------------------------------------------
# YAML with !include
# ---------------------------------------------------------------------------


class ConfigLoader(yaml.SafeLoader):
    """SafeLoader that understands ``!include``.

    A private subclass, so ``yaml.safe_load`` elsewhere never sees the
    tag.  Each loader knows the chain of files that led to it, which is
    how include cycles are caught.
    """

    def __init__(self, stream, chain: Sequence[Path] = ()) -> None:
        super().__init__(stream)
        self.chain = tuple(chain)

    def construct_include(self, node: yaml.ScalarNode) -> Any:
        current = self.chain[-1]
        target = Path(self.construct_scalar(node))
        if not target.is_absolute():
            target = current.parent / target
        target = target.resolve()

        if target in self.chain:
            cycle = " -> ".join(str(p) for p in (*self.chain, target))
            raise ValueError(f"Circular include detected: {cycle}")
        if not target.is_file():
            raise FileNotFoundError(
                f"Include file not found: {target} (referenced from {current})"
            )
        return load_yaml(target, self.chain)


ConfigLoader.add_constructor("!include", ConfigLoader.construct_include)


def load_yaml(path: Path, chain: Sequence[Path] = ()) -> Any:
    """Parse the YAML document at *path*, following ``!include`` tags."""
    path = path.resolve()
    with open(path, "r", encoding="utf-8") as fh:
        loader = ConfigLoader(fh, (*chain, path))
        try:
            return loader.get_single_data()
        finally:
            loader.dispose()


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


def _candidate_paths() -> list[Path]:
    candidates = []
    from_env = os.environ.get(CONFIG_ENV_VAR)
    if from_env:
        candidates.append(Path(from_env).expanduser())
    project = Path.cwd() / PROJECT_DIR
    candidates += [
        project / "config.yml",
        project / "config.yaml",
        Path.home() / ".config" / "codesync" / "config.yml",
    ]
    return candidates


def discover_config_files() -> list[Path]:
    """Return the config files that exist, most specific first.

    Order: ``$CODESYNC_CONFIG``, ``./.codesync/config.yml``,
    ``./.codesync/config.yaml``, ``~/.config/codesync/config.yml``.
    A file reachable through two of these is listed once.
    """
    found: list[Path] = []
    for candidate in _candidate_paths():
        if not candidate.is_file():
            continue
        resolved = candidate.resolve()
        if resolved not in found:
            found.append(resolved)
    return found


# ---------------------------------------------------------------------------
# Layering
# ---------------------------------------------------------------------------


def load_hierarchical_config(
    explicit_path: Path | None = None,
) -> dict[str, Any]:
    """Load every applicable config file and layer them into one dict.

    Layering is per top-level section: a section present in a more
    specific file replaces the whole section from less specific ones,
    it is not merged key by key.  Environment references are expanded
    after layering, so an included or overridden value is expanded
    exactly once.

    Args:
        explicit_path: File given on the command line.  It is layered on
            top of everything discovered and must exist.

    Returns:
        The layered mapping; empty when no file applies.

    Raises:
        FileNotFoundError: If *explicit_path* or an included file is missing.
        ValueError: On an include cycle.
        yaml.YAMLError: If a file is not valid YAML.
    """
    layers = discover_config_files()
    if explicit_path is not None:
        if not explicit_path.is_file():
            raise FileNotFoundError(f"Config file not found: {explicit_path}")
        layers.insert(0, explicit_path.resolve())

    if not layers:
        logger.debug("No config files found, using built-in defaults")
        return {}

    merged: dict[str, Any] = {}
    for path in reversed(layers):
        logger.debug("Loading config layer %s", path)
        data = load_yaml(path)
        if data is None:
            continue
        if not isinstance(data, dict):
            logger.warning(
                "Ignoring config file %s: top level is a %s, not a mapping",
                path,
                type(data).__name__,
            )
            continue
        merged.update(data)

    return interpolate_tree(merged)
