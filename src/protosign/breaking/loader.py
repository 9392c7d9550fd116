"""
YAML loader for breaking-change configuration, with per-path caching.

Reads the ``breaking:`` section of a buf-style configuration file.  The
buf keys ``use`` and ``except`` may mix category names and rule ids:
categories in ``use`` select by category, rule ids in ``use`` select
rules, and categories in ``except`` expand to their rule ids.  The
explicit keys (``use_categories``, ``use_rules``, ``except_rules``) are
accepted as well.

Usage::

    from protosign.breaking.loader import BreakingConfigLoader

    loader = BreakingConfigLoader()
    config = loader.load(Path("buf.yaml"))
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, ClassVar

import yaml

from protosign.breaking.categories import rules_in_category
from protosign.breaking.schema import BreakingCategory, BreakingConfig

logger = logging.getLogger(__name__)

_CATEGORY_NAMES = {c.value for c in BreakingCategory}


def _as_list(value: Any, key: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise TypeError(f"Expected a list for '{key}', got {type(value).__name__}")
    return [str(item) for item in value]


def config_from_mapping(raw: dict[str, Any]) -> BreakingConfig:
    """Build a ``BreakingConfig`` from a parsed configuration document."""
    section = raw.get("breaking")
    if section is None:
        return BreakingConfig()
    if not isinstance(section, dict):
        raise TypeError(
            f"Expected mapping for 'breaking', got {type(section).__name__}"
        )

    data = dict(section)
    use = _as_list(data.pop("use", None), "use")
    excepts = _as_list(data.pop("except", None), "except")

    if use:
        categories = [u for u in use if u in _CATEGORY_NAMES]
        rules = [u for u in use if u not in _CATEGORY_NAMES]
        if categories:
            data["use_categories"] = list(data.get("use_categories", [])) + categories
        if rules:
            data["use_rules"] = list(data.get("use_rules", [])) + rules

    if excepts:
        except_rules = list(data.get("except_rules", []))
        for entry in excepts:
            if entry in _CATEGORY_NAMES:
                except_rules.extend(rules_in_category(BreakingCategory(entry)))
            else:
                except_rules.append(entry)
        data["except_rules"] = except_rules

    return BreakingConfig.model_validate(data)


class BreakingConfigLoader:
    """Loads and caches breaking configuration from YAML files."""

    _cache: ClassVar[dict[str, BreakingConfig]] = {}

    @classmethod
    def clear_cache(cls) -> None:
        """Clear the configuration cache (useful in tests)."""
        cls._cache.clear()

    def load(self, path: Path) -> BreakingConfig:
        """Load configuration from a YAML file.

        Raises:
            FileNotFoundError: If the file does not exist.
            TypeError: If the YAML root or ``breaking`` section is not a mapping.
            yaml.YAMLError: If the file contains invalid YAML.
            pydantic.ValidationError: If the section does not match the schema.
        """
        key = str(path.resolve())
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Breaking config cache hit: %s", key)
            return cached

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path) as fh:
            raw = yaml.safe_load(fh)

        if not isinstance(raw, dict):
            raise TypeError(
                f"Expected YAML mapping at root of {path}, got {type(raw).__name__}"
            )

        config = config_from_mapping(raw)
        self._cache[key] = config
        logger.debug(
            "Loaded breaking config from %s: categories=%s rules=%d except=%d",
            key,
            [c.value for c in config.use_categories],
            len(config.use_rules),
            len(config.except_rules),
        )
        return config

    def load_from_string(self, yaml_str: str) -> BreakingConfig:
        """Load configuration from a YAML string."""
        raw = yaml.safe_load(yaml_str)
        if raw is None:
            return BreakingConfig()
        if not isinstance(raw, dict):
            raise TypeError(f"Expected YAML mapping, got {type(raw).__name__}")
        return config_from_mapping(raw)
