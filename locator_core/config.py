# locator_core/config.py
"""
@file config.py
@brief Tunables for signal extraction, path synthesis and ranking.

Defaults live in DEFAULT_CONFIG. A YAML file can override any field:

    hash_class_patterns:
      - "^css-"
      - "^tw-[a-z0-9]{6}$"
    near_text_max_count: 3
    score_weights:
      near_text: 25
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field, fields, replace
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Pattern, Tuple

import yaml

from .exceptions import ConfigError


IDENTITY_ATTRIBUTES: Tuple[str, ...] = (
    "data-testid",
    "data-test",
    "data-qa",
    "data-cy",
    "data-id",
    "data-component-id",
    "name",
    "aria-label",
    "aria-labelledby",
    "title",
    "placeholder",
    "alt",
    "type",
    "href",
    "src",
)

STRONG_ATTRIBUTES: Tuple[str, ...] = (
    "data-testid",
    "data-test",
    "data-qa",
    "data-cy",
    "aria-label",
    "aria-labelledby",
)

# Applied to every attribute value and class token.
HASH_PATTERNS: Tuple[str, ...] = (
    r"^[a-f0-9]{8,}$",
    r"[a-f0-9]{12,}",
    r"^[a-f0-9]{8}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{12}$",
)

# Applied to class tokens only, in addition to HASH_PATTERNS.
HASH_CLASS_PATTERNS: Tuple[str, ...] = (
    r"^(?:css|sc|jsx|emotion|svelte)-[a-z0-9_-]+$",
    r"[-_](?=(?:[a-z]*[0-9]){2})(?=[0-9]*[a-z])[a-z0-9]{5,}$",
    r"^(?=(?:[a-z]*[0-9]){2})(?=[0-9]*[a-z])[a-z0-9]{6,}$",
)

DEFAULT_SCORE_WEIGHTS: Dict[str, float] = {
    "identity_attribute": 100.0,
    "attribute": 25.0,
    "role": 60.0,
    "text_exact": 50.0,
    "text_fuzzy": 30.0,
    "stable_class": 20.0,
    "near_text": 15.0,
    "depth": 10.0,
    "position": 5.0,
}


@lru_cache(maxsize=64)
def compile_patterns(patterns: Tuple[str, ...]) -> Tuple[Pattern[str], ...]:
    """Compile a pattern set case-insensitively (cached per tuple)."""
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


@dataclass(frozen=True)
class LocatorConfig:
    identity_attributes: Tuple[str, ...] = IDENTITY_ATTRIBUTES
    strong_attributes: Tuple[str, ...] = STRONG_ATTRIBUTES
    data_attribute_prefix: str = "data-"
    hash_patterns: Tuple[str, ...] = HASH_PATTERNS
    hash_class_patterns: Tuple[str, ...] = HASH_CLASS_PATTERNS
    text_max_length: int = 120
    near_text_max_count: int = 5
    near_text_max_length: int = 50
    near_text_parent_levels: int = 2
    infer_implicit_roles: bool = False
    fuzzy_text_ratio: float = 0.85
    score_weights: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_SCORE_WEIGHTS))

    def weight(self, name: str) -> float:
        return float(self.score_weights.get(name, DEFAULT_SCORE_WEIGHTS.get(name, 0.0)))

    def with_overrides(self, **overrides: Any) -> LocatorConfig:
        """Create a new config with overrides applied."""
        return replace(self, **overrides)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, tuple):
                value = list(value)
            elif isinstance(value, Mapping):
                value = dict(value)
            data[f.name] = value
        return data


DEFAULT_CONFIG = LocatorConfig()


_LIST_KEYS = {"identity_attributes", "strong_attributes", "hash_patterns", "hash_class_patterns"}
_INT_KEYS = {"text_max_length", "near_text_max_count", "near_text_max_length", "near_text_parent_levels"}
_ALLOWED_KEYS = {f.name for f in fields(LocatorConfig)}


def _as_str_list(value: Any, where: str) -> List[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{where}: must be a list of strings")
    return value


def _validate_patterns(patterns: List[str], where: str) -> None:
    for i, p in enumerate(patterns):
        try:
            re.compile(p)
        except re.error as e:
            raise ConfigError(f"{where}[{i}]: invalid regex {p!r}: {e}") from e


def parse_config(data: Mapping[str, Any]) -> LocatorConfig:
    """
    Build a LocatorConfig from a plain mapping.

    @param data Mapping of LocatorConfig field names to values
    @return LocatorConfig with defaults for missing keys
    @throws ConfigError on unknown keys, wrong types or invalid regexes
    """
    if not isinstance(data, Mapping):
        raise ConfigError(f"config must be a mapping, got: {type(data).__name__}")

    unknown = set(data.keys()) - _ALLOWED_KEYS
    if unknown:
        raise ConfigError(f"unknown config keys: {sorted(unknown)}. Allowed: {sorted(_ALLOWED_KEYS)}")

    overrides: Dict[str, Any] = {}
    for key, value in data.items():
        if key in _LIST_KEYS:
            items = _as_str_list(value, key)
            if key in ("hash_patterns", "hash_class_patterns"):
                _validate_patterns(items, key)
            else:
                items = [v.lower() for v in items]
            overrides[key] = tuple(items)
        elif key in _INT_KEYS:
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ConfigError(f"{key}: must be a non-negative integer")
            overrides[key] = value
        elif key == "data_attribute_prefix":
            if not isinstance(value, str):
                raise ConfigError(f"{key}: must be a string")
            overrides[key] = value.lower()
        elif key == "infer_implicit_roles":
            if not isinstance(value, bool):
                raise ConfigError(f"{key}: must be a boolean")
            overrides[key] = value
        elif key == "fuzzy_text_ratio":
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0.0 < value <= 1.0:
                raise ConfigError(f"{key}: must be a number in (0, 1]")
            overrides[key] = float(value)
        elif key == "score_weights":
            if not isinstance(value, Mapping):
                raise ConfigError(f"{key}: must be a mapping")
            unknown_w = set(value.keys()) - set(DEFAULT_SCORE_WEIGHTS)
            if unknown_w:
                raise ConfigError(f"{key}: unknown weights: {sorted(unknown_w)}")
            weights = dict(DEFAULT_SCORE_WEIGHTS)
            for wname, w in value.items():
                if isinstance(w, bool) or not isinstance(w, (int, float)) or w < 0:
                    raise ConfigError(f"{key}.{wname}: must be a non-negative number")
                weights[wname] = float(w)
            overrides[key] = weights

    return DEFAULT_CONFIG.with_overrides(**overrides)


def load_config(path: str) -> LocatorConfig:
    """Load a LocatorConfig from a YAML file."""
    path = os.path.abspath(path)
    if not os.path.exists(path):
        raise ConfigError(f"Config YAML not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML: {e}") from e
    if data is None:
        return DEFAULT_CONFIG
    if not isinstance(data, dict):
        raise ConfigError("Config YAML must be a mapping at root.")
    return parse_config(data)
