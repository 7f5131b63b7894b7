# locator_core/record.py
"""
@file record.py
@brief Locator Record: the portable fingerprint of one node.

A record is built once from a live node and is plain data afterwards. It
serializes to camelCase JSON:

    {
      "tag": "button",
      "attributes": {"data-testid": "submit-btn", "aria-label": "Submit Form"},
      "role": "button",
      "text": "Submit",
      "stableClasses": ["btn", "btn-primary"],
      "nearText": ["Cancel", "Delete", "Card 1 Price: $19.99 Buy Now"],
      "domDepth": 4,
      "positionHint": {"indexAmongSameTag": 0},
      "xpathFallback": "//div[@id='container']/main[contains(@class, 'content-section')]/button[contains(@class, 'btn-primary')]",
      "stabilityLevel": "A",
      "createdAt": 1760745600000,
      "version": 1
    }
"""

from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from jsonschema import Draft202012Validator

from .config import DEFAULT_CONFIG, LocatorConfig
from .exceptions import RecordFormatError
from .interfaces import INode
from .signals import extract_signals, format_node_info
from .xpath import generate_xpath

log = logging.getLogger("locator_core.record")

RECORD_VERSION = 1

SCHEMA_PATH = os.path.join(os.path.dirname(__file__), "schemas", "locator_record.schema.json")


@lru_cache(maxsize=1)
def _validator() -> Draft202012Validator:
    with open(SCHEMA_PATH, "r", encoding="utf-8") as f:
        return Draft202012Validator(json.load(f))


def validate_record(data: Any) -> None:
    """
    Validate a JSON-shaped record.

    @throws RecordFormatError listing every schema violation, or naming an
            unsupported version
    """
    if not isinstance(data, Mapping):
        raise RecordFormatError(f"record must be an object, got: {type(data).__name__}")

    version = data.get("version")
    if "version" in data and (isinstance(version, bool) or version != RECORD_VERSION):
        raise RecordFormatError("unsupported record version", version=version)

    errors = sorted(_validator().iter_errors(dict(data)), key=lambda e: list(e.path))
    if errors:
        raise RecordFormatError(
            "record schema validation failed",
            errors=[f"{list(e.path)}: {e.message}" for e in errors],
        )


@dataclass(frozen=True)
class LocatorRecord:
    tag: str
    attributes: Optional[Dict[str, str]] = None
    role: Optional[str] = None
    text: Optional[str] = None
    stable_classes: Tuple[str, ...] = ()
    near_text: Tuple[str, ...] = ()
    dom_depth: int = 0
    index_among_same_tag: int = 0
    xpath_fallback: Optional[str] = None
    stability_level: str = "C"
    created_at: int = 0
    version: int = RECORD_VERSION

    def has_strong_attribute(self, config: LocatorConfig = DEFAULT_CONFIG) -> bool:
        attrs = self.attributes or {}
        return any(attrs.get(name) for name in config.strong_attributes)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"tag": self.tag}
        if self.attributes:
            data["attributes"] = dict(self.attributes)
        if self.role is not None:
            data["role"] = self.role
        if self.text is not None:
            data["text"] = self.text
        data["stableClasses"] = list(self.stable_classes)
        data["nearText"] = list(self.near_text)
        data["domDepth"] = self.dom_depth
        data["positionHint"] = {"indexAmongSameTag": self.index_among_same_tag}
        if self.xpath_fallback is not None:
            data["xpathFallback"] = self.xpath_fallback
        data["stabilityLevel"] = self.stability_level
        data["createdAt"] = self.created_at
        data["version"] = self.version
        return data

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LocatorRecord:
        """
        Build a record from its JSON shape.

        @throws RecordFormatError on schema violations or a wrong version
        """
        validate_record(data)
        attrs = data.get("attributes")
        hint = data.get("positionHint") or {}
        return cls(
            tag=data["tag"].lower(),
            attributes=dict(attrs) if attrs else None,
            role=data.get("role"),
            text=data.get("text"),
            stable_classes=tuple(data.get("stableClasses", ())),
            near_text=tuple(data.get("nearText", ())),
            dom_depth=data.get("domDepth", 0),
            index_among_same_tag=hint.get("indexAmongSameTag", 0),
            xpath_fallback=data.get("xpathFallback"),
            stability_level=data.get("stabilityLevel", "C"),
            created_at=data.get("createdAt", 0),
            version=data["version"],
        )

    @classmethod
    def from_json(cls, text: str) -> LocatorRecord:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise RecordFormatError(f"invalid JSON: {e}") from e
        return cls.from_dict(data)


def classify_stability(
    attributes: Optional[Mapping[str, str]],
    role: Optional[str],
    text: Optional[str],
    config: LocatorConfig = DEFAULT_CONFIG,
) -> str:
    """A: strong attribute present. B: role and text. C: anything else."""
    attrs = attributes or {}
    if any(attrs.get(name) for name in config.strong_attributes):
        return "A"
    if role and text:
        return "B"
    return "C"


def generate_locator_json(
    node: INode,
    config: LocatorConfig = DEFAULT_CONFIG,
    clock: Callable[[], float] = time.time,
) -> LocatorRecord:
    """
    Describe a live node as a LocatorRecord.

    @param node Element to describe
    @param config Locator configuration
    @param clock Time source in seconds since the epoch
    @return LocatorRecord with xpathFallback attached when one verifies
    """
    signals = extract_signals(node, config)
    xpath = generate_xpath(node, config)
    level = classify_stability(signals.attributes, signals.role, signals.text, config)

    record = LocatorRecord(
        tag=signals.tag,
        attributes=dict(signals.attributes) or None,
        role=signals.role,
        text=signals.text,
        stable_classes=signals.stable_classes,
        near_text=signals.near_text,
        dom_depth=signals.dom_depth,
        index_among_same_tag=signals.index_among_same_tag,
        xpath_fallback=xpath,
        stability_level=level,
        created_at=int(clock() * 1000),
    )
    log.debug(f"Record built (level={level}, xpath={xpath}) for {format_node_info(node)}")
    return record
