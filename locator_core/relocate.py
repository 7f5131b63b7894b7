# locator_core/relocate.py
"""
@file relocate.py
@brief Re-identify the node a LocatorRecord describes in a (changed) tree.

Single-best lookup runs strategies in order and stops at the first hit:

    1) strong_attribute   exact value of a data-testid / aria-label / ...
    2) role_text          exact (role, direct text) pair
    3) fuzzy_text         same tag, text equal / contained / near-equal
    4) xpath_fallback     stored structural path

Ranked lookup scores every same-tag node on all signals at once and
returns the best candidates with a per-signal breakdown.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from difflib import SequenceMatcher
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .config import DEFAULT_CONFIG, LocatorConfig
from .exceptions import LocatorAttempt, RecordFormatError
from .interfaces import INode
from .record import LocatorRecord
from .signals import (
    NodeSignals,
    extract_role,
    extract_signals,
    extract_text,
    format_node_info,
    normalize_text,
)
from .tree import iter_elements, root_of
from .xpath import find_element_by_xpath

log = logging.getLogger("locator_core.relocate")

RecordLike = Union[LocatorRecord, Mapping[str, Any]]


class _NoMatch(Exception):
    """A strategy ran (or was skipped) without producing a node."""


@dataclass(frozen=True)
class Resolution:
    """
    Outcome of a single-best lookup.

    Immutable; carries which strategy produced the node and why every
    earlier strategy did not.
    """
    node: Optional[INode]
    strategy: Optional[str] = None
    attempts: List[LocatorAttempt] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.node is not None


@dataclass
class Match:
    node: INode
    score: float
    details: Dict[str, float] = field(default_factory=dict)


def _coerce_record(record: RecordLike) -> LocatorRecord:
    if isinstance(record, LocatorRecord):
        return record
    if isinstance(record, Mapping):
        return LocatorRecord.from_dict(record)
    raise RecordFormatError(f"expected LocatorRecord or mapping, got: {type(record).__name__}")


def _prefer_tag(nodes: Sequence[INode], tag: str) -> INode:
    for n in nodes:
        if n.tag == tag:
            return n
    return nodes[0]


def _ratio(a: str, b: str) -> float:
    return SequenceMatcher(None, a, b).ratio()


# =========================================================
# Strategies
# =========================================================

def _by_strong_attribute(top: INode, record: LocatorRecord, config: LocatorConfig) -> INode:
    attrs = record.attributes or {}
    tried = [name for name in config.strong_attributes if attrs.get(name)]
    if not tried:
        raise _NoMatch("record has no strong attribute")
    for name in tried:
        value = attrs[name]
        hits = [n for n in iter_elements(top) if (n.get_attribute(name) or "").strip() == value]
        if hits:
            return _prefer_tag(hits, record.tag)
    raise _NoMatch(f"no node carries {tried}")


def _by_role_text(top: INode, record: LocatorRecord, config: LocatorConfig) -> INode:
    if not (record.role and record.text):
        raise _NoMatch("record lacks role or text")
    hits = [
        n for n in iter_elements(top)
        if extract_role(n, config) == record.role and extract_text(n, config) == record.text
    ]
    if not hits:
        raise _NoMatch(f"no node with role={record.role!r} text={record.text!r}")
    return _prefer_tag(hits, record.tag)


def _by_fuzzy_text(top: INode, record: LocatorRecord, config: LocatorConfig) -> INode:
    if record.has_strong_attribute(config) or record.role:
        raise _NoMatch("record carries a strong attribute or role")
    target = normalize_text(record.text)
    if not target:
        raise _NoMatch("record has no text")

    candidates: List[Tuple[INode, str]] = []
    for n in iter_elements(top):
        if n.tag != record.tag:
            continue
        text = extract_text(n, config)
        if text:
            candidates.append((n, text))

    for n, text in candidates:
        if text == target:
            return n
    for n, text in candidates:
        if target in text or text in target:
            return n

    best: Optional[INode] = None
    best_ratio = 0.0
    for n, text in candidates:
        r = _ratio(target, text)
        if r > best_ratio:
            best, best_ratio = n, r
    if best is not None and best_ratio >= config.fuzzy_text_ratio:
        return best
    raise _NoMatch(f"no <{record.tag}> text close to {target!r} (best ratio {best_ratio:.2f})")


def _by_xpath_fallback(top: INode, record: LocatorRecord, config: LocatorConfig) -> INode:
    if not record.xpath_fallback:
        raise _NoMatch("record has no xpathFallback")
    node = find_element_by_xpath(top, record.xpath_fallback)
    if node is None:
        raise _NoMatch(f"xpathFallback matched nothing: {record.xpath_fallback}")
    return node


STRATEGIES: List[Tuple[str, Callable[[INode, LocatorRecord, LocatorConfig], INode]]] = [
    ("strong_attribute", _by_strong_attribute),
    ("role_text", _by_role_text),
    ("fuzzy_text", _by_fuzzy_text),
    ("xpath_fallback", _by_xpath_fallback),
]


def _strategy_locator(name: str, record: LocatorRecord) -> Dict[str, Any]:
    if name == "strong_attribute":
        return {"tag": record.tag, "attributes": dict(record.attributes or {})}
    if name == "role_text":
        return {"role": record.role, "text": record.text}
    if name == "fuzzy_text":
        return {"tag": record.tag, "text": record.text}
    return {"xpath": record.xpath_fallback}


# =========================================================
# Single-best lookup
# =========================================================

def explain_locate(
    root: Optional[INode],
    record: RecordLike,
    config: LocatorConfig = DEFAULT_CONFIG,
) -> Resolution:
    """
    Run the tiered lookup and report how it went.

    @param root Any node of the tree to search, or None for an empty tree
    @param record LocatorRecord or its JSON-shaped dict
    @return Resolution with the node (or None), winning strategy and attempts
    @throws RecordFormatError when record is a malformed dict
    """
    rec = _coerce_record(record)
    if root is None:
        return Resolution(node=None)

    top = root_of(root)
    attempts: List[LocatorAttempt] = []

    for name, strategy in STRATEGIES:
        locator = _strategy_locator(name, rec)
        try:
            node = strategy(top, rec, config)
        except _NoMatch as e:
            log.debug(f"[{name}] {e}")
            attempts.append(LocatorAttempt(kind=name, locator=locator, error=str(e)))
            continue
        log.debug(f"[{name}] {format_node_info(node, 'Located')}")
        return Resolution(node=node, strategy=name, attempts=attempts)

    log.debug(f"No strategy located <{rec.tag}> (tried {len(attempts)})")
    return Resolution(node=None, attempts=attempts)


def locate_node_by_json(
    root: Optional[INode],
    record: RecordLike,
    config: LocatorConfig = DEFAULT_CONFIG,
) -> Optional[INode]:
    """Best single node for record, or None."""
    return explain_locate(root, record, config).node


# =========================================================
# Ranked lookup
# =========================================================

def _has_usable_signals(record: LocatorRecord) -> bool:
    return bool(
        record.attributes
        or record.role
        or record.text
        or record.stable_classes
        or record.near_text
    )


def score_candidate(
    node: INode,
    record: LocatorRecord,
    config: LocatorConfig = DEFAULT_CONFIG,
    signals: Optional[NodeSignals] = None,
) -> Tuple[float, Dict[str, float]]:
    """
    Score one node against a record.

    @return (total, per-signal contributions); zero contributions are omitted
    """
    sig = signals or extract_signals(node, config)
    details: Dict[str, float] = {}

    rec_attrs = record.attributes or {}
    strong = [name for name in config.strong_attributes if rec_attrs.get(name)]
    if any(sig.attributes.get(name) == rec_attrs[name] for name in strong):
        details["identity_attribute"] = config.weight("identity_attribute")

    others = [name for name in rec_attrs if name not in strong]
    if others:
        hits = sum(1 for name in others if sig.attributes.get(name) == rec_attrs[name])
        details["attribute"] = config.weight("attribute") * hits / len(others)

    if record.role and sig.role == record.role:
        details["role"] = config.weight("role")

    if record.text and sig.text:
        if sig.text == record.text:
            details["text"] = config.weight("text_exact")
        elif (
            record.text in sig.text
            or sig.text in record.text
            or _ratio(record.text, sig.text) >= config.fuzzy_text_ratio
        ):
            details["text"] = config.weight("text_fuzzy")

    if record.stable_classes:
        overlap = len(set(record.stable_classes) & set(sig.stable_classes))
        details["stable_class"] = config.weight("stable_class") * overlap / len(record.stable_classes)

    if record.near_text:
        parent = node.parent
        parent_text = normalize_text(parent.text_content()) if parent is not None else None
        found = sum(
            1 for snippet in record.near_text
            if snippet in sig.near_text or (parent_text is not None and snippet in parent_text)
        )
        details["near_text"] = config.weight("near_text") * found / len(record.near_text)

    depth_diff = abs(sig.dom_depth - record.dom_depth)
    if depth_diff <= 2:
        details["depth"] = config.weight("depth") * (1.0 - depth_diff * 0.2)

    pos_diff = abs(sig.index_among_same_tag - record.index_among_same_tag)
    details["position"] = config.weight("position") * max(0.0, 1.0 - pos_diff * 0.5)

    details = {k: v for k, v in details.items() if v > 0}
    return sum(details.values()), details


def locate_all_nodes_by_json(
    root: Optional[INode],
    record: RecordLike,
    limit: Optional[int] = 10,
    config: LocatorConfig = DEFAULT_CONFIG,
) -> List[Match]:
    """
    Rank every candidate node against record.

    @param root Any node of the tree to search, or None for an empty tree
    @param record LocatorRecord or its JSON-shaped dict
    @param limit Maximum number of matches (None for all)
    @return Matches with score > 0, best first, ties in document order
    @throws RecordFormatError when record is a malformed dict
    """
    rec = _coerce_record(record)
    if root is None or not _has_usable_signals(rec):
        return []
    if limit is not None and limit <= 0:
        return []

    matches: List[Match] = []
    for node in iter_elements(root_of(root)):
        if rec.tag and node.tag != rec.tag:
            continue
        score, details = score_candidate(node, rec, config)
        if score > 0:
            matches.append(Match(node=node, score=score, details=details))

    # stable sort keeps document order among equal scores
    matches.sort(key=lambda m: -m.score)
    log.debug(f"Ranked {len(matches)} candidate(s) for <{rec.tag}>")
    return matches if limit is None else matches[:limit]
