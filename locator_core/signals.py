# locator_core/signals.py
"""
Signal extraction.

Reads the identity-relevant features of one element: identity attributes,
role, direct text, stable classes, near-text context, depth and sibling
position. Extraction only reads upward and sideways from the given node,
never searches the tree, and never raises; a signal that cannot be read is
simply left out.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

from .config import DEFAULT_CONFIG, LocatorConfig, compile_patterns
from .interfaces import INode

T = TypeVar("T")

_WS = re.compile(r"\s+")

IMPLICIT_ROLES: Dict[str, str] = {
    "button": "button",
    "nav": "navigation",
    "main": "main",
    "header": "banner",
    "footer": "contentinfo",
    "aside": "complementary",
    "form": "form",
    "ul": "list",
    "ol": "list",
    "li": "listitem",
    "table": "table",
    "tr": "row",
    "td": "cell",
    "th": "columnheader",
    "select": "combobox",
    "textarea": "textbox",
    "dialog": "dialog",
    "img": "img",
    "h1": "heading",
    "h2": "heading",
    "h3": "heading",
    "h4": "heading",
    "h5": "heading",
    "h6": "heading",
}

INPUT_ROLES: Dict[str, str] = {
    "button": "button",
    "submit": "button",
    "reset": "button",
    "checkbox": "checkbox",
    "radio": "radio",
    "range": "slider",
    "search": "searchbox",
    "email": "textbox",
    "tel": "textbox",
    "text": "textbox",
    "url": "textbox",
}


def _safe(fn: Callable[[], T], default: T) -> T:
    try:
        return fn()
    except Exception:
        return default


def normalize_text(value: Optional[str], limit: Optional[int] = None) -> Optional[str]:
    """Trim and collapse whitespace; empty results become None."""
    if not value:
        return None
    text = _WS.sub(" ", value).strip()
    if not text:
        return None
    if limit is not None and len(text) > limit:
        text = text[:limit].rstrip()
    return text


# =========================================================
# Hash detection
# =========================================================

def is_hash_like(value: Optional[str], config: LocatorConfig = DEFAULT_CONFIG) -> bool:
    """True when a value looks generated (long hex runs, UUIDs, ...)."""
    if not value or not isinstance(value, str):
        return False
    trimmed = value.strip()
    if not trimmed:
        return False
    return any(rx.search(trimmed) for rx in compile_patterns(config.hash_patterns))


def is_hash_class(token: Optional[str], config: LocatorConfig = DEFAULT_CONFIG) -> bool:
    """True when a class token looks like a build-generated class name."""
    if not token:
        return False
    if is_hash_like(token, config):
        return True
    return any(rx.search(token) for rx in compile_patterns(config.hash_class_patterns))


# =========================================================
# Individual signals
# =========================================================

def class_tokens(node: INode) -> List[str]:
    raw = _safe(lambda: node.get_attribute("class"), None) or ""
    return [c for c in raw.split() if c]


def extract_stable_classes(node: INode, config: LocatorConfig = DEFAULT_CONFIG) -> List[str]:
    """Class tokens with hash-like ones removed, in source order, deduplicated."""
    out: List[str] = []
    for token in class_tokens(node):
        if token in out or is_hash_class(token, config):
            continue
        out.append(token)
    return out


def extract_identity_attributes(node: INode, config: LocatorConfig = DEFAULT_CONFIG) -> Dict[str, str]:
    """
    Identity-bearing attributes: the allow-list in priority order, then any
    other data-* attribute in source order. Empty values are dropped, and so
    are hash-like values of anything but a strong attribute.
    """
    attrs: Dict[str, str] = {}

    for name in config.identity_attributes:
        value = _safe(lambda: node.get_attribute(name), None)
        if isinstance(value, str):
            trimmed = value.strip()
            if trimmed and (name in config.strong_attributes or not is_hash_like(trimmed, config)):
                attrs[name] = trimmed

    prefix = config.data_attribute_prefix
    if prefix:
        for name in _safe(node.attribute_names, []):
            lname = name.lower()
            if not lname.startswith(prefix) or lname in attrs:
                continue
            value = (_safe(lambda: node.get_attribute(name), None) or "").strip()
            if value and (lname in config.strong_attributes or not is_hash_like(value, config)):
                attrs[lname] = value

    return attrs


def extract_role(node: INode, config: LocatorConfig = DEFAULT_CONFIG) -> Optional[str]:
    declared = (_safe(lambda: node.get_attribute("role"), None) or "").strip()
    if declared:
        # role may list fallbacks ("switch checkbox"); the first one wins
        return declared.split()[0].lower()
    if not config.infer_implicit_roles:
        return None
    return implicit_role(node)


def implicit_role(node: INode) -> Optional[str]:
    tag = _safe(lambda: node.tag, "")
    if tag == "a" or tag == "area":
        return "link" if _safe(lambda: node.get_attribute("href"), None) is not None else None
    if tag == "input":
        itype = (_safe(lambda: node.get_attribute("type"), None) or "text").lower()
        return INPUT_ROLES.get(itype)
    return IMPLICIT_ROLES.get(tag)


def extract_text(node: INode, config: LocatorConfig = DEFAULT_CONFIG) -> Optional[str]:
    """Direct text of the node, normalized and truncated."""
    return normalize_text(_safe(node.own_text, ""), config.text_max_length)


def _context_text(node: INode) -> Optional[str]:
    return normalize_text(_safe(node.own_text, "")) or normalize_text(_safe(node.text_content, ""))


def extract_near_text(node: INode, config: LocatorConfig = DEFAULT_CONFIG) -> List[str]:
    """
    Short text snippets from the parent chain and immediate siblings.

    Snippets longer than near_text_max_length are skipped rather than cut,
    since a truncated paragraph makes poor context.
    """
    limit = config.near_text_max_length
    max_count = config.near_text_max_count
    own = normalize_text(_safe(node.text_content, ""))
    snippets: List[str] = []

    def add(text: Optional[str]) -> None:
        if not text or len(text) > limit or text == own or text in snippets:
            return
        if len(snippets) < max_count:
            snippets.append(text)

    parent = _safe(lambda: node.parent, None)
    cur = parent
    level = 0
    while cur is not None and level < config.near_text_parent_levels:
        add(_context_text(cur))
        cur = _safe(lambda: cur.parent, None)
        level += 1

    if parent is not None:
        for sib in _safe(parent.children, []):
            if sib == node:
                continue
            add(normalize_text(_safe(sib.text_content, "")))

    return snippets


def dom_depth(node: INode) -> int:
    """Number of ancestor elements between node and the document root."""
    depth = 0
    cur = _safe(lambda: node.parent, None)
    while cur is not None:
        depth += 1
        cur = _safe(lambda: cur.parent, None)
    return depth


def same_tag_siblings(node: INode) -> List[INode]:
    parent = _safe(lambda: node.parent, None)
    if parent is None:
        return [node]
    tag = node.tag
    return [s for s in _safe(parent.children, []) if _safe(lambda: s.tag, None) == tag]


def index_among_same_tag(node: INode) -> int:
    """Zero-based rank among siblings sharing the node's tag."""
    for i, s in enumerate(same_tag_siblings(node)):
        if s == node:
            return i
    return 0


# =========================================================
# Aggregate
# =========================================================

@dataclass(frozen=True)
class NodeSignals:
    tag: str
    attributes: Dict[str, str] = field(default_factory=dict)
    role: Optional[str] = None
    text: Optional[str] = None
    stable_classes: Tuple[str, ...] = ()
    near_text: Tuple[str, ...] = ()
    dom_depth: int = 0
    index_among_same_tag: int = 0


def extract_signals(node: INode, config: LocatorConfig = DEFAULT_CONFIG) -> NodeSignals:
    return NodeSignals(
        tag=_safe(lambda: node.tag.lower(), ""),
        attributes=extract_identity_attributes(node, config),
        role=extract_role(node, config),
        text=extract_text(node, config),
        stable_classes=tuple(extract_stable_classes(node, config)),
        near_text=tuple(extract_near_text(node, config)),
        dom_depth=dom_depth(node),
        index_among_same_tag=index_among_same_tag(node),
    )


def format_node_info(node: Optional[INode], prefix: str = "Node") -> str:
    """One-line readable description of a node for logs and CLI output."""
    if node is None:
        return f"{prefix}: null (node not found)"

    parts = [f"{prefix}:", f"tag={_safe(lambda: node.tag, '?')}"]

    node_id = _safe(lambda: node.get_attribute("id"), None)
    if node_id:
        parts.append(f'id="{node_id}"')

    classes = class_tokens(node)
    if classes:
        shown = " ".join(classes[:3])
        if len(classes) > 3:
            shown += f" (+{len(classes) - 3} more)"
        parts.append(f'class="{shown}"')

    for name in ("data-testid", "data-id", "aria-label", "role"):
        value = _safe(lambda: node.get_attribute(name), None)
        if value:
            parts.append(f'{name}="{value}"')

    text = normalize_text(_safe(node.own_text, ""), 40)
    if text:
        parts.append(f"text={text!r}")

    return " ".join(parts)


def signals_to_dict(signals: NodeSignals) -> Dict[str, Any]:
    return {
        "tag": signals.tag,
        "attributes": dict(signals.attributes),
        "role": signals.role,
        "text": signals.text,
        "stable_classes": list(signals.stable_classes),
        "near_text": list(signals.near_text),
        "dom_depth": signals.dom_depth,
        "index_among_same_tag": signals.index_among_same_tag,
    }
