# locator_core/xpath.py
"""
@file xpath.py
@brief Structural path synthesis and evaluation.

generate_xpath() walks from a node toward the root and emits, per level,
the most stable segment that is unique among the node's same-tag siblings:

    1) tag[@id='...']                 document-unique id, ends the ascent
    2) tag[contains(@class, '...')]   stable class (or class combination)
    3) tag[@data-x='...']             identity attribute
    4) tag[n] / tag                   position among same-tag siblings

The document root and its direct children (html/body) are never emitted;
the joined path starts with '//'. Paths made only of positional segments
are rejected, and every path is re-evaluated before it is returned.

find_element_by_xpath() evaluates the XPath 1.0 subset the synthesizer
emits plus the usual hand-written forms:

    /a/b   //a//b   *   [n]   [last()]   [@x]   [@x='v']
    [contains(@x, 'v')]   [starts-with(@x, 'v')]   [text()='v']
    [normalize-space()='v']   [... and ...]   concat('a', "'", 'b')
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .config import DEFAULT_CONFIG, LocatorConfig
from .exceptions import XPathSyntaxError
from .interfaces import INode
from .signals import (
    extract_identity_attributes,
    extract_stable_classes,
    format_node_info,
    is_hash_class,
    normalize_text,
    same_tag_siblings,
    dom_depth,
)
from .tree import document_order, iter_elements, root_of

log = logging.getLogger("locator_core.xpath")

# html and body
WRAPPER_LEVELS = 2


def xpath_literal(value: str) -> str:
    """Quote a string as an XPath 1.0 literal."""
    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    parts = value.split("'")
    pieces: List[str] = []
    for i, part in enumerate(parts):
        if part:
            pieces.append(f"'{part}'")
        if i < len(parts) - 1:
            pieces.append('"\'"')
    return "concat(" + ", ".join(pieces) + ")"


# =========================================================
# Predicates
# =========================================================

@dataclass(frozen=True)
class Operand:
    """Value source inside a predicate: @attr, text(), normalize-space(...) or '.'"""
    kind: str
    name: Optional[str] = None
    normalize: bool = False

    def value(self, node: INode) -> Optional[str]:
        if self.kind == "attr":
            raw = node.get_attribute(self.name or "")
        elif self.kind == "text":
            raw = node.own_text()
            # text() comparisons ignore surrounding layout whitespace
            raw = raw.strip() if raw else raw
        else:
            raw = node.text_content()
        if raw is None:
            return None
        if self.normalize:
            return normalize_text(raw) or ""
        return raw

    def __str__(self) -> str:
        if self.kind == "attr":
            base = f"@{self.name}"
        elif self.kind == "text":
            base = "text()"
        else:
            base = "."
        if self.normalize:
            return "normalize-space()" if self.kind == "string" else f"normalize-space({base})"
        return base


class Predicate(ABC):
    """Bracketed step filter applied to the per-parent candidate list."""

    @abstractmethod
    def filter(self, nodes: List[INode]) -> List[INode]:
        pass


class Condition(Predicate):
    """Predicate decided node by node."""

    def filter(self, nodes: List[INode]) -> List[INode]:
        return [n for n in nodes if self.matches(n)]

    @abstractmethod
    def matches(self, node: INode) -> bool:
        pass


@dataclass(frozen=True)
class Position(Predicate):
    index: int

    def filter(self, nodes: List[INode]) -> List[INode]:
        if 1 <= self.index <= len(nodes):
            return [nodes[self.index - 1]]
        return []

    def __str__(self) -> str:
        return str(self.index)


@dataclass(frozen=True)
class Last(Predicate):
    def filter(self, nodes: List[INode]) -> List[INode]:
        return nodes[-1:]

    def __str__(self) -> str:
        return "last()"


@dataclass(frozen=True)
class Exists(Condition):
    operand: Operand

    def matches(self, node: INode) -> bool:
        return self.operand.value(node) is not None

    def __str__(self) -> str:
        return str(self.operand)


@dataclass(frozen=True)
class Equals(Condition):
    operand: Operand
    literal: str

    def matches(self, node: INode) -> bool:
        return self.operand.value(node) == self.literal

    def __str__(self) -> str:
        return f"{self.operand}={xpath_literal(self.literal)}"


@dataclass(frozen=True)
class Contains(Condition):
    operand: Operand
    literal: str

    def matches(self, node: INode) -> bool:
        value = self.operand.value(node)
        return value is not None and self.literal in value

    def __str__(self) -> str:
        return f"contains({self.operand}, {xpath_literal(self.literal)})"


@dataclass(frozen=True)
class StartsWith(Condition):
    operand: Operand
    literal: str

    def matches(self, node: INode) -> bool:
        value = self.operand.value(node)
        return value is not None and value.startswith(self.literal)

    def __str__(self) -> str:
        return f"starts-with({self.operand}, {xpath_literal(self.literal)})"


@dataclass(frozen=True)
class And(Condition):
    parts: Tuple[Condition, ...]

    def matches(self, node: INode) -> bool:
        return all(p.matches(node) for p in self.parts)

    def __str__(self) -> str:
        return " and ".join(str(p) for p in self.parts)


@dataclass(frozen=True)
class Step:
    descendant: bool
    name: str
    predicates: Tuple[Predicate, ...] = ()

    def matches_name(self, node: INode) -> bool:
        return self.name == "*" or node.tag == self.name

    def segment(self) -> str:
        return self.name + "".join(f"[{p}]" for p in self.predicates)


# =========================================================
# Parser
# =========================================================

_TOKEN_RE = re.compile(
    r"""\s*(?:
        (?P<dslash>//)
      | (?P<slash>/)
      | (?P<lbrack>\[)
      | (?P<rbrack>\])
      | (?P<lparen>\()
      | (?P<rparen>\))
      | (?P<at>@)
      | (?P<comma>,)
      | (?P<eq>=)
      | (?P<star>\*)
      | (?P<number>\d+)
      | (?P<string>'[^']*'|"[^"]*")
      | (?P<dot>\.)
      | (?P<name>[A-Za-z_][\w.-]*(?::[A-Za-z_][\w.-]*)?)
    )""",
    re.VERBOSE,
)


def _tokenize(expression: str) -> List[Tuple[str, str, int]]:
    tokens: List[Tuple[str, str, int]] = []
    pos = 0
    end = len(expression.rstrip())
    while pos < end:
        m = _TOKEN_RE.match(expression, pos)
        if not m or m.end() == pos:
            raise XPathSyntaxError(expression, pos, f"unexpected character {expression[pos]!r}")
        kind = m.lastgroup or ""
        tokens.append((kind, m.group(kind), m.start(kind)))
        pos = m.end()
    return tokens


class _Parser:
    def __init__(self, expression: str):
        self.expression = expression
        self.tokens = _tokenize(expression)
        self.i = 0

    # -------------------------
    # token helpers
    # -------------------------

    def _peek(self, offset: int = 0) -> Tuple[str, str, int]:
        j = self.i + offset
        if j < len(self.tokens):
            return self.tokens[j]
        return ("eof", "", len(self.expression))

    def _error(self, message: str) -> XPathSyntaxError:
        return XPathSyntaxError(self.expression, self._peek()[2], message)

    def _take(self, kind: str, value: Optional[str] = None) -> str:
        k, v, _ = self._peek()
        if k != kind or (value is not None and v != value):
            want = value or kind
            raise self._error(f"expected {want!r}, got {v or k!r}")
        self.i += 1
        return v

    def _accept(self, kind: str, value: Optional[str] = None) -> bool:
        k, v, _ = self._peek()
        if k == kind and (value is None or v == value):
            self.i += 1
            return True
        return False

    # -------------------------
    # grammar
    # -------------------------

    def parse(self) -> List[Step]:
        if self._peek()[0] not in ("slash", "dslash"):
            raise self._error("path must start with '/' or '//'")
        steps: List[Step] = []
        while self._peek()[0] in ("slash", "dslash"):
            descendant = self._take(self._peek()[0]) == "//"
            steps.append(self._step(descendant))
        if self._peek()[0] != "eof":
            raise self._error(f"unexpected token {self._peek()[1]!r}")
        return steps

    def _step(self, descendant: bool) -> Step:
        if self._accept("star"):
            name = "*"
        else:
            name = self._take("name").lower()
        preds: List[Predicate] = []
        while self._accept("lbrack"):
            preds.append(self._predicate())
            self._take("rbrack")
        return Step(descendant, name, tuple(preds))

    def _predicate(self) -> Predicate:
        kind, value, _ = self._peek()
        if kind == "number" and self._peek(1)[0] == "rbrack":
            self.i += 1
            index = int(value)
            if index < 1:
                raise self._error("position must be >= 1")
            return Position(index)
        if kind == "name" and value == "last" and self._peek(1)[0] == "lparen":
            self.i += 1
            self._take("lparen")
            self._take("rparen")
            return Last()
        parts = [self._condition()]
        while self._accept("name", "and"):
            parts.append(self._condition())
        return parts[0] if len(parts) == 1 else And(tuple(parts))

    def _condition(self) -> Condition:
        kind, value, _ = self._peek()
        if kind == "lparen":
            self.i += 1
            start = self._peek()[2]
            inner = self._predicate()
            if not isinstance(inner, Condition):
                raise XPathSyntaxError(self.expression, start, "positional predicate inside a condition")
            self._take("rparen")
            return inner
        if kind == "name" and value in ("contains", "starts-with") and self._peek(1)[0] == "lparen":
            self.i += 1
            self._take("lparen")
            operand = self._operand()
            self._take("comma")
            literal = self._literal()
            self._take("rparen")
            return Contains(operand, literal) if value == "contains" else StartsWith(operand, literal)
        operand = self._operand()
        if self._accept("eq"):
            return Equals(operand, self._literal())
        if operand.kind != "attr":
            raise self._error("expected '=' after text operand")
        return Exists(operand)

    def _operand(self) -> Operand:
        if self._accept("at"):
            return Operand("attr", self._take("name").lower())
        if self._accept("dot"):
            return Operand("string")
        kind, value, _ = self._peek()
        if kind == "name" and value == "text":
            self.i += 1
            self._take("lparen")
            self._take("rparen")
            return Operand("text")
        if kind == "name" and value == "normalize-space":
            self.i += 1
            self._take("lparen")
            if self._accept("rparen"):
                return Operand("string", normalize=True)
            inner = self._operand()
            self._take("rparen")
            return Operand(inner.kind, inner.name, normalize=True)
        raise self._error(f"expected operand, got {value or kind!r}")

    def _literal(self) -> str:
        kind, value, _ = self._peek()
        if kind == "string":
            self.i += 1
            return value[1:-1]
        if kind == "name" and value == "concat":
            self.i += 1
            self._take("lparen")
            pieces = [self._take("string")[1:-1]]
            while self._accept("comma"):
                pieces.append(self._take("string")[1:-1])
            self._take("rparen")
            return "".join(pieces)
        raise self._error(f"expected string literal, got {value or kind!r}")


def parse_xpath(expression: str) -> List[Step]:
    """
    Parse a path expression into steps.

    @throws XPathSyntaxError when the expression is outside the supported subset
    """
    if not isinstance(expression, str) or not expression.strip():
        raise XPathSyntaxError(str(expression), 0, "empty expression")
    return _Parser(expression.strip()).parse()


# =========================================================
# Evaluator
# =========================================================

class _Document:
    """Virtual document node above the outermost element."""


_DOCUMENT = _Document()


def _evaluate(top: INode, steps: Sequence[Step]) -> List[INode]:
    order = document_order(top)
    context: List[object] = [_DOCUMENT]

    def kids(base: object) -> List[INode]:
        return [top] if base is _DOCUMENT else base.children()  # type: ignore[union-attr]

    def self_and_descendants(base: object) -> Iterable[object]:
        if base is _DOCUMENT:
            yield _DOCUMENT
            yield from iter_elements(top)
        else:
            yield from iter_elements(base)  # type: ignore[arg-type]

    for step in steps:
        bases: List[object] = []
        seen_bases = set()
        for ctx in context:
            for base in (self_and_descendants(ctx) if step.descendant else [ctx]):
                if base in seen_bases:
                    continue
                seen_bases.add(base)
                bases.append(base)

        found: Dict[INode, None] = {}
        for base in bases:
            matched = [k for k in kids(base) if step.matches_name(k)]
            for pred in step.predicates:
                matched = pred.filter(matched)
                if not matched:
                    break
            for m in matched:
                found.setdefault(m, None)

        context = sorted(found, key=lambda n: order.get(n, len(order)))
        if not context:
            return []

    return context  # type: ignore[return-value]


def find_elements_by_xpath(root: INode, expression: str) -> List[INode]:
    """All nodes matching expression, in document order; [] on syntax errors."""
    try:
        steps = parse_xpath(expression)
    except XPathSyntaxError as e:
        log.warning(f"XPath evaluation failed: {e}")
        return []
    return _evaluate(root_of(root), steps)


def find_element_by_xpath(root: INode, expression: str) -> Optional[INode]:
    """
    Resolve a path expression to one node.

    @param root Any node of the tree to search (the whole tree is searched)
    @param expression Path expression
    @return First match in document order, or None
    """
    matches = find_elements_by_xpath(root, expression)
    return matches[0] if matches else None


# =========================================================
# Synthesizer
# =========================================================

def _unique_among(node: INode, siblings: Sequence[INode], pred: Condition) -> bool:
    return not any(pred.matches(s) for s in siblings if s != node)


def _segment_for(
    node: INode,
    id_counts: Counter,
    config: LocatorConfig,
) -> Tuple[str, str]:
    """Return (segment, kind) for one level, kind in id/class/attribute/ordinal."""
    tag = node.tag

    node_id = (node.get_attribute("id") or "").strip()
    if node_id and not is_hash_class(node_id, config) and id_counts.get(node_id) == 1:
        step = Step(False, tag, (Equals(Operand("attr", "id"), node_id),))
        return step.segment(), "id"

    siblings = same_tag_siblings(node)

    classes = extract_stable_classes(node, config)
    class_preds: List[Condition] = [Contains(Operand("attr", "class"), c) for c in classes]
    if len(class_preds) > 1:
        class_preds.append(And(tuple(class_preds)))
    for pred in class_preds:
        if _unique_among(node, siblings, pred):
            return Step(False, tag, (pred,)).segment(), "class"

    attrs = extract_identity_attributes(node, config)
    prefix = config.data_attribute_prefix
    ordered = [k for k in attrs if prefix and k.startswith(prefix)] + [
        k for k in attrs if not (prefix and k.startswith(prefix))
    ]
    for name in ordered:
        if is_hash_class(attrs[name], config):
            continue
        pred = Equals(Operand("attr", name), attrs[name])
        if _unique_among(node, siblings, pred):
            return Step(False, tag, (pred,)).segment(), "attribute"

    if len(siblings) <= 1:
        return tag, "ordinal"
    index = next((i for i, s in enumerate(siblings) if s == node), 0)
    return Step(False, tag, (Position(index + 1),)).segment(), "ordinal"


def validate_xpath(xpath: str, node: INode) -> bool:
    """True when xpath resolves to exactly this node."""
    found = find_element_by_xpath(node, xpath)
    if found is not None and found == node:
        return True
    log.warning(
        "XPath validation failed\n"
        f"XPath: {xpath}\n"
        f"{format_node_info(node, 'Expected')}\n"
        f"{format_node_info(found, 'Found')}"
    )
    return False


def generate_xpath(node: INode, config: LocatorConfig = DEFAULT_CONFIG) -> Optional[str]:
    """
    Synthesize a structural path that resolves back to node.

    @param node Target element
    @param config Locator configuration
    @return Path expression, or None when no stable, verified path exists
    """
    try:
        depth = dom_depth(node)
        if depth < WRAPPER_LEVELS:
            log.debug(f"No path for wrapper-level node: {format_node_info(node)}")
            return None

        top = root_of(node)
        id_counts: Counter = Counter()
        for el in iter_elements(top):
            el_id = (el.get_attribute("id") or "").strip()
            if el_id:
                id_counts[el_id] += 1

        segments: List[str] = []
        has_feature = False
        cur: Optional[INode] = node
        while cur is not None and depth >= WRAPPER_LEVELS:
            segment, kind = _segment_for(cur, id_counts, config)
            segments.append(segment)
            if kind != "ordinal":
                has_feature = True
            if kind == "id":
                break
            cur = cur.parent
            depth -= 1
    except Exception as e:
        log.warning(f"XPath synthesis error: {type(e).__name__}: {e}")
        return None

    if not has_feature:
        log.debug(f"No distinguishing feature on any level: {format_node_info(node)}")
        return None

    xpath = "//" + "/".join(reversed(segments))
    if not validate_xpath(xpath, node):
        return None
    return xpath
