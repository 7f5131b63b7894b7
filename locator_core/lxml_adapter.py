# locator_core/lxml_adapter.py
"""
@file lxml_adapter.py
@brief INode implementation over lxml.html documents.
"""

from __future__ import annotations

import os
from typing import List, Optional, Union

from lxml import etree, html

from .exceptions import LocatorError
from .interfaces import INode


class LxmlNode(INode):
    """
    Wrap one lxml element.

    Wrappers are cheap and created on demand; two wrappers of the same
    element compare equal.
    """

    __slots__ = ("element",)

    def __init__(self, element: etree._Element):
        self.element = element

    def __eq__(self, other: object) -> bool:
        return isinstance(other, LxmlNode) and other.element is self.element

    def __hash__(self) -> int:
        return hash(self.element)

    def __repr__(self) -> str:
        return f"<LxmlNode {self.tag}>"

    @property
    def tag(self) -> str:
        return str(self.element.tag).lower()

    @property
    def parent(self) -> Optional[LxmlNode]:
        p = self.element.getparent()
        return LxmlNode(p) if p is not None else None

    def get_attribute(self, name: str) -> Optional[str]:
        return self.element.get(name.lower())

    def attribute_names(self) -> List[str]:
        return [str(k) for k in self.element.attrib.keys()]

    def children(self) -> List[LxmlNode]:
        # comments and processing instructions carry a non-string tag
        return [LxmlNode(c) for c in self.element if isinstance(c.tag, str)]

    def own_text(self) -> str:
        parts = [self.element.text or ""]
        parts.extend(c.tail or "" for c in self.element)
        return "".join(parts)

    def text_content(self) -> str:
        return self.element.text_content()


def parse_html(markup: Union[str, bytes]) -> LxmlNode:
    """Parse an HTML document and return its root element."""
    try:
        root = html.document_fromstring(markup)
    except (etree.ParserError, ValueError) as e:
        raise LocatorError(f"Cannot parse HTML: {e}") from e
    return LxmlNode(root)


def parse_html_file(path: str) -> LxmlNode:
    path = os.path.abspath(path)
    if not os.path.exists(path):
        raise LocatorError(f"HTML file not found: {path}")
    with open(path, "rb") as f:
        return parse_html(f.read())


def select(root: INode, expression: str) -> Optional[LxmlNode]:
    """
    Run a full lxml XPath query and return the first element it yields.

    Used to pick nodes for description; relocation itself never relies on it.
    """
    if not isinstance(root, LxmlNode):
        raise LocatorError("select() needs a node from parse_html()")
    try:
        result = root.element.xpath(expression)
    except etree.XPathError as e:
        raise LocatorError(f"Invalid selector {expression!r}: {e}") from e
    if not isinstance(result, list):
        return None
    for item in result:
        if isinstance(item, etree._Element) and isinstance(item.tag, str):
            return LxmlNode(item)
    return None
