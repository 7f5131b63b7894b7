# locator_core/tree.py
"""
@file tree.py
@brief Tree traversal helpers and an in-memory INode implementation.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Mapping, Optional, Union

from .interfaces import INode


Content = Union["TreeNode", str]


def root_of(node: INode) -> INode:
    """Walk parents up to the outermost element."""
    cur = node
    while True:
        parent = cur.parent
        if parent is None:
            return cur
        cur = parent


def ancestors(node: INode) -> Iterator[INode]:
    """Yield ancestors nearest-first."""
    cur = node.parent
    while cur is not None:
        yield cur
        cur = cur.parent


def iter_elements(root: INode) -> Iterator[INode]:
    """Yield root and all descendant elements in document (pre-)order."""
    stack: List[INode] = [root]
    while stack:
        node = stack.pop()
        yield node
        kids = node.children()
        stack.extend(reversed(kids))


def document_order(root: INode) -> Dict[INode, int]:
    """Map every element under root to its document-order index."""
    return {node: i for i, node in enumerate(iter_elements(root))}


class TreeNode(INode):
    """
    Mutable in-memory element.

    Contents are an ordered mix of text strings and child elements, so
    direct text and descendant text can be told apart.

    Example:
        >>> body = TreeNode("body")
        >>> btn = body.append(TreeNode("button", {"data-testid": "ok"}, ["OK"]))
        >>> btn.own_text()
        'OK'
    """

    def __init__(
        self,
        tag: str,
        attributes: Optional[Mapping[str, str]] = None,
        contents: Optional[List[Content]] = None,
    ):
        self._tag = tag.lower()
        self._attributes: Dict[str, str] = {k.lower(): str(v) for k, v in (attributes or {}).items()}
        self._contents: List[Content] = []
        self._parent: Optional[TreeNode] = None
        for item in contents or []:
            self.append(item)

    def __repr__(self) -> str:
        attrs = " ".join(f'{k}="{v}"' for k, v in self._attributes.items())
        return f"<TreeNode {self._tag}{' ' + attrs if attrs else ''}>"

    # -------------------------
    # INode
    # -------------------------

    @property
    def tag(self) -> str:
        return self._tag

    @property
    def parent(self) -> Optional[TreeNode]:
        return self._parent

    def get_attribute(self, name: str) -> Optional[str]:
        return self._attributes.get(name.lower())

    def attribute_names(self) -> List[str]:
        return list(self._attributes.keys())

    def children(self) -> List[TreeNode]:
        return [c for c in self._contents if isinstance(c, TreeNode)]

    def own_text(self) -> str:
        return "".join(c for c in self._contents if isinstance(c, str))

    def text_content(self) -> str:
        parts: List[str] = []
        for c in self._contents:
            if isinstance(c, str):
                parts.append(c)
            else:
                parts.append(c.text_content())
        return "".join(parts)

    # -------------------------
    # Mutation (host side only; the engine never calls these)
    # -------------------------

    def append(self, item: Content) -> Content:
        return self.insert(len(self._contents), item)

    def insert(self, index: int, item: Content) -> Content:
        """Insert text or an element at a position in the contents list."""
        if isinstance(item, TreeNode):
            if item._parent is not None:
                item._parent.remove(item)
            item._parent = self
        elif not isinstance(item, str):
            raise TypeError(f"TreeNode contents must be TreeNode or str, got: {type(item).__name__}")
        self._contents.insert(index, item)
        return item

    def remove(self, child: TreeNode) -> None:
        for i, c in enumerate(self._contents):
            if c is child:
                del self._contents[i]
                child._parent = None
                return
        raise ValueError(f"{child!r} is not a child of {self!r}")

    def set_text(self, text: str) -> None:
        """Replace all direct text with a single leading string."""
        self._contents = [c for c in self._contents if isinstance(c, TreeNode)]
        if text:
            self._contents.insert(0, text)

    def set_attribute(self, name: str, value: str) -> None:
        self._attributes[name.lower()] = str(value)

    def remove_attribute(self, name: str) -> None:
        self._attributes.pop(name.lower(), None)


def element(tag: str, attributes: Optional[Mapping[str, str]] = None, *contents: Content) -> TreeNode:
    """Shorthand constructor for building trees in code."""
    return TreeNode(tag, attributes, list(contents))
