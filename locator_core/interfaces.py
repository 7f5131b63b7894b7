"""
@file interfaces.py
@brief Abstract node interface the locator engine runs against.

The engine never touches a concrete document model directly. Any tree that
can answer the questions below (an in-memory tree, an lxml document, a
browser DOM bridged over a protocol) can be described and searched.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional


class INode(ABC):
    """
    Abstract element node.

    Implementations wrap one element of a live tree. Two wrappers of the
    same underlying element must compare equal and hash alike, because
    the engine keys document order and identity checks on them.
    """

    @property
    @abstractmethod
    def tag(self) -> str:
        """
        Element tag name.

        Returns:
            Lower-cased tag name (e.g. "button")
        """
        pass

    @property
    @abstractmethod
    def parent(self) -> Optional["INode"]:
        """
        Parent element.

        Returns:
            Parent element, or None for the outermost element
        """
        pass

    @abstractmethod
    def get_attribute(self, name: str) -> Optional[str]:
        """
        Read an attribute value.

        Args:
            name: Attribute name (lower-case)

        Returns:
            Raw attribute value, or None when the attribute is absent
        """
        pass

    @abstractmethod
    def attribute_names(self) -> List[str]:
        """
        List attribute names in source order.

        Returns:
            Attribute names present on the element
        """
        pass

    @abstractmethod
    def children(self) -> List["INode"]:
        """
        List element children in document order.

        Text, comments and other non-element nodes are not included.
        """
        pass

    @abstractmethod
    def own_text(self) -> str:
        """
        Concatenated text of the element's direct text nodes.

        Text belonging to descendant elements is excluded.
        """
        pass

    @abstractmethod
    def text_content(self) -> str:
        """Concatenated text of the element and all of its descendants."""
        pass
