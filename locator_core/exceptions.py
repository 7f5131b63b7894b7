# locator_core/exceptions.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


class LocatorError(Exception):
    """Base exception for the locator engine."""


class ConfigError(LocatorError):
    """Raised when a YAML configuration file is invalid."""


class XPathSyntaxError(LocatorError):
    """Raised by the path parser when an expression cannot be parsed."""

    def __init__(self, expression: str, position: int, message: str):
        self.expression = expression
        self.position = position
        self.message = message
        super().__init__(self.__str__())

    def __str__(self) -> str:
        return f"XPathSyntaxError: {self.message} at position {self.position} in {self.expression!r}"


@dataclass
class LocatorAttempt:
    kind: str
    locator: Dict[str, Any]
    error: Optional[str] = None


class RecordFormatError(LocatorError):
    def __init__(
        self,
        message: str,
        errors: Optional[List[str]] = None,
        version: Optional[Any] = None,
    ):
        self.message = message
        self.errors = errors or []
        self.version = version
        super().__init__(self.__str__())

    def __str__(self) -> str:
        lines = [f"RecordFormatError: {self.message}"]
        if self.version is not None:
            lines[0] += f" (version={self.version!r})"
        for e in self.errors:
            lines.append(f"- {e}")
        return "\n".join(lines)
