# locator_core/__init__.py
"""
Locator Core - describe a document node and find it again later.

This package provides:
- Signals: identity-relevant features of one node
- XPath: verified structural path synthesis and a subset evaluator
- Record: portable Locator Record (JSON) with a stability tier
- Relocate: tiered single-best lookup and scored ranked lookup
- Interfaces: abstract node API, with in-memory and lxml implementations
"""

from locator_core.config import DEFAULT_CONFIG, LocatorConfig, load_config, parse_config
from locator_core.exceptions import (
    ConfigError,
    LocatorAttempt,
    LocatorError,
    RecordFormatError,
    XPathSyntaxError,
)
from locator_core.interfaces import INode
from locator_core.record import LocatorRecord, generate_locator_json, validate_record
from locator_core.relocate import (
    Match,
    Resolution,
    explain_locate,
    locate_all_nodes_by_json,
    locate_node_by_json,
)
from locator_core.signals import extract_signals, format_node_info, is_hash_class, is_hash_like
from locator_core.tree import TreeNode, element
from locator_core.xpath import find_element_by_xpath, find_elements_by_xpath, generate_xpath

__all__ = [
    "DEFAULT_CONFIG",
    "LocatorConfig",
    "load_config",
    "parse_config",
    "ConfigError",
    "LocatorAttempt",
    "LocatorError",
    "RecordFormatError",
    "XPathSyntaxError",
    "INode",
    "LocatorRecord",
    "generate_locator_json",
    "validate_record",
    "Match",
    "Resolution",
    "explain_locate",
    "locate_all_nodes_by_json",
    "locate_node_by_json",
    "extract_signals",
    "format_node_info",
    "is_hash_class",
    "is_hash_like",
    "TreeNode",
    "element",
    "find_element_by_xpath",
    "find_elements_by_xpath",
    "generate_xpath",
]

__version__ = "1.0.0"
