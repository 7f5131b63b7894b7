# locator_core/cli.py
"""
@file cli.py
@brief Command-line interface for locator-core.

    locator-core xpath   --html page.html --select "//h1"
    locator-core record  --html page.html --select "//button[1]" --out rec.json
    locator-core locate  --html changed.html --record rec.json [--all --limit 5]
    locator-core signals --html page.html --select "//h1"
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from .config import DEFAULT_CONFIG, LocatorConfig, load_config
from .exceptions import LocatorError
from .interfaces import INode
from .logconfig import get_logger, setup_logging
from .lxml_adapter import parse_html_file, select
from .record import LocatorRecord, generate_locator_json
from .relocate import explain_locate, locate_all_nodes_by_json
from .signals import extract_signals, format_node_info, signals_to_dict
from .xpath import generate_xpath

log = get_logger("cli")

EXIT_OK = 0
EXIT_INPUT_ERROR = 1
EXIT_NOT_FOUND = 2


def _load_config(args: argparse.Namespace) -> LocatorConfig:
    if not args.config:
        return DEFAULT_CONFIG
    return load_config(args.config)


def _select_node(args: argparse.Namespace) -> INode:
    root = parse_html_file(args.html)
    node = select(root, args.select)
    if node is None:
        raise LocatorError(f"selector matched no element: {args.select}")
    return node


def _load_record(path: str) -> LocatorRecord:
    path = os.path.abspath(path)
    if not os.path.exists(path):
        raise LocatorError(f"Record file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        return LocatorRecord.from_json(f.read())


def _write_or_print(text: str, out: Optional[str]) -> None:
    if not out:
        print(text)
        return
    out_dir = os.path.dirname(os.path.abspath(out))
    os.makedirs(out_dir, exist_ok=True)
    with open(out, "w", encoding="utf-8") as f:
        f.write(text + "\n")
    print(f"+ Record written: {out}")


def _cmd_xpath(args: argparse.Namespace, config: LocatorConfig) -> int:
    node = _select_node(args)
    xpath = generate_xpath(node, config)
    if xpath is None:
        print(f"No stable path for {format_node_info(node)}", file=sys.stderr)
        return EXIT_NOT_FOUND
    print(xpath)
    return EXIT_OK


def _cmd_record(args: argparse.Namespace, config: LocatorConfig) -> int:
    node = _select_node(args)
    record = generate_locator_json(node, config)
    _write_or_print(record.to_json(), args.out)
    return EXIT_OK


def _cmd_signals(args: argparse.Namespace, config: LocatorConfig) -> int:
    node = _select_node(args)
    print(json.dumps(signals_to_dict(extract_signals(node, config)), indent=2, ensure_ascii=False))
    return EXIT_OK


def _cmd_locate(args: argparse.Namespace, config: LocatorConfig) -> int:
    record = _load_record(args.record)
    root = parse_html_file(args.html)

    if args.all:
        matches = locate_all_nodes_by_json(root, record, limit=args.limit, config=config)
        if not matches:
            print("No candidates found", file=sys.stderr)
            return EXIT_NOT_FOUND
        for i, m in enumerate(matches, start=1):
            breakdown = ", ".join(f"{k}={v:.1f}" for k, v in m.details.items())
            print(f"{i}. score={m.score:.1f} {format_node_info(m.node, 'Match')}")
            print(f"   [{breakdown}]")
        return EXIT_OK

    resolution = explain_locate(root, record, config)
    if args.verbose:
        for a in resolution.attempts:
            print(f"  - {a.kind}: {a.error}")
    if not resolution.found:
        print(format_node_info(None), file=sys.stderr)
        return EXIT_NOT_FOUND
    print(format_node_info(resolution.node, "Located"))
    print(f"  strategy: {resolution.strategy}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="locator-core",
        description="locator-core - describe DOM nodes and find them again after the page changes",
    )
    p.add_argument("--config", "-c", default=None, help="Path to a YAML config file")
    p.add_argument("--verbose", action="store_true", help="Debug logging and strategy attempts")
    p.add_argument("--log-file", default=None, help="Also write debug logs to this file")
    sub = p.add_subparsers(dest="cmd", required=True)

    # -------------------------
    # xpath
    # -------------------------
    xp = sub.add_parser("xpath", help="Print a verified structural path for one element")
    xp.add_argument("--html", required=True, help="Path to an HTML file")
    xp.add_argument("--select", "-s", required=True, help="lxml XPath query picking the element")

    # -------------------------
    # record
    # -------------------------
    recp = sub.add_parser("record", help="Build a Locator Record (JSON) for one element")
    recp.add_argument("--html", required=True, help="Path to an HTML file")
    recp.add_argument("--select", "-s", required=True, help="lxml XPath query picking the element")
    recp.add_argument("--out", "-o", default=None, help="Write the record here instead of stdout")

    # -------------------------
    # locate
    # -------------------------
    locp = sub.add_parser("locate", help="Find the element a Locator Record describes")
    locp.add_argument("--html", required=True, help="Path to an HTML file")
    locp.add_argument("--record", "-r", required=True, help="Path to a Locator Record JSON file")
    locp.add_argument("--all", action="store_true", help="Print ranked candidates instead of the single best")
    locp.add_argument("--limit", type=int, default=10, help="Maximum candidates with --all (default: 10)")

    # -------------------------
    # signals
    # -------------------------
    sigp = sub.add_parser("signals", help="Print the extracted signals of one element as JSON")
    sigp.add_argument("--html", required=True, help="Path to an HTML file")
    sigp.add_argument("--select", "-s", required=True, help="lxml XPath query picking the element")

    return p


COMMANDS = {
    "xpath": _cmd_xpath,
    "record": _cmd_record,
    "locate": _cmd_locate,
    "signals": _cmd_signals,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    argv = argv if argv is not None else sys.argv[1:]
    args = build_parser().parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.WARNING, args.log_file)
    log.debug(f"Command started: {args.cmd}")

    try:
        config = _load_config(args)
        return COMMANDS[args.cmd](args, config)
    except (LocatorError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR


if __name__ == "__main__":
    sys.exit(main())
