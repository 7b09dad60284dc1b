#!/usr/bin/env python3
"""
Structurray — compact field names for pseudo-arrays

Command-line interface for inspecting identifiers and store documents.

Usage:
    structurray encode <index>...            Show the identifier of each index
    structurray decode <identifier>...       Show the index of each identifier
    structurray names <count>                List field names for <count> slots
    structurray normalize <file.json>        Rewrite a document in index order
    structurray diff <before> <after>        Show the store update between two documents
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import textwrap
from pathlib import Path
from typing import Any, Optional

from structurray import codec
from structurray.array import Mode, PseudoArray
from structurray.errors import StructurrayError
from structurray.patch import plan_update


# ============================================================================
# Formatting helpers
# ============================================================================

class C:
    """ANSI colors."""
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    CYAN = "\033[36m"
    RESET = "\033[0m"

    @staticmethod
    def off():
        C.BOLD = C.DIM = C.RED = C.GREEN = C.YELLOW = C.CYAN = C.RESET = ""


def header(text: str) -> str:
    return f"\n{C.BOLD}{C.CYAN}{'─' * 60}{C.RESET}\n{C.BOLD}  {text}{C.RESET}\n{C.BOLD}{C.CYAN}{'─' * 60}{C.RESET}"


def ok(text: str) -> str:
    return f"  {C.GREEN}✓{C.RESET} {text}"


def fail(text: str) -> str:
    return f"  {C.RED}✗{C.RESET} {text}"


def load_document(path: str) -> dict[str, Any]:
    """Read a JSON object from `path`."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object, got {type(data).__name__}")
    return data


def dump_document(document: dict[str, Any]) -> str:
    return json.dumps(document, indent=2, ensure_ascii=False)


# ============================================================================
# Commands
# ============================================================================

def cmd_encode(args) -> int:
    """Print index -> identifier."""
    for index in args.indices:
        print(f"{index}\t{codec.encode(index)}")
    return 0


def cmd_decode(args) -> int:
    """Print identifier -> index. Invalid identifiers are reported, not fatal."""
    status = 0
    for identifier in args.identifiers:
        try:
            print(f"{identifier}\t{codec.decode(identifier)}")
        except StructurrayError as e:
            print(fail(str(e)), file=sys.stderr)
            status = 1
    return status


def cmd_names(args) -> int:
    """List consecutive field names."""
    for name in codec.identifiers(args.count, start=args.start):
        print(f"{args.prefix}{name}")
    return 0


def cmd_normalize(args) -> int:
    """Import a document, optionally compact it, write it back in index order."""
    document = load_document(args.file)
    mode = Mode.SPARSE if args.sparse or args.compact else Mode.DENSE
    arr = PseudoArray.from_mapping(document, mode=mode)

    renames: dict[str, str] = {}
    if args.compact:
        renames = arr.compact()

    text = dump_document(arr.to_dict())
    if not args.output:
        print(text)
        return 0

    Path(args.output).write_text(text + "\n", encoding="utf-8")
    print(header(f"NORMALIZE: {args.file}"))
    layout = "compacted" if args.compact else mode.value
    print(ok(f"{len(arr)} slot(s), mode={layout}"))
    if renames:
        print(f"  {C.YELLOW}Re-keyed {len(renames)} slot(s){C.RESET}")
        for old, new in list(renames.items())[:15]:
            print(f"    {C.DIM}{old} → {new}{C.RESET}")
        if len(renames) > 15:
            print(f"    {C.DIM}...and {len(renames) - 15} more{C.RESET}")
    print(ok(f"Written to {args.output}"))
    return 0


def cmd_diff(args) -> int:
    """Show the writes and deletes that turn BEFORE into AFTER."""
    plan = plan_update(load_document(args.before), load_document(args.after))

    if args.json:
        print(dump_document(plan.as_patch()))
        return 0

    print(header(f"DIFF: {args.before} → {args.after}"))
    if plan.is_empty:
        print(ok("No changes"))
        return 0

    for key, value in plan.writes.items():
        tag = f"{C.GREEN}+{C.RESET}" if key in plan.added else f"{C.YELLOW}~{C.RESET}"
        print(f"  {tag} {key}: {json.dumps(value, ensure_ascii=False)}")
    for key in plan.deletes:
        print(f"  {C.RED}-{C.RESET} {key}")
    print(f"\n  {C.DIM}{len(plan.writes)} write(s), {len(plan.deletes)} delete(s), "
          f"{plan.unchanged} unchanged, key cost {plan.key_cost} char(s){C.RESET}")
    return 0


# ============================================================================
# CLI setup
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="structurray",
        description="Structurray — compact, ordered field names for pseudo-arrays",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""
        examples:
          structurray encode 0 51 52
          structurray decode A0 zz
          structurray names 100 --prefix _
          structurray normalize scores.json --compact -o scores.json
          structurray diff old.json new.json --json
        """),
    )
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log re-keying at DEBUG level")

    sub = parser.add_subparsers(dest="command", help="Command to run")

    # encode
    p = sub.add_parser("encode", aliases=["enc"], help="Show the identifier of each index")
    p.add_argument("indices", nargs="+", type=int, help="Non-negative indices")

    # decode
    p = sub.add_parser("decode", aliases=["dec"], help="Show the index of each identifier")
    p.add_argument("identifiers", nargs="+", help="Identifiers to decode")

    # names
    p = sub.add_parser("names", help="List field names for a fixed-size pseudo-array")
    p.add_argument("count", type=int, help="Number of slots")
    p.add_argument("--start", type=int, default=0, help="First index (default: 0)")
    p.add_argument("--prefix", default="", help="Prepend to every name (e.g. _)")

    # normalize
    p = sub.add_parser("normalize", aliases=["norm"], help="Rewrite a JSON document in index order")
    p.add_argument("file", help="JSON object of identifier -> value")
    p.add_argument("--sparse", action="store_true", help="Allow gaps between indices")
    p.add_argument("--compact", action="store_true", help="Renumber to 0..N-1 (implies --sparse on input)")
    p.add_argument("-o", "--output", help="Output file path (default: stdout)")

    # diff
    p = sub.add_parser("diff", help="Show the store update between two JSON documents")
    p.add_argument("before", help="Earlier document")
    p.add_argument("after", help="Later document")
    p.add_argument("--json", action="store_true", help="Print a single update document")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.no_color:
        C.off()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 0

    # Dispatch
    commands = {
        "encode": cmd_encode, "enc": cmd_encode,
        "decode": cmd_decode, "dec": cmd_decode,
        "names": cmd_names,
        "normalize": cmd_normalize, "norm": cmd_normalize,
        "diff": cmd_diff,
    }

    handler = commands[args.command]
    try:
        return handler(args)
    except FileNotFoundError as e:
        print(fail(f"File not found: {e.filename}"), file=sys.stderr)
    except OSError as e:
        print(fail(f"Cannot read {e.filename}: {e.strerror}"), file=sys.stderr)
    except json.JSONDecodeError as e:
        print(fail(f"Malformed JSON: {e}"), file=sys.stderr)
    except (StructurrayError, ValueError) as e:
        print(fail(f"Error: {e}"), file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
