"""
generate_from_json.py: CLI for the Nelua block generator
=========================================================
Generates a Nelua program from a serialised block workspace.

Usage
-----
    neluablocks-generate <workspace.json> [options]
    python -m neluablocks.generate_from_json <workspace.json> [options]

Options
-------
    --out          <dir>       Output directory (default: current directory)
    --print                    Print the generated program to stdout instead of writing a file
    --strict                   Treat unknown block types as schema errors (default: warnings only)
    --indent       <n>         Spaces per indentation level (default: 2)
    --comment-wrap <n>         Column at which block comments are wrapped (default: 60)
    --loop-trap    <template>  Line injected at the top of every loop and procedure body;
                               %1 is replaced by the quoted block id
    --verbose                  Log name allocation and helper registration

Examples
--------
    # Write counter.nelua next to the current directory:
    neluablocks-generate examples/counter.json

    # Print with four-space indents and an iteration guard in every loop:
    neluablocks-generate examples/counter.json --print --indent 4 \\
        --loop-trap "guard(%1)"
"""

from __future__ import annotations

import argparse
import json
import logging
import re
import sys
from pathlib import Path


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="neluablocks-generate",
        description="Generate a Nelua program from a block workspace JSON file.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    p.add_argument(
        "workspace_json",
        metavar="workspace.json",
        help="Path to the workspace JSON file to translate.",
    )
    p.add_argument(
        "--out",
        metavar="DIR",
        default=".",
        help="Output directory for the generated .nelua file (default: current directory).",
    )
    p.add_argument(
        "--print",
        dest="print_only",
        action="store_true",
        help="Print the generated program to stdout instead of writing a file.",
    )
    p.add_argument(
        "--strict",
        action="store_true",
        help="Treat unknown block types as errors rather than warnings.",
    )
    p.add_argument("--indent", type=int, default=2, metavar="N",
                   help="Spaces per indentation level (default: 2).")
    p.add_argument("--comment-wrap", type=int, default=60, metavar="N",
                   help="Wrap block comments at this column (default: 60).")
    p.add_argument("--loop-trap", metavar="TEMPLATE", default=None,
                   help="Statement injected at the top of loop and procedure bodies.")
    p.add_argument("--verbose", "-v", action="store_true",
                   help="Enable debug logging.")
    return p


def _workspace_name_to_filename(name: str) -> str:
    """Turn 'Bouncing Ball' into 'bouncing_ball.nelua', keeping only word characters."""
    safe = re.sub(r"\W+", "_", name.lower()).strip("_") or "workspace"
    return f"{safe}.nelua"


def main(argv=None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    json_path = Path(args.workspace_json)
    if not json_path.exists():
        print(f"[error] File not found: {json_path}", file=sys.stderr)
        return 1

    # ── Validate JSON ────────────────────────────────────────────────────────
    from neluablocks.serialization.schema import SchemaError, validate_file
    try:
        data = validate_file(json_path, strict=args.strict)
    except json.JSONDecodeError as exc:
        print(f"[error] Invalid JSON: {exc}", file=sys.stderr)
        return 1
    except SchemaError as exc:
        print(f"[error] Schema validation failed: {exc}", file=sys.stderr)
        return 1

    from neluablocks.generator import GenerationError, GeneratorConfig, NeluaGenerator
    try:
        config = GeneratorConfig.from_dict({
            "indent": args.indent,
            "comment_wrap": args.comment_wrap,
            "infinite_loop_trap": args.loop_trap,
        })
    except ValueError as exc:
        print(f"[error] Invalid option: {exc}", file=sys.stderr)
        return 1

    # ── Deserialise JSON → Workspace ─────────────────────────────────────────
    from neluablocks.serialization.deserialiser import json_to_workspace
    workspace = json_to_workspace(data)
    name = data.get("name", json_path.stem)
    if not args.print_only:
        print(f"[generate_from_json] workspace : {name}")
        print(f"[generate_from_json] blocks    : {sum(1 for _ in workspace.get_all_blocks())}")
        print(f"[generate_from_json] variables : {len(workspace.variables)}")

    # ── Generate ─────────────────────────────────────────────────────────────
    try:
        source = NeluaGenerator(config).workspace_to_code(workspace)
    except GenerationError as exc:
        print(f"[error] Generation failed: {exc}", file=sys.stderr)
        return 1

    # ── Output ───────────────────────────────────────────────────────────────
    if args.print_only:
        sys.stdout.write(source)
        return 0

    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / _workspace_name_to_filename(name)
    out_path.write_text(source, encoding="utf-8")

    print(f"[generate_from_json] wrote     : {out_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
