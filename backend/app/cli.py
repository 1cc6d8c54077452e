"""CLI entry point: compile a saved block graph (JSON) into program text."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from pydantic import ValidationError

from backend.app.core.config import get_settings
from backend.app.core.logging import CLI_LOG_FORMAT, configure_logging
from backend.app.models.program import ProgramGraph
from backend.app.services.block_registry import BlockRegistry
from backend.app.services.codegen_errors import CompilationError
from backend.app.services.codegen_service import CodegenService


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="blockscore-compile",
        description="Compile a block program graph (JSON) into music script source",
    )
    parser.add_argument(
        "input",
        nargs="?",
        help="Path to the program graph JSON file",
    )
    parser.add_argument(
        "-o", "--output",
        help="Output file path (default: stdout)",
    )
    parser.add_argument(
        "--root",
        default=None,
        help="Id of the first block of the chain to compile (default: every top-level chain)",
    )
    parser.add_argument(
        "--list-blocks",
        action="store_true",
        help="List all known block kinds and exit",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 2 when the output was degraded by incomplete blocks",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Verbose logging on stderr",
    )

    args = parser.parse_args(argv)
    configure_logging(args.debug, stream=sys.stderr, fmt=CLI_LOG_FORMAT)

    registry = BlockRegistry()
    if args.list_blocks:
        _print_blocks(registry)
        return

    if args.input is None:
        parser.error("the following arguments are required: input")

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: file not found: {input_path}", file=sys.stderr)
        sys.exit(1)

    try:
        graph = ProgramGraph.model_validate_json(input_path.read_text(encoding="utf-8"))
    except ValidationError as e:
        print(f"Error reading {input_path}: {e}", file=sys.stderr)
        sys.exit(1)

    codegen = CodegenService(registry=registry, indent_unit=get_settings().indent_unit)
    try:
        generated = codegen.compile_program(graph, args.root)
    except CompilationError as e:
        print(f"Error compiling {input_path}: {e}", file=sys.stderr)
        sys.exit(1)

    for diagnostic in generated.diagnostics:
        print(f"warning: {diagnostic}", file=sys.stderr)

    if args.output:
        output_path = Path(args.output)
        output_path.write_text(generated.program, encoding="utf-8")
        print(f"Written: {output_path}", file=sys.stderr)
    else:
        sys.stdout.write(generated.program)

    if args.strict and generated.diagnostics:
        sys.exit(2)


def _print_blocks(registry: BlockRegistry) -> None:
    """Print every block kind grouped by category."""
    for category, count in registry.categories().items():
        print(f"{category} ({count})")
        for block in registry.list_blocks(category):
            slots = [item.name for item in block.inputs] + [f"{item.name}:" for item in block.statement_inputs]
            shape = "value" if block.produces_value else "statement"
            suffix = f" [{', '.join(slots)}]" if slots else ""
            print(f"  {block.kind:<24} {shape}{suffix}")


if __name__ == "__main__":
    main()
