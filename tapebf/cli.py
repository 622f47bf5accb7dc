from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .compiler import compile_source, format_operations
from .errors import InterpreterError, ParseError
from .executor import ByteSource, execute, to_input_bytes


def _read_source(path: str) -> str:
    source_path = Path(path)
    if not source_path.exists():
        raise FileNotFoundError(f"Source file not found: {path}")
    return source_path.read_text(encoding="utf-8")


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Run a tape-machine program")
    parser.add_argument("source", help="Path to the program source file")
    parser.add_argument(
        "--input",
        help="Input string supplied to the program (default: read from stdin)",
        default=None,
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=None,
        help="Abort after this many steps (default: unlimited)",
    )
    parser.add_argument(
        "--compile-only",
        action="store_true",
        help="Print the compiled operation tree instead of running it",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        source_text = _read_source(args.source)
    except OSError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except UnicodeDecodeError as exc:
        print(f"Source file is not valid UTF-8: {args.source}: {exc}", file=sys.stderr)
        return 1

    try:
        operations = compile_source(source_text)
    except ParseError as exc:
        print(f"Compilation error: {exc}", file=sys.stderr)
        return 1

    if args.compile_only:
        sys.stdout.write(format_operations(operations))
        sys.stdout.write("\n")
        return 0

    input_data: ByteSource
    if args.input is None:
        input_data = sys.stdin.buffer
    else:
        try:
            input_data = to_input_bytes(args.input)
        except ValueError as exc:
            print(f"Invalid input: {exc}", file=sys.stderr)
            return 1

    try:
        output = execute(operations, input_data, max_steps=args.max_steps)
    except InterpreterError as exc:
        print(f"Execution error: {exc}", file=sys.stderr)
        return 1

    sys.stdout.write(output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
