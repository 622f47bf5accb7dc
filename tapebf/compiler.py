from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Tuple, Type

from .errors import ParseError

logger = logging.getLogger(__name__)


class Token(str, Enum):
    MOVE_RIGHT = ">"
    MOVE_LEFT = "<"
    INCREMENT = "+"
    DECREMENT = "-"
    INPUT = ","
    OUTPUT = "."
    LOOP_BEGIN = "["
    LOOP_END = "]"


TOKEN_TABLE: Dict[str, Token] = {token.value: token for token in Token}


# === Operation tree ===


class Operation:
    pass


@dataclass
class MoveRight(Operation):
    count: int = 1


@dataclass
class MoveLeft(Operation):
    count: int = 1


@dataclass
class Increment(Operation):
    count: int = 1


@dataclass
class Decrement(Operation):
    count: int = 1


@dataclass
class Input(Operation):
    pass


@dataclass
class Output(Operation):
    pass


@dataclass
class Loop(Operation):
    body: List[Operation] = field(default_factory=list)


RUN_LENGTH_OPERATIONS: Dict[Token, Type[Operation]] = {
    Token.MOVE_RIGHT: MoveRight,
    Token.MOVE_LEFT: MoveLeft,
    Token.INCREMENT: Increment,
    Token.DECREMENT: Decrement,
}


def tokenize(source: str) -> Iterator[Tuple[int, Token]]:
    """Yield ``(position, token)`` for every instruction character in ``source``.

    Characters outside the instruction table are comments and produce nothing.
    """
    for position, char in enumerate(source):
        token = TOKEN_TABLE.get(char)
        if token is not None:
            yield position, token


def compile_source(source: str) -> List[Operation]:
    """Compile program text into a loop-aware operation tree.

    Consecutive identical moves and increments are folded into one node with a
    repeat count. Fusion only looks at the previous sibling in the sequence
    currently being built, so it never crosses a loop boundary.

    Raises :class:`ParseError` for a ``]`` without a matching ``[`` and for a
    ``[`` that is never closed.
    """
    stack: List[List[Operation]] = [[]]
    open_positions: List[int] = []

    for position, token in tokenize(source):
        current = stack[-1]
        if token in RUN_LENGTH_OPERATIONS:
            kind = RUN_LENGTH_OPERATIONS[token]
            if current and type(current[-1]) is kind:
                current[-1].count += 1  # type: ignore[attr-defined]
            else:
                current.append(kind())
        elif token is Token.INPUT:
            current.append(Input())
        elif token is Token.OUTPUT:
            current.append(Output())
        elif token is Token.LOOP_BEGIN:
            stack.append([])
            open_positions.append(position)
        elif token is Token.LOOP_END:
            body = stack.pop()
            if not stack:
                raise ParseError(f"Unexpected end of loop at position {position}")
            open_positions.pop()
            stack[-1].append(Loop(body))
        else:
            raise ParseError(f"Unexpected token {token!r} at position {position}")

    operations = stack.pop()
    if stack:
        raise ParseError(f"Expected end of loop for '[' at position {open_positions[-1]}")

    logger.debug("compiled %d top-level operations", len(operations))
    return operations


def count_operations(operations: List[Operation]) -> int:
    total = 0
    pending = list(operations)
    while pending:
        op = pending.pop()
        total += 1
        if isinstance(op, Loop):
            pending.extend(op.body)
    return total


def operation_to_dict(op: Operation) -> dict:
    name = type(op).__name__
    snake = "".join("_" + ch.lower() if ch.isupper() else ch for ch in name).lstrip("_")
    if isinstance(op, Loop):
        return {"op": snake, "body": [operation_to_dict(child) for child in op.body]}
    if isinstance(op, (MoveRight, MoveLeft, Increment, Decrement)):
        return {"op": snake, "count": op.count}
    return {"op": snake}


def format_operations(operations: List[Operation], indent: str = "  ") -> str:
    """Render an operation tree as one operation per line, loop bodies indented."""
    lines: List[str] = []
    pending: List[Tuple[int, Operation]] = [(0, op) for op in reversed(operations)]
    while pending:
        depth, op = pending.pop()
        prefix = indent * depth
        if isinstance(op, Loop):
            lines.append(f"{prefix}Loop:")
            pending.extend((depth + 1, child) for child in reversed(op.body))
        elif isinstance(op, (MoveRight, MoveLeft, Increment, Decrement)):
            lines.append(f"{prefix}{type(op).__name__}({op.count})")
        else:
            lines.append(f"{prefix}{type(op).__name__}")
    return "\n".join(lines)


__all__ = [
    "Decrement",
    "Increment",
    "Input",
    "Loop",
    "MoveLeft",
    "MoveRight",
    "Operation",
    "Output",
    "Token",
    "compile_source",
    "count_operations",
    "format_operations",
    "operation_to_dict",
    "tokenize",
]
