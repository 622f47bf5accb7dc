from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from typing import BinaryIO, List, Optional, Sequence, Union

from .compiler import (
    Decrement,
    Increment,
    Input,
    Loop,
    MoveLeft,
    MoveRight,
    Operation,
    Output,
    compile_source,
)
from .errors import MemoryOverflow, PointerOverflow, StdinError, StepLimitExceeded

logger = logging.getLogger(__name__)

ByteSource = Union[BinaryIO, bytes, bytearray, str, None]

MEMORY_SIZE = 30_000


def to_input_bytes(data: str) -> bytes:
    """Map each character of ``data`` to the byte with the same code point."""
    try:
        return data.encode("latin-1")
    except UnicodeEncodeError as exc:
        char = data[exc.start]
        raise ValueError(
            f"Input character {char!r} (U+{ord(char):04X}) at position {exc.start} "
            "is outside the byte range 0-255"
        ) from exc


def _as_byte_source(data: ByteSource) -> BinaryIO:
    if data is None:
        return io.BytesIO()
    if isinstance(data, str):
        return io.BytesIO(to_input_bytes(data))
    if isinstance(data, (bytes, bytearray)):
        return io.BytesIO(bytes(data))
    return data


@dataclass
class _Frame:
    operations: Sequence[Operation]
    looping: bool = False
    index: int = 0


@dataclass
class TapeMachine:
    """Fixed-size byte tape with a single pointer.

    Cells hold values in ``0..cell_max``; leaving that range raises
    :class:`MemoryOverflow` instead of wrapping around.
    """

    tape_length: int = MEMORY_SIZE
    cell_max: int = 255

    tape: List[int] = field(init=False, repr=False)
    pointer: int = field(init=False, repr=False)
    output_buffer: List[str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.tape = [0] * self.tape_length
        self.pointer = 0
        self.output_buffer = []

    def run(
        self,
        operations: Sequence[Operation],
        input_data: ByteSource = None,
        max_steps: Optional[int] = None,
    ) -> str:
        self.reset()
        stdin = _as_byte_source(input_data)
        frames: List[_Frame] = [_Frame(operations)]
        steps = 0

        while frames:
            frame = frames[-1]
            if frame.index >= len(frame.operations):
                if frame.looping:
                    steps += 1
                    if max_steps is not None and steps > max_steps:
                        raise StepLimitExceeded("Program exceeded allowed step count")
                    if self.tape[self.pointer] != 0:
                        frame.index = 0
                        continue
                frames.pop()
                continue

            op = frame.operations[frame.index]
            frame.index += 1
            steps += 1
            if max_steps is not None and steps > max_steps:
                raise StepLimitExceeded("Program exceeded allowed step count")

            if isinstance(op, Loop):
                if self.tape[self.pointer] != 0:
                    frames.append(_Frame(op.body, looping=True))
            else:
                self._apply(op, stdin)

        logger.debug("executed %d steps, produced %d characters", steps, len(self.output_buffer))
        return "".join(self.output_buffer)

    def _apply(self, op: Operation, stdin: BinaryIO) -> None:
        if isinstance(op, MoveRight):
            pointer = self.pointer + op.count
            if pointer >= self.tape_length:
                raise PointerOverflow()
            self.pointer = pointer
        elif isinstance(op, MoveLeft):
            pointer = self.pointer - op.count
            if pointer < 0:
                raise PointerOverflow()
            self.pointer = pointer
        elif isinstance(op, Increment):
            value = self.tape[self.pointer] + op.count
            if value > self.cell_max:
                raise MemoryOverflow()
            self.tape[self.pointer] = value
        elif isinstance(op, Decrement):
            value = self.tape[self.pointer] - op.count
            if value < 0:
                raise MemoryOverflow()
            self.tape[self.pointer] = value
        elif isinstance(op, Output):
            self.output_buffer.append(chr(self.tape[self.pointer]))
        elif isinstance(op, Input):
            try:
                data = stdin.read(1)
            except OSError as exc:
                raise StdinError(exc) from exc
            # end of input leaves the zero-filled read buffer in the cell
            self.tape[self.pointer] = data[0] if data else 0
        else:
            raise TypeError(f"Unsupported operation: {op!r}")


def execute(
    operations: Sequence[Operation],
    input_data: ByteSource = None,
    *,
    max_steps: Optional[int] = None,
) -> str:
    """Run a compiled operation tree on a fresh tape and return its output."""
    return TapeMachine().run(operations, input_data, max_steps=max_steps)


def interpret(
    source: str,
    input_data: ByteSource = None,
    *,
    max_steps: Optional[int] = None,
) -> str:
    """Compile ``source`` and execute it, returning the accumulated output."""
    operations = compile_source(source)
    return execute(operations, input_data, max_steps=max_steps)


__all__ = [
    "MEMORY_SIZE",
    "TapeMachine",
    "execute",
    "interpret",
    "to_input_bytes",
]
