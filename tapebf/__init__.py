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
from .errors import (
    InterpreterError,
    MemoryOverflow,
    ParseError,
    PointerOverflow,
    StdinError,
    StepLimitExceeded,
)
from .executor import TapeMachine, execute, interpret

__all__ = [
    "Decrement",
    "Increment",
    "Input",
    "InterpreterError",
    "Loop",
    "MemoryOverflow",
    "MoveLeft",
    "MoveRight",
    "Operation",
    "Output",
    "ParseError",
    "PointerOverflow",
    "StdinError",
    "StepLimitExceeded",
    "TapeMachine",
    "compile_source",
    "execute",
    "interpret",
]
