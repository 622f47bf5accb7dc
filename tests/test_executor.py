import io
import unittest

from tapebf import (
    MemoryOverflow,
    ParseError,
    PointerOverflow,
    StdinError,
    StepLimitExceeded,
    TapeMachine,
    compile_source,
    execute,
    interpret,
)
from tapebf.executor import to_input_bytes

HELLO_WORLD = (
    "++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]"
    ">>.>---.+++++++..+++.>>.<-.<.+++.------.--------.>>+.>++."
)

FIBONACCI = """+++++++++++
        >+>>>>++++++++++++++++++++++++++++++++++++++++++++
        >++++++++++++++++++++++++++++++++<<<<<<[>[>>>>>>+>
        +<<<<<<<-]>>>>>>>[<<<<<<<+>>>>>>>-]<[>++++++++++[-
        <-[>>+>+<<<-]>>>[<<<+>>>-]+<[>[-]<[-]]>[<<[>>>+<<<
        -]>>[-]]<<]>>>[>>+>+<<<-]>>>[<<<+>>>-]+<[>[-]<[-]]
        >[<<+>>[-]]<<<<<<<]>>>>>[+++++++++++++++++++++++++
        +++++++++++++++++++++++.[-]]++++++++++<[->-<]>++++
        ++++++++++++++++++++++++++++++++++++++++++++.[-]<<
        <<<<<<<<<<[>>>+>+<<<<-]>>>>[<<<<+>>>>-]<-[>>.>.<<<
        [-]]<<[>>+>+<<<-]>>>[<<<+>>>-]<<[<+>-]>[<+>-]<<<-]"""

CAT = ",[.,]"


class _FailingReader(io.RawIOBase):
    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        raise OSError("device not ready")


class KnownProgramTests(unittest.TestCase):
    def test_hello_world(self) -> None:
        self.assertEqual(interpret(HELLO_WORLD, b""), "Hello World!\n")

    def test_fibonacci(self) -> None:
        self.assertEqual(interpret(FIBONACCI, b""), "1, 1, 2, 3, 5, 8, 13, 21, 34, 55, 89")

    def test_cat(self) -> None:
        stdin = io.BytesIO(b"I love programming!")
        self.assertEqual(interpret(CAT, stdin), "I love programming!")

    def test_cat_accepts_text_input(self) -> None:
        self.assertEqual(interpret(CAT, "I love programming!"), "I love programming!")

    def test_text_input_maps_code_points_to_bytes(self) -> None:
        self.assertEqual(interpret(CAT, "café"), "café")
        self.assertEqual(to_input_bytes("\xffA"), b"\xffA")

    def test_text_input_outside_byte_range_is_rejected(self) -> None:
        with self.assertRaises(ValueError) as ctx:
            interpret(CAT, "snow ☃")
        self.assertIn("U+2603", str(ctx.exception))
        self.assertIn("position 5", str(ctx.exception))

    def test_simple_output(self) -> None:
        self.assertEqual(interpret("+" * 65 + "."), "A")


class PointerBoundsTests(unittest.TestCase):
    def test_pointer_overflow_left(self) -> None:
        with self.assertRaises(PointerOverflow):
            interpret(">><<<", b"")

    def test_pointer_overflow_right(self) -> None:
        with self.assertRaises(PointerOverflow):
            interpret("+[>+]", b"")

    def test_last_cell_is_reachable(self) -> None:
        program = ">" * 29_999 + "+++."
        self.assertEqual(interpret(program), "\x03")

    def test_moving_past_last_cell_fails(self) -> None:
        with self.assertRaises(PointerOverflow):
            interpret(">" * 30_000)

    def test_custom_tape_length(self) -> None:
        machine = TapeMachine(tape_length=4)
        with self.assertRaises(PointerOverflow):
            machine.run(compile_source(">>>>"))


class CellBoundsTests(unittest.TestCase):
    def test_memory_overflow_below_zero(self) -> None:
        with self.assertRaises(MemoryOverflow):
            interpret("+--", b"")

    def test_memory_overflow_above_255(self) -> None:
        with self.assertRaises(MemoryOverflow):
            interpret("+[+]", b"")

    def test_folded_run_that_overflows(self) -> None:
        with self.assertRaises(MemoryOverflow):
            interpret("+" * 256)

    def test_max_cell_value(self) -> None:
        self.assertEqual(interpret("+" * 255 + "."), "\xff")


class LoopTests(unittest.TestCase):
    def test_zero_iteration_loop_has_no_effect(self) -> None:
        self.assertEqual(interpret("[<<<--.]+."), "\x01")

    def test_loop_runs_until_cell_is_zero(self) -> None:
        self.assertEqual(interpret("+++[>++<-]>."), "\x06")

    def test_deep_nesting_executes(self) -> None:
        depth = 5000
        program = "+" + "[" * depth + "-" + "]" * depth + "."
        self.assertEqual(interpret(program), "\x00")


class InputTests(unittest.TestCase):
    def test_end_of_input_stores_zero(self) -> None:
        self.assertEqual(interpret("+,.", b""), "\x00")

    def test_input_reads_one_byte_at_a_time(self) -> None:
        self.assertEqual(interpret(",.,.,.", b"AB"), "AB\x00")

    def test_missing_input_source_behaves_as_empty(self) -> None:
        self.assertEqual(interpret(",."), "\x00")

    def test_io_fault_raises_stdin_error(self) -> None:
        with self.assertRaises(StdinError) as ctx:
            interpret(",.", _FailingReader())
        self.assertIsInstance(ctx.exception.cause, OSError)
        self.assertIs(ctx.exception.__cause__, ctx.exception.cause)
        self.assertIn("device not ready", str(ctx.exception))

    def test_programs_without_input_never_read(self) -> None:
        self.assertEqual(interpret("+.", _FailingReader()), "\x01")


class StepLimitTests(unittest.TestCase):
    def test_infinite_loop_hits_step_limit(self) -> None:
        with self.assertRaises(StepLimitExceeded):
            interpret("+[]", max_steps=10)

    def test_budget_counts_operations(self) -> None:
        operations = compile_source("+>+")
        self.assertEqual(execute(operations, max_steps=3), "")
        with self.assertRaises(StepLimitExceeded):
            execute(operations, max_steps=2)


class StateIsolationTests(unittest.TestCase):
    def test_each_run_starts_from_fresh_state(self) -> None:
        machine = TapeMachine()
        operations = compile_source("+++>.")
        machine.run(operations)
        self.assertEqual(machine.run(compile_source(".")), "\x00")

    def test_parse_errors_surface_before_execution(self) -> None:
        with self.assertRaises(ParseError):
            interpret(",[.,", _FailingReader())


if __name__ == "__main__":
    unittest.main()
