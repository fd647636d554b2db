#!/usr/bin/env python3
"""
Test end-to-end execution: optimized runs must match the primitive stream
byte for byte.
"""

import pytest

from bfvm.compiler import compile_program
from bfvm.errors import MalformedClosedLoopError, MalformedOpenLoopError, MissingArgumentsError
from bfvm.vm import VirtualMachine

HELLO_WORLD = (
    "++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]>>.>---.+++++++..+++."
    ">>.<-.<.+++.------.--------.>>+.>++."
)

# source, input queue (tail first), expected output
PROGRAMS = [
    ("+++.", None, b"\x03"),
    (",.", b"A", b"A"),
    ("+[-]", None, b""),
    (HELLO_WORLD, None, b"Hello World!\n"),
    (",[.,]", b"cba", b"abc"),
    (",>,[<+>-]<.", bytes([4, 3]), bytes([7])),
    ("++++++[>++++++++<-]>+.[-]<+++[>+++<-]>.", None, bytes([49, 9])),
    ("+>+>+>+[<]>.>[>]<.", None, bytes([1, 1])),
    ("+[>>+<<-]>>[<+>-]<[-<+>]<.", None, bytes([1])),
    ("++[>+++[>++<-]<-]>>.", None, bytes([12])),
    ("+++++[>++++[>+++<-]<-]>>[-<+>]<.", None, bytes([60])),
]


def execute(source, queue, level):
    vm = VirtualMachine()
    vm.execute(compile_program(source, level), queue)
    return vm


@pytest.mark.parametrize("source, queue, expected", PROGRAMS)
def test_optimized_matches_primitive(source, queue, expected):
    naive = execute(source, queue, 0)
    folded = execute(source, queue, 1)
    optimized = execute(source, queue, 2)

    assert folded.output == naive.output
    assert optimized.output == naive.output
    assert optimized.pointer == naive.pointer
    assert optimized.memory == naive.memory
    assert optimized.output == expected


def test_optimization_shrinks_program():
    assert len(compile_program(HELLO_WORLD, 2)) < len(compile_program(HELLO_WORLD, 0))


def test_structural_errors_abort_before_execution():
    with pytest.raises(MalformedOpenLoopError) as exc:
        compile_program("[")
    assert exc.value.position == 1

    with pytest.raises(MalformedClosedLoopError) as exc:
        compile_program("]")
    assert exc.value.position == 1

    # ',' would fail at runtime; the bracket error wins
    with pytest.raises(MalformedClosedLoopError):
        compile_program(",]")


def test_missing_arguments_end_to_end():
    with pytest.raises(MissingArgumentsError):
        execute(",.", None, 2)
