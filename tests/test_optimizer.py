#!/usr/bin/env python3
"""
Test run folding and loop idiom recognition.
"""

import pytest

from bfvm.ir import (
    Add, AddUntilZero, ClearCell, LoopClose, LoopOpen, Move, Output,
    ScanLeft, ScanRight, TransferMultiply, IDIOM_INSTRUCTIONS,
)
from bfvm.lexer import tokenize
from bfvm.linker import link
from bfvm.optimizer import count_instructions, fold_runs, optimize


def opt(source, level=2):
    return optimize(tokenize(source), level)


def test_level_zero_keeps_primitive_stream():
    tokens = tokenize("++[->+<].")
    assert optimize(tokens, 0) == tokens


@pytest.mark.parametrize("source, expected", [
    ("+++", [Add(3, 1)]),
    ("---", [Add(253, 1)]),
    (">>", [Move(2, 1)]),
    ("<<", [Move(65534, 1)]),
    ("+" * 257, [Add(1, 1)]),
    ("+>.", [Add(1, 1), Move(1, 2), Output(3)]),
])
def test_runs_fold_with_wrapping(source, expected):
    assert opt(source, 1) == expected


@pytest.mark.parametrize("source", ["+-", "<>", "+" * 256, ">" * 3 + "<" * 3, "+><-"])
def test_net_zero_runs_are_elided(source):
    assert opt(source, 1) == []


def test_elided_gap_lets_neighbours_merge():
    assert opt("+><+", 1) == [Add(2, 1)]
    assert fold_runs(tokenize("+><+")) == [Add(2, 1)]


@pytest.mark.parametrize("source, expected", [
    ("+-+", [Add(1, 1)]),
    ("<>>", [Move(1, 1)]),
    ("+" * 257, [Add(1, 1)]),
    (".+-+", [Output(1), Add(1, 2)]),
    ("+-.+", [Output(3), Add(1, 4)]),
])
def test_run_through_zero_keeps_first_position(source, expected):
    assert opt(source, 1) == expected
    assert opt(source, 2) == expected


@pytest.mark.parametrize("source, expected", [
    ("[-]", [ClearCell(1)]),
    ("[+]", [ClearCell(1)]),
    ("+[+]", [Add(1, 1), ClearCell(2)]),
    ("[>]", [ScanRight(1)]),
    ("[<]", [ScanLeft(1)]),
    ("[++]", [AddUntilZero(2, 1)]),
    ("[---]", [AddUntilZero(253, 1)]),
    ("[->+<]", [TransferMultiply(1, 255, 1, 1)]),
    ("[>+<-]", [TransferMultiply(1, 255, 1, 1)]),
    ("[->>+++<<]", [TransferMultiply(2, 255, 3, 1)]),
    ("[-<+>]", [TransferMultiply(65535, 255, 1, 1)]),
    ("[-->+<]", [TransferMultiply(1, 254, 1, 1)]),
])
def test_loop_idioms(source, expected):
    assert opt(source) == expected


def test_idioms_need_level_two():
    assert opt("[-]", 1) == [LoopOpen(None, 1), Add(255, 2), LoopClose(None, 3)]


@pytest.mark.parametrize("source, expected", [
    ("[>>]", [LoopOpen(None, 1), Move(2, 2), LoopClose(None, 4)]),
    ("[+-]", [LoopOpen(None, 1), LoopClose(None, 4)]),
    ("[[-]]", [LoopOpen(None, 1), ClearCell(2), LoopClose(None, 5)]),
    ("[->+<<]", [LoopOpen(None, 1), Add(255, 2), Move(1, 3), Add(1, 4), Move(65534, 5), LoopClose(None, 7)]),
    ("[.]", [LoopOpen(None, 1), Output(2), LoopClose(None, 3)]),
])
def test_other_loops_stay_plain(source, expected):
    assert opt(source) == expected


PROGRAMS = [
    "",
    "+++.",
    "+><+[-]>>[<]",
    "++[->+<]>[>++<-]<<[[-]]",
    "+[>+]-[>]",
    ",[.,]",
    "++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]>>.>---.+++++++..+++.>>.<-.<.+++.------.--------.>>+.>++.",
]


@pytest.mark.parametrize("level", [1, 2])
@pytest.mark.parametrize("source", PROGRAMS)
def test_optimizing_twice_is_a_no_op(source, level):
    once = opt(source, level)
    assert optimize(once, level) == once


@pytest.mark.parametrize("source", PROGRAMS)
def test_reoptimizing_a_linked_stream_clears_targets(source):
    once = opt(source)
    assert optimize(link(once)) == once


def test_count_instructions():
    program = opt("[-]>[>]<[->+<].")
    assert count_instructions(program, Output) == 1
    assert count_instructions(program, IDIOM_INSTRUCTIONS) == 3
