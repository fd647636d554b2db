#!/usr/bin/env python3
"""
Test source tokenization.
"""

import pytest

from bfvm.errors import UnknownInstructionError
from bfvm.ir import Add, Input, LoopClose, LoopOpen, Move, Output
from bfvm.lexer import tokenize


def test_every_primitive_maps_one_to_one():
    assert tokenize("+-><,.[]") == [
        Add(1, 1),
        Add(255, 2),
        Move(1, 3),
        Move(65535, 4),
        Input(5),
        Output(6),
        LoopOpen(None, 7),
        LoopClose(None, 8),
    ]


def test_empty_source_is_an_empty_program():
    assert tokenize("") == []


@pytest.mark.parametrize("source, char, position", [
    ("++ +", " ", 3),
    ("+\n", "\n", 2),
    ("a", "a", 1),
    ("+[-]# comment", "#", 5),
])
def test_unknown_characters_are_fatal(source, char, position):
    with pytest.raises(UnknownInstructionError) as exc:
        tokenize(source)
    assert exc.value.char == char
    assert exc.value.position == position


def test_unknown_character_message_points_at_it():
    with pytest.raises(UnknownInstructionError) as exc:
        tokenize("++x++")
    message = str(exc.value)
    assert "position 3" in message
    assert "'x'" in message
    # caret sits under the offending character
    excerpt, caret = exc.value.context.split("\n")
    assert excerpt.index("x") == caret.index("^")
