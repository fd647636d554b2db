from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from .ir import Instruction
from .lexer import tokenize
from .linker import link
from .optimizer import clamp_level, optimize

logger = logging.getLogger(__name__)


class Compiler:
    """
    Source text to linked instruction stream.

    Steps:
    1. Tokenize: one primitive instruction per character
    2. Optimize: fold runs and collapse loop idioms (see optimizer levels)
    3. Link: pair brackets into mutual jump targets

    Every structural error is raised here, before anything executes.
    """

    def __init__(self, optimize_level=None):
        self.optimize_level = clamp_level(optimize_level)
        self.tokens: List[Instruction] = []
        self.optimized: List[Instruction] = []

    def compile(self, source, optimize_level=None) -> Tuple[Instruction, ...]:
        level = self.optimize_level if optimize_level is None else clamp_level(optimize_level)
        self.tokens = tokenize(source)
        self.optimized = optimize(self.tokens, level)
        program = link(self.optimized, source=source)
        logger.debug("compiled %d characters into %d instructions", len(source), len(program))
        return program


def compile_program(source: str, level: Optional[int] = None) -> Tuple[Instruction, ...]:
    return Compiler(optimize_level=level).compile(source)
