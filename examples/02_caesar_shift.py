#!/usr/bin/env python3

import os
import sys

sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

from bfvm.api import run_string
from bfvm.ir import render
from bfvm.compiler import compile_program


def main():
    # shift every input byte by 3 until EOF (0)
    code = ",[+++.,]"
    text = sys.argv[1] if len(sys.argv) > 1 else "HAL"

    print(render(compile_program(code)))
    print(run_string(code, text).text)


if __name__ == "__main__":
    main()
