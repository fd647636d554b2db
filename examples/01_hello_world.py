#!/usr/bin/env python3

import os
import sys

sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

from bfvm.api import run_string


def main():
    code = (
        "++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]>>.>---.+++++++..+++."
        ">>.<-.<.+++.------.--------.>>+.>++."
    )

    result = run_string(code)
    print(result.text, end="")
    print(f"({result.instructions} instructions after optimization)")


if __name__ == "__main__":
    main()
