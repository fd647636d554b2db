import argparse
import logging
import sys
import time
from typing import List, Optional

from .api import CompileOptions, compile_file, compile_string, decode_arguments
from .errors import BFVMError, UsageError
from .ir import IDIOM_INSTRUCTIONS, render
from .optimizer import DEFAULT_LEVEL, MAX_LEVEL, count_instructions
from .vm import VirtualMachine

USAGE = """bfvm [options] <bf_code> [bf_args ...]

Brainfuck interpreter.

Arguments:
  <bf_code>        Brainfuck code to be executed. Use only the following 8 instructions: +-.,[]<>
                   (use `--` before code starting with '-')
  [bf_args]        Pass a single string parameter to be converted into a collection of u8 characters (ascii).
                   Pass a collection of u8 numbers (0 to 255)."""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bfvm", usage=USAGE)
    parser.add_argument("items", nargs="*", help=argparse.SUPPRESS)
    parser.add_argument("--file", help="Read the program from a file instead of the first argument")
    parser.add_argument("--level", type=int, default=DEFAULT_LEVEL, help=f"Optimization level 0..{MAX_LEVEL}")
    parser.add_argument("--dump", action="store_true", help="Print the linked instruction listing")
    parser.add_argument("--stats", action="store_true", help="Print compile/execution timings to stderr")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging on stderr")
    return parser


def _run(args: argparse.Namespace) -> int:
    options = CompileOptions(optimize_level=args.level)
    items: List[str] = list(args.items)

    start = time.time()
    if args.file:
        program = compile_file(args.file, options=options)
    else:
        if not items:
            raise UsageError(f"Usage: {USAGE}")
        program = compile_string(items.pop(0), options=options)
    end = time.time()

    data = decode_arguments(items)
    queue = None if data is None else data[::-1]

    if args.dump:
        print(render(program))

    vm = VirtualMachine()
    run_start = time.time()
    vm.execute(program, queue)
    run_end = time.time()

    if args.stats:
        idioms = count_instructions(program, IDIOM_INSTRUCTIONS)
        print(f"Compilation took {(end - start) * 1000:.2f} ms "
              f"({len(program)} instructions, {idioms} idioms)", file=sys.stderr)
        print(f"Execution took {(run_end - run_start) * 1000:.2f} ms", file=sys.stderr)

    print(f"\"{vm.output_text}\" {list(vm.output)}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr)

    try:
        return _run(args)
    except BFVMError as e:
        print(e, file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Couldn't read file: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
