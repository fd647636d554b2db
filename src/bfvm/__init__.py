from .compiler import Compiler, compile_program
from .lexer import tokenize
from .optimizer import optimize
from .linker import link
from .vm import MachineState, VirtualMachine
from .api import CompileOptions, RunResult, compile_file, compile_string, decode_arguments, run_string

__all__ = [
    'Compiler',
    'compile_program',
    'tokenize',
    'optimize',
    'link',
    'MachineState',
    'VirtualMachine',
    'CompileOptions',
    'RunResult',
    'compile_string',
    'compile_file',
    'decode_arguments',
    'run_string',
]
