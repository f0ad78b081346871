"""CLI entry point for the Trilang interpreter.

Usage:
    python -m trilang [-v|-vv|-vvv] [--lang pi|rho|tau]
    python -m trilang [-v...] [--lang pi|rho|tau] <program_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --lang        Notation to use; defaults to the program file's extension
                (.pi, .rho, .tau), or Pi for the interactive loop
  --debug-file  Where debug output goes (default: debug.txt)

Without a program file an interactive loop is started. Rho programs are
evaluated as a whole; Pi and Tau programs are run line by line, printing
each result or error just like the interactive loop does.
"""

import argparse
import sys
from pathlib import Path

from .errors import TrilangError
from .repl import LANGUAGES, Repl
from .rho import eval_rho
from .runtime import Runtime
from .types import UnitVal


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Trilang multi-notation interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--lang', choices=sorted(LANGUAGES), help='notation to use (pi, rho or tau)')
    parser.add_argument('--debug-file', default='debug.txt', help='file that receives debug output')
    parser.add_argument('program', nargs='?', help='program file to execute')
    args = parser.parse_args(argv)

    runtime = Runtime(debug_level=args.v, debug_file=args.debug_file)

    if not args.program:
        Repl(runtime, language=args.lang or 'pi').run()
        return

    program_file = Path(args.program)
    if not program_file.exists():
        print(f"Error: file {program_file} not found", file=sys.stderr)
        sys.exit(1)
    language = args.lang or program_file.suffix.lstrip('.')
    if language not in LANGUAGES:
        parser.error(f'cannot tell the notation of {program_file}; use --lang')
    with open(program_file, 'r', encoding='utf-8') as f:
        source = f.read()

    try:
        if language == 'rho':
            try:
                value = eval_rho(source, runtime)
            except TrilangError as e:
                print(f"Runtime error: {e}", file=sys.stderr)
                sys.exit(1)
            if not isinstance(value, UnitVal):
                print(repr(value))
            return
        repl = Repl(runtime, language=language)
        for line in source.splitlines():
            output = repl.handle_line(line)
            if output is not None:
                print(output)
            if not repl.running:
                break
        output = repl.flush()
        if output is not None:
            print(output)
    finally:
        runtime.close()


if __name__ == '__main__':
    main()
