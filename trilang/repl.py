"""Interactive read-eval-print loop shared by the three notations."""

from __future__ import annotations

import builtins
from typing import List, Optional

from .environment import Environment
from .errors import TrilangError
from .pi import eval_pi
from .rho import eval_rho
from .runtime import Runtime
from .tau import eval_tau
from .types import Value

LANGUAGES = {
    'pi': 'Pi (postfix/RPN notation)',
    'rho': 'Rho (infix with tab indentation)',
    'tau': 'Tau (network language with futures)',
}

HELP_TEXT = """Trilang REPL Help:

Languages:
  :pi  - Switch to Pi (postfix/RPN): 3 4 +
  :rho - Switch to Rho (infix+tabs): 3 + 4
  :tau - Switch to Tau (futures): async fetch

Pi (Postfix):
  3 4 +                 # 7
  [1,2,3] "arr" =       # bind arr
  arr -->               # prints: Num(1.0) Num(2.0) Num(3.0)

Rho (Infix):
  3 + 4                 # 7
  while i < 3:          # indented block, end with a blank line
  defer (x = 1) ; defer (x = 2)
  resume | 0            # fall back to 0 when nothing was resumed

Tau (Futures):
  f = async fetch       # Future(Pending)
  resolve f 42          # settle it
  await f               # 42

Commands: :quit, :help, :pi, :rho, :tau"""


class Repl:
    """Reads lines, dispatches them to the current notation and renders results."""
    def __init__(self, runtime: Optional[Runtime] = None, language: str = 'pi'):
        self.runtime = runtime if runtime is not None else Runtime()
        self.env = Environment()
        self.language = language
        self.pending: List[str] = []
        self.running = True

    @property
    def prompt(self) -> str:
        return '... ' if self.pending else '> '

    def run(self):
        print("Trilang REPL")
        print("Languages: Pi (postfix), Rho (infix+tabs), Tau (futures)")
        print("Commands: :quit, :help, :pi, :rho, :tau\n")
        print(f"Current language: {self.language}\n")
        try:
            while self.running:
                try:
                    line = builtins.input(self.prompt)
                except EOFError:
                    break
                output = self.handle_line(line)
                if output is not None:
                    print(output)
            output = self.flush()
            if output is not None:
                print(output)
        finally:
            self.runtime.close()

    def handle_line(self, line: str) -> Optional[str]:
        """Process one input line and return the text to show, if any."""
        if self.pending:
            if line.strip():
                self.pending.append(line.rstrip('\r\n'))
                return None
            return self.flush()
        text = line.strip()
        # Skip empty lines and comments
        if not text or text.startswith('#'):
            return None
        if text.startswith(':'):
            return self.command(text)
        if self.language != 'pi' and text.endswith(':'):
            # start of an indented block, read until a blank line
            self.pending.append(line.rstrip('\r\n'))
            return None
        return self.evaluate(text)

    def flush(self) -> Optional[str]:
        if not self.pending:
            return None
        source = '\n'.join(self.pending)
        self.pending = []
        return self.evaluate(source)

    def evaluate(self, source: str) -> str:
        try:
            value = self.eval_source(source)
        except TrilangError as e:
            return f"Error: {e.message}"
        return repr(value)

    def eval_source(self, source: str) -> Value:
        if self.language == 'pi':
            return eval_pi(source, self.runtime, self.env)
        if self.language == 'rho':
            return eval_rho(source, self.runtime, self.env)
        return eval_tau(source, self.runtime, self.env)

    def command(self, text: str) -> str:
        if text in (':quit', ':q'):
            self.running = False
            return 'Goodbye!'
        if text in (':help', ':h'):
            return HELP_TEXT
        name = text[1:]
        if name in LANGUAGES:
            self.language = name
            return f"Switched to {LANGUAGES[name]}"
        return f"Unknown command: {text}"
