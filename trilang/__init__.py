# Trilang package
# A small expression engine shared by three notations: Pi (postfix),
# Rho (infix with indented blocks) and Tau (Rho plus futures).
from .errors import TrilangError, ErrorVal
from .environment import Environment
from .runtime import Runtime
from .parser import parse_rho
from .pi import eval_pi
from .rho import eval_rho
from .tau import eval_tau

__all__ = [
    'TrilangError',
    'ErrorVal',
    'Environment',
    'Runtime',
    'parse_rho',
    'eval_pi',
    'eval_rho',
    'eval_tau',
]
