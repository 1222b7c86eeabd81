"""User-facing report output"""

import sys

PROG = "ticket-toolbox"


def echo(message: str = "") -> None:
    print(message, file=sys.stdout)


def warn(message: str) -> None:
    print(f"{PROG}: {message}", file=sys.stderr)
