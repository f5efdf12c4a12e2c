"""Exit codes and the translation of errors into them."""

from __future__ import annotations

import sys
from typing import TextIO

EXIT_CODE_OK = 0
EXIT_CODE_ERROR = 1


class ExitError(Exception):
    """An error that carries the exit code the process should end with."""

    def __init__(self, exit_code: int, err: BaseException | None = None) -> None:
        super().__init__("" if err is None else str(err))
        self.exit_code = exit_code
        self.err = err

    def __str__(self) -> str:
        return "" if self.err is None else str(self.err)


def handle_exit(err: BaseException | None, stderr: TextIO | None = None) -> int:
    """Report ``err`` on stderr, if it has a message, and return the exit code."""
    if err is None:
        return EXIT_CODE_OK
    out = sys.stderr if stderr is None else stderr
    message = str(err)
    if isinstance(err, ExitError):
        if message:
            print(message, file=out)
        return err.exit_code
    print(message, file=out)
    return EXIT_CODE_ERROR