"""Copy input to output while keeping a colour-free copy of it."""

from __future__ import annotations

import re
from typing import TextIO

# An escape followed by a control sequence up to its final letter or '@',
# or by any single other character; an unterminated sequence runs to the end.
_ESCAPE = re.compile(r"\x1b(?:\[[^a-zA-Z@]*(?:[a-zA-Z@]|$)|.|$)", re.DOTALL)

_CHUNK_SIZE = 4096


def strip_ansi(text: str) -> str:
    """Remove terminal escape sequences from ``text``."""
    return _ESCAPE.sub("", text)


def tee(stdin: TextIO, stdout: TextIO) -> str:
    """Write everything read from ``stdin`` to ``stdout``; return it without colours."""
    parts = []
    for chunk in iter(lambda: stdin.read(_CHUNK_SIZE), ""):
        stdout.write(chunk)
        stdout.flush()
        parts.append(chunk)
    return strip_ansi("".join(parts))