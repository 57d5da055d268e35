"""Decoding of raw terminal input into key names and actions."""

import re
from enum import Enum
from typing import List


class Action(Enum):
    """What a key asks the interactive app to do."""
    INSERT = "insert"
    BACKSPACE = "backspace"
    DELETE_WORD = "delete_word"
    CLEAR_ALL = "clear_all"
    NEXT_BOX = "next_box"
    PREVIOUS_BOX = "previous_box"
    NEXT_RESULT = "next_result"
    PREVIOUS_RESULT = "previous_result"
    COMMIT = "commit"
    CANCEL = "cancel"
    IGNORE = "ignore"


# Raw sequences as returned by click.getchar() in a POSIX terminal
SEQUENCES = {
    "\x1b[A": Action.PREVIOUS_RESULT,   # Up
    "\x1bOA": Action.PREVIOUS_RESULT,
    "\x1b[B": Action.NEXT_RESULT,       # Down
    "\x1bOB": Action.NEXT_RESULT,
    "\x0b": Action.PREVIOUS_RESULT,     # Ctrl-K
    "\n": Action.NEXT_RESULT,           # Ctrl-J
    "\r": Action.COMMIT,                # Enter
    "\x0c": Action.COMMIT,              # Ctrl-L
    "\x0e": Action.NEXT_BOX,            # Ctrl-N
    "\x10": Action.PREVIOUS_BOX,        # Ctrl-P
    "\x7f": Action.BACKSPACE,
    "\x08": Action.BACKSPACE,
    "\x17": Action.DELETE_WORD,         # Ctrl-W
    "\x07": Action.CLEAR_ALL,           # Ctrl-G
    "\x03": Action.CANCEL,              # Ctrl-C
    "\x04": Action.CANCEL,              # Ctrl-D
    "\x1b": Action.CANCEL,              # Esc
    # Windows getch() prefixes arrow keys with \xe0 or \x00
    "\xe0H": Action.PREVIOUS_RESULT,
    "\x00H": Action.PREVIOUS_RESULT,
    "\xe0P": Action.NEXT_RESULT,
    "\x00P": Action.NEXT_RESULT,
}

PASTED_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def decode(raw: str) -> List[tuple]:
    """
    Turn one chunk of raw input into (action, text) pairs.

    Known control sequences map to their action. Any other chunk is treated
    as typed (or pasted) text; printable characters become INSERT actions and
    unknown control characters are ignored. Line breaks inside a longer chunk
    are pasted text and become spaces; only a lone Enter or Ctrl-J acts.
    """
    action = SEQUENCES.get(raw)
    if action is not None:
        return [(action, "")]
    if raw.startswith("\x1b"):
        return [(Action.IGNORE, raw)]
    raw = PASTED_LINE_BREAK.sub(" ", raw)

    decoded = []
    text = ""
    for ch in raw:
        if ch.isprintable():
            text += ch
            continue
        if text:
            decoded.append((Action.INSERT, text))
            text = ""
        decoded.append((SEQUENCES.get(ch, Action.IGNORE), "" if ch in SEQUENCES else ch))
    if text:
        decoded.append((Action.INSERT, text))
    return decoded
