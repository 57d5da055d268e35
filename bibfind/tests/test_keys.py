"""Tests for raw key decoding."""

import pytest

from bibfind.cli.keys import Action, decode


@pytest.mark.parametrize("raw,action", [
    ("\x1b[A", Action.PREVIOUS_RESULT),
    ("\x1b[B", Action.NEXT_RESULT),
    ("\x0b", Action.PREVIOUS_RESULT),
    ("\n", Action.NEXT_RESULT),
    ("\r", Action.COMMIT),
    ("\x0c", Action.COMMIT),
    ("\x0e", Action.NEXT_BOX),
    ("\x10", Action.PREVIOUS_BOX),
    ("\x7f", Action.BACKSPACE),
    ("\x17", Action.DELETE_WORD),
    ("\x07", Action.CLEAR_ALL),
    ("\x03", Action.CANCEL),
    ("\x1b", Action.CANCEL),
])
def test_control_sequences(raw, action):
    assert decode(raw) == [(action, "")]


def test_printable_text_is_inserted():
    assert decode("q") == [(Action.INSERT, "q")]
    assert decode("quant um") == [(Action.INSERT, "quant um")]


def test_pasted_text_with_control_characters():
    assert decode("ab\x7fc") == [
        (Action.INSERT, "ab"),
        (Action.BACKSPACE, ""),
        (Action.INSERT, "c"),
    ]


def test_unknown_sequences_are_ignored():
    assert decode("\x1b[15~") == [(Action.IGNORE, "\x1b[15~")]
    assert decode("\x01") == [(Action.IGNORE, "\x01")]
    assert decode("") == []


@pytest.mark.parametrize("raw", ["quantum\rcomputing", "quantum\ncomputing", "quantum\r\ncomputing"])
def test_line_breaks_inside_pasted_text_stay_text(raw):
    assert decode(raw) == [(Action.INSERT, "quantum computing")]


def test_pasted_text_ending_in_newline_does_not_commit():
    assert decode("quantum\n") == [(Action.INSERT, "quantum ")]
