"""
tokenizer.py - Split a command line into tokens

Whitespace separates tokens. A double quote toggles a quoted region inside
which whitespace is literal; the quote characters themselves are dropped.
An unterminated quote runs to the end of the line.

    tokenize('modify -name="War and Peace" -price=9.5')
    -> ['modify', '-name=War and Peace', '-price=9.5']
"""

from __future__ import annotations
from typing import List


# ASCII whitespace only; other Unicode spaces are ordinary token characters.
WHITESPACE = " \t\n\v\f\r"


def tokenize(line: str) -> List[str]:
    tokens: List[str] = []
    current: List[str] = []
    in_quotes = False
    for c in line:
        if c == '"':
            in_quotes = not in_quotes
        elif not in_quotes and c in WHITESPACE:
            if current:
                tokens.append("".join(current))
                current = []
        else:
            current.append(c)
    if current:
        tokens.append("".join(current))
    return tokens
