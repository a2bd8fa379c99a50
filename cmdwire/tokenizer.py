"""Command-line tokenizer.

Splits prefix-stripped message text into an argument vector. Words are
separated by whitespace; a run of words wrapped in backquotes forms a
single argument whose inner text is kept exactly as typed::

    greet `John  Smith` now  ->  ("greet", "John  Smith", "now")

Backquotes are only meaningful at the start of a group's first word and
the end of its last word. Anywhere else they are rejected, which also
means any input with an odd number of backquotes fails to tokenize.
"""

import re
from typing import Tuple

from .exceptions import TokenizeError

QUOTE = "`"

NO_COMMAND = "no command specified"
MISMATCHED_QUOTES = "mismatched quoting: unbalanced backquotes ``(`)``"

_FIELD_RE = re.compile(r"\S+")


def tokenize(text: str) -> Tuple[str, ...]:
    """Split text into a command name followed by its arguments.

    Args:
        text: Message text with the bot prefix already removed.

    Returns:
        Tuple of tokens. The first token is the command name and is
        never empty.

    Raises:
        TokenizeError: If the text is empty, the command name is empty,
            or backquotes are unbalanced or misplaced.
    """
    fields = list(_FIELD_RE.finditer(text))
    if not fields:
        raise TokenizeError(NO_COMMAND)

    tokens = []
    group_start = None  # offset just past the opening backquote

    for match in fields:
        field = match.group()
        if group_start is None:
            if not field.startswith(QUOTE):
                if QUOTE in field:
                    raise TokenizeError(MISMATCHED_QUOTES, offset=match.start())
                tokens.append(field)
                continue
            inner = field[1:]
            if inner.endswith(QUOTE):
                body = inner[:-1]
                if QUOTE in body:
                    raise TokenizeError(MISMATCHED_QUOTES, offset=match.start())
                tokens.append(body)
            elif QUOTE in inner:
                raise TokenizeError(MISMATCHED_QUOTES, offset=match.start())
            else:
                group_start = match.start() + 1
        else:
            if field.endswith(QUOTE):
                if QUOTE in field[:-1]:
                    raise TokenizeError(MISMATCHED_QUOTES, offset=match.start())
                tokens.append(text[group_start:match.end() - 1])
                group_start = None
            elif QUOTE in field:
                raise TokenizeError(MISMATCHED_QUOTES, offset=match.start())

    if group_start is not None:
        raise TokenizeError(MISMATCHED_QUOTES, offset=group_start - 1)
    if not tokens[0]:
        raise TokenizeError(NO_COMMAND)
    return tuple(tokens)
