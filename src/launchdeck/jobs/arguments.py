"""Lenient shell-style command line tokenizer."""

from __future__ import annotations

from collections.abc import Sequence


def tokenize(text: str) -> list[str]:
    """Split a command line into an argument vector.

    Unquoted ASCII spaces separate tokens. Single and double quotes group
    spaces into one token and are dropped from the output; a quote of one kind
    is literal inside the other. There is no escape handling and an
    unterminated quote simply runs to end of input.

    Args:
        text: Raw command line as typed by the user.

    Returns:
        Ordered non-empty tokens.
    """
    tokens: list[str] = []
    current: list[str] = []
    in_double = False
    in_single = False
    for char in text:
        if char == '"' and not in_single:
            in_double = not in_double
        elif char == "'" and not in_double:
            in_single = not in_single
        elif char == " " and not in_double and not in_single:
            if current:
                tokens.append("".join(current))
                current = []
        else:
            current.append(char)
    if current:
        tokens.append("".join(current))
    return tokens


def join_arguments(argv: Sequence[str]) -> str:
    """Render an argument vector as an editable command line.

    Args:
        argv: Argument vector.

    Returns:
        Space-joined line that :func:`tokenize` splits back into ``argv``
        as long as no argument is empty or mixes both quote kinds.
    """
    parts: list[str] = []
    for arg in argv:
        if " " not in arg and '"' not in arg and "'" not in arg and arg:
            parts.append(arg)
        elif '"' in arg:
            parts.append(f"'{arg}'")
        else:
            parts.append(f'"{arg}"')
    return " ".join(parts)
