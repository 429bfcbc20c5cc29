"""Command line grammar: `!<id> <args>` matching and usage rendering."""

import re
from typing import Optional


class PatternMatcher:
    """Compiles a command id and an argument grammar into one anchored pattern.

    The grammar is a regular-expression fragment; named groups are only
    used to render the usage string, captures are always returned
    positionally.
    """

    def __init__(self, command_id: str, grammar: str = "") -> None:
        self.command_id = command_id
        self.grammar = grammar
        if grammar:
            pattern = rf"!{re.escape(command_id)}\s+(?:{grammar})\s*"
        else:
            pattern = rf"!{re.escape(command_id)}\s*"
        self._regex = re.compile(pattern)

    def match(self, text: str) -> Optional[list[str]]:
        """Return the captured arguments, or None if `text` is not a well-formed call."""
        m = self._regex.fullmatch(text)
        if m is None:
            return None
        return list(m.groups())

    @property
    def argument_names(self) -> list[str]:
        by_index = {index: name for name, index in self._regex.groupindex.items()}
        return [by_index.get(i + 1, f"arg{i}") for i in range(self._regex.groups)]

    def usage(self) -> str:
        return " ".join([f"!{self.command_id}"] + [f"<{name}>" for name in self.argument_names])


# Widest integer column the store accepts (signed 64 bit)
MAX_INTEGER = 2**63 - 1


def integer(value: str) -> int:
    """Argument converter for whole numbers that fit an integer column."""
    try:
        number = int(value)
    except ValueError:
        raise ValueError(f"'{value}' is not a number") from None
    if not -MAX_INTEGER - 1 <= number <= MAX_INTEGER:
        raise ValueError(f"'{value}' is out of range")
    return number
