"""Recover added new-file line numbers from a zero-context unified diff."""

from __future__ import annotations

import re

_HUNK_HEADER = re.compile(r"@@ -[0-9]+(?:,[0-9]+)? \+([0-9]+)(?:,([0-9]+))? @@")


class _NewLineCursor:
    """New-file line cursor driven one diff line at a time.

    Hunk headers reset the cursor. ``+`` lines are recorded, then advance
    it. Every other line except ``\\`` markers advances it too, ``-`` lines
    included.
    """

    def __init__(self) -> None:
        self.line = 0
        self.added: list[int] = []

    def feed(self, text: str) -> None:
        if text.startswith("@@"):
            match = _HUNK_HEADER.match(text)
            if match:
                self.line = int(match.group(1))
        elif text.startswith("+") and not text.startswith("+++"):
            self.added.append(self.line)
            self.line += 1
        elif not text.startswith("\\"):
            self.line += 1


def parse_added_lines(diff_output: str) -> list[int]:
    """Return the new-file line numbers of every ``+`` line, in diff order."""
    if not diff_output:
        return []
    cursor = _NewLineCursor()
    for text in diff_output.split("\n"):
        cursor.feed(text)
    return cursor.added
