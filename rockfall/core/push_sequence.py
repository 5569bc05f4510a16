"""
Push Sequence
=============

The jet pattern that pushes falling rocks sideways. The pattern is finite
and consumed cyclically forever: push number n is pattern[n % len(pattern)].
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator, List, Tuple, Union


class PushDirection(Enum):
    """Sideways push applied to a falling rock."""
    LEFT = "<"
    RIGHT = ">"

    @property
    def offset(self) -> int:
        """Column delta of this push."""
        return -1 if self is PushDirection.LEFT else 1


class PushSequence:
    """
    Immutable, cyclically indexed list of push directions.

    The sequence itself keeps no cursor; callers own the unbounded push
    counter and index with it.
    """

    def __init__(self, directions: Iterable[PushDirection]):
        """
        Args:
            directions: Push directions in pattern order.

        Raises:
            ValueError: If the pattern is empty.
        """
        self._directions: Tuple[PushDirection, ...] = tuple(directions)
        if not self._directions:
            raise ValueError("Push sequence must contain at least one direction")

    def __len__(self) -> int:
        return len(self._directions)

    def __getitem__(self, push_index: int) -> PushDirection:
        """Direction of the push with the given (unbounded) counter."""
        return self._directions[push_index % len(self._directions)]

    def __iter__(self) -> Iterator[PushDirection]:
        """One pass over the pattern."""
        return iter(self._directions)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PushSequence):
            return NotImplemented
        return self._directions == other._directions

    def to_text(self) -> str:
        """Render back to the `<`/`>` jet notation."""
        return "".join(d.value for d in self._directions)

    def __repr__(self) -> str:
        text = self.to_text()
        if len(text) > 20:
            text = text[:20] + "..."
        return f"PushSequence({len(self)}: {text})"


def parse_pushes(text: str) -> PushSequence:
    """
    Parse a line of jet characters.

    Surrounding whitespace (such as a trailing newline) is ignored.

    Args:
        text: Pattern made of `<` and `>`.

    Returns:
        PushSequence in the same order.

    Raises:
        ValueError: On any other character or an empty pattern.
    """
    pattern = text.strip()
    directions: List[PushDirection] = []
    for position, char in enumerate(pattern):
        try:
            directions.append(PushDirection(char))
        except ValueError:
            raise ValueError(
                f"Invalid push character {char!r} at position {position}"
            ) from None

    if not directions:
        raise ValueError("Push pattern is empty")
    return PushSequence(directions)


def load_pushes(path: Union[str, Path]) -> PushSequence:
    """
    Read and parse a jet pattern file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the contents are not a valid pattern.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Push pattern file not found: {path}")

    with open(path, "r") as f:
        return parse_pushes(f.read())
