"""Mapping between character offsets in joined text and token indices."""

from bisect import bisect_left, bisect_right
from typing import List, Optional, Sequence, Tuple


class TokenAlignment:
    """Tokens joined by single spaces, with their character boundaries."""

    def __init__(self, tokens: Sequence[str]) -> None:
        self.starts: List[int] = []
        self.ends: List[int] = []
        position = 0
        for token in tokens:
            self.starts.append(position)
            position += len(token)
            self.ends.append(position)
            position += 1
        self.text = " ".join(tokens)

    def to_tokens(self, start_char: int, end_char: int, expand: bool = False) -> Optional[Tuple[int, int]]:
        """
        Token range [start, end) for a character range of the joined text.

        With ``expand`` the range grows to the enclosing token boundaries;
        otherwise ranges not aligned to token boundaries give None.
        """
        if not self.starts or start_char >= end_char:
            return None
        first = bisect_right(self.starts, start_char) - 1
        last = bisect_left(self.ends, end_char)
        if first < 0 or last >= len(self.ends) or first > last:
            return None
        if not expand and (self.starts[first] != start_char or self.ends[last] != end_char):
            return None
        return first, last + 1
