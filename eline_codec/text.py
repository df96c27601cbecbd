import enum
import logging
import os
from typing import Iterator, List, Optional

import regex

from .errors import PivotTooSmallError

logger = logging.getLogger(__name__)

ASCII_DELIMITER = " "

GRAPHEME_PATTERN = regex.compile(r"\X")
WHITESPACE_RUN_PATTERN = regex.compile(r"\s+")
LINE_BREAK_PATTERN = regex.compile(r"\r?\n")


class LineSeparator(enum.Enum):
    UNIX = "unix"
    WINDOWS = "windows"

    @property
    def separator(self) -> str:
        return "\r\n" if self is LineSeparator.WINDOWS else "\n"

    @classmethod
    def default(cls) -> "LineSeparator":
        return cls.WINDOWS if os.name == "nt" else cls.UNIX


def graphemes_length(text: str) -> int:
    return len(GRAPHEME_PATTERN.findall(text))


def split_words(cover: str) -> List[str]:
    return cover.split()


def split_lines(text: str) -> List[str]:
    return LINE_BREAK_PATTERN.split(text)


def normalize_whitespace(line: str) -> str:
    """Collapse whitespace runs to single spaces and drop trailing whitespace."""
    return WHITESPACE_RUN_PATTERN.sub(ASCII_DELIMITER, line).rstrip()


def find_longest_word(cover: str, pivot: int) -> Optional[str]:
    for word in split_words(cover):
        if graphemes_length(word) > pivot:
            return word
    return None


def verify_pivot(cover: str, pivot: int) -> None:
    logger.debug("Checking if pivot %d is feasible for provided cover", pivot)
    word = find_longest_word(cover, pivot)
    if word is not None:
        raise PivotTooSmallError(word, pivot)


def determine_pivot(cover: str) -> int:
    # Every line must fit the longest word plus room for one delimiter
    return max((graphemes_length(word) + 1 for word in split_words(cover)), default=0)


class WordCursor:
    """Peekable, forward-only walk over the words of a cover text."""

    def __init__(self, cover: str):
        self._words = split_words(cover)
        self._index = 0

    def __iter__(self) -> Iterator[str]:
        while self.peek() is not None:
            yield self.next()

    @property
    def remaining(self) -> int:
        return len(self._words) - self._index

    def peek(self) -> Optional[str]:
        if self._index >= len(self._words):
            return None
        return self._words[self._index]

    def next(self) -> Optional[str]:
        word = self.peek()
        if word is not None:
            self._index += 1
        return word

    def construct_pivot_line(self, pivot: int) -> str:
        line_parts: List[str] = []
        current_length = 0

        while True:
            next_word = self.peek()
            if next_word is None:
                break
            word_length = graphemes_length(next_word)
            if not line_parts and word_length > pivot:
                raise PivotTooSmallError(next_word, pivot)

            # A leading combining mark joins the delimiter into one grapheme
            candidate_length = graphemes_length(ASCII_DELIMITER.join(line_parts + [next_word]))
            if candidate_length > pivot:
                break

            current_length = candidate_length
            line_parts.append(next_word)
            self.next()

        logger.debug(
            "Constructed line of length %d while %d is the pivot", current_length, pivot
        )
        return ASCII_DELIMITER.join(line_parts)


__all__ = [
    "ASCII_DELIMITER",
    "LineSeparator",
    "WordCursor",
    "determine_pivot",
    "find_longest_word",
    "graphemes_length",
    "normalize_whitespace",
    "split_lines",
    "split_words",
    "verify_pivot",
]
