"""Extended Line steganography method.

Each cover line carries bits in three sub-channels: an optional extra word
pushing the line past ``pivot`` graphemes, a doubled space at a random
position, and a trailing invisible character from a character set. The
variant fixes the order in which the sub-channels transform a line; revealing
peels the transformations off in the reverse order.
"""

import dataclasses
import enum
import logging
import random
from typing import Iterable, List, Optional, Tuple, Union

from .bits import BitStream, bits_to_bytes, bytes_to_bits, pad_bits
from .charsets import CharacterSet, CharacterSetType, get_character_set
from .errors import CoverTextTooSmallError, TrailingCharacterInCoverError
from .observer import DataWritten, EventNotifier, Finished
from .submethods import (
    LINE_EXTEND_BITRATE,
    RANDOM_WHITESPACE_BITRATE,
    MethodResult,
    conceal_in_extended_line,
    conceal_in_random_whitespace,
    conceal_in_trailing_character,
    reveal_in_extended_line,
    reveal_in_random_whitespace,
    reveal_in_trailing_character,
)
from .text import (
    LineSeparator,
    WordCursor,
    split_lines,
    split_words,
    verify_pivot,
)

logger = logging.getLogger(__name__)

DEFAULT_PIVOT = 15


class SubMethod(enum.Enum):
    LINE_EXTEND = "line_extend"
    RANDOM_WHITESPACE = "random_whitespace"
    TRAILING_CHARACTER = "trailing_character"


class Variant(enum.Enum):
    V1 = "v1"
    V2 = "v2"
    V3 = "v3"

    @property
    def order(self) -> Tuple[SubMethod, SubMethod, SubMethod]:
        return _VARIANT_ORDER[self]


_VARIANT_ORDER = {
    Variant.V1: (
        SubMethod.LINE_EXTEND,
        SubMethod.RANDOM_WHITESPACE,
        SubMethod.TRAILING_CHARACTER,
    ),
    Variant.V2: (
        SubMethod.LINE_EXTEND,
        SubMethod.TRAILING_CHARACTER,
        SubMethod.RANDOM_WHITESPACE,
    ),
    Variant.V3: (
        SubMethod.RANDOM_WHITESPACE,
        SubMethod.LINE_EXTEND,
        SubMethod.TRAILING_CHARACTER,
    ),
}

VARIANT_NAMES = [member.value for member in Variant]


def parse_variant(variant: Union[str, Variant]) -> Variant:
    if isinstance(variant, Variant):
        return variant
    try:
        return Variant(variant.lower())
    except ValueError:
        raise ValueError(
            f"Unknown variant '{variant}'; expected one of: {', '.join(VARIANT_NAMES)}"
        ) from None


def parse_line_separator(line_separator: Union[str, LineSeparator]) -> LineSeparator:
    if isinstance(line_separator, LineSeparator):
        return line_separator
    try:
        return LineSeparator(line_separator.lower())
    except ValueError:
        raise ValueError(
            f"Unknown line separator '{line_separator}'; expected one of: "
            + ", ".join(member.value for member in LineSeparator)
        ) from None


@dataclasses.dataclass(frozen=True)
class MethodConfig:
    pivot: int
    variant: Variant
    charset: CharacterSet
    rng: random.Random
    line_separator: LineSeparator
    notifier: EventNotifier


def build_method_config(
    pivot: int = DEFAULT_PIVOT,
    variant: Union[str, Variant] = Variant.V1,
    charset: Union[str, CharacterSetType, CharacterSet] = CharacterSetType.ONE_BIT,
    rng=None,
    seed: Optional[int] = None,
    line_separator: Optional[Union[str, LineSeparator]] = None,
    notifier: Optional[EventNotifier] = None,
) -> MethodConfig:
    if isinstance(pivot, bool) or not isinstance(pivot, int) or pivot < 1:
        raise ValueError(f"pivot must be a positive integer, got {pivot!r}")
    if rng is None and seed is None:
        raise ValueError("rng must be provided (pass rng or seed)")
    if rng is not None and seed is not None:
        raise ValueError("pass either rng or seed, not both")
    if rng is None:
        rng = random.Random(seed)
    if not callable(getattr(rng, "randrange", None)):
        raise ValueError("rng must provide randrange()")

    return MethodConfig(
        pivot=pivot,
        variant=parse_variant(variant),
        charset=get_character_set(charset),
        rng=rng,
        line_separator=(
            LineSeparator.default()
            if line_separator is None
            else parse_line_separator(line_separator)
        ),
        notifier=notifier if notifier is not None else EventNotifier(),
    )


def verify_trailing_characters(cover: str, charset: CharacterSet) -> None:
    for word in split_words(cover):
        if charset.character_to_bits(word[-1]):
            raise TrailingCharacterInCoverError(word, charset.name)


class ExtendedLineMethod:
    def __init__(self, config: MethodConfig):
        self.config = config

    @property
    def pivot(self) -> int:
        return self.config.pivot

    def subscribe(self, subscriber, is_alive=None) -> None:
        self.config.notifier.subscribe(subscriber, is_alive=is_alive)

    def unsubscribe(self, subscriber) -> None:
        self.config.notifier.unsubscribe(subscriber)

    def bitrate(self) -> int:
        return (
            LINE_EXTEND_BITRATE
            + RANDOM_WHITESPACE_BITRATE
            + self.config.charset.bitrate()
        )

    def capacity(self, cover: str) -> int:
        verify_pivot(cover, self.pivot)
        words = WordCursor(cover)
        line_count = 0
        while words.construct_pivot_line(self.pivot):
            line_count += 1
        logger.info("Cover text can be split into %d lines", line_count)
        return line_count * self.bitrate()

    def _partial_conceal(
        self, pivot_line: str, words: WordCursor, data: BitStream
    ) -> Tuple[str, MethodResult]:
        config = self.config
        line = pivot_line
        line_status = MethodResult.SUCCESS

        for action in config.variant.order:
            if action is SubMethod.LINE_EXTEND:
                result = conceal_in_extended_line(
                    line, config.pivot, words, data
                )
            elif action is SubMethod.RANDOM_WHITESPACE:
                result = conceal_in_random_whitespace(line, data, config.rng)
            else:
                result = conceal_in_trailing_character(line, data, config.charset)

            line = result.line
            if result.written:
                config.notifier.notify(DataWritten(result.written))
            if result.status is MethodResult.NO_DATA_LEFT:
                line_status = MethodResult.NO_DATA_LEFT
        return line, line_status

    def conceal(self, cover: str, data: Iterable[int]) -> str:
        verify_pivot(cover, self.pivot)
        verify_trailing_characters(cover, self.config.charset)
        bits = data if isinstance(data, BitStream) else BitStream(data)
        words = WordCursor(cover)
        lines: List[str] = []

        logger.info(
            "Concealing %d bits using variant %s", bits.remaining, self.config.variant.name
        )
        while not bits.exhausted:
            pivot_line = words.construct_pivot_line(self.pivot)
            if not pivot_line:
                raise CoverTextTooSmallError.no_cover_words_left(bits.remaining, self.pivot)
            line, status = self._partial_conceal(pivot_line, words, bits)
            lines.append(line)
            if status is MethodResult.NO_DATA_LEFT:
                break

        # Rest of the cover carries no data
        while True:
            line = words.construct_pivot_line(self.pivot)
            if not line:
                break
            lines.append(line)

        self.config.notifier.notify(Finished())
        return self.config.line_separator.separator.join(lines)

    def _partial_reveal(self, line: str) -> List[int]:
        config = self.config
        chunks: List[List[int]] = []
        for action in reversed(config.variant.order):
            if action is SubMethod.LINE_EXTEND:
                line, bits = reveal_in_extended_line(line, config.pivot)
            elif action is SubMethod.RANDOM_WHITESPACE:
                line, bits = reveal_in_random_whitespace(line)
            else:
                line, bits = reveal_in_trailing_character(line, config.charset)
            chunks.append(bits)

        revealed: List[int] = []
        for bits in reversed(chunks):
            revealed.extend(bits)
        return revealed

    def reveal(self, stego_text: str) -> List[int]:
        revealed: List[int] = []
        for line in split_lines(stego_text):
            revealed.extend(self._partial_reveal(line))
        logger.info("Revealed %d bits", len(revealed))
        return revealed


def conceal(cover: str, data: bytes, config: MethodConfig) -> str:
    return ExtendedLineMethod(config).conceal(cover, bytes_to_bits(data))


def reveal(stego_text: str, config: MethodConfig, length: Optional[int] = None) -> bytes:
    bits = ExtendedLineMethod(config).reveal(stego_text)
    return bits_to_bytes(pad_bits(bits), length=length)


def cover_capacity(
    cover: str,
    pivot: int,
    charset: Union[str, CharacterSetType, CharacterSet] = CharacterSetType.ONE_BIT,
) -> int:
    # Capacity does not depend on randomness; any fixed seed will do
    config = build_method_config(pivot=pivot, charset=charset, seed=0)
    return ExtendedLineMethod(config).capacity(cover)


__all__ = [
    "DEFAULT_PIVOT",
    "ExtendedLineMethod",
    "MethodConfig",
    "SubMethod",
    "VARIANT_NAMES",
    "Variant",
    "build_method_config",
    "conceal",
    "cover_capacity",
    "parse_line_separator",
    "parse_variant",
    "reveal",
    "verify_trailing_characters",
]
