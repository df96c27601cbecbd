import enum
import logging
from typing import List, NamedTuple, Sequence, Tuple

from .bits import BitStream
from .charsets import CharacterSet
from .errors import CoverTextTooSmallError, NotEnoughWordsOnPivotLineError
from .text import ASCII_DELIMITER, WordCursor, graphemes_length, normalize_whitespace

logger = logging.getLogger(__name__)

LINE_EXTEND_BITRATE = 1
RANDOM_WHITESPACE_BITRATE = 1


class MethodResult(enum.Enum):
    SUCCESS = "success"
    NO_DATA_LEFT = "no_data_left"


class ChannelResult(NamedTuple):
    line: str
    written: int
    status: MethodResult


def conceal_in_extended_line(
    line: str,
    pivot: int,
    words: WordCursor,
    data: BitStream,
) -> ChannelResult:
    bit = data.next_bit()
    if bit is None:
        return ChannelResult(line, 0, MethodResult.NO_DATA_LEFT)
    if not bit:
        logger.debug("Leaving line as-is")
        return ChannelResult(line, LINE_EXTEND_BITRATE, MethodResult.SUCCESS)

    next_word = words.peek()
    if next_word is None:
        raise CoverTextTooSmallError.no_cover_words_left(data.remaining, pivot)

    # Same measure as reveal_in_extended_line
    extended_line_length = graphemes_length(
        normalize_whitespace(line + ASCII_DELIMITER + next_word)
    )
    if extended_line_length <= pivot:
        raise CoverTextTooSmallError.line_too_short(data.remaining, pivot)

    words.next()
    logger.debug("Extending line with '%s'", next_word)
    return ChannelResult(
        line + ASCII_DELIMITER + next_word, LINE_EXTEND_BITRATE, MethodResult.SUCCESS
    )


def reveal_in_extended_line(line: str, pivot: int) -> Tuple[str, List[int]]:
    bit = int(graphemes_length(normalize_whitespace(line)) > pivot)
    logger.debug("Found extended line: %s", bool(bit))
    return line, [bit]


def find_approx_whitespace_position(line: str, rng, delimiter: str = ASCII_DELIMITER) -> int:
    """Pick the delimiter closest to (at or before) a random offset in ``line``.

    Falls back to the first delimiter when none precedes the offset. Returns
    -1 when the line contains no delimiter at all.
    """
    position = line.find(delimiter)
    if position == -1:
        return position

    approx_position = rng.randrange(len(line))
    for index, character in enumerate(line):
        if index > approx_position:
            break
        if character == delimiter:
            position = index
    return position


def conceal_in_random_whitespace(
    line: str, data: BitStream, rng, delimiter: str = ASCII_DELIMITER
) -> ChannelResult:
    bit = data.next_bit()
    if bit is None:
        return ChannelResult(line, 0, MethodResult.NO_DATA_LEFT)
    if not bit:
        logger.debug("Skipping double whitespace")
        return ChannelResult(line, RANDOM_WHITESPACE_BITRATE, MethodResult.SUCCESS)

    position = find_approx_whitespace_position(line, rng, delimiter)
    if position == -1:
        raise NotEnoughWordsOnPivotLineError(line)

    logger.debug("Putting space at position %d", position)
    return ChannelResult(
        line[:position] + delimiter + line[position:],
        RANDOM_WHITESPACE_BITRATE,
        MethodResult.SUCCESS,
    )


def reveal_in_random_whitespace(
    line: str, delimiter: str = ASCII_DELIMITER
) -> Tuple[str, List[int]]:
    previous = None
    for index, character in enumerate(line):
        if character == delimiter and previous == delimiter:
            logger.debug("Found two consecutive whitespaces at %d", index)
            return line[:index] + line[index + 1 :], [1]
        previous = character
    return line, [0]


def assemble_charset_index(bits: Sequence[int], bitrate: int) -> int:
    index = 0
    for bit in bits:
        index = (index << 1) | bit
    # The last chunk of a stream may be shorter than the bitrate
    return index << (bitrate - len(bits))


def conceal_in_trailing_character(
    line: str, data: BitStream, charset: CharacterSet
) -> ChannelResult:
    bitrate = charset.bitrate()
    next_bits = data.take(bitrate)
    if not next_bits:
        return ChannelResult(line, 0, MethodResult.NO_DATA_LEFT)

    charset_index = assemble_charset_index(next_bits, bitrate)
    logger.debug("Took %d bits and assembled a number: %d", len(next_bits), charset_index)

    character = charset.get_character(charset_index)
    if character is not None:
        logger.debug("Putting character U+%04X at the end of the line", ord(character))
        line += character
    else:
        logger.debug("Skipping trailing character")

    status = MethodResult.NO_DATA_LEFT if len(next_bits) < bitrate else MethodResult.SUCCESS
    return ChannelResult(line, len(next_bits), status)


def reveal_in_trailing_character(
    line: str, charset: CharacterSet
) -> Tuple[str, List[int]]:
    if not line:
        logger.debug("Empty line received, skipping")
        return line, []

    bitrate = charset.bitrate()
    decoded_number = charset.character_to_bits(line[-1])
    logger.debug(
        "Found U+%04X at the end of the line, decoded into %s",
        ord(line[-1]),
        format(decoded_number, f"0{bitrate}b"),
    )
    bits = [(decoded_number >> shift) & 1 for shift in range(bitrate - 1, -1, -1)]
    if decoded_number > 0:
        line = line[:-1]
    return line, bits


__all__ = [
    "ChannelResult",
    "LINE_EXTEND_BITRATE",
    "MethodResult",
    "RANDOM_WHITESPACE_BITRATE",
    "assemble_charset_index",
    "conceal_in_extended_line",
    "conceal_in_random_whitespace",
    "conceal_in_trailing_character",
    "find_approx_whitespace_position",
    "reveal_in_extended_line",
    "reveal_in_random_whitespace",
    "reveal_in_trailing_character",
]
