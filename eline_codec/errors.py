import enum


class ElineCodecError(ValueError):
    pass


class CoverTooSmallReason(enum.Enum):
    NO_COVER_WORDS_LEFT = "No cover words left, cannot construct a line."
    CONSTRUCTED_TOO_SHORT_LINE = (
        "Line constructed is too short to extend it above pivot length"
    )

    def __str__(self) -> str:
        return self.value


class ConcealError(ElineCodecError):
    """Base class for errors raised while concealing data in a cover."""


class PivotTooSmallError(ConcealError):
    def __init__(self, word: str, pivot: int):
        super().__init__(
            f"Pivot '{pivot}' is smaller than the longest word in cover: '{word}'"
        )
        self.word = word
        self.pivot = pivot

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, PivotTooSmallError)
            and other.word == self.word
            and other.pivot == self.pivot
        )

    __hash__ = Exception.__hash__


class CoverTextTooSmallError(ConcealError):
    def __init__(self, reason: CoverTooSmallReason, remaining_data_size: int, pivot: int):
        super().__init__(
            f"{reason}. '{remaining_data_size}' bits left unprocessed "
            f"while using '{pivot}' as a pivot"
        )
        self.reason = reason
        self.remaining_data_size = remaining_data_size
        self.pivot = pivot

    @classmethod
    def no_cover_words_left(cls, remaining_data_size: int, pivot: int) -> "CoverTextTooSmallError":
        return cls(CoverTooSmallReason.NO_COVER_WORDS_LEFT, remaining_data_size, pivot)

    @classmethod
    def line_too_short(cls, remaining_data_size: int, pivot: int) -> "CoverTextTooSmallError":
        return cls(
            CoverTooSmallReason.CONSTRUCTED_TOO_SHORT_LINE, remaining_data_size, pivot
        )

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, CoverTextTooSmallError)
            and other.reason == self.reason
            and other.remaining_data_size == self.remaining_data_size
            and other.pivot == self.pivot
        )

    __hash__ = Exception.__hash__


class NotEnoughWordsOnPivotLineError(ConcealError):
    def __init__(self, line: str):
        super().__init__(f"Line '{line}' doesn't have enough words to conceal a bit")
        self.line = line

    def __eq__(self, other) -> bool:
        return isinstance(other, NotEnoughWordsOnPivotLineError) and other.line == self.line

    __hash__ = Exception.__hash__


class TrailingCharacterInCoverError(ConcealError):
    def __init__(self, word: str, charset_name: str):
        super().__init__(
            f"Cover word '{word}' ends with U+{ord(word[-1]):04X} from character set "
            f"'{charset_name}' and would be revealed as hidden data"
        )
        self.word = word
        self.charset_name = charset_name

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, TrailingCharacterInCoverError)
            and other.word == self.word
            and other.charset_name == self.charset_name
        )

    __hash__ = Exception.__hash__


class NotByteAlignedError(ElineCodecError):
    def __init__(self, bit_count: int):
        super().__init__(
            f"Cannot convert {bit_count} bits to bytes: length is not a multiple of 8"
        )
        self.bit_count = bit_count


__all__ = [
    "ElineCodecError",
    "ConcealError",
    "CoverTooSmallReason",
    "PivotTooSmallError",
    "CoverTextTooSmallError",
    "NotEnoughWordsOnPivotLineError",
    "TrailingCharacterInCoverError",
    "NotByteAlignedError",
]
