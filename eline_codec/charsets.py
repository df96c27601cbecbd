"""Invisible and whitespace character sets used by the trailing-character channel.

Index 0 is reserved for "no character", so a set holding ``2**k - 1``
characters encodes exactly ``k`` bits per line.
"""

import enum
from typing import Dict, Optional, Sequence, Tuple, Union


def _code_points(*codes: int) -> Tuple[str, ...]:
    return tuple(chr(code) for code in codes)


# Different width spaces, formatting characters and zero-width spaces
FULL_UNICODE_CHARACTER_SET = _code_points(
    0x0020, 0x2000, 0x2001, 0x2002, 0x2003, 0x2004, 0x2005, 0x2006,
    0x2007, 0x2009, 0x200A, 0x200B, 0x200C, 0x200D, 0x200E, 0x2028,
    0x202A, 0x202C, 0x202D, 0x202F, 0x205F, 0x2060, 0x2061, 0x2062,
    0x2063, 0x2064, 0x2066, 0x2068, 0x2069, 0x3000, 0xFEFF,
)

# Characters that survive posting on Twitter
TWITTER_UNICODE_CHARACTER_SET = _code_points(
    0x0020, 0x2000, 0x2001, 0x2002, 0x2003, 0x2004, 0x2005, 0x2006,
    0x2007, 0x2009, 0x200A, 0x200B, 0x200C, 0x200D, 0xFEFF,
)

FOUR_BIT_CHARACTER_SET = _code_points(
    0x0020, 0x2000, 0x2001, 0x2002, 0x2003, 0x2004, 0x2005, 0x2006,
    0x2007, 0x2009, 0x200A, 0x200B, 0x200C, 0x200D, 0x200E,
)

THREE_BIT_CHARACTER_SET = _code_points(
    0x0020, 0x2000, 0x2001, 0x2002, 0x2003, 0x2004, 0x2005,
)

TWO_BIT_CHARACTER_SET = _code_points(0x0020, 0x2000, 0x2001)

# A single trailing ASCII space: the base Extended Line behaviour
ONE_BIT_CHARACTER_SET = _code_points(0x0020)


class CharacterSet:
    def __init__(self, name: str, characters: Sequence[str]):
        characters = tuple(characters)
        if not characters:
            raise ValueError("character set must not be empty")
        for character in characters:
            if len(character) != 1:
                raise ValueError(
                    f"character set entries must be single code points, got {character!r}"
                )
        if len(set(characters)) != len(characters):
            raise ValueError(f"character set '{name}' contains duplicate characters")
        size = len(characters)
        # One slot is reserved for "no character", so size + 1 must be a power of two
        if (size + 1) & size != 0:
            raise ValueError(
                f"character set '{name}' has {size} characters; "
                "size + 1 must be a power of two"
            )
        self.name = name
        self.characters = characters

    def __repr__(self) -> str:
        return f"CharacterSet(name={self.name!r}, size={self.size()})"

    def __eq__(self, other) -> bool:
        return isinstance(other, CharacterSet) and other.characters == self.characters

    def __hash__(self) -> int:
        return hash(self.characters)

    def size(self) -> int:
        return len(self.characters)

    def bitrate(self) -> int:
        return self.size().bit_length()

    def get_character(self, index: int) -> Optional[str]:
        if index == 0:
            return None
        if index < 0 or index > self.size():
            raise IndexError(
                f"Too large number for character set '{self.name}' - "
                f"cannot encode value {index}"
            )
        return self.characters[index - 1]

    def character_to_bits(self, character: str) -> int:
        for position, candidate in enumerate(self.characters):
            if candidate == character:
                return position + 1
        return 0


class CharacterSetType(enum.Enum):
    FULL = "full"
    TWITTER = "twitter"
    FOUR_BIT = "four_bit"
    THREE_BIT = "three_bit"
    TWO_BIT = "two_bit"
    ONE_BIT = "one_bit"

    @property
    def character_set(self) -> CharacterSet:
        return _PREDEFINED_SETS[self]


_PREDEFINED_SETS: Dict[CharacterSetType, CharacterSet] = {
    CharacterSetType.FULL: CharacterSet("full", FULL_UNICODE_CHARACTER_SET),
    CharacterSetType.TWITTER: CharacterSet("twitter", TWITTER_UNICODE_CHARACTER_SET),
    CharacterSetType.FOUR_BIT: CharacterSet("four_bit", FOUR_BIT_CHARACTER_SET),
    CharacterSetType.THREE_BIT: CharacterSet("three_bit", THREE_BIT_CHARACTER_SET),
    CharacterSetType.TWO_BIT: CharacterSet("two_bit", TWO_BIT_CHARACTER_SET),
    CharacterSetType.ONE_BIT: CharacterSet("one_bit", ONE_BIT_CHARACTER_SET),
}

CHARSET_NAMES = [member.value for member in CharacterSetType]


def get_character_set(charset: Union[str, CharacterSetType, CharacterSet]) -> CharacterSet:
    if isinstance(charset, CharacterSet):
        return charset
    if isinstance(charset, CharacterSetType):
        return charset.character_set
    try:
        return CharacterSetType(charset.lower()).character_set
    except ValueError:
        raise ValueError(
            f"Unknown charset '{charset}'; expected one of: {', '.join(CHARSET_NAMES)}"
        ) from None


__all__ = [
    "CHARSET_NAMES",
    "CharacterSet",
    "CharacterSetType",
    "FOUR_BIT_CHARACTER_SET",
    "FULL_UNICODE_CHARACTER_SET",
    "ONE_BIT_CHARACTER_SET",
    "THREE_BIT_CHARACTER_SET",
    "TWITTER_UNICODE_CHARACTER_SET",
    "TWO_BIT_CHARACTER_SET",
    "get_character_set",
]
