"""Text steganography with the Extended Line method."""

from .bits import BitStream, bits_to_bytes, bytes_to_bits, pad_bits
from .charsets import CharacterSet, CharacterSetType, get_character_set
from .codec import (
    CodecConfig,
    CodecKey,
    decode_text_to_data,
    encode_data_to_text,
    load_codec_key,
    save_codec_key,
)
from .errors import (
    ConcealError,
    CoverTextTooSmallError,
    CoverTooSmallReason,
    ElineCodecError,
    NotByteAlignedError,
    NotEnoughWordsOnPivotLineError,
    PivotTooSmallError,
    TrailingCharacterInCoverError,
)
from .method import (
    ExtendedLineMethod,
    MethodConfig,
    Variant,
    build_method_config,
    conceal,
    cover_capacity,
    reveal,
)
from .observer import DataWritten, EventNotifier, Finished, Observer
from .text import LineSeparator, determine_pivot

__all__ = [
    "BitStream",
    "CharacterSet",
    "CharacterSetType",
    "CodecConfig",
    "CodecKey",
    "ConcealError",
    "CoverTextTooSmallError",
    "CoverTooSmallReason",
    "DataWritten",
    "ElineCodecError",
    "EventNotifier",
    "ExtendedLineMethod",
    "Finished",
    "LineSeparator",
    "MethodConfig",
    "NotByteAlignedError",
    "NotEnoughWordsOnPivotLineError",
    "Observer",
    "PivotTooSmallError",
    "TrailingCharacterInCoverError",
    "Variant",
    "bits_to_bytes",
    "build_method_config",
    "bytes_to_bits",
    "conceal",
    "cover_capacity",
    "decode_text_to_data",
    "determine_pivot",
    "encode_data_to_text",
    "get_character_set",
    "load_codec_key",
    "pad_bits",
    "reveal",
    "save_codec_key",
]

__version__ = "0.1.0"
