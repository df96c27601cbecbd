"""CLI shim for running the codec directly from the repository checkout."""

from eline_codec.cli import main
from eline_codec.codec import (
    CodecConfig,
    CodecKey,
    decode_text_to_data,
    encode_data_to_text,
)

__all__ = [
    "CodecConfig",
    "CodecKey",
    "decode_text_to_data",
    "encode_data_to_text",
    "main",
]


if __name__ == "__main__":
    main()
