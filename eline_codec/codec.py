import dataclasses
import json
import logging
import random
from typing import Optional, Tuple

from .charsets import CHARSET_NAMES, CharacterSetType, get_character_set
from .method import (
    DEFAULT_PIVOT,
    VARIANT_NAMES,
    build_method_config,
    conceal,
    parse_line_separator,
    parse_variant,
    reveal,
)
from .observer import EventNotifier
from .text import LineSeparator

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class CodecConfig:
    pivot: int = DEFAULT_PIVOT
    variant: str = "v1"
    charset: str = CharacterSetType.ONE_BIT.value
    line_separator: Optional[str] = None
    seed: Optional[int] = None


@dataclasses.dataclass
class CodecKey:
    pivot: int
    variant: str = "v1"
    charset: str = CharacterSetType.ONE_BIT.value
    line_separator: str = LineSeparator.UNIX.value
    payload_length: Optional[int] = None
    version: str = "v1"

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "pivot": self.pivot,
            "variant": self.variant,
            "charset": self.charset,
            "line_separator": self.line_separator,
            "payload_length": self.payload_length,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CodecKey":
        version = data.get("version", "v1")
        if version != "v1":
            raise ValueError(f"Unsupported codec key version: {version}")
        if "pivot" not in data:
            raise ValueError("codec key is missing 'pivot'")
        pivot = int(data["pivot"])
        if pivot < 1:
            raise ValueError("pivot must be >= 1")
        variant = parse_variant(str(data.get("variant", "v1"))).value
        charset = str(data.get("charset", CharacterSetType.ONE_BIT.value)).lower()
        if charset not in CHARSET_NAMES:
            raise ValueError(
                f"Unknown charset '{charset}'; expected one of: {', '.join(CHARSET_NAMES)}"
            )
        line_separator = parse_line_separator(
            str(data.get("line_separator", LineSeparator.UNIX.value))
        ).value
        payload_length_raw = data.get("payload_length")
        payload_length = None if payload_length_raw is None else int(payload_length_raw)
        if payload_length is not None and payload_length < 0:
            raise ValueError("payload_length must be >= 0")
        return cls(
            pivot=pivot,
            variant=variant,
            charset=charset,
            line_separator=line_separator,
            payload_length=payload_length,
            version=version,
        )


def save_codec_key(key: CodecKey, path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(key.to_dict(), f, indent=2)
        f.write("\n")


def load_codec_key(path: str) -> CodecKey:
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, dict):
        raise ValueError("codec key must be a JSON object")
    return CodecKey.from_dict(raw)


def encode_data_to_text(
    data: bytes,
    cover: str,
    cfg: CodecConfig,
    rng=None,
    notifier: Optional[EventNotifier] = None,
) -> Tuple[str, CodecKey]:
    if rng is None:
        # Unseeded runs still need a source of positions for doubled spaces
        rng = random.Random(cfg.seed)
    method_config = build_method_config(
        pivot=cfg.pivot,
        variant=cfg.variant,
        charset=cfg.charset,
        rng=rng,
        line_separator=cfg.line_separator,
        notifier=notifier,
    )
    logger.info(
        "Encoding %d bytes with pivot %d, variant %s, charset %s",
        len(data),
        method_config.pivot,
        method_config.variant.value,
        method_config.charset.name,
    )
    text = conceal(cover, data, method_config)
    key = CodecKey(
        pivot=method_config.pivot,
        variant=method_config.variant.value,
        charset=method_config.charset.name,
        line_separator=method_config.line_separator.value,
        payload_length=len(data),
    )
    return text, key


def decode_text_to_data(
    encoded_text: str,
    key: CodecKey,
    length: Optional[int] = None,
) -> bytes:
    if length is None:
        length = key.payload_length
    # Reveal never draws random numbers
    method_config = build_method_config(
        pivot=key.pivot,
        variant=key.variant,
        charset=get_character_set(key.charset),
        seed=0,
        line_separator=key.line_separator,
    )
    data = reveal(encoded_text, method_config, length=length)
    logger.info("Decoded %d bytes", len(data))
    return data


__all__ = [
    "CodecConfig",
    "CodecKey",
    "VARIANT_NAMES",
    "decode_text_to_data",
    "encode_data_to_text",
    "load_codec_key",
    "save_codec_key",
]
