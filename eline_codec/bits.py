from typing import Iterable, List, Optional

from .errors import NotByteAlignedError

BITS_PER_BYTE = 8


def bytes_to_bits(data: bytes) -> List[int]:
    bits: List[int] = []
    for byte in data:
        # Most significant bit first
        for shift in range(BITS_PER_BYTE - 1, -1, -1):
            bits.append((byte >> shift) & 1)
    return bits


def pad_bits(bits: Iterable[int]) -> List[int]:
    padded = list(bits)
    missing = -len(padded) % BITS_PER_BYTE
    padded.extend([0] * missing)
    return padded


def bits_to_bytes(bits: Iterable[int], length: Optional[int] = None) -> bytes:
    bits = list(bits)
    if len(bits) % BITS_PER_BYTE != 0:
        raise NotByteAlignedError(len(bits))
    out = bytearray()
    for start in range(0, len(bits), BITS_PER_BYTE):
        byte = 0
        for bit in bits[start : start + BITS_PER_BYTE]:
            if bit not in (0, 1):
                raise ValueError(f"bit {bit} out of range")
            byte = (byte << 1) | bit
        out.append(byte)
    if length is not None:
        if length < 0:
            raise ValueError("length must be >= 0")
        if length <= len(out):
            return bytes(out[:length])
        return bytes(out) + b"\x00" * (length - len(out))
    return bytes(out)


class BitStream:
    """Forward-only cursor over a sequence of bits shared by the sub-channels."""

    def __init__(self, bits: Iterable[int]):
        self._bits = list(bits)
        self._position = 0

    def __len__(self) -> int:
        return len(self._bits)

    @property
    def position(self) -> int:
        return self._position

    @property
    def remaining(self) -> int:
        return len(self._bits) - self._position

    @property
    def exhausted(self) -> bool:
        return self._position >= len(self._bits)

    def next_bit(self) -> Optional[int]:
        if self.exhausted:
            return None
        bit = self._bits[self._position]
        self._position += 1
        return bit

    def take(self, count: int) -> List[int]:
        chunk = self._bits[self._position : self._position + count]
        self._position += len(chunk)
        return chunk


__all__ = ["BITS_PER_BYTE", "BitStream", "bits_to_bytes", "bytes_to_bits", "pad_bits"]
