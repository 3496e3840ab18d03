"""Decoding of the V1730 waveform bank written by the frontend.

A bank is a sequence of 16-bit little-endian words: an 8-word header
(channel mask, flags, samples per channel as 32 bits, time stamp in ns as
64 bits) followed by the samples of each enabled channel in channel order.
"""

from __future__ import annotations

import struct
from collections.abc import Iterable
from dataclasses import dataclass, field

N_CHANNELS = 16
HEADER_WORDS = 8


class BankFormatError(ValueError):
    """Raised when a bank is too short for what its header announces."""


@dataclass(frozen=True)
class EventHeader:
    """Header placed by the frontend in front of every event."""

    channel_mask: int = 0
    flags: int = 0
    samples: int = 0
    timestamp_ns: int = 0

    @property
    def channels(self):
        """Channel numbers whose bit is set in the mask, ascending."""
        return [ch for ch in range(N_CHANNELS) if self.channel_mask & (1 << ch)]


@dataclass
class RawChannel:
    """Samples recorded by one digitizer channel."""

    channel_number: int = -1
    waveform: list[int] = field(default_factory=list)

    @property
    def n_samples(self):
        return len(self.waveform)

    @property
    def is_empty(self):
        return not self.waveform

    def adc_sample(self, index):
        """Return the sample at ``index``, or -1 when it is out of range."""
        if 0 <= index < len(self.waveform):
            return self.waveform[index]
        return -1


@dataclass
class RawData:
    """Decoded content of one waveform bank."""

    name: str
    header: EventHeader
    channels: list[RawChannel] = field(default_factory=list)

    @property
    def n_channels(self):
        return len(self.channels)

    def describe(self):
        """Return a short readable summary of the bank."""
        return "\n".join(
            [
                f"V1730 decoder for bank {self.name}",
                f"Channel Mask: {self.header.channel_mask}",
                f"Time stamp ns: {self.header.timestamp_ns}",
                f"Num channels: {self.n_channels}",
            ]
        )


def _as_words(data) -> list[int]:
    if isinstance(data, (bytes, bytearray, memoryview)):
        raw = bytes(data)
        if len(raw) % 2:
            raise BankFormatError("bank length is not a whole number of 16-bit words")
        return list(struct.unpack(f"<{len(raw) // 2}H", raw))
    if not isinstance(data, Iterable):
        raise TypeError("bank data must be bytes or an iterable of 16-bit words")
    words = [int(word) for word in data]
    for word in words:
        if not 0 <= word <= 0xFFFF:
            raise BankFormatError(f"word {word} does not fit in 16 bits")
    return words


def decode_header(words):
    """Decode the 8-word event header from bytes or a sequence of words."""
    words = _as_words(words)
    if len(words) < HEADER_WORDS:
        raise BankFormatError(f"header needs {HEADER_WORDS} words, got {len(words)}")
    samples = words[2] | (words[3] << 16)
    timestamp = 0
    for shift, word in enumerate(words[4:HEADER_WORDS]):
        timestamp |= word << (16 * shift)
    return EventHeader(
        channel_mask=words[0], flags=words[1], samples=samples, timestamp_ns=timestamp
    )


def decode_bank(name, data):
    """Decode a whole waveform bank into a :class:`RawData`."""
    words = _as_words(data)
    header = decode_header(words)
    numbers = header.channels
    needed = HEADER_WORDS + len(numbers) * header.samples
    if len(words) < needed:
        raise BankFormatError(f"bank {name!r} needs {needed} words, got {len(words)}")
    channels = []
    start = HEADER_WORDS
    for number in numbers:
        stop = start + header.samples
        channels.append(RawChannel(number, words[start:stop]))
        start = stop
    return RawData(name=name, header=header, channels=channels)