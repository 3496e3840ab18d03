"""Event packing for the waveform bank and the software ring buffer between readout and sender."""

from __future__ import annotations

import struct
import threading
from collections import deque
from collections.abc import Iterable, Sequence

CLOCK_NS = 8
WRAP_SHIFT = 31
HEADER_WORDS = 8
RB_CAPACITY = 1024 * 1024 * 1024
RB_MAX_EVENT_SIZE = int(2 * 5.12 * 1024 * 1024 * 16 + 1024 * 16)
RB_HIGH_WATER = 0.60
_UINT64 = 0xFFFFFFFFFFFFFFFF


class BufferFullError(RuntimeError):
    """Raised when a record cannot fit in the ring buffer at all."""


class TimestampUnwrapper:
    """Extends the digitizer's trigger time tag to a 64-bit time in ns.

    Each time the tag goes backwards it is taken to have wrapped once; this
    is only valid when events come more often than once per wrap period.
    """

    def __init__(self):
        self.counter = 0
        self.previous = 0

    def unwrap(self, tag):
        """Return the time in ns of an event with trigger time tag ``tag``."""
        if tag < 0:
            raise ValueError("trigger time tag cannot be negative")
        if tag < self.previous:
            self.counter += 1
        clock = (((self.counter << WRAP_SHIFT) + tag) * CLOCK_NS) & _UINT64
        self.previous = tag
        return clock

    def reset(self):
        """Start counting wraps from zero again, as at the start of a run."""
        self.counter = 0
        self.previous = 0


def bank_name(board):
    """Name of the waveform bank for digitizer board number ``board``."""
    if not 0 <= board <= 99:
        raise ValueError(f"board number {board} does not fit in a bank name")
    return f"WF{board:02d}"


def encode_event(channel_mask, flags, record_length, timestamp_ns, channel_data):
    """Pack one event as little-endian 16-bit words.

    The 8-word header holds the channel mask, the flags, the record length
    (32 bits) and the time stamp (64 bits); the samples of each channel in
    ``channel_data`` follow in the order given.
    """
    try:
        header = struct.pack("<HHIQ", channel_mask, flags, record_length, timestamp_ns)
    except struct.error as exc:
        raise ValueError(f"header field out of range: {exc}") from None
    parts = [header]
    for samples in channel_data:
        samples = list(samples)
        for value in samples:
            if not 0 <= value <= 0xFFFF:
                raise ValueError(f"sample {value} does not fit in 16 bits")
        parts.append(struct.pack(f"<{len(samples)}H", *samples))
    return b"".join(parts)


class EventRingBuffer:
    """Thread-safe FIFO of encoded events with a byte budget.

    The readout side stops filling once the stored bytes pass the high-water
    mark, leaving the hardware buffer to fill up instead.
    """

    def __init__(self, capacity=RB_CAPACITY, max_event_size=RB_MAX_EVENT_SIZE,
                 high_water=RB_HIGH_WATER):
        if capacity <= 0 or max_event_size <= 0:
            raise ValueError("capacity and maximum event size must be positive")
        if not 0 < high_water <= 1:
            raise ValueError("high-water mark must be a fraction in (0, 1]")
        self.capacity = capacity
        self.max_event_size = max_event_size
        self.high_water = high_water
        self._records: deque[bytes] = deque()
        self._level = 0
        self._lock = threading.Lock()

    def __len__(self):
        with self._lock:
            return len(self._records)

    @property
    def level(self):
        """Bytes currently stored."""
        with self._lock:
            return self._level

    @property
    def accepting(self):
        """Whether the level is at or below the high-water mark."""
        with self._lock:
            return self._level <= int(self.capacity * self.high_water)

    def push(self, record):
        """Store ``record``; return False when above the high-water mark."""
        record = bytes(record)
        if len(record) > self.max_event_size:
            raise ValueError(
                f"record of {len(record)} bytes exceeds maximum of {self.max_event_size}"
            )
        with self._lock:
            if self._level > int(self.capacity * self.high_water):
                return False
            if self._level + len(record) > self.capacity:
                raise BufferFullError(
                    f"no room for {len(record)} bytes with {self._level} of {self.capacity} used"
                )
            self._records.append(record)
            self._level += len(record)
            return True

    def pop(self):
        """Remove and return the oldest record."""
        with self._lock:
            if not self._records:
                raise IndexError("pop from an empty ring buffer")
            record = self._records.popleft()
            self._level -= len(record)
            return record

    def clear(self):
        """Drop every stored record."""
        with self._lock:
            self._records.clear()
            self._level = 0

    def extend(self, records: Iterable[Sequence[int] | bytes]):
        """Push several records; return how many were stored."""
        stored = 0
        for record in records:
            if not self.push(record):
                break
            stored += 1
        return stored