import struct

import pytest

from dartdaq.rawdata import (
    BankFormatError,
    EventHeader,
    RawChannel,
    RawData,
    decode_bank,
    decode_header,
)


def _bank_bytes(mask, flags, samples, timestamp, payload):
    header = struct.pack("<HHIQ", mask, flags, samples, timestamp)
    return header + struct.pack(f"<{len(payload)}H", *payload)


def test_decode_header_from_bytes():
    raw = struct.pack("<HHIQ", 0x0003, 1, 5000, 123456789012345)
    header = decode_header(raw)
    assert header == EventHeader(0x0003, 1, 5000, 123456789012345)


def test_decode_header_from_words_matches_bytes():
    raw = struct.pack("<HHIQ", 0x8001, 0, 70000, 2**40 + 7)
    words = list(struct.unpack("<8H", raw))
    assert decode_header(words) == decode_header(raw)


def test_header_channels_follow_mask():
    header = EventHeader(channel_mask=(1 << 0) | (1 << 5) | (1 << 15))
    assert header.channels == [0, 5, 15]


def test_decode_header_too_short():
    with pytest.raises(BankFormatError):
        decode_header([0, 0, 0])


def test_decode_bank_splits_channels_in_order():
    payload = [10, 11, 12, 20, 21, 22]
    data = _bank_bytes((1 << 1) | (1 << 4), 0, 3, 99, payload)
    bank = decode_bank("WF00", data)
    assert bank.name == "WF00"
    assert bank.n_channels == 2
    assert [ch.channel_number for ch in bank.channels] == [1, 4]
    assert bank.channels[0].waveform == [10, 11, 12]
    assert bank.channels[1].waveform == [20, 21, 22]
    assert bank.header.timestamp_ns == 99


def test_decode_bank_ignores_trailing_words():
    data = _bank_bytes(1, 0, 2, 0, [5, 6, 7, 8])
    bank = decode_bank("WF00", data)
    assert bank.channels[0].waveform == [5, 6]


def test_decode_bank_too_short():
    data = _bank_bytes(0b11, 0, 4, 0, [1, 2, 3])
    with pytest.raises(BankFormatError):
        decode_bank("WF00", data)


def test_decode_bank_odd_byte_length():
    with pytest.raises(BankFormatError):
        decode_bank("WF00", b"\x00" * 17)


def test_decode_bank_rejects_wide_words():
    with pytest.raises(BankFormatError):
        decode_bank("WF00", [0x10000] + [0] * 7)


def test_empty_mask_gives_no_channels():
    bank = decode_bank("WF00", _bank_bytes(0, 0, 10, 0, []))
    assert bank.channels == []


def test_adc_sample_out_of_range_is_minus_one():
    channel = RawChannel(2, [7, 8, 9])
    assert channel.adc_sample(1) == 8
    assert channel.adc_sample(3) == -1
    assert channel.adc_sample(-1) == -1


def test_channel_empty_and_size():
    assert RawChannel().is_empty
    channel = RawChannel(0, [1, 2])
    assert channel.n_samples == 2
    assert not channel.is_empty


def test_describe_mentions_bank_and_counts():
    bank = RawData("WF00", EventHeader(channel_mask=3, timestamp_ns=42), [RawChannel(0), RawChannel(1)])
    text = bank.describe().splitlines()
    assert text[0] == "V1730 decoder for bank WF00"
    assert text[1] == "Channel Mask: 3"
    assert text[2] == "Time stamp ns: 42"
    assert text[3] == "Num channels: 2"