"""Digitizer settings and the ODB text-record format they are stored in."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, NamedTuple

N_CHANNELS = 16
N_PAIRS = 8
STRING_SIZE = 32


class OdbFormatError(ValueError):
    """Raised when an ODB record text cannot be parsed."""


_INT_RANGES = {
    "BYTE": (0, 0xFF),
    "UINT8": (0, 0xFF),
    "SBYTE": (-0x80, 0x7F),
    "INT8": (-0x80, 0x7F),
    "WORD": (0, 0xFFFF),
    "UINT16": (0, 0xFFFF),
    "SHORT": (-0x8000, 0x7FFF),
    "INT16": (-0x8000, 0x7FFF),
    "DWORD": (0, 0xFFFFFFFF),
    "UINT32": (0, 0xFFFFFFFF),
    "INT": (-0x80000000, 0x7FFFFFFF),
    "INT32": (-0x80000000, 0x7FFFFFFF),
    "UINT64": (0, 0xFFFFFFFFFFFFFFFF),
    "INT64": (-0x8000000000000000, 0x7FFFFFFFFFFFFFFF),
}
_FLOAT_FORMATS = {"FLOAT": ".7g", "DOUBLE": ".16g"}
_KNOWN_TYPES = set(_INT_RANGES) | set(_FLOAT_FORMATS) | {"BOOL", "CHAR", "STRING"}

_ENTRY = re.compile(
    r"(?P<name>.+?) = (?P<type>[A-Z][A-Z0-9]*)(?:\[(?P<count>\d+)\])? :(?: (?P<value>.*))?"
)
_ELEMENT = re.compile(r"\[(?P<number>\d+)\] ?(?P<value>.*)")


def _parse_value(odb_type: str, text: str) -> Any:
    if odb_type in _INT_RANGES:
        try:
            value = int(text, 16) if text.lower().startswith("0x") else int(text)
        except ValueError:
            raise OdbFormatError(f"invalid {odb_type} value {text!r}") from None
        low, high = _INT_RANGES[odb_type]
        if not low <= value <= high:
            raise OdbFormatError(f"{odb_type} value {value} out of range")
        return value
    if odb_type in _FLOAT_FORMATS:
        try:
            return float(text)
        except ValueError:
            raise OdbFormatError(f"invalid {odb_type} value {text!r}") from None
    if odb_type == "BOOL":
        lowered = text.lower()
        if lowered in ("y", "1"):
            return True
        if lowered in ("n", "0"):
            return False
        raise OdbFormatError(f"invalid BOOL value {text!r}")
    if odb_type == "CHAR":
        if len(text) > 1:
            raise OdbFormatError(f"CHAR value {text!r} longer than one character")
        return text
    return text


def _format_value(odb_type: str, value: Any) -> str:
    if odb_type == "BOOL":
        return "y" if value else "n"
    if odb_type in _FLOAT_FORMATS:
        return format(float(value), _FLOAT_FORMATS[odb_type])
    if odb_type in _INT_RANGES:
        return str(int(value))
    return str(value)


def _split_string(text: str, lineno: int) -> str:
    match = _ELEMENT.fullmatch(text)
    if match is None:
        raise OdbFormatError(f"line {lineno}: string value {text!r} lacks a size prefix")
    return match.group("value")


def parse_odb_record(lines):
    """Parse ODB record text into a mapping of key names to values.

    ``lines`` is a string or an iterable of lines. Arrays become lists.
    Keys inside a named section are prefixed with ``section/``.
    """
    if isinstance(lines, str):
        lines = lines.splitlines()
    record: dict[str, Any] = {}
    prefix = ""
    pending: tuple[str, str, int, list[Any]] | None = None

    for lineno, raw in enumerate(lines, 1):
        line = raw.strip()
        if pending is not None:
            name, odb_type, count, items = pending
            match = _ELEMENT.fullmatch(line)
            if match is None:
                raise OdbFormatError(f"line {lineno}: expected element {len(items)} of {name!r}")
            if odb_type != "STRING" and int(match.group("number")) != len(items):
                raise OdbFormatError(
                    f"line {lineno}: element index {match.group('number')} out of order in {name!r}"
                )
            items.append(_parse_value(odb_type, match.group("value")))
            if len(items) == count:
                record[name] = items
                pending = None
            continue

        if not line:
            continue
        if line.startswith("[") and line.endswith("]"):
            section = line[1:-1].strip().strip("/")
            prefix = "" if section in ("", ".") else section + "/"
            continue

        match = _ENTRY.fullmatch(line)
        if match is None:
            raise OdbFormatError(f"line {lineno}: cannot parse {line!r}")
        name = prefix + match.group("name")
        odb_type = match.group("type")
        if odb_type not in _KNOWN_TYPES:
            raise OdbFormatError(f"line {lineno}: unknown type {odb_type!r}")
        value = match.group("value")
        if match.group("count") is not None:
            count = int(match.group("count"))
            if value:
                raise OdbFormatError(f"line {lineno}: array {name!r} has an inline value")
            if count == 0:
                record[name] = []
            else:
                pending = (name, odb_type, count, [])
            continue
        if value is None:
            if odb_type not in ("STRING", "CHAR"):
                raise OdbFormatError(f"line {lineno}: {name!r} has no value")
            value = ""
        if odb_type == "STRING":
            value = _split_string(value, lineno) if value else ""
        record[name] = _parse_value(odb_type, value)

    if pending is not None:
        name, _, count, items = pending
        raise OdbFormatError(f"array {name!r} has {len(items)} of {count} elements")
    return record


class _Field(NamedTuple):
    attr: str
    key: str
    odb_type: str
    count: int | None


_SCHEMA = (
    _Field("pulse_polarity", "pulse polarity (+,-)", "CHAR", None),
    _Field("external_trigger", "external trigger (y,n)", "BOOL", None),
    _Field("record_length", "record length (points)", "UINT32", None),
    _Field("post_trigger", "post-trigger (%)", "UINT32", None),
    _Field("ch_enable", "enable channel", "UINT32", N_CHANNELS),
    _Field("ch_bsl_percent", "baseline position (%)", "UINT32", N_CHANNELS),
    _Field("ch_threshold", "threshold (ADC counts)", "UINT32", N_CHANNELS),
    _Field("ch_dynamic_range", "dynamic range (V) (0.5,2)", "FLOAT", N_CHANNELS),
    _Field("pair_logic", "trg (AND,OR,NONE,ONLY0,ONLY1)", "STRING", N_PAIRS),
    _Field("trigger_width_ns", "trigger width (ns)", "INT32", N_PAIRS),
    _Field("n_request_for_coincidence", "N request for coincidence", "INT32", None),
    _Field("coincidence_window_ns", "coincidence window (ns)", "INT32", None),
)

_PY_TYPES = {"CHAR": str, "BOOL": bool, "UINT32": int, "INT32": int, "FLOAT": float, "STRING": str}


@dataclass
class V1730Settings:
    """Run settings of the V1730 equipment."""

    pulse_polarity: str = "+"
    external_trigger: bool = False
    record_length: int = 5000
    post_trigger: int = 80
    ch_enable: list[int] = field(default_factory=lambda: [1, 1] + [0] * 14)
    ch_bsl_percent: list[int] = field(
        default_factory=lambda: [90, 90, 50, 50, 50, 50, 50, 50, 90, 10, 10, 50, 50, 50, 50, 50]
    )
    ch_threshold: list[int] = field(default_factory=lambda: [200, 200] + [0] * 14)
    ch_dynamic_range: list[float] = field(default_factory=lambda: [2.0] * N_CHANNELS)
    pair_logic: list[str] = field(default_factory=lambda: ["AND"] + ["NONE"] * 7)
    trigger_width_ns: list[int] = field(default_factory=lambda: [40] * N_PAIRS)
    n_request_for_coincidence: int = 1
    coincidence_window_ns: int = 120

    def __post_init__(self):
        if len(self.pulse_polarity) > 1:
            raise ValueError("pulse polarity must be a single character")
        for spec in _SCHEMA:
            if spec.count is None:
                continue
            values = getattr(self, spec.attr)
            if len(values) != spec.count:
                raise ValueError(f"{spec.attr} needs {spec.count} values, got {len(values)}")
        for logic in self.pair_logic:
            if len(logic) >= STRING_SIZE:
                raise ValueError(f"trigger logic {logic!r} longer than {STRING_SIZE - 1} characters")

    def to_record(self):
        """Return the settings as ODB record lines."""
        lines = ["[.]"]
        for spec in _SCHEMA:
            value = getattr(self, spec.attr)
            if spec.count is None:
                text = _format_value(spec.odb_type, value)
                if spec.odb_type == "STRING":
                    text = f"[{STRING_SIZE}] {text}"
                lines.append(f"{spec.key} = {spec.odb_type} : {text}")
                continue
            lines.append(f"{spec.key} = {spec.odb_type}[{spec.count}] :")
            for index, item in enumerate(value):
                label = STRING_SIZE if spec.odb_type == "STRING" else index
                lines.append(f"[{label}] {_format_value(spec.odb_type, item)}")
        lines.append("")
        return lines

    def enabled_channels(self):
        """Return the indices of the enabled channels in ascending order."""
        return [channel for channel, enabled in enumerate(self.ch_enable) if enabled]


def settings_from_record(record: Mapping[str, Any]) -> V1730Settings:
    """Build settings from a parsed record; missing keys keep their defaults."""
    values: dict[str, Any] = {}
    for spec in _SCHEMA:
        if spec.key not in record:
            continue
        raw = record[spec.key]
        convert = _PY_TYPES[spec.odb_type]
        if spec.count is None:
            if isinstance(raw, (list, tuple)):
                raise ValueError(f"{spec.key!r} must be a single value")
            values[spec.attr] = convert(raw)
        else:
            if not isinstance(raw, Iterable) or isinstance(raw, str):
                raise ValueError(f"{spec.key!r} must be an array")
            items = [convert(item) for item in raw]
            if len(items) != spec.count:
                raise ValueError(f"{spec.key!r} needs {spec.count} values, got {len(items)}")
            values[spec.attr] = items
    return V1730Settings(**values)


@dataclass
class CommonSettings:
    """Common equipment parameters of the V1730 data equipment."""

    event_id: int = 1
    trigger_mask: int = 0
    buffer: str = "SYSTEM"
    type: int = 2
    source: int = 0
    format: str = "MIDAS"
    enabled: bool = True
    read_on: int = 1
    period: int = 500
    event_limit: float = 0.0
    num_subevents: int = 0
    log_history: int = 0
    frontend_host: str = "localhost"
    frontend_name: str = "fe1730"
    frontend_file_name: str = "fe1730Th.cxx"
    status: str = "fe1730@localhost"
    status_color: str = "greenLight"
    hidden: bool = False
    write_cache_size: int = 0