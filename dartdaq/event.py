"""Reconstructed event: per-channel pulse parameters and event summaries."""

from __future__ import annotations

from dataclasses import MISSING, dataclass, field, fields


def _fmt(value) -> str:
    if isinstance(value, float):
        return format(value, "g")
    return str(value)


def _reset_fields(obj) -> None:
    for spec in fields(obj):
        if spec.default is not MISSING:
            setattr(obj, spec.name, spec.default)
            continue
        current = getattr(obj, spec.name)
        if isinstance(current, list):
            current.clear()
        else:
            setattr(obj, spec.name, spec.default_factory())


@dataclass
class DartChannel:
    """Pulse parameters of one detector channel."""

    ch: int = -1
    charge: float = -1.0
    charge90: float = -1.0
    charge640: float = -1.0
    bsl: float = -1.0
    bmax: float = -1.0
    bmin: float = -1.0
    bmaxp: float = -1.0
    bminp: float = -1.0
    bimax: float = -1.0
    bsl_end: float = -1.0
    bmax_end: float = -1.0
    rms: float = -1.0
    rms_end: float = -1.0
    max: float = -1.0
    min: float = -1.0
    t0: float = -1.0
    t_max: float = -1.0
    t_min: float = -1.0

    def reset(self):
        """Set every parameter back to -1."""
        _reset_fields(self)

    def dump(self):
        """Return a readable multi-line description."""
        return "\n".join(
            [
                f"- ch: {self.ch} charge: {_fmt(self.charge)} charge90: {_fmt(self.charge90)}"
                f" charge640: {_fmt(self.charge640)}",
                f" bsl: {_fmt(self.bsl)} bslEnd: {_fmt(self.bsl_end)} bmax: {_fmt(self.bmax)}"
                f" bmaxp: {_fmt(self.bmaxp)} bimax: {_fmt(self.bimax)} bmin: {_fmt(self.bmin)}"
                f" bminp: {_fmt(self.bminp)} rms: {_fmt(self.rms)} rmsEnd: {_fmt(self.rms_end)}",
                f" max: {_fmt(self.max)} min: {_fmt(self.min)} t0: {_fmt(self.t0)}"
                f" tMax: {_fmt(self.t_max)} tMin: {_fmt(self.t_min)}",
            ]
        )


@dataclass
class VetoChannel:
    """Pulse parameters of one veto channel."""

    ch: int = -1
    charge: float = -1.0
    bsl: float = -1.0
    bmax: float = -1.0
    bmin: float = -1.0
    bmaxp: float = -1.0
    bminp: float = -1.0
    bimax: float = -1.0
    rms: float = -1.0
    max: float = -1.0
    t0: float = -1.0
    t_max: float = -1.0
    min: float = -1.0
    t_min: float = -1.0

    def reset(self):
        """Set every parameter back to -1."""
        _reset_fields(self)

    def dump(self):
        """Return a readable one-line description."""
        return (
            f"- Vch: {self.ch} Vcharge: {_fmt(self.charge)} Vbsl: {_fmt(self.bsl)}"
            f" Vrms: {_fmt(self.rms)} Vmax: {_fmt(self.max)} Vt0: {_fmt(self.t0)}"
            f" VtMax: {_fmt(self.t_max)} Vmin: {_fmt(self.min)} VtMin: {_fmt(self.t_min)}"
        )


@dataclass
class DartEvent:
    """One analysed event with its detector and veto channels.

    ``type`` is 0 for gamma, 1 for alpha and 2 for muon events; ``dt`` and
    ``dat`` are the times in ns since the previous event and previous alpha.
    """

    run: int = -1
    event_number: int = -1
    midas_event_number: int = -1
    bank_number: int = -1
    time: float = -1.0
    time_ns: int = -1
    veto_mult: int = -1
    tot_charge: float = -1.0
    veto_charge: float = -1.0
    original_file: str = ""
    dt: int = -1
    dat: int = -1
    type: int = -1
    dart_channels: list[DartChannel] = field(default_factory=list)
    veto_channels: list[VetoChannel] = field(default_factory=list)

    def reset(self):
        """Restore all summaries to -1 and empty the channel lists."""
        _reset_fields(self)

    def dump(self):
        """Return a readable multi-line description including all channels."""
        lines = [
            f" run: {self.run}",
            f" eventNumber: {self.event_number}",
            f" midasEventNumber: {self.midas_event_number}",
            f" bankNumber: {self.bank_number}",
            f" time: {_fmt(self.time)}",
            f" timeNs: {self.time_ns}",
            f" vetoMult: {self.veto_mult}",
            f" totCharge: {_fmt(self.tot_charge)}",
            f" vetoCharge: {_fmt(self.veto_charge)}",
            f" original file: {self.original_file}",
            f" dt: {self.dt}",
            f" dat: {self.dat}",
            f" type: {self.type}",
        ]
        if self.dart_channels:
            lines.append("* dartChannels: ")
            lines.extend(channel.dump() for channel in self.dart_channels)
        if self.veto_channels:
            lines.append("* vetoChannels: ")
            lines.extend(channel.dump() for channel in self.veto_channels)
        return "\n".join(lines)