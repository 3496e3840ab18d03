"""Pulse analysis of V1730 waveform banks into reconstructed events."""

from __future__ import annotations

import copy
import itertools
import math
from collections.abc import Iterable
from dataclasses import dataclass

from dartdaq.event import DartChannel, DartEvent, VetoChannel
from dartdaq.rawdata import RawChannel, RawData

N_BSL_SAMPLES = 2000
POLARITY = 1.0
N_RMS = 5
SAMPLING_RATE_GSPS = 0.5
CHARGE_WINDOW_NS = 640
MAX_INTEGRATION_SAMPLE = 6000
N_HISTORY_CHANNELS = 16
INITIAL_EVENTS = 100
_UINT64 = 0xFFFFFFFFFFFFFFFF


@dataclass
class BasicParams:
    """Baseline, trigger time, peak and charge of one waveform.

    ``triggered`` is False when no sample crossed the threshold; the
    baseline values are still filled in that case and the rest stay zero.
    """

    bsl: float = 0.0
    bmax: float = 0.0
    bmaxp: float = 0.0
    bmin: float = 0.0
    bminp: float = 0.0
    bimax: float = 0.0
    rms: float = 0.0
    max: float = 0.0
    t0: float = 0.0
    t_max: float = 0.0
    area: float = 0.0
    min: float = 0.0
    t_min: float = 0.0
    triggered: bool = False


def _sqrt(value: float) -> float:
    return math.sqrt(value) if value >= 0 else math.nan


def basic_params(channel: RawChannel, n_bsl_samples=N_BSL_SAMPLES, polarity=POLARITY,
                 n_rms=N_RMS):
    """Analyse one channel's waveform.

    The baseline and RMS come from the first ``n_bsl_samples`` samples
    (missing samples count as -1). The trigger time is the first sample
    beyond ``n_rms`` RMS from the baseline; the peak and the charge are
    taken from there to the end of the waveform.
    """
    if n_bsl_samples <= 0:
        raise ValueError("need at least one baseline sample")
    params = BasicParams()
    total = 0.0
    squares = 0.0
    for samp in range(n_bsl_samples):
        adc = channel.adc_sample(samp)
        if adc > params.bmax:
            params.bmax = float(adc)
            params.bmaxp = float(samp)
        total += adc
        squares += adc * adc
    bsl = total / n_bsl_samples
    params.bsl = bsl
    params.rms = _sqrt(squares / n_bsl_samples - bsl * bsl)
    params.bmax -= bsl

    threshold = bsl + polarity * n_rms * params.rms
    n_samples = channel.n_samples
    t0 = next(
        (samp for samp in range(n_samples)
         if polarity * channel.adc_sample(samp) > polarity * threshold),
        None,
    )
    if t0 is None:
        return params

    values = [polarity * (channel.adc_sample(samp) - bsl) for samp in range(t0, n_samples)]
    peak = max(range(len(values)), key=values.__getitem__)
    params.t0 = float(t0)
    params.max = values[peak]
    params.t_max = float(t0 + peak)
    area = 0.0
    for value in values:
        area += value
    params.area = area
    params.triggered = True
    return params


class EventProcessor:
    """Turns waveform banks into :class:`DartEvent` objects.

    Channels listed in ``veto_channels`` are analysed as veto channels; all
    others as detector channels. After each bank the per-channel baselines
    and RMS values are kept in ``baselines`` and ``rms_values``.
    """

    def __init__(self, run=-1, veto_channels=(), n_bsl_samples=N_BSL_SAMPLES,
                 polarity=POLARITY, n_rms=N_RMS):
        self.run = run
        self.veto_channels = frozenset(veto_channels)
        self.n_bsl_samples = n_bsl_samples
        self.polarity = polarity
        self.n_rms = n_rms
        self.event = DartEvent()
        self.baselines = [0.0] * N_HISTORY_CHANNELS
        self.rms_values = [0.0] * N_HISTORY_CHANNELS
        self._previous_time = 0.0
        self._event_counter = 0

    def _is_dart(self, channel_number: int) -> bool:
        return channel_number not in self.veto_channels

    def _params(self, channel: RawChannel) -> BasicParams:
        return basic_params(channel, self.n_bsl_samples, self.polarity, self.n_rms)

    def analyze_dart_channel(self, channel):
        """Analyse a detector channel and append it to the current event."""
        params = self._params(channel)
        start = int(params.t0)
        stop = min(int(start + CHARGE_WINDOW_NS * SAMPLING_RATE_GSPS), MAX_INTEGRATION_SAMPLE)
        charge640 = 0.0
        for samp in range(start, stop):
            charge640 += self.polarity * (channel.adc_sample(samp) - params.bsl)
        result = DartChannel(
            ch=channel.channel_number,
            charge=params.area,
            charge90=0.0,
            charge640=charge640,
            bsl=params.bsl,
            bmax=params.bmax,
            bmin=params.bmin,
            bmaxp=params.bmaxp,
            bminp=params.bminp,
            bimax=params.bimax,
            bsl_end=0.0,
            rms=params.rms,
            rms_end=0.0,
            max=params.max,
            min=params.min,
            t0=params.t0,
            t_max=params.t_max,
            t_min=params.t_min,
        )
        self.event.dart_channels.append(result)
        return result

    def analyze_veto_channel(self, channel):
        """Analyse a veto channel; it joins the event only if it triggered after sample 0."""
        params = self._params(channel)
        result = VetoChannel(
            ch=channel.channel_number,
            charge=params.area,
            bsl=params.bsl,
            bmax=params.bmax,
            bmin=params.bmin,
            bmaxp=params.bmaxp,
            bminp=params.bminp,
            bimax=params.bimax,
            rms=params.rms,
            max=params.max,
            t0=params.t0,
            t_max=params.t_max,
            min=params.min,
            t_min=params.t_min,
        )
        if result.t0 > 0:
            self.event.veto_channels.append(result)
        return result

    def process_bank(self, raw: RawData, serial, timestamp, bank_number=0):
        """Fill the current event from one bank and return it."""
        event = self.event
        event.reset()
        event.run = self.run
        event.event_number = serial
        event.midas_event_number = serial
        event.bank_number = bank_number
        event.time = float(timestamp)
        event.time_ns = raw.header.timestamp_ns

        baselines = [0.0] * N_HISTORY_CHANNELS
        rms_values = [0.0] * N_HISTORY_CHANNELS
        for index, channel in enumerate(raw.channels):
            if self._is_dart(channel.channel_number):
                result = self.analyze_dart_channel(channel)
            else:
                result = self.analyze_veto_channel(channel)
            if index < N_HISTORY_CHANNELS:
                baselines[index] = result.bsl
                rms_values[index] = result.rms
        self.baselines = baselines
        self.rms_values = rms_values

        event.veto_mult = len(event.veto_channels)
        area = 0.0
        for channel in event.dart_channels:
            area += channel.charge
        event.tot_charge = area
        for channel in event.veto_channels:
            area += channel.charge
        event.veto_charge = area
        event.dt = int(float(event.time_ns) - self._previous_time) & _UINT64
        self._previous_time = float(event.time_ns)
        return event

    def process_event(self, serial, timestamp, banks: Iterable[RawData]):
        """Process every bank of one stored event; return one event per bank.

        Events are numbered consecutively over all calls.
        """
        events = []
        for bank_number, raw in enumerate(banks):
            event = self.process_bank(raw, serial, timestamp, bank_number)
            event.event_number = self._event_counter
            self._event_counter += 1
            events.append(copy.deepcopy(event))
        return events


def initial_tmax(banks: Iterable[RawData | None], max_events=INITIAL_EVENTS):
    """Average peak time per channel over the first ``max_events`` banks.

    Channels are taken from the first bank. Banks in which a channel shows
    no peak after sample 0 are left out of that channel's average; a
    channel without any peak gives NaN.
    """
    totals: list[float] | None = None
    counts: list[int] = []
    for raw in itertools.islice(banks, max_events):
        if raw is None or raw.n_channels == 0:
            raise ValueError("waveform bank missing or without channels")
        if totals is None:
            totals = [0.0] * raw.n_channels
            counts = [max_events] * raw.n_channels
        for index in range(len(totals)):
            t_max = basic_params(raw.channels[index]).t_max
            if t_max > 0:
                totals[index] += t_max
            else:
                counts[index] -= 1
    if totals is None:
        return []
    return [total / count if count else math.nan for total, count in zip(totals, counts)]