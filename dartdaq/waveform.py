"""Per-channel waveform histograms of V1730 banks."""

from __future__ import annotations

import logging

from dartdaq.histogram import Histogram1D
from dartdaq.rawdata import RawData

log = logging.getLogger(__name__)

DEFAULT_NAME = "V1730"
DEFAULT_SAMPLES = 4000
DEFAULT_CHANNELS = 16
NS_PER_SAMPLE = 2


class WaveformSet:
    """One histogram per channel holding the samples of the latest waveform.

    Bin ``i + 1`` holds sample ``i``; the axis is in ns. Whenever a bank
    with a different channel list or record length arrives, the
    histograms are rebuilt to match it.
    """

    def __init__(self, name=DEFAULT_NAME, ns_per_sample=NS_PER_SAMPLE,
                 n_samples=DEFAULT_SAMPLES, channels=None):
        if ns_per_sample <= 0:
            raise ValueError("nanoseconds per sample must be positive")
        if n_samples <= 0:
            raise ValueError("a waveform needs at least one sample")
        self.name = name
        self.tab_name = name
        self.sub_tab_name = "Waveforms"
        self.update_when_plotted = False
        self.auto_update = True
        self.ns_per_sample = ns_per_sample
        self.n_samples = n_samples
        self.channels = list(range(DEFAULT_CHANNELS) if channels is None else channels)
        self.histograms: list[Histogram1D] = []
        self._create_histograms()

    @property
    def n_channels(self):
        return len(self.channels)

    def __len__(self):
        return len(self.histograms)

    def __getitem__(self, index):
        return self.histograms[index]

    def _create_histograms(self) -> None:
        length = self.n_samples * self.ns_per_sample
        self.histograms = [
            Histogram1D(
                f"{self.name}_{ch}",
                f"{self.name} Waveform for channel={ch}",
                self.n_samples,
                0,
                length,
                x_title="ns",
                y_title="ADC value",
            )
            for ch in self.channels
        ]

    def _match(self, channels: list[int], n_samples: int) -> None:
        if len(channels) == self.n_channels and n_samples == self.n_samples:
            return
        log.info(
            "waveforms: updating to %d channels and %d samples", len(channels), n_samples
        )
        if n_samples <= 0:
            raise ValueError("a waveform needs at least one sample")
        self.n_samples = n_samples
        self.channels = list(channels)
        self._create_histograms()

    def _match_raw(self, raw: RawData) -> None:
        if raw is None or raw.n_channels == 0:
            raise ValueError("waveform bank missing or without channels")
        self._match([ch.channel_number for ch in raw.channels], raw.channels[0].n_samples)

    def update(self, raw):
        """Replace the histogram contents with the waveforms of ``raw``."""
        self._match_raw(raw)
        for histogram, channel in zip(self.histograms, raw.channels):
            for samp, adc in enumerate(channel.waveform[: histogram.n_bins]):
                histogram.set_bin_content(samp + 1, adc)

    def add_channel(self, raw, channel):
        """Add the waveform of channel number ``channel`` of ``raw`` to its histogram."""
        self._match_raw(raw)
        try:
            index = self.channels.index(channel)
        except ValueError:
            raise ValueError(f"channel {channel} not found") from None
        histogram = self.histograms[index]
        for samp, adc in enumerate(raw.channels[index].waveform[: histogram.n_bins]):
            histogram.add_bin_content(samp + 1, adc)

    def add_waveform(self, other):
        """Add the contents of another waveform set bin by bin."""
        self._match(list(other.channels), other.n_samples)
        for mine, theirs in zip(self.histograms, other.histograms):
            for index in range(1, self.n_samples + 1):
                mine.add_bin_content(index, theirs.bin_content(index))

    def normalized(self, n_events):
        """Return a copy whose contents are divided by ``n_events``."""
        if n_events == 0:
            raise ValueError("cannot normalise by zero events")
        result = WaveformSet(
            name=f"{self.name}_norm",
            ns_per_sample=self.ns_per_sample,
            n_samples=self.n_samples,
            channels=self.channels,
        )
        for target, source in zip(result.histograms, self.histograms):
            for index in range(self.n_samples + 2):
                target.set_bin_content(index, source.bin_content(index))
            target.scale(1.0 / n_events)
        return result

    def reset(self):
        """Empty every histogram."""
        for histogram in self.histograms:
            histogram.reset()

    def channel_number(self, index):
        """Channel number shown in histogram ``index``, or -1 if there is none."""
        if 0 <= index < len(self.channels):
            return self.channels[index]
        return -1