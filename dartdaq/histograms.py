"""Charge and pulse-height histograms and the manager that fills them."""

from __future__ import annotations

from dartdaq.event import DartEvent
from dartdaq.histogram import Histogram1D
from dartdaq.processor import EventProcessor
from dartdaq.rawdata import RawData
from dartdaq.waveform import WaveformSet

CHANNELS_PER_MODULE = 16
CHARGE_BINS = 5000
CHARGE_MAX = 500000
HEIGHT_BINS = 1000
HEIGHT_MAX = 16400


class _HistogramGroup:
    """A named list of histograms shown together."""

    tab_name = ""
    sub_tab_name = ""

    def __init__(self):
        self.update_when_plotted = False
        self.auto_update = True
        self.histograms: list[Histogram1D] = []

    def __len__(self):
        return len(self.histograms)

    def __getitem__(self, index):
        return self.histograms[index]

    def reset(self):
        for histogram in self.histograms:
            histogram.reset()


class ChargeHistograms(_HistogramGroup):
    """Charge spectrum of every channel."""

    tab_name = "Charge"
    sub_tab_name = "Channel Charge "

    def __init__(self):
        super().__init__()
        self.histograms = [
            Histogram1D(
                f"HistoCharge_{i}",
                f"Histo Charge channel={i}",
                CHARGE_BINS,
                0,
                CHARGE_MAX,
                x_title="Charge (ADC*sample value)",
                y_title="Counts",
            )
            for i in range(CHANNELS_PER_MODULE)
        ]

    def update(self, event: DartEvent):
        """Fill each channel's charge into its histogram."""
        for channel in event.dart_channels:
            self.histograms[channel.ch].fill(channel.charge)
        for channel in event.veto_channels:
            self.histograms[channel.ch].fill(channel.charge)


class HeightHistograms(_HistogramGroup):
    """Pulse-height spectrum of every channel."""

    tab_name = "High"
    sub_tab_name = "Channel High "

    def __init__(self):
        super().__init__()
        self.histograms = [
            Histogram1D(
                f"HistoHigh_{i}",
                f"Histo High channel={i}",
                HEIGHT_BINS,
                0,
                HEIGHT_MAX,
                x_title="High (ADC)",
                y_title="Counts",
            )
            for i in range(CHANNELS_PER_MODULE)
        ]

    def update(self, event: DartEvent):
        """Fill each channel's pulse height into its histogram."""
        for channel in event.dart_channels:
            self.histograms[channel.ch].fill(channel.max)
        for channel in event.veto_channels:
            self.histograms[channel.ch].fill(channel.max)


class ChargeSummary(_HistogramGroup):
    """Total detector charge and total charge including the veto."""

    tab_name = "Charge"
    sub_tab_name = "Charge Summary"

    def __init__(self):
        super().__init__()
        self.histograms = [
            Histogram1D(
                "ChargeSummaryDart",
                title,
                CHARGE_BINS,
                0,
                CHARGE_MAX,
                x_title="Charge (ADC*sample value)",
                y_title="Counts",
            )
            for title in ("Dart Charge Summary", "Veto Charge Summary")
        ]

    def update(self, event: DartEvent):
        """Fill the event's summed charges."""
        self.histograms[0].fill(event.tot_charge)
        self.histograms[1].fill(event.veto_charge)


class AnalysisManager:
    """Runs the event processor and fills all histogram groups."""

    def __init__(self, processor=None):
        self.processor = processor if processor is not None else EventProcessor()
        self.waveforms = WaveformSet()
        self._groups: list = []
        self.add(self.waveforms)
        self.add(ChargeHistograms())
        self.add(HeightHistograms())
        self.add(ChargeSummary())

    @property
    def histograms(self):
        """The histogram groups in the order they were added."""
        return list(self._groups)

    def add(self, histograms):
        """Register a histogram group; it is filled by the manager only."""
        histograms.auto_update = False
        self._groups.append(histograms)

    @staticmethod
    def _fill(group, raw: RawData, event: DartEvent) -> None:
        if isinstance(group, WaveformSet):
            group.update(raw)
        else:
            group.update(event)

    def process_bank(self, raw, serial, timestamp):
        """Analyse one bank and fill the cumulative histograms; return the event."""
        event = self.processor.process_bank(raw, serial, timestamp)
        for group in self._groups:
            if not group.update_when_plotted:
                self._fill(group, raw, event)
        return event

    def update_transient_plots(self, raw):
        """Fill the groups that are only updated when displayed."""
        event = self.processor.event
        for group in self._groups:
            if group.update_when_plotted:
                self._fill(group, raw, event)