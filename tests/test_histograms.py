import pytest

from dartdaq.event import DartChannel, DartEvent, VetoChannel
from dartdaq.histograms import (
    AnalysisManager,
    ChargeHistograms,
    ChargeSummary,
    HeightHistograms,
)
from dartdaq.processor import EventProcessor
from dartdaq.rawdata import EventHeader, RawChannel, RawData
from dartdaq.waveform import WaveformSet


def test_charge_histogram_layout():
    group = ChargeHistograms()
    assert len(group) == 16
    assert group[0].name == "HistoCharge_0"
    assert group[0].n_bins == 5000
    assert group[0].high == 500000


def test_charge_histograms_fill_dart_and_veto():
    group = ChargeHistograms()
    event = DartEvent(
        dart_channels=[DartChannel(ch=2, charge=1000.0)],
        veto_channels=[VetoChannel(ch=5, charge=2000.0)],
    )
    group.update(event)
    assert group[2].entries == 1
    assert group[2].bin_content(group[2].find_bin(1000.0)) == 1.0
    assert group[5].entries == 1
    assert group[0].entries == 0


def test_height_histograms_fill_max():
    group = HeightHistograms()
    assert group[3].name == "HistoHigh_3"
    group.update(DartEvent(dart_channels=[DartChannel(ch=3, max=500.0)]))
    assert group[3].bin_content(group[3].find_bin(500.0)) == 1.0


def test_charge_summary_fills_both():
    group = ChargeSummary()
    group.update(DartEvent(tot_charge=100.0, veto_charge=300.0))
    assert group[0].bin_content(group[0].find_bin(100.0)) == 1.0
    assert group[1].bin_content(group[1].find_bin(300.0)) == 1.0


def test_channel_out_of_range_raises():
    with pytest.raises(IndexError):
        ChargeHistograms().update(DartEvent(dart_channels=[DartChannel(ch=16, charge=1.0)]))


def make_raw():
    samples = [100, 100, 100, 100, 200, 300, 100, 100]
    header = EventHeader(channel_mask=1, samples=len(samples))
    return RawData("WF00", header, [RawChannel(0, samples)]), samples


def test_manager_default_groups():
    manager = AnalysisManager()
    groups = manager.histograms
    assert len(groups) == 4
    assert isinstance(groups[0], WaveformSet)
    assert all(group.auto_update is False for group in groups)


def test_manager_process_bank_fills_everything():
    manager = AnalysisManager(EventProcessor(n_bsl_samples=4))
    raw, samples = make_raw()
    event = manager.process_bank(raw, 7, 1234)
    assert event.midas_event_number == 7
    assert event.tot_charge == 300.0
    waveforms, charges, heights, summary = manager.histograms
    assert waveforms[0].contents == [float(v) for v in samples]
    assert charges[0].entries == 1
    assert heights[0].entries == 1
    assert summary[0].entries == 1


def test_manager_skips_transient_groups_until_plotted():
    manager = AnalysisManager(EventProcessor(n_bsl_samples=4))
    extra = ChargeSummary()
    extra.update_when_plotted = True
    manager.add(extra)
    raw, _ = make_raw()
    manager.process_bank(raw, 1, 0)
    assert extra[0].entries == 0
    manager.update_transient_plots(raw)
    assert extra[0].entries == 1
    assert manager.histograms[-1] is extra