# dartdaq

Tools for waveform data from a 16-channel, 500 MS/s digitizer: the run
settings record, packing and decoding of the waveform bank, a software ring
buffer for packed events, pulse analysis and histogramming. It is a library
with no command-line programs and no dependencies beyond the standard library.

## Modules

- `dartdaq.settings`: `V1730Settings` holds the run settings (pulse polarity,
  external trigger, record length, post-trigger, per-channel enable, baseline
  position, threshold and dynamic range, per-pair trigger logic and width,
  coincidence level and window). `to_record()` writes it as ODB record lines,
  and `enabled_channels()` lists the enabled channels. `parse_odb_record`
  parses record text into a dict; it raises `OdbFormatError` on bad input.
  `settings_from_record` builds settings from that dict, and missing keys keep
  their defaults. `CommonSettings` holds the common equipment parameters.
- `dartdaq.packing`: `encode_event(channel_mask, flags, record_length,
  timestamp_ns, channel_data)` packs one event. The result is little-endian
  16-bit words: an 8-word header, then the samples. `TimestampUnwrapper` turns
  the trigger time tag into nanoseconds and counts a wrap each time the tag
  goes backwards. `bank_name(board)` gives `WF00`…`WF99`. `EventRingBuffer` is
  a thread-safe FIFO of packed events with a byte budget:
  - `push` returns `False` once the level is above the high-water mark (60 %
    by default);
  - `push` raises `BufferFullError` when a record cannot fit at all;
  - it also has `pop`, `clear`, `extend`, `level` and `accepting`.
- `dartdaq.rawdata`: `decode_header` and `decode_bank` take bytes or a
  sequence of words. `decode_bank` returns `RawData`, which holds an
  `EventHeader` and one `RawChannel` per enabled channel. Short banks raise
  `BankFormatError`. `RawChannel.adc_sample(i)` returns -1 outside the
  waveform.
- `dartdaq.event`: `DartEvent` holds `DartChannel` (detector) and
  `VetoChannel` entries. `reset()` sets every value back to -1, and `dump()`
  returns a readable text.
- `dartdaq.processor`: `basic_params(channel)` returns `BasicParams` with:
  - baseline and RMS, taken from the first 2000 samples;
  - the trigger time, the first sample above baseline + 5 RMS;
  - the peak and its time;
  - the charge from the trigger time to the end of the waveform.

  `EventProcessor` fills a `DartEvent` per bank:
  - `process_bank` handles one bank, and `process_event` handles every bank of
    one stored event;
  - `analyze_dart_channel` also computes the 640 ns charge;
  - `analyze_veto_channel` handles channels named in `veto_channels`.

  `initial_tmax(banks)` averages the peak time per channel over the first 100
  banks.
- `dartdaq.histogram`: `Histogram1D` is a fixed-binning histogram with
  underflow and overflow bins. It has `fill`, `set_bin_content`,
  `add_bin_content`, `bin_content`, `bin_center`, `scale`, `reset` and
  `integral`.
- `dartdaq.waveform`: `WaveformSet` keeps one histogram per channel holding
  the latest waveform. It is rebuilt whenever the channel list or record
  length changes. It has:
  - `update` and `add_channel`;
  - `add_waveform` for summing, and `normalized(n)` for averaging;
  - `reset` and `channel_number`.
- `dartdaq.histograms`: `ChargeHistograms`, `HeightHistograms` and
  `ChargeSummary` fill per-channel and summed spectra from a `DartEvent`.
  `AnalysisManager.process_bank(raw, serial, timestamp)` runs the processor
  and fills every registered group.
- `dartdaq.runfiles`: `partial_root_files` lists existing
  `<base>_RRRRRR_PPPP.root` partials. `midas_file_name` gives
  `<base>RRRRR_PPP.mid.lz4`. `output_file_name` derives `output_RRRRRR[_PPPP].root`
  from a raw file name, and raises `ValueError` when the run numbers disagree.

## Example

```python
from dartdaq.packing import encode_event
from dartdaq.rawdata import decode_bank
from dartdaq.processor import EventProcessor

data = encode_event(0b1, 0, 4, 1000, [[10, 11, 12, 13]])
raw = decode_bank("WF00", data)
processor = EventProcessor()
event = processor.process_bank(raw, serial=1, timestamp=0, bank_number=0)
print(event.time_ns)  # 1000
```

## What it does not do

The package does not talk to digitizer hardware:

- it has no board register map;
- it has no trigger or threshold setup for a board;
- it has no run frontend that reads a board.

It also does not:

- read or write raw data files or analysis output files (`dartdaq.runfiles`
  only builds and checks their names);
- draw or display anything;
- provide commands to run.

## Installing and testing

```
pip install .
pip install ".[test]"
pytest
```