"""Settings, event packing, bank decoding, pulse analysis and histograms for digitizer waveform data."""

__version__ = "0.1.0"