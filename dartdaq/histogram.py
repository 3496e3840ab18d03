"""A fixed-binning one-dimensional histogram with under- and overflow bins."""

from __future__ import annotations


class Histogram1D:
    """Histogram with ``n_bins`` equal bins over [low, high).

    Bin 0 is the underflow and bin ``n_bins + 1`` the overflow; bins 1 to
    ``n_bins`` cover the axis range.
    """

    def __init__(self, name, title, n_bins, low, high, x_title="", y_title=""):
        if n_bins <= 0:
            raise ValueError("a histogram needs at least one bin")
        if not high > low:
            raise ValueError("upper edge must be above lower edge")
        self.name = name
        self.title = title
        self.n_bins = int(n_bins)
        self.low = float(low)
        self.high = float(high)
        self.x_title = x_title
        self.y_title = y_title
        self.entries = 0
        self._contents = [0.0] * (self.n_bins + 2)

    @property
    def bin_width(self):
        return (self.high - self.low) / self.n_bins

    @property
    def contents(self):
        """Contents of bins 1..n_bins, without under- and overflow."""
        return self._contents[1:-1]

    def find_bin(self, value):
        """Index of the bin that holds ``value``."""
        if value < self.low:
            return 0
        if value >= self.high:
            return self.n_bins + 1
        return min(1 + int((value - self.low) / self.bin_width), self.n_bins)

    def _check(self, index):
        if not 0 <= index <= self.n_bins + 1:
            raise IndexError(f"bin {index} outside 0..{self.n_bins + 1}")

    def fill(self, value, weight=1.0):
        """Add ``weight`` to the bin holding ``value``; return that bin."""
        index = self.find_bin(value)
        self._contents[index] += weight
        self.entries += 1
        return index

    def set_bin_content(self, index, value):
        self._check(index)
        self._contents[index] = float(value)

    def add_bin_content(self, index, value):
        self._check(index)
        self._contents[index] += value

    def bin_content(self, index):
        self._check(index)
        return self._contents[index]

    def bin_center(self, index):
        """Centre of bin ``index`` on the axis."""
        return self.low + (index - 0.5) * self.bin_width

    def scale(self, factor):
        """Multiply every bin, under- and overflow included, by ``factor``."""
        self._contents = [content * factor for content in self._contents]

    def reset(self):
        """Empty all bins and the entry count."""
        self._contents = [0.0] * (self.n_bins + 2)
        self.entries = 0

    def integral(self):
        """Sum of bins 1..n_bins."""
        return sum(self.contents)