"""File names of run data: analysis output partials and raw data files."""

from __future__ import annotations

import os

MAX_PARTIAL = 99


def _zero_padded(value: int, digits: int) -> str:
    sign = "-" if value < 0 else ""
    return sign + str(abs(value)).zfill(digits)


def partial_root_files(base_name, run, max_partial=MAX_PARTIAL):
    """Names of the existing analysis output partials of ``run``.

    Partials are numbered from 0; the search stops at the first missing one.
    """
    found = []
    for partial in range(max_partial):
        name = f"{base_name}_{run:06d}_{partial:04d}.root"
        if not os.access(name, os.F_OK):
            break
        found.append(name)
    return found


def midas_file_name(data_base, run, partial):
    """Name of the compressed raw data file of one run partial."""
    return f"{data_base}{run:05d}_{partial:03d}.mid.lz4"


def output_file_name(run, midas_filename):
    """Analysis output name for a raw data file.

    The run and subrun numbers are read from the file name, ignoring any
    digits in directory names. If both are present the run number must
    match ``run``.
    """
    numbers = [0, 0]
    in_number = False
    part = 0
    for char in midas_filename:
        if char == "/":
            numbers = [0, 0]
            in_number = False
            part = 0
        elif char.isdigit() and char.isascii() and part < 2:
            numbers[part] = numbers[part] * 10 + int(char)
            in_number = True
        elif in_number:
            in_number = False
            part += 1
    if part == 2:
        if run != numbers[0]:
            raise ValueError(
                f"File name run number ({numbers[0]}) disagrees with MIDAS run ({run})"
            )
        return f"output_{_zero_padded(run, 6)}_{_zero_padded(numbers[1], 4)}.root"
    return f"output_{_zero_padded(run, 6)}.root"