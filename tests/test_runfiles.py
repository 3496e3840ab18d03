import pytest

from dartdaq.runfiles import midas_file_name, output_file_name, partial_root_files


def touch(path):
    path.write_bytes(b"")
    return path


def test_partial_root_files_stops_at_first_gap(tmp_path):
    base = tmp_path / "output"
    first = touch(tmp_path / "output_000012_0000.root")
    second = touch(tmp_path / "output_000012_0001.root")
    touch(tmp_path / "output_000012_0003.root")
    assert partial_root_files(str(base), 12) == [str(first), str(second)]


def test_partial_root_files_none_found(tmp_path):
    assert partial_root_files(str(tmp_path / "output"), 3) == []


def test_partial_root_files_respects_limit(tmp_path):
    for partial in range(4):
        touch(tmp_path / f"output_000001_{partial:04d}.root")
    found = partial_root_files(str(tmp_path / "output"), 1, max_partial=2)
    assert len(found) == 2
    assert found[-1].endswith("_000001_0001.root")


def test_partial_root_files_ignores_other_runs(tmp_path):
    touch(tmp_path / "output_000002_0000.root")
    assert partial_root_files(str(tmp_path / "output"), 1) == []


def test_midas_file_name_format():
    assert midas_file_name("/storage/online/run", 42, 3) == "/storage/online/run00042_003.mid.lz4"


def test_output_file_name_with_subrun():
    assert output_file_name(123, "/data/run00123_004.mid.lz4") == "output_000123_0004.root"


def test_output_file_name_ignores_directory_digits():
    assert output_file_name(123, "/data2024/x9/run00123_004.mid.lz4") == "output_000123_0004.root"


def test_output_file_name_round_trips_midas_name():
    name = midas_file_name("/storage/online/run", 77, 12)
    assert output_file_name(77, name) == "output_000077_0012.root"


def test_output_file_name_without_subrun():
    assert output_file_name(5, "run5.mid") == "output_000005.root"


def test_output_file_name_run_mismatch():
    with pytest.raises(ValueError):
        output_file_name(7, "/data/run00123_004.mid.lz4")