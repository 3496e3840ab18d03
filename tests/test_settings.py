import pytest

from dartdaq.settings import (
    CommonSettings,
    OdbFormatError,
    V1730Settings,
    parse_odb_record,
    settings_from_record,
)


def test_default_record_layout():
    lines = V1730Settings().to_record()
    assert lines[0] == "[.]"
    assert lines[-1] == ""
    assert lines[1] == "pulse polarity (+,-) = CHAR : +"
    assert "record length (points) = UINT32 : 5000" in lines
    assert "coincidence window (ns) = INT32 : 120" in lines


def test_string_array_elements_carry_size():
    lines = V1730Settings().to_record()
    start = lines.index("trg (AND,OR,NONE,ONLY0,ONLY1) = STRING[8] :")
    assert lines[start + 1] == "[32] AND"
    assert lines[start + 2] == "[32] NONE"


def test_default_round_trip():
    settings = V1730Settings()
    assert settings_from_record(parse_odb_record(settings.to_record())) == settings


def test_modified_round_trip():
    settings = V1730Settings(
        pulse_polarity="-",
        external_trigger=True,
        record_length=1234,
        ch_dynamic_range=[0.5] * 16,
        pair_logic=["OR", "ONLY0", "ONLY1", "NONE", "AND", "NONE", "NONE", "NONE"],
        n_request_for_coincidence=3,
    )
    text = "\n".join(settings.to_record())
    assert settings_from_record(parse_odb_record(text)) == settings


def test_enabled_channels_default():
    assert V1730Settings().enabled_channels() == [0, 1]


def test_enabled_channels_follow_flags():
    flags = [0] * 16
    flags[3] = 1
    flags[15] = 1
    assert V1730Settings(ch_enable=flags).enabled_channels() == [3, 15]


def test_parse_common_record():
    record = parse_odb_record(
        [
            "[.]",
            "Event ID = UINT16 : 1",
            "Buffer = STRING : [32] SYSTEM",
            "Enabled = BOOL : y",
            "Hidden = BOOL : n",
            "Event limit = DOUBLE : 0",
            "",
        ]
    )
    assert record == {
        "Event ID": 1,
        "Buffer": "SYSTEM",
        "Enabled": True,
        "Hidden": False,
        "Event limit": 0.0,
    }
    defaults = CommonSettings()
    assert record["Buffer"] == defaults.buffer
    assert record["Event ID"] == defaults.event_id


def test_parse_float_array():
    lines = ["[.]", "bsl = FLOAT[3] :", "[0] 2842.79", "[1] 2826.539", "[2] 0", ""]
    record = parse_odb_record(lines)
    assert record["bsl"] == [2842.79, 2826.539, 0.0]


def test_section_prefix():
    record = parse_odb_record(["[Settings]", "Period = INT32 : 500"])
    assert record == {"Settings/Period": 500}


def test_missing_keys_keep_defaults():
    settings = settings_from_record({"record length (points)": 100})
    assert settings.record_length == 100
    assert settings.post_trigger == V1730Settings().post_trigger
    assert settings.pair_logic == V1730Settings().pair_logic


def test_truncated_array_rejected():
    with pytest.raises(OdbFormatError):
        parse_odb_record(["x = INT32[3] :", "[0] 1", "[1] 2"])


def test_out_of_order_index_rejected():
    with pytest.raises(OdbFormatError):
        parse_odb_record(["x = INT32[2] :", "[1] 1", "[0] 2"])


def test_bad_bool_rejected():
    with pytest.raises(OdbFormatError):
        parse_odb_record(["Enabled = BOOL : maybe"])


def test_unknown_type_rejected():
    with pytest.raises(OdbFormatError):
        parse_odb_record(["x = BLOB : 1"])


def test_out_of_range_integer_rejected():
    with pytest.raises(OdbFormatError):
        parse_odb_record(["Event ID = UINT16 : 70000"])


def test_garbage_line_rejected():
    with pytest.raises(OdbFormatError):
        parse_odb_record(["not a record line"])


def test_wrong_array_length_in_record():
    with pytest.raises(ValueError):
        settings_from_record({"enable channel": [1, 1]})


def test_wrong_array_length_in_constructor():
    with pytest.raises(ValueError):
        V1730Settings(trigger_width_ns=[40] * 7)


def test_overlong_logic_string_rejected():
    with pytest.raises(ValueError):
        V1730Settings(pair_logic=["A" * 40] + ["NONE"] * 7)


def test_default_lists_not_shared():
    first = V1730Settings()
    second = V1730Settings()
    first.ch_enable[5] = 1
    assert second.enabled_channels() == [0, 1]