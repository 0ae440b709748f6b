import pytest

from hanzikit.pinyinlookup import PinyinLookup, consonant, vowel


def record(char, *readings):
    word = char.encode("utf-8")
    out = bytes([len(word)]) + word + bytes([len(readings)])
    for reading in readings:
        out += bytes(reading)
    return out


def test_vowel_table_values():
    assert vowel(1, 1) == "ā"
    assert vowel(0, 0) == ""


def test_vowel_out_of_range_index():
    assert vowel(-1, 0) == ""
    assert vowel(99, 1) == ""


def test_vowel_bad_tone_falls_back_to_plain():
    assert vowel(1, 7) == vowel(1, 0)
    assert vowel(1, -2) == "a"


def test_consonant_table():
    assert consonant(3) == "ch"
    assert consonant(0) == ""
    assert consonant(25) == ""
    assert consonant(-1) == ""


def test_lookup_single_reading():
    lookup = PinyinLookup()
    lookup.load_bytes(record("中", (24, 25, 1)))
    assert lookup.lookup("中") == ["zhōng"]
    assert lookup.lookup(ord("中")) == lookup.lookup("中")


def test_lookup_multiple_readings_keep_order():
    lookup = PinyinLookup()
    lookup.load_bytes(record("行", (21, 18, 2), (7, 4, 2)))
    result = lookup.lookup("行")
    assert len(result) == 2
    assert result[0].startswith("x")
    assert result[1].startswith("h")


def test_empty_reading_is_skipped():
    lookup = PinyinLookup()
    lookup.load_bytes(record("a", (0, 0, 0)))
    assert lookup.lookup("a") == []


def test_zero_count_record_and_missing_char():
    lookup = PinyinLookup()
    lookup.load_bytes(record("中") + record("文", (24, 25, 1)))
    assert lookup.lookup("中") == []
    assert lookup.lookup("字") == []
    assert lookup.lookup("文") == lookup.lookup(ord("文"))
    assert len(lookup.lookup("文")) == 1


@pytest.mark.parametrize(
    "data",
    [
        b"\x03",
        bytes([7]) + b"abcdefg" + b"\x00",
        bytes([2]) + b"ab" + b"\x00",
        bytes([1]) + b"\xff" + b"\x00",
        record("中", (1, 1, 1))[:-1],
        bytes([1]) + b"a",
    ],
)
def test_malformed_data_raises(data):
    lookup = PinyinLookup()
    with pytest.raises(ValueError):
        lookup.load_bytes(data)
    assert lookup.load() is False


def test_load_from_file_and_cache(tmp_path):
    path = tmp_path / "py_table.mb"
    path.write_bytes(record("中", (24, 25, 1)))
    lookup = PinyinLookup(path)
    assert lookup.load() is True
    path.unlink()
    assert lookup.load() is True
    assert lookup.lookup("中") == ["zhōng"]


def test_load_missing_file(tmp_path):
    assert PinyinLookup(tmp_path / "missing.mb").load() is False
    assert PinyinLookup().load() is False


def test_load_bad_file(tmp_path):
    path = tmp_path / "bad.mb"
    path.write_bytes(b"\x09abc")
    assert PinyinLookup(path).load() is False