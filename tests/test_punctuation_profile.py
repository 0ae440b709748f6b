import pytest

from hanzikit.punctuation_profile import PunctuationEntry, PunctuationProfile

SAMPLE = [
    ", ，",
    ". 。",
    '" “ ”',
    "' ‘ ’",
    "",
    "   ",
    "# ＃",
]


@pytest.fixture
def profile():
    p = PunctuationProfile()
    p.load(SAMPLE)
    return p


def test_two_token_line_maps_without_alternative(profile):
    assert profile.get_punctuation(ord(",")) == ("，", "")


def test_three_token_line_has_alternative(profile):
    assert profile.get_punctuation(ord('"')) == ("“", "”")


def test_hash_is_a_key_not_a_comment(profile):
    assert profile.get_punctuation("#") == ("＃", "")


def test_missing_key_gives_empty_pair(profile):
    assert profile.get_punctuation(ord("a")) == ("", "")


def test_entries_keep_order(profile):
    assert [e.key for e in profile.entries] == [",", ".", '"', "'", "#"]


def test_malformed_lines_skipped():
    p = PunctuationProfile()
    p.load(["ab ，", "x", ", a b c", "; ；"])
    assert [e.key for e in p.entries] == [";"]


def test_first_mapping_wins():
    p = PunctuationProfile()
    p.load([", ，", ", 、"])
    assert p.get_punctuation(",") == ("，", "")
    assert len(p.entries) == 1


def test_split_only_on_ascii_whitespace():
    p = PunctuationProfile()
    p.load(["  \t, a\u3000b\t\r"])
    assert p.get_punctuation(",") == ("a\u3000b", "")


def test_load_replaces_previous(profile):
    profile.load(["; ；"])
    assert profile.get_punctuation(",") == ("", "")
    assert [e.key for e in profile.entries] == [";"]


def test_dumps_round_trip(profile):
    other = PunctuationProfile()
    other.load(profile.dumps().splitlines())
    assert other.entries == profile.entries


def test_dumps_omits_empty_alternative():
    p = PunctuationProfile()
    p.load([", ，"])
    assert p.dumps() == ", ，\n"


def test_save_and_read_back(tmp_path, profile):
    path = tmp_path / "sub" / "punc.mb.zh_CN"
    profile.save(path)
    other = PunctuationProfile()
    with open(path, encoding="utf-8") as f:
        other.load(f)
    assert other.entries == profile.entries


def test_set_entries_skips_incomplete():
    p = PunctuationProfile()
    p.set_entries([
        PunctuationEntry("", "x"),
        PunctuationEntry(",", ""),
        PunctuationEntry("ab", "x"),
        PunctuationEntry(",", "，", ""),
        PunctuationEntry(",", "、"),
        PunctuationEntry('"', "“", "”"),
    ])
    assert p.entries == [PunctuationEntry(",", "，", ""), PunctuationEntry('"', "“", "”")]
    assert p.get_punctuation('"') == ("“", "”")


def test_load_system_sets_defaults(profile):
    p = PunctuationProfile()
    p.load_system(SAMPLE)
    assert p.default_entries == profile.entries
    p.load(["; ；"])
    assert p.default_entries == profile.entries


def test_plain_load_does_not_touch_defaults(profile):
    assert profile.default_entries == []


def test_reset_default_value_clears(profile):
    profile.load_system(SAMPLE)
    profile.reset_default_value()
    assert profile.entries == []
    assert profile.default_entries == []
    assert profile.get_punctuation(",") == ("", "")